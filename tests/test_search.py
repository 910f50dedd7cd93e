"""Tests for agent_search.search (matching, excerpting, ranking, budgets)."""

from datetime import datetime, timezone

import pytest

from agent_search.excerpt import SnippetConfig, estimate_item_tokens
from agent_search.matcher import QueryError
from agent_search.models import SearchOptions
from agent_search.search import (
    list_agent_sessions,
    list_sessions,
    process_message,
    search,
    search_agents,
    search_sessions,
    session_topic,
)
from agent_search.sessions.claude import ClaudeReader
from agent_search.sessions.codex import CodexReader
from agent_search.sessions.kimi import KimiReader
from agent_search.sessions.models import Session

from conftest import CODEX_SESSION_ID, make_message


class TestProcessMessage:
    """Test per-message shortening by output mode."""

    def test_short_message_untouched(self):
        message = make_message("a short needle")
        processed, excerpt = process_message(message, [], SnippetConfig())
        assert processed is message
        assert excerpt is None

    def test_snippet_mode_excerpts_long_message(self, long_content):
        message = make_message(long_content)
        start = long_content.index("needle")
        from agent_search.excerpt import MatchRange

        ranges = [MatchRange(start=start, end=start + 6)]
        processed, excerpt = process_message(message, ranges, SnippetConfig(snippet_size=50))

        assert excerpt.metadata.truncation_type == "snippet"
        assert processed.content == excerpt.text
        assert len(processed.content) < len(long_content)
        pos = excerpt.match_positions[0]
        assert processed.content[pos.start:pos.end] == "needle"
        # Original message is not modified
        assert message.content == long_content


class TestSearchSessions:
    """Test scanning sessions for matches."""

    def test_finds_all_matching_messages(self, sample_sessions):
        matches = search_sessions(sample_sessions, SearchOptions(query="needle"))
        assert len(matches) == 3
        assert all(m.matched_text.lower() == "needle" for m in matches)

    def test_case_insensitive_matched_text_from_original(self, sample_sessions):
        matches = search_sessions(sample_sessions, SearchOptions(query="NEEDLE"))
        assert matches[0].matched_text == "needle"

    def test_role_filter(self, sample_sessions):
        matches = search_sessions(sample_sessions, SearchOptions(query="needle", role="assistant"))
        assert len(matches) == 1
        assert matches[0].message.role == "assistant"

    def test_long_message_snippeted(self, sample_sessions, long_content):
        matches = search_sessions(sample_sessions, SearchOptions(query="needle", role="assistant"))
        match = matches[0]

        assert match.truncation is not None
        assert match.truncation.content_truncated is True
        assert match.truncation.original_length == len(long_content)
        assert "needle" in match.message.content
        pos = match.match_positions[0]
        assert match.message.content[pos.start:pos.end] == "needle"

    def test_short_messages_not_truncated(self, sample_sessions):
        matches = search_sessions(sample_sessions, SearchOptions(query="needle", role="user"))
        for match in matches:
            assert match.truncation is None
            pos = match.match_positions[0]
            assert match.message.content[pos.start:pos.end] == "needle"

    def test_context_messages(self, sample_sessions):
        options = SearchOptions(query="needle", role="assistant", context_lines=1)
        match = search_sessions(sample_sessions, options)[0]
        assert [m.content for m in match.context_before] == ["Find the needle please"]
        assert [m.content for m in match.context_after] == ["Great, done."]

    def test_session_position(self, sample_sessions):
        match = search_sessions(sample_sessions, SearchOptions(query="needle", role="assistant"))[0]
        assert match.session_snippet.message_index == 1
        assert match.session_snippet.total_messages == 3
        assert match.session_snippet.session_summary == "assistant message 2/3 (33% through session)"

    def test_full_mode_applies_length_limit(self, sample_sessions):
        options = SearchOptions(query="needle", output_mode="full", max_content_length=100)
        matches = search_sessions(sample_sessions, options)
        long_match = next(m for m in matches if m.message.role == "assistant")

        assert long_match.truncation.truncation_type == "length"
        assert long_match.message.content.endswith("...")
        # The needle sits past the cut point
        assert long_match.match_positions == []
        short = [m for m in matches if m.message.role == "user"]
        assert all(m.truncation is None for m in short)

    def test_full_mode_unlimited(self, sample_sessions, long_content):
        options = SearchOptions(query="needle", output_mode="full", max_content_length=0, role="assistant")
        match = search_sessions(sample_sessions, options)[0]
        assert match.message.content == long_content
        assert match.truncation is None

    def test_summary_mode_leaves_content(self, sample_sessions, long_content):
        options = SearchOptions(query="needle", output_mode="summary", role="assistant")
        match = search_sessions(sample_sessions, options)[0]
        assert match.message.content == long_content
        assert match.truncation is None

    def test_date_window(self, sample_sessions):
        cutoff = datetime(2024, 5, 15, tzinfo=timezone.utc)
        newer = search_sessions(sample_sessions, SearchOptions(query="needle", since=cutoff))
        older = search_sessions(sample_sessions, SearchOptions(query="needle", before=cutoff))
        assert {m.message.session_id for m in newer} == {"new-session"}
        assert {m.message.session_id for m in older} == {"old-session"}

    def test_literal_query(self, sample_sessions):
        matches = search_sessions(sample_sessions, SearchOptions(query="needle?", literal=True))
        assert len(matches) == 0
        matches = search_sessions(sample_sessions, SearchOptions(query="needle test?", literal=True))
        assert len(matches) == 1

    def test_invalid_query(self, sample_sessions):
        with pytest.raises(QueryError):
            search_sessions(sample_sessions, SearchOptions(query="(bad"))


class TestSearch:
    """Test ranking, budgets, and limits over combined results."""

    def test_most_recent_first(self, sample_sessions):
        result = search(sample_sessions, SearchOptions(query="needle"))
        assert result.total_matches == 3
        assert result.searched_sessions == 2
        assert result.agents == ["claude"]
        assert [m.message.session_id for m in result.matches] == [
            "new-session", "new-session", "old-session",
        ]

    def test_estimate_without_budget(self, sample_sessions):
        result = search(sample_sessions, SearchOptions(query="needle"))
        expected = sum(estimate_item_tokens(m.message.content) for m in result.matches)
        assert result.estimated_tokens == expected
        assert result.token_budget_exceeded is False
        assert result.truncated_count == 0

    def test_token_budget(self, sample_sessions):
        # "Find the needle please" costs 6 + 10 tokens; the excerpt after it doesn't fit
        result = search(sample_sessions, SearchOptions(query="needle", max_tokens=20))
        assert result.total_matches == 1
        assert result.matches[0].message.content == "Find the needle please"
        assert result.token_budget_exceeded is True
        assert result.estimated_tokens == 16
        assert result.truncated_count == 2

    def test_zero_max_tokens_means_unlimited(self, sample_sessions):
        result = search(sample_sessions, SearchOptions(query="needle", max_tokens=0))
        assert result.total_matches == 3
        assert result.token_budget_exceeded is False

    def test_limit(self, sample_sessions):
        result = search(sample_sessions, SearchOptions(query="needle", limit=1))
        assert result.total_matches == 1
        assert result.truncated_count == 2
        assert result.token_budget_exceeded is False

    def test_no_matches(self, sample_sessions):
        result = search(sample_sessions, SearchOptions(query="zebra"))
        assert result.matches == []
        assert result.estimated_tokens == 0

    def test_search_agents_reads_sessions(self, sessions_dir):
        result = search_agents(SearchOptions(query="login"), [ClaudeReader(sessions_dir)])
        assert result.total_matches == 2
        assert result.searched_sessions == 2
        assert result.agents == ["claude"]

    def test_search_agents_combines_readers(self, sessions_dir, kimi_share_dir):
        readers = [ClaudeReader(sessions_dir), KimiReader(kimi_share_dir)]
        result = search_agents(SearchOptions(query="login"), readers)

        assert result.total_matches == 4
        assert result.searched_sessions == 4
        assert result.agents == ["claude", "kimi"]
        assert {m.message.agent_type for m in result.matches} == {"claude", "kimi"}
        # Kimi messages carry file times, newer than the 2024 Claude records
        assert result.matches[0].message.agent_type == "kimi"

    def test_search_agents_budget_from_options(self, sessions_dir):
        """The assistant reply costs 37 tokens; the user message after it doesn't fit."""
        result = search_agents(SearchOptions(query="login", max_tokens=40), [ClaudeReader(sessions_dir)])
        assert result.total_matches == 1
        assert result.matches[0].message.role == "assistant"
        assert result.token_budget_exceeded is True
        assert result.truncated_count == 1


class TestListSessions:
    def test_most_recent_first(self, sample_sessions):
        result = list_sessions(sample_sessions)
        assert [s.session_id for s in result.sessions] == ["new-session", "old-session"]
        assert result.total_sessions == 2
        assert result.sessions[0].first_message == "Find the needle please"
        assert result.sessions[0].message_count == 3

    def test_limit(self, sample_sessions):
        result = list_sessions(sample_sessions, limit=1)
        assert len(result.sessions) == 1
        assert result.total_sessions == 2

    def test_topic_preview_truncated(self):
        session = Session(
            session_id="s",
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            messages=[make_message("word   " * 40)],
        )
        topic = session_topic(session)
        assert topic.endswith("...")
        assert len(topic) == 103
        assert "  " not in topic

    def test_topic_falls_back_to_any_role(self):
        session = Session(
            session_id="s",
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            messages=[make_message("assistant only", role="assistant")],
        )
        assert session_topic(session) == "assistant only"

    def test_topic_empty_session(self):
        session = Session(session_id="s", timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert session_topic(session) is None

    def test_list_agent_sessions(self, sessions_dir, codex_home):
        result = list_agent_sessions([ClaudeReader(sessions_dir), CodexReader(codex_home)])
        assert result.total_sessions == 4
        assert result.agents == ["claude", "codex"]
        # abc123 has no record timestamp, so its file time puts it first
        assert [s.session_id for s in result.sessions] == ["abc123", CODEX_SESSION_ID, "def456", "old"]

    def test_list_agent_sessions_filter_and_limit(self, sessions_dir, codex_home):
        readers = [ClaudeReader(sessions_dir), CodexReader(codex_home)]
        result = list_agent_sessions(readers, work_dir_filter="codex", limit=5)
        assert [s.session_id for s in result.sessions] == [CODEX_SESSION_ID]
