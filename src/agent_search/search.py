"""Search orchestration across agent sessions.

Scans messages for query matches, shortens matched content according to
the output mode, then ranks, budgets, and limits the combined results.
Each function takes explicit parameters so it works as a library without
the CLI.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from datetime import datetime

from agent_search.excerpt import (
    Excerpt,
    MatchRange,
    SnippetConfig,
    apply_content_limit,
    enforce_token_budget,
    extract_multi_match_snippet,
    generate_session_summary,
)
from agent_search.matcher import compile_query, find_match_ranges
from agent_search.models import (
    SearchMatch,
    SearchOptions,
    SearchResult,
    SessionListResult,
    SessionSnippet,
)
from agent_search.sessions.base import AgentReader
from agent_search.sessions.models import Message, Session, SessionInfo

logger = logging.getLogger(__name__)

_TOPIC_PREVIEW_LENGTH = 100
_WHITESPACE = re.compile(r"\s+")


def build_snippet_config(options: SearchOptions) -> SnippetConfig:
    """Core snippet settings for a search."""
    return SnippetConfig(
        mode=options.output_mode,
        snippet_size=options.snippet_size,
        max_content_length=options.max_content_length,
        max_tokens=options.max_tokens,
    )


def process_message(
    message: Message,
    ranges: Sequence[MatchRange],
    config: SnippetConfig,
) -> tuple[Message, Excerpt | None]:
    """Shorten a matched message according to the output mode.

    - snippet: excerpt around every match once the content is longer
      than two snippet radii
    - full: hard length limit when `max_content_length` is set
    - summary: content left as is

    Returns:
        (message with possibly shortened content, excerpt or None if untouched)
    """
    content = message.content

    if config.mode == "snippet" and len(content) > config.snippet_size * 2:
        excerpt = extract_multi_match_snippet(content, ranges, config.snippet_size)
    elif config.mode == "full" and config.max_content_length > 0 and len(content) > config.max_content_length:
        excerpt = apply_content_limit(content, config.max_content_length)
        # Matches past the cut point are no longer visible
        cut = excerpt.metadata.snippet_end
        excerpt.match_positions = [r for r in ranges if r.end <= cut]
    else:
        return message, None

    return message.model_copy(update={"content": excerpt.text}), excerpt


def _aware(dt: datetime) -> datetime:
    """Treat naive datetimes as local time."""
    return dt if dt.tzinfo else dt.astimezone()


def _in_window(message: Message, since: datetime | None, before: datetime | None) -> bool:
    ts = _aware(message.timestamp)
    if since and ts < _aware(since):
        return False
    if before and ts >= _aware(before):
        return False
    return True


def search_sessions(sessions: Iterable[Session], options: SearchOptions) -> list[SearchMatch]:
    """Find every matching message in the given sessions.

    Args:
        sessions: Sessions to scan
        options: Query, filters, and output settings

    Returns:
        One SearchMatch per matching message, in session order

    Raises:
        QueryError: If the query is not a valid pattern
    """
    pattern = compile_query(options.query, options.literal, options.case_insensitive)
    config = build_snippet_config(options)
    matches: list[SearchMatch] = []

    for session in sessions:
        messages = session.messages
        for i, message in enumerate(messages):
            if options.role and message.role != options.role:
                continue
            if not _in_window(message, options.since, options.before):
                continue

            ranges = find_match_ranges(pattern, message.content)
            if not ranges:
                continue

            context_before: list[Message] = []
            context_after: list[Message] = []
            if options.context_lines > 0:
                context_before = messages[max(0, i - options.context_lines):i]
                context_after = messages[i + 1:i + 1 + options.context_lines]

            processed, excerpt = process_message(message, ranges, config)
            first = ranges[0]

            matches.append(SearchMatch(
                message=processed,
                matched_text=message.content[first.start:first.end],
                context_before=context_before,
                context_after=context_after,
                match_positions=excerpt.match_positions if excerpt else ranges,
                truncation=excerpt.metadata if excerpt else None,
                session_snippet=SessionSnippet(
                    total_messages=len(messages),
                    message_index=i,
                    session_summary=generate_session_summary(len(messages), i, message.role),
                ),
            ))

    return matches


def rank_and_budget(
    matches: list[SearchMatch],
    options: SearchOptions,
) -> SearchResult:
    """Sort matches most-recent-first, then apply the token budget and limit."""
    config = build_snippet_config(options)
    total_found = len(matches)
    ranked = sorted(matches, key=lambda m: _aware(m.message.timestamp), reverse=True)

    budget = enforce_token_budget(
        ranked,
        config.max_tokens or None,
        text_of=lambda m: m.message.content,
    )
    kept = budget.items
    if options.limit:
        kept = kept[:options.limit]

    # Budget estimate only counts what is actually returned
    estimated = enforce_token_budget(kept, None, text_of=lambda m: m.message.content)

    if budget.budget_exceeded:
        logger.info(f"Token budget of {config.max_tokens} reached: {len(budget.items)}/{total_found} matches kept")

    return SearchResult(
        matches=kept,
        total_matches=len(kept),
        output_mode=config.mode,
        estimated_tokens=estimated.estimated_tokens,
        token_budget_exceeded=budget.budget_exceeded,
        truncated_count=total_found - len(kept),
    )


def search(sessions: Sequence[Session], options: SearchOptions) -> SearchResult:
    """Search already-loaded sessions and return ranked, budgeted results."""
    matches = search_sessions(sessions, options)
    result = rank_and_budget(matches, options)
    result.searched_sessions = len(sessions)
    result.agents = sorted({s.agent_type for s in sessions})
    return result


def search_agents(options: SearchOptions, readers: Sequence[AgentReader]) -> SearchResult:
    """Load sessions from every reader and search them together."""
    sessions: list[Session] = []
    for reader in readers:
        sessions.extend(reader.find_sessions(options.work_dir_filter))

    logger.info(f"Searching {len(sessions)} sessions for '{options.query}'")
    result = search(sessions, options)
    result.agents = [reader.agent_type for reader in readers]
    return result


def _preview(text: str) -> str:
    text = _WHITESPACE.sub(" ", text).strip()
    if len(text) > _TOPIC_PREVIEW_LENGTH:
        return text[:_TOPIC_PREVIEW_LENGTH] + "..."
    return text


def session_topic(session: Session) -> str | None:
    """Preview of the first user message, or of the first message of any role."""
    for message in session.messages:
        if message.role == "user":
            return _preview(message.content)
    if session.messages:
        return _preview(session.messages[0].content)
    return None


def list_sessions(sessions: Sequence[Session], limit: int | None = None) -> SessionListResult:
    """List sessions most recent first, with a topic preview for each."""
    infos = [
        SessionInfo(
            session_id=s.session_id,
            agent_type=s.agent_type,
            work_dir=s.work_dir,
            timestamp=s.timestamp,
            first_message=session_topic(s),
            message_count=len(s.messages),
        )
        for s in sessions
    ]
    infos.sort(key=lambda s: _aware(s.timestamp), reverse=True)

    return SessionListResult(
        sessions=infos[:limit] if limit else infos,
        total_sessions=len(infos),
        agents=sorted({s.agent_type for s in sessions}),
    )


def list_agent_sessions(
    readers: Sequence[AgentReader],
    work_dir_filter: str | None = None,
    limit: int | None = None,
) -> SessionListResult:
    """Load sessions from every reader and list them together."""
    sessions: list[Session] = []
    for reader in readers:
        sessions.extend(reader.find_sessions(work_dir_filter))

    result = list_sessions(sessions, limit)
    result.agents = [reader.agent_type for reader in readers]
    return result
