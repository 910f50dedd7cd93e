"""agent-search: search coding agent chat histories without flooding the context window.

Finds regex or literal matches in coding agent session transcripts
(Claude Code, Kimi, Codex, OpenCode) and returns bounded excerpts around
each match, annotated with truncation metadata, under an optional token
budget.
"""

__version__ = "0.1.0"

from agent_search.config import SearchSettings
from agent_search.excerpt import (
    Excerpt,
    MatchRange,
    SnippetConfig,
    TruncationMetadata,
    apply_content_limit,
    enforce_token_budget,
    extract_multi_match_snippet,
    extract_snippet,
    find_word_boundary,
    merge_ranges,
)
from agent_search.models import SearchMatch, SearchOptions, SearchResult
from agent_search.search import list_agent_sessions, list_sessions, search, search_agents
from agent_search.sessions import (
    AgentReader,
    ClaudeReader,
    CodexReader,
    KimiReader,
    Message,
    OpenCodeReader,
    Session,
    get_reader,
)

__all__ = [
    "__version__",
    "AgentReader",
    "ClaudeReader",
    "CodexReader",
    "Excerpt",
    "KimiReader",
    "MatchRange",
    "Message",
    "OpenCodeReader",
    "SearchMatch",
    "SearchOptions",
    "SearchResult",
    "SearchSettings",
    "Session",
    "SnippetConfig",
    "TruncationMetadata",
    "apply_content_limit",
    "enforce_token_budget",
    "extract_multi_match_snippet",
    "extract_snippet",
    "find_word_boundary",
    "get_reader",
    "list_agent_sessions",
    "list_sessions",
    "merge_ranges",
    "search",
    "search_agents",
]
