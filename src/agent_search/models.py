"""Pydantic models for search requests and results."""

from datetime import datetime

from pydantic import BaseModel, Field

from agent_search.excerpt.models import MatchRange, OutputMode, TruncationMetadata
from agent_search.sessions.models import AgentType, Message, MessageRole, SessionInfo


class SearchOptions(BaseModel):
    """Everything that shapes a single search call."""

    query: str
    role: MessageRole | None = None
    context_lines: int = Field(default=0, ge=0)
    work_dir_filter: str | None = None
    limit: int | None = Field(default=None, ge=0)  # None or 0 = no limit
    case_insensitive: bool = True
    literal: bool = False
    output_mode: OutputMode = "snippet"
    snippet_size: int = Field(default=200, ge=0)
    max_content_length: int = Field(default=500, ge=0)  # 0 = unlimited
    max_tokens: int | None = Field(default=None, ge=0)
    since: datetime | None = None
    before: datetime | None = None


class SessionSnippet(BaseModel):
    """Position of a matched message within its session."""

    total_messages: int
    message_index: int
    session_summary: str = ""


class SearchMatch(BaseModel):
    """One matched message, possibly excerpted."""

    message: Message  # content holds the excerpt when truncated
    matched_text: str  # First match, from the original content
    context_before: list[Message] = Field(default_factory=list)
    context_after: list[Message] = Field(default_factory=list)
    match_positions: list[MatchRange] = Field(default_factory=list)
    truncation: TruncationMetadata | None = None
    session_snippet: SessionSnippet | None = None


class SearchResult(BaseModel):
    """Matches across all searched sessions, after budget and limit."""

    matches: list[SearchMatch] = Field(default_factory=list)
    total_matches: int = 0
    searched_sessions: int = 0
    agents: list[AgentType] = Field(default_factory=list)
    output_mode: OutputMode = "snippet"
    estimated_tokens: int = 0
    token_budget_exceeded: bool = False
    truncated_count: int = 0  # Matches dropped by budget or limit


class SessionListResult(BaseModel):
    """Sessions listed most recent first."""

    sessions: list[SessionInfo] = Field(default_factory=list)
    total_sessions: int = 0
    agents: list[AgentType] = Field(default_factory=list)
