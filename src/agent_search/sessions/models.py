"""Pydantic models for agent chat sessions and messages.

Readers turn each agent's on-disk format into these uniform models;
search and formatting only ever see Message/Session.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

AgentType = Literal["claude", "kimi", "codex", "opencode"]
ALL_AGENTS: tuple[AgentType, ...] = ("claude", "kimi", "codex", "opencode")
MessageRole = Literal["user", "assistant", "tool"]


class Message(BaseModel):
    """A single message within a session."""

    role: MessageRole
    content: str
    timestamp: datetime
    agent_type: AgentType = "claude"
    session_id: str
    work_dir: str = ""


class Session(BaseModel):
    """A chat session: messages in the order they were recorded."""

    session_id: str
    agent_type: AgentType = "claude"
    work_dir: str = ""
    timestamp: datetime
    messages: list[Message] = Field(default_factory=list)


class SessionInfo(BaseModel):
    """One row of a session listing."""

    session_id: str
    agent_type: AgentType
    work_dir: str
    timestamp: datetime
    first_message: str | None = None  # Topic preview
    message_count: int = 0
