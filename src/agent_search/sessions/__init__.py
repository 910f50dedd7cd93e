"""Session reading: uniform Message/Session models and agent readers."""

from pathlib import Path

from agent_search.sessions.base import AgentReader
from agent_search.sessions.claude import ClaudeReader
from agent_search.sessions.codex import CodexReader
from agent_search.sessions.kimi import KimiReader
from agent_search.sessions.models import ALL_AGENTS, AgentType, Message, Session, SessionInfo
from agent_search.sessions.opencode import OpenCodeReader

READERS: dict[str, type[AgentReader]] = {
    "claude": ClaudeReader,
    "kimi": KimiReader,
    "codex": CodexReader,
    "opencode": OpenCodeReader,
}


def get_reader(agent: str, root: Path | None = None) -> AgentReader:
    """Create the reader for an agent.

    Args:
        agent: Agent name (claude, kimi, codex, opencode)
        root: Agent-specific data directory; None uses the agent's default location

    Raises:
        ValueError: If the agent is unknown
    """
    if agent not in READERS:
        raise ValueError(f"Unknown agent: {agent}. Valid agents: {', '.join(ALL_AGENTS)}")
    return READERS[agent](root)


__all__ = [
    "ALL_AGENTS",
    "AgentReader",
    "AgentType",
    "ClaudeReader",
    "CodexReader",
    "KimiReader",
    "Message",
    "OpenCodeReader",
    "READERS",
    "Session",
    "SessionInfo",
    "get_reader",
]
