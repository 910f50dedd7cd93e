"""Base class for agent chat history readers.

Each supported agent stores sessions in its own on-disk layout. A reader
turns that layout into uniform Session/Message models; search, listing,
and formatting only ever talk to the AgentReader interface.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from agent_search.sessions.models import AgentType, Session


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp (with optional trailing Z) as UTC-aware."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def from_epoch(value: int | float, scale: int = 1) -> datetime | None:
    """UTC datetime from an epoch number; `scale=1000` for milliseconds."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value / scale, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def file_times(path: Path) -> tuple[datetime, datetime]:
    """(created, modified) times of a file in UTC.

    Creation time falls back to modification time where the platform
    doesn't record it.
    """
    stat = path.stat()
    modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
    birth = getattr(stat, "st_birthtime", 0)
    created = datetime.fromtimestamp(birth, tz=timezone.utc) if birth > 0 else modified
    return created, modified


class AgentReader(ABC):
    """Reads one agent's sessions from disk.

    Subclasses set `agent_type` and `sessions_dir` and implement discovery
    and lookup. Readers never raise on unreadable or malformed files;
    those sessions are logged and skipped.
    """

    agent_type: AgentType
    sessions_dir: Path

    @abstractmethod
    def find_sessions(self, work_dir_filter: str | None = None) -> list[Session]:
        """Discover and read every session with at least one message.

        Args:
            work_dir_filter: Substring the session's work dir must contain
        """

    @abstractmethod
    def read_session(self, session_id: str) -> Session | None:
        """Read a single session by ID, or None if it doesn't exist."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.sessions_dir)!r})"
