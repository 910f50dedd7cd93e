"""Claude Code chat history reader.

Sessions live under ~/.claude/projects/<encoded-project-dir>/<session-id>.jsonl,
where the project directory is the working directory with "/" replaced
by "-" (e.g. "-home-user-my-project").
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from agent_search.sessions.base import AgentReader, parse_timestamp
from agent_search.sessions.content import extract_text_content
from agent_search.sessions.jsonl import read_jsonl
from agent_search.sessions.models import AgentType, Message, Session

logger = logging.getLogger(__name__)

DEFAULT_SESSIONS_DIR = Path.home() / ".claude" / "projects"

_SEARCHABLE_ROLES = {"user", "assistant"}


class ClaudeReader(AgentReader):
    """Reads Claude Code sessions from a projects directory."""

    agent_type: AgentType = "claude"

    def __init__(self, sessions_dir: Path | None = None):
        self.sessions_dir = Path(sessions_dir) if sessions_dir else DEFAULT_SESSIONS_DIR
        self._path_cache: dict[str, str] = {}

    def decode_project_path(self, encoded: str) -> str:
        """Decode a project directory name back into a working directory path.

        Directory names that themselves contain hyphens are ambiguous, so
        when the naive decode doesn't exist on disk the segments are
        regrouped against the filesystem. Falls back to the naive decode.
        """
        if not encoded.startswith("-"):
            return encoded
        if encoded in self._path_cache:
            return self._path_cache[encoded]

        segments = encoded[1:].split("-")
        naive = "/" + "/".join(segments)
        if Path(naive).exists():
            decoded = naive
        else:
            decoded = self._resolve_segments(segments, 0, "") or naive

        self._path_cache[encoded] = decoded
        return decoded

    def _resolve_segments(self, segments: list[str], start: int, base: str) -> str | None:
        """Shortest-first regrouping of hyphenated segments, with backtracking."""
        if start >= len(segments):
            return base

        for end in range(start + 1, len(segments) + 1):
            candidate = f"{base}/{'-'.join(segments[start:end])}"
            if end == len(segments):
                return candidate if Path(candidate).exists() else None
            if Path(candidate).is_dir():
                resolved = self._resolve_segments(segments, end, candidate)
                if resolved:
                    return resolved
        return None

    def find_sessions(self, work_dir_filter: str | None = None) -> list[Session]:
        """Discover and read every session, optionally filtered by work dir.

        Args:
            work_dir_filter: Substring the decoded work dir must contain

        Returns:
            Sessions that contain at least one searchable message
        """
        if not self.sessions_dir.is_dir():
            logger.debug(f"Sessions directory not found: {self.sessions_dir}")
            return []

        sessions = []
        for project_dir in sorted(p for p in self.sessions_dir.iterdir() if p.is_dir()):
            work_dir = self.decode_project_path(project_dir.name)
            if work_dir_filter and work_dir_filter not in work_dir:
                continue

            for path in sorted(project_dir.glob("*.jsonl")):
                session = self.read_session_file(path, work_dir)
                if session and session.messages:
                    sessions.append(session)

        logger.debug(f"Found {len(sessions)} {self.agent_type} sessions in {self.sessions_dir}")
        return sessions

    def read_session(self, session_id: str) -> Session | None:
        """Locate a session by ID in any project directory and read it."""
        if not self.sessions_dir.is_dir():
            return None
        for project_dir in sorted(p for p in self.sessions_dir.iterdir() if p.is_dir()):
            path = project_dir / f"{session_id}.jsonl"
            if path.exists():
                return self.read_session_file(path, self.decode_project_path(project_dir.name))
        return None

    def read_session_file(self, path: Path, work_dir: str = "") -> Session | None:
        """Read one session JSONL file into a Session."""
        records = read_jsonl(path)
        if not records:
            return None

        session_id = path.stem
        session_ts = parse_timestamp(records[0].get("timestamp"))
        if session_ts is None:
            session_ts = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)

        messages = []
        for record in records:
            # Skip summaries, snapshots, and other non-message entries
            message = record.get("message")
            if not isinstance(message, dict):
                continue
            role = message.get("role")
            if role not in _SEARCHABLE_ROLES or not message.get("content"):
                continue

            messages.append(Message(
                role=role,
                content=extract_text_content(message["content"]),
                timestamp=parse_timestamp(record.get("timestamp")) or session_ts,
                agent_type=self.agent_type,
                session_id=session_id,
                work_dir=work_dir,
            ))

        return Session(
            session_id=session_id,
            agent_type=self.agent_type,
            work_dir=work_dir,
            timestamp=session_ts,
            messages=messages,
        )
