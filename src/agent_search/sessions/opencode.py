"""OpenCode chat history reader.

OpenCode keeps one JSON file per object under its storage directory:

    project/<project-id>.json              worktree of each project
    session/<project-id>/<session-id>.json session info
    message/<session-id>/<message-id>.json role and timing
    part/<message-id>/<part-id>.json       text, reasoning, tool parts

The storage directory is $OPENCODE_DATA_DIR, else
$XDG_DATA_HOME/opencode/storage, else ~/.local/share/opencode/storage.
"""

import logging
import os
from pathlib import Path

from agent_search.sessions.base import AgentReader, from_epoch
from agent_search.sessions.jsonl import read_json
from agent_search.sessions.models import AgentType, Message, Session

logger = logging.getLogger(__name__)

_SEARCHABLE_ROLES = {"user", "assistant"}
_TEXT_PART_TYPES = {"text", "reasoning"}


def default_storage_dir() -> Path:
    data_dir = os.environ.get("OPENCODE_DATA_DIR")
    if data_dir:
        return Path(data_dir)
    data_home = os.environ.get("XDG_DATA_HOME")
    base = Path(data_home) if data_home else Path.home() / ".local" / "share"
    return base / "opencode" / "storage"


def _json_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.glob("*.json") if p.is_file())


def _created_ms(data: dict) -> int | float:
    created = (data.get("time") or {}).get("created")
    return created if isinstance(created, (int, float)) else 0


class OpenCodeReader(AgentReader):
    """Reads OpenCode sessions from a storage directory."""

    agent_type: AgentType = "opencode"

    def __init__(self, storage_dir: Path | None = None):
        self.sessions_dir = Path(storage_dir) if storage_dir else default_storage_dir()

    def _project_worktrees(self) -> dict[str, str]:
        worktrees = {}
        for path in _json_files(self.sessions_dir / "project"):
            project = read_json(path)
            if project and project.get("id"):
                worktrees[project["id"]] = project.get("worktree") or "unknown"
        return worktrees

    def _session_records(self):
        """Yield (session info, worktree) for every session file."""
        worktrees = self._project_worktrees()
        session_root = self.sessions_dir / "session"
        if not session_root.is_dir():
            return
        for project_dir in sorted(p for p in session_root.iterdir() if p.is_dir()):
            worktree = worktrees.get(project_dir.name, "unknown")
            for path in _json_files(project_dir):
                info = read_json(path)
                if info and info.get("id"):
                    yield info, worktree

    def _message_text(self, message_id: str) -> str:
        parts = (read_json(p) for p in _json_files(self.sessions_dir / "part" / message_id))
        texts = [
            part["text"] for part in parts
            if part and part.get("type") in _TEXT_PART_TYPES and part.get("text")
        ]
        return "\n".join(texts).strip()

    def find_sessions(self, work_dir_filter: str | None = None) -> list[Session]:
        sessions = []
        for info, worktree in self._session_records():
            if work_dir_filter and work_dir_filter not in worktree:
                continue
            session = self.parse_session(info, worktree)
            if session and session.messages:
                sessions.append(session)

        logger.debug(f"Found {len(sessions)} {self.agent_type} sessions in {self.sessions_dir}")
        return sessions

    def read_session(self, session_id: str) -> Session | None:
        for info, worktree in self._session_records():
            if info["id"] == session_id:
                return self.parse_session(info, worktree)
        return None

    def parse_session(self, info: dict, work_dir: str) -> Session | None:
        """Assemble a Session from its message and part files.

        Returns None when the session has no user/assistant text.
        """
        session_id = info["id"]
        raw = [read_json(p) for p in _json_files(self.sessions_dir / "message" / session_id)]
        ordered = sorted(
            (m for m in raw if m and m.get("id") and m.get("role") in _SEARCHABLE_ROLES),
            key=_created_ms,
        )

        messages = []
        for data in ordered:
            content = self._message_text(data["id"])
            if not content:
                continue
            timestamp = from_epoch(_created_ms(data), scale=1000) if _created_ms(data) else None
            if timestamp is None:
                timestamp = from_epoch((self.sessions_dir / "message" / session_id).stat().st_mtime)

            messages.append(Message(
                role=data["role"],
                content=content,
                timestamp=timestamp,
                agent_type=self.agent_type,
                session_id=session_id,
                work_dir=work_dir,
            ))

        if not messages:
            return None

        session_ts = from_epoch(_created_ms(info), scale=1000) if _created_ms(info) else None
        return Session(
            session_id=session_id,
            agent_type=self.agent_type,
            work_dir=work_dir,
            timestamp=session_ts or messages[0].timestamp,
            messages=messages,
        )
