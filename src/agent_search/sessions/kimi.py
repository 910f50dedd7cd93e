"""Kimi CLI chat history reader.

Sessions live under <share>/sessions/<work-dir-hash>/<session-id>/context.jsonl,
where <share> is $KIMI_SHARE_DIR or ~/.kimi. The hash is the MD5 of the
working directory (prefixed with "<kaos>:" for non-local instances);
<share>/kimi.json lists the known working directories so hashes can be
mapped back to paths.
"""

import hashlib
import logging
import os
from datetime import datetime
from pathlib import Path

from agent_search.sessions.base import AgentReader, file_times, from_epoch, parse_timestamp
from agent_search.sessions.content import extract_text_content
from agent_search.sessions.jsonl import read_json, read_jsonl
from agent_search.sessions.models import AgentType, Message, Session

logger = logging.getLogger(__name__)

CONTEXT_FILE = "context.jsonl"
METADATA_FILE = "kimi.json"

_SEARCHABLE_ROLES = {"user", "assistant"}


def default_share_dir() -> Path:
    """$KIMI_SHARE_DIR if set, else ~/.kimi."""
    share_dir = os.environ.get("KIMI_SHARE_DIR")
    return Path(share_dir) if share_dir else Path.home() / ".kimi"


def hash_work_dir(path: str, kaos: str = "local") -> str:
    """Kimi's directory hash for a working directory."""
    key = path if kaos == "local" else f"{kaos}:{path}"
    return hashlib.md5(key.encode("utf-8")).hexdigest()


def _record_timestamp(record: dict) -> datetime | None:
    """Per-message timestamp, from whichever field the record carries."""
    for key in ("timestamp", "created_at"):
        if record.get(key):
            return parse_timestamp(record[key])
    ts = record.get("ts")
    if isinstance(ts, str):
        return parse_timestamp(ts)
    if ts:
        return from_epoch(ts)
    return None


class KimiReader(AgentReader):
    """Reads Kimi sessions from a share directory."""

    agent_type: AgentType = "kimi"

    def __init__(self, share_dir: Path | None = None):
        self.share_dir = Path(share_dir) if share_dir else default_share_dir()
        self.sessions_dir = self.share_dir / "sessions"
        self._work_dirs: dict[str, str] | None = None

    def _load_work_dirs(self) -> dict[str, str]:
        """Map of directory hash -> working directory, from kimi.json."""
        if self._work_dirs is not None:
            return self._work_dirs

        self._work_dirs = {}
        metadata = read_json(self.share_dir / METADATA_FILE) or {}
        for entry in metadata.get("work_dirs") or []:
            if isinstance(entry, dict) and isinstance(entry.get("path"), str):
                digest = hash_work_dir(entry["path"], entry.get("kaos") or "local")
                self._work_dirs[digest] = entry["path"]
        logger.debug(f"Loaded {len(self._work_dirs)} Kimi work dirs")
        return self._work_dirs

    def resolve_work_dir(self, digest: str) -> str:
        """Working directory for a hash, or the hash itself if unknown."""
        return self._load_work_dirs().get(digest, digest)

    def find_sessions(self, work_dir_filter: str | None = None) -> list[Session]:
        if not self.sessions_dir.is_dir():
            logger.debug(f"Sessions directory not found: {self.sessions_dir}")
            return []

        sessions = []
        for hash_dir in sorted(p for p in self.sessions_dir.iterdir() if p.is_dir()):
            work_dir = self.resolve_work_dir(hash_dir.name)
            if work_dir_filter and work_dir_filter not in work_dir:
                continue

            for session_dir in sorted(p for p in hash_dir.iterdir() if p.is_dir()):
                session = self.read_context_file(session_dir / CONTEXT_FILE, work_dir)
                if session and session.messages:
                    sessions.append(session)

        logger.debug(f"Found {len(sessions)} {self.agent_type} sessions in {self.sessions_dir}")
        return sessions

    def read_session(self, session_id: str) -> Session | None:
        if not self.sessions_dir.is_dir():
            return None
        for hash_dir in sorted(p for p in self.sessions_dir.iterdir() if p.is_dir()):
            path = hash_dir / session_id / CONTEXT_FILE
            if path.exists():
                return self.read_context_file(path, self.resolve_work_dir(hash_dir.name))
        return None

    def read_context_file(self, path: Path, work_dir: str = "") -> Session | None:
        """Read one session's context.jsonl into a Session.

        Kimi records rarely carry timestamps. When none do, message times
        are spread evenly between the file's creation and modification
        times so that recency ordering within a session still holds.
        """
        records = read_jsonl(path)
        if not records:
            return None

        session_id = path.parent.name
        started, modified = file_times(path)

        relevant = []
        for record in records:
            if record.get("role") not in _SEARCHABLE_ROLES:
                continue
            content = extract_text_content(record.get("content"))
            if content:
                relevant.append((record, content))

        stamps = [_record_timestamp(record) for record, _ in relevant]
        interpolate = not any(stamps) and len(relevant) > 1

        messages = []
        for i, ((record, content), stamp) in enumerate(zip(relevant, stamps)):
            if stamp is None:
                if interpolate:
                    stamp = started + (modified - started) * (i / (len(relevant) - 1))
                else:
                    stamp = modified

            messages.append(Message(
                role=record["role"],
                content=content,
                timestamp=stamp,
                agent_type=self.agent_type,
                session_id=session_id,
                work_dir=work_dir,
            ))

        return Session(
            session_id=session_id,
            agent_type=self.agent_type,
            work_dir=work_dir,
            timestamp=started,
            messages=messages,
        )
