"""Codex CLI chat history reader.

Sessions are rollout JSONL files anywhere under <codex-home>/sessions/
(usually nested by date), where <codex-home> is $CODEX_HOME or ~/.codex.
A `session_meta` record carries the session ID, start time, and working
directory; `response_item` records of type `message` carry the chat.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

from agent_search.sessions.base import AgentReader, file_times, parse_timestamp
from agent_search.sessions.jsonl import read_jsonl
from agent_search.sessions.models import AgentType, Message, Session

logger = logging.getLogger(__name__)

_SEARCHABLE_ROLES = {"user", "assistant"}
_UUID_SUFFIX = re.compile(
    r"([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})\.jsonl$", re.IGNORECASE
)


def default_codex_home() -> Path:
    """$CODEX_HOME if set, else ~/.codex."""
    codex_home = os.environ.get("CODEX_HOME")
    return Path(codex_home) if codex_home else Path.home() / ".codex"


def extract_codex_text(content: Any) -> str:
    """Flatten Codex message content (input_text/output_text blocks) into text."""
    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and isinstance(block.get("text"), str):
                parts.append(block["text"])
        return "\n".join(p for p in parts if p).strip()
    if isinstance(content, dict) and isinstance(content.get("text"), str):
        return content["text"].strip()
    return ""


def session_id_from_filename(path: Path) -> str:
    """Trailing UUID of a rollout filename, or the bare file stem."""
    match = _UUID_SUFFIX.search(path.name)
    return match.group(1) if match else path.stem


class CodexReader(AgentReader):
    """Reads Codex sessions from a Codex home directory."""

    agent_type: AgentType = "codex"

    def __init__(self, codex_home: Path | None = None):
        self.codex_home = Path(codex_home) if codex_home else default_codex_home()
        self.sessions_dir = self.codex_home / "sessions"

    def session_files(self) -> list[Path]:
        if not self.sessions_dir.is_dir():
            return []
        return sorted(p for p in self.sessions_dir.rglob("*.jsonl") if p.is_file())

    def find_sessions(self, work_dir_filter: str | None = None) -> list[Session]:
        sessions = []
        for path in self.session_files():
            session = self.read_session_file(path)
            if not session or not session.messages:
                continue
            if work_dir_filter and work_dir_filter not in session.work_dir:
                continue
            sessions.append(session)

        logger.debug(f"Found {len(sessions)} {self.agent_type} sessions in {self.sessions_dir}")
        return sessions

    def read_session(self, session_id: str) -> Session | None:
        files = self.session_files()
        # Rollout filenames normally embed the ID; fall back to session_meta
        by_name = [p for p in files if session_id in p.name]
        for path in by_name + [p for p in files if p not in by_name]:
            session = self.read_session_file(path)
            if session and (session.session_id == session_id or session_id in path.name):
                return session
        return None

    def read_session_file(self, path: Path) -> Session | None:
        """Read one rollout file into a Session."""
        records = read_jsonl(path)
        if not records:
            return None

        meta_record = next(
            (r for r in records if r.get("type") == "session_meta" and isinstance(r.get("payload"), dict)),
            None,
        )
        meta = meta_record["payload"] if meta_record else {}

        meta_id = meta.get("id")
        session_id = meta_id.strip() if isinstance(meta_id, str) and meta_id.strip() else session_id_from_filename(path)

        session_ts = (
            parse_timestamp(meta.get("timestamp"))
            or parse_timestamp(meta_record.get("timestamp") if meta_record else None)
            or parse_timestamp(records[0].get("timestamp"))
        )
        if session_ts is None:
            session_ts = file_times(path)[0]

        cwd = meta.get("cwd")
        work_dir = cwd.strip() if isinstance(cwd, str) and cwd.strip() else "unknown"

        messages = []
        for record in records:
            payload = record.get("payload")
            if record.get("type") != "response_item" or not isinstance(payload, dict):
                continue
            if payload.get("type") != "message" or payload.get("role") not in _SEARCHABLE_ROLES:
                continue

            content = extract_codex_text(payload.get("content"))
            if not content:
                continue

            messages.append(Message(
                role=payload["role"],
                content=content,
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
