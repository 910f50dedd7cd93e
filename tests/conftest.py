"""Shared test fixtures for agent-search."""

import hashlib
import json
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from agent_search.sessions.models import Message, Session


def make_message(
    content: str,
    role: str = "user",
    session_id: str = "sess-1",
    timestamp: datetime | None = None,
) -> Message:
    """Helper: build a Message with sensible defaults."""
    return Message(
        role=role,
        content=content,
        timestamp=timestamp or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
        session_id=session_id,
        work_dir="/home/user/project",
    )


@pytest.fixture
def tmp_dir():
    """Temporary directory that cleans up after test."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def long_content() -> str:
    """A long message with one 'needle' in the middle."""
    return "lorem ipsum " * 60 + "the needle is here" + " dolor sit" * 60


@pytest.fixture
def sample_sessions(long_content) -> list[Session]:
    """Two sessions on different days; the newer one has the long message."""
    old_ts = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    new_ts = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)

    old = Session(
        session_id="old-session",
        work_dir="/home/user/alpha",
        timestamp=old_ts,
        messages=[
            make_message("How do I set up authentication?", "user", "old-session", old_ts),
            make_message("Use a token-based auth middleware.", "assistant", "old-session", old_ts),
            make_message("Thanks, what about the needle test?", "user", "old-session", old_ts),
        ],
    )
    new = Session(
        session_id="new-session",
        work_dir="/home/user/beta",
        timestamp=new_ts,
        messages=[
            make_message("Find the needle please", "user", "new-session", new_ts),
            make_message(long_content, "assistant", "new-session", new_ts),
            make_message("Great, done.", "user", "new-session", new_ts),
        ],
    )
    return [old, new]


def write_jsonl(path: Path, records: list) -> Path:
    """Write records (dicts or raw strings) as JSONL."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def sessions_dir(tmp_dir) -> Path:
    """A Claude Code projects directory with one project and two sessions."""
    root = tmp_dir / "projects"
    project = root / "-nonexistent-work-app"
    write_jsonl(project / "abc123.jsonl", [
        {"type": "summary", "summary": "Auth work"},
        {
            "type": "user",
            "timestamp": "2024-06-01T10:00:00.000Z",
            "message": {"role": "user", "content": "Please fix the login bug"},
        },
        "{not valid json",
        "",
        {
            "type": "assistant",
            "timestamp": "2024-06-01T10:00:05.000Z",
            "message": {
                "role": "assistant",
                "content": [
                    {"type": "thinking", "thinking": "Look at the session code"},
                    {"type": "text", "text": "The login bug is in the session handler."},
                    {"type": "tool_use", "name": "Read", "input": {"file_path": "/app/session.py"}},
                ],
            },
        },
        {"type": "system", "message": {"role": "system", "content": "ignored"}},
    ])
    write_jsonl(project / "def456.jsonl", [
        {
            "type": "user",
            "timestamp": "2024-05-01T08:00:00Z",
            "message": {"role": "user", "content": "Write a README"},
        },
    ])
    write_jsonl(root / "-nonexistent-other" / "empty.jsonl", [
        {"type": "summary", "summary": "nothing searchable"},
    ])
    return root


def write_json(path: Path, data: dict) -> Path:
    """Write one JSON object file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


KIMI_WORK_DIR = "/nonexistent/kimi/app"
CODEX_SESSION_ID = "0199a1b2-c3d4-7e5f-8a9b-0c1d2e3f4a5b"


@pytest.fixture
def kimi_share_dir(tmp_dir) -> Path:
    """A Kimi share directory with one known and one unknown work dir."""
    share = tmp_dir / "kimi"
    write_json(share / "kimi.json", {"work_dirs": [{"path": KIMI_WORK_DIR, "kaos": "local"}]})

    digest = hashlib.md5(KIMI_WORK_DIR.encode("utf-8")).hexdigest()
    write_jsonl(share / "sessions" / digest / "sess-k1" / "context.jsonl", [
        {"role": "_checkpoint", "id": 0},
        {"role": "user", "content": "Where is the login form?"},
        {"role": "_usage", "token_count": 42},
        {"role": "assistant", "content": [{"type": "text", "text": "The login form lives in forms.py"}]},
        {"role": "tool", "content": "forms.py contents"},
    ])
    write_jsonl(share / "sessions" / "deadbeef" / "sess-k2" / "context.jsonl", [
        {"role": "user", "content": "Hello there", "timestamp": "2024-04-01T00:00:00Z"},
    ])
    return share


@pytest.fixture
def codex_home(tmp_dir) -> Path:
    """A Codex home with one dated rollout and one bare session file."""
    home = tmp_dir / "codex"
    rollout = home / "sessions" / "2024" / "06" / "02" / f"rollout-2024-06-02T09-00-00-{CODEX_SESSION_ID}.jsonl"
    write_jsonl(rollout, [
        {
            "timestamp": "2024-06-02T09:00:00Z",
            "type": "session_meta",
            "payload": {"id": CODEX_SESSION_ID, "timestamp": "2024-06-02T09:00:00Z", "cwd": "/nonexistent/codex/api"},
        },
        {
            "timestamp": "2024-06-02T09:00:01Z",
            "type": "response_item",
            "payload": {"type": "message", "role": "user", "content": [{"type": "input_text", "text": "Add a login endpoint"}]},
        },
        {"timestamp": "2024-06-02T09:00:02Z", "type": "response_item", "payload": {"type": "function_call", "name": "shell"}},
        {
            "timestamp": "2024-06-02T09:00:03Z",
            "type": "response_item",
            "payload": {"type": "message", "role": "assistant", "content": [{"type": "output_text", "text": "Added POST /login"}]},
        },
        {
            "timestamp": "2024-06-02T09:00:04Z",
            "type": "response_item",
            "payload": {"type": "message", "role": "developer", "content": [{"type": "input_text", "text": "login rules"}]},
        },
        {"type": "event_msg", "payload": {"type": "token_count"}},
    ])
    write_jsonl(home / "sessions" / "old.jsonl", [
        {
            "timestamp": "2024-01-01T00:00:00Z",
            "type": "response_item",
            "payload": {"type": "message", "role": "user", "content": "plain text question"},
        },
    ])
    return home


@pytest.fixture
def opencode_storage(tmp_dir) -> Path:
    """An OpenCode storage directory with one searchable and one empty session."""
    storage = tmp_dir / "opencode"
    write_json(storage / "project" / "proj1.json", {"id": "proj1", "worktree": "/nonexistent/oc/web"})
    # 2024-06-01T09:00:00Z in milliseconds
    created = 1717232400000
    write_json(storage / "session" / "proj1" / "ses_1.json", {"id": "ses_1", "time": {"created": created}})
    write_json(storage / "session" / "proj1" / "ses_2.json", {"id": "ses_2", "time": {"created": created}})

    # File order (msg_a, msg_m, msg_z) differs from creation order
    write_json(storage / "message" / "ses_1" / "msg_z.json", {"id": "msg_z", "role": "user", "time": {"created": created + 1000}})
    write_json(storage / "message" / "ses_1" / "msg_a.json", {"id": "msg_a", "role": "assistant", "time": {"created": created + 5000}})
    write_json(storage / "message" / "ses_1" / "msg_m.json", {"id": "msg_m", "role": "user", "time": {"created": created + 9000}})

    write_json(storage / "part" / "msg_z" / "prt_1.json", {"type": "text", "text": "Why does the login page flicker?"})
    write_json(storage / "part" / "msg_a" / "prt_1.json", {"type": "reasoning", "text": "Check the CSS"})
    write_json(storage / "part" / "msg_a" / "prt_2.json", {"type": "text", "text": "The login page reloads twice."})
    write_json(storage / "part" / "msg_a" / "prt_3.json", {"type": "tool", "tool": "read"})
    write_json(storage / "part" / "msg_m" / "prt_1.json", {"type": "tool", "tool": "bash"})
    return storage
