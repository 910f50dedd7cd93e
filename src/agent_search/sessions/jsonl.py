"""JSON and line-delimited JSON reading."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def read_jsonl(path: Path) -> list[dict]:
    """Parse a JSONL file into a list of records.

    Blank and malformed lines are skipped. A file that can't be read
    yields an empty list rather than an error, so one bad session never
    aborts a search across many.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return []

    records = []
    skipped = 0
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            skipped += 1
            continue
        if isinstance(record, dict):
            records.append(record)

    if skipped:
        logger.debug(f"Skipped {skipped} malformed lines in {Path(path).name}")
    return records


def read_json(path: Path) -> dict | None:
    """Parse a JSON object file, or None if it's missing, unreadable, or not an object."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug(f"Could not read {path}: {e}")
        return None
    return data if isinstance(data, dict) else None
