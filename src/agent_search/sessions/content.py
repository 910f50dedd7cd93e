"""Flatten structured message content into searchable text.

Handles plain strings, lists of content blocks (text, thinking, tool_use,
tool_result), and objects with a `text` field.
"""

import re
from typing import Any

_THINKING_BLOCK = re.compile(r"\[Thinking:.*?\]", re.DOTALL)

# Nested tool inputs deeper than this are ignored
_MAX_DEPTH = 4


def _extract_strings_deep(obj: Any, depth: int = 0) -> str:
    """Collect every string value from a nested dict/list structure."""
    if depth > _MAX_DEPTH:
        return ""
    if isinstance(obj, str):
        return obj
    if isinstance(obj, dict):
        obj = list(obj.values())
    if isinstance(obj, list):
        parts = (_extract_strings_deep(item, depth + 1) for item in obj)
        return "\n".join(p for p in parts if p)
    return ""


def _tool_result_text(block: dict) -> str:
    parts = ["[Tool Result]"]
    inner = block.get("content")
    if isinstance(inner, str):
        parts.append(inner)
    elif isinstance(inner, list):
        for item in inner:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("text"):
                parts.append(item["text"])
            elif isinstance(item, dict) and item.get("content"):
                parts.append(_extract_strings_deep(item["content"]))
    return "\n".join(p for p in parts if p)


def _block_text(block: Any) -> str:
    if isinstance(block, str):
        return block
    if not isinstance(block, dict):
        return ""

    block_type = block.get("type")
    if block_type == "text" and block.get("text"):
        return block["text"]
    if block_type == "thinking" and block.get("thinking"):
        return f"[Thinking: {block['thinking']}]"
    if block_type == "tool_use":
        parts = [f"[Tool: {block.get('name', '')}]"]
        if block.get("input"):
            input_text = _extract_strings_deep(block["input"])
            if input_text:
                parts.append(input_text)
        return "\n".join(parts)
    if block_type == "tool_result":
        return _tool_result_text(block)
    return ""


def extract_text_content(content: Any) -> str:
    """Extract text from any supported message content format.

    Args:
        content: Raw `message.content` value from a session record

    Returns:
        Plain text with tool calls and thinking rendered as bracketed markers
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts = (_block_text(block) for block in content)
        return "\n".join(t for t in texts if t)
    if isinstance(content, dict) and content.get("text"):
        return content["text"]
    if content is None:
        return ""
    return str(content)


def strip_thinking_blocks(content: str) -> str:
    """Remove [Thinking: ...] markers for cleaner output."""
    return _THINKING_BLOCK.sub("", content).strip()
