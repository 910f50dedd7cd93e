"""Render search results and session listings as text or JSON."""

import json
import re
from typing import Any

from agent_search.excerpt import (
    TruncationMetadata,
    calculate_shown_percentage,
    format_truncation_info,
)
from agent_search.models import SearchMatch, SearchResult, SessionListResult
from agent_search.sessions.content import strip_thinking_blocks
from agent_search.sessions.models import Message

_WHITESPACE = re.compile(r"\s+")
_CONTEXT_PREVIEW_LENGTH = 150

_AGENT_NAMES = {
    "claude": "Claude Code",
    "kimi": "Kimi",
    "codex": "Codex",
    "opencode": "OpenCode",
}


def agent_display_name(agent_type: str) -> str:
    return _AGENT_NAMES.get(agent_type, agent_type.capitalize())


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _format_context_message(message: Message) -> str:
    content = _collapse(strip_thinking_blocks(message.content))
    if len(content) > _CONTEXT_PREVIEW_LENGTH:
        content = content[:_CONTEXT_PREVIEW_LENGTH] + "..."
    return f"    [{message.role}] {content}"


def _format_match_message(match: SearchMatch, output_mode: str) -> str:
    message = match.message
    if output_mode == "summary":
        body = _collapse(match.matched_text)
    else:
        body = _collapse(message.content)

    line = f">>> [{message.role}] {body}"
    if match.truncation and match.truncation.content_truncated:
        line += f"\n    {format_truncation_info(match.truncation)}"
    return line


def format_results(result: SearchResult) -> str:
    """Human-readable rendering of a search result."""
    lines = [
        f"Found {result.total_matches} matches across {len(result.agents)} agent(s) "
        f"(searched {result.searched_sessions} sessions)",
        f"Estimated tokens: ~{result.estimated_tokens}",
        "",
    ]

    if result.token_budget_exceeded:
        lines.append("⚠ Token budget exceeded - showing partial results\n")
    if result.truncated_count > 0:
        lines.append(f"⚠ {result.truncated_count} additional matches not shown\n")

    for index, match in enumerate(result.matches, start=1):
        message = match.message
        lines.append(f"--- Match {index} [{message.agent_type}] ---")
        lines.append(f"Session: {message.session_id}")
        lines.append(f"Work Dir: {message.work_dir}")
        lines.append(f"Agent: {agent_display_name(message.agent_type)}")
        lines.append(f"Time: {message.timestamp.isoformat()}")
        if match.session_snippet:
            lines.append(f"Position: {match.session_snippet.session_summary}")
        lines.append("")

        if match.context_before:
            lines.append("Context:")
            lines.extend(_format_context_message(m) for m in match.context_before)
        lines.append(_format_match_message(match, result.output_mode))
        lines.extend(_format_context_message(m) for m in match.context_after)
        lines.append("")

    return "\n".join(lines)


def _truncation_fields(truncation: TruncationMetadata) -> dict[str, Any]:
    """Flat truncation fields alongside the nested metadata object."""
    return {
        "_truncated": truncation.content_truncated,
        "_original_length": truncation.original_length,
        "_truncation_type": truncation.truncation_type,
        "snippet_start": truncation.snippet_start,
        "snippet_end": truncation.snippet_end,
        "shown_percentage": calculate_shown_percentage(truncation),
    }


def _match_to_dict(match: SearchMatch) -> dict[str, Any]:
    data = match.model_dump(mode="json", exclude_none=True)
    if match.truncation:
        data.update(_truncation_fields(match.truncation))
    return data


def format_results_json(result: SearchResult) -> str:
    """JSON rendering of a search result; timestamps are ISO-8601 strings."""
    data = result.model_dump(mode="json", exclude={"matches"})
    data["matches"] = [_match_to_dict(m) for m in result.matches]
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_session_list_json(result: SessionListResult) -> str:
    return json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False)
