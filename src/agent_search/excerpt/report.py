"""Human-readable descriptions of truncation and session position."""

from agent_search.excerpt.models import TruncationMetadata

_TYPE_LABELS = {
    "snippet": "snippet",
    "length": "max length",
    "token": "token limit",
}


def calculate_shown_percentage(metadata: TruncationMetadata) -> int:
    """Percentage (0-100) of the original content covered by the excerpt."""
    if not metadata.content_truncated or metadata.original_length == 0:
        return 100
    shown = metadata.snippet_end - metadata.snippet_start
    return round(shown / metadata.original_length * 100)


def format_truncation_info(metadata: TruncationMetadata) -> str:
    """One-line truncation notice, or an empty string if nothing was cut."""
    if not metadata.content_truncated:
        return ""
    percentage = calculate_shown_percentage(metadata)
    label = _TYPE_LABELS.get(metadata.truncation_type, metadata.truncation_type)
    return (
        f"[Truncated: showing {percentage}% of {metadata.original_length} chars, "
        f"type: {label}]"
    )


def generate_session_summary(total_messages: int, message_index: int, role: str) -> str:
    """Describe where a message sits within its session.

    Example:
        >>> generate_session_summary(10, 4, "assistant")
        'assistant message 5/10 (40% through session)'
    """
    percentage = round(message_index / total_messages * 100) if total_messages else 0
    return f"{role} message {message_index + 1}/{total_messages} ({percentage}% through session)"
