"""Word boundary lookup for clean text cuts."""

from typing import Literal

from agent_search.excerpt.constants import BOUNDARY_PUNCTUATION, MAX_WORD_BOUNDARY_SEARCH

Direction = Literal["backward", "forward"]


def is_word_boundary(char: str) -> bool:
    """True for whitespace and the punctuation in BOUNDARY_PUNCTUATION."""
    return char.isspace() or char in BOUNDARY_PUNCTUATION


def find_word_boundary(
    content: str,
    position: int,
    direction: Direction = "backward",
    max_search: int = MAX_WORD_BOUNDARY_SEARCH,
) -> int:
    """Find the nearest word boundary at or around a position.

    Looks at most `max_search` characters away. If no boundary character
    turns up, the raw position is returned unchanged.

    Args:
        content: Full document text
        position: Starting cut position
        direction: "backward" scans towards the start, "forward" towards the end
        max_search: Search radius in characters

    Returns:
        A position in [0, len(content)]
    """
    if position <= 0:
        return 0
    if position >= len(content):
        return len(content)

    if direction == "backward":
        for i in range(min(max_search, position)):
            if is_word_boundary(content[position - i]):
                return position - i
    else:
        for i in range(min(max_search, len(content) - position)):
            if is_word_boundary(content[position + i]):
                return position + i
    return position
