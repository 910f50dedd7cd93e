"""Query compilation and match scanning."""

import re

from agent_search.excerpt.models import MatchRange


class QueryError(ValueError):
    """Raised when a search query is not a valid pattern."""


def compile_query(query: str, literal: bool = False, case_insensitive: bool = True) -> re.Pattern:
    """Compile a search query into a regex.

    Args:
        query: Regex pattern, or plain text when `literal` is set
        literal: Escape the query so it matches verbatim
        case_insensitive: Ignore case when matching

    Raises:
        QueryError: If the query is empty or not a valid regex
    """
    if not query:
        raise QueryError("Query must not be empty")
    pattern = re.escape(query) if literal else query
    flags = re.IGNORECASE if case_insensitive else 0
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise QueryError(f"Invalid regex '{query}': {e}") from e


def find_match_ranges(pattern: re.Pattern, text: str) -> list[MatchRange]:
    """Every non-overlapping match of `pattern` in `text`, in order.

    Zero-width matches are included; the scanner advances past them.
    """
    return [MatchRange(start=m.start(), end=m.end()) for m in pattern.finditer(text)]
