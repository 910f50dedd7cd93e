"""Consolidation of overlapping or nearly-adjacent match ranges."""

from collections.abc import Iterable

from agent_search.excerpt.constants import MERGE_GAP
from agent_search.excerpt.models import MatchRange


def merge_ranges(ranges: Iterable[MatchRange], gap: int = MERGE_GAP) -> list[MatchRange]:
    """Merge ranges that overlap or sit within `gap` characters of each other.

    Input order does not matter and the input is never modified.

    Returns:
        Sorted, pairwise non-overlapping ranges covering every input range
    """
    ordered = sorted(ranges, key=lambda r: (r.start, r.end))
    if not ordered:
        return []

    merged: list[MatchRange] = []
    start, end = ordered[0].start, ordered[0].end

    for nxt in ordered[1:]:
        if nxt.start <= end + gap:
            end = max(end, nxt.end)
        else:
            merged.append(MatchRange(start=start, end=end))
            start, end = nxt.start, nxt.end

    merged.append(MatchRange(start=start, end=end))
    return merged


def ranges_adjacent(left: MatchRange, right: MatchRange, gap: int = MERGE_GAP) -> bool:
    """True when `right` starts within `gap` characters of where `left` ends."""
    return right.start <= left.end + gap
