"""Snippet extraction around matches, and hard length limiting.

Keeps long messages from exhausting a consumer's context window by
returning a bounded excerpt around each match instead of the full text.
Every function here is total: empty content, zero-width matches, and
matches at the document edges all produce a well-defined Excerpt.
"""

import logging
from collections.abc import Sequence

from agent_search.excerpt.boundary import find_word_boundary
from agent_search.excerpt.constants import DEFAULT_SNIPPET_SIZE, ELLIPSIS, SEPARATOR
from agent_search.excerpt.models import Excerpt, MatchRange, TruncationMetadata
from agent_search.excerpt.ranges import merge_ranges, ranges_adjacent

logger = logging.getLogger(__name__)


def extract_snippet(
    content: str,
    match_start: int,
    match_end: int,
    snippet_size: int = DEFAULT_SNIPPET_SIZE,
) -> Excerpt:
    """Extract a snippet around a single match.

    Args:
        content: Full document text
        match_start: Start offset of the match
        match_end: End offset of the match (exclusive)
        snippet_size: Characters of context to keep on each side

    Returns:
        Excerpt whose match position is expressed in snippet coordinates
    """
    if not content:
        return Excerpt(text="", metadata=TruncationMetadata.untruncated(0))

    original_length = len(content)

    # Small enough that a "snippet" would be the whole thing anyway
    if original_length <= snippet_size * 2 + (match_end - match_start):
        return Excerpt(
            text=content,
            metadata=TruncationMetadata.untruncated(original_length),
            match_positions=[MatchRange(start=match_start, end=match_end)],
        )

    start = max(0, match_start - snippet_size)
    end = min(original_length, match_end + snippet_size)
    start = find_word_boundary(content, start, "backward")
    end = find_word_boundary(content, end, "forward")

    return Excerpt(
        text=content[start:end],
        metadata=TruncationMetadata(
            content_truncated=True,
            original_length=original_length,
            snippet_start=start,
            snippet_end=end,
            truncation_type="snippet",
        ),
        match_positions=[
            MatchRange(start=match_start - start, end=match_end - start),
        ],
    )


def extract_multi_match_snippet(
    content: str,
    matches: Sequence[MatchRange],
    snippet_size: int = DEFAULT_SNIPPET_SIZE,
) -> Excerpt:
    """Build one combined snippet covering every match in a document.

    Each match gets a context window of `snippet_size` on both sides.
    Windows that overlap or nearly touch are merged; distant windows are
    joined with " [...] ". The first and last pieces get a "..." marker
    when they don't reach the document edges.

    Match positions are remapped into the combined snippet's coordinates
    and returned in the same order as `matches`.

    Args:
        content: Full document text
        matches: Match ranges in document coordinates
        snippet_size: Characters of context around each match

    Returns:
        Excerpt with the combined text, metadata, and remapped positions
    """
    if not content or not matches:
        content = content or ""
        return Excerpt(
            text=content,
            metadata=TruncationMetadata.untruncated(len(content)),
            match_positions=list(matches),
        )

    original_length = len(content)

    # Looser threshold than a single match: several matches need more room
    if original_length <= snippet_size * 3:
        return Excerpt(
            text=content,
            metadata=TruncationMetadata.untruncated(original_length),
            match_positions=list(matches),
        )

    windows = merge_ranges(
        MatchRange(
            start=max(0, m.start - snippet_size),
            end=min(original_length, m.end + snippet_size),
        )
        for m in matches
    )

    parts: list[str] = []
    # (snapped start, offset of the snapped start within the output)
    placements: list[tuple[int, int]] = []
    out_len = 0
    first_start = last_end = 0

    for i, window in enumerate(windows):
        if i > 0 and not ranges_adjacent(windows[i - 1], window):
            parts.append(SEPARATOR)
            out_len += len(SEPARATOR)

        start = find_word_boundary(content, window.start, "backward")
        end = find_word_boundary(content, window.end, "forward")
        if i == 0:
            first_start = start
        else:
            # Snapping can pull this piece back into text the previous one shows
            start = max(start, last_end)
            end = max(end, start)
        last_end = end

        prefix = ELLIPSIS if i == 0 and start > 0 else ""
        suffix = ELLIPSIS if i == len(windows) - 1 and end < original_length else ""

        placements.append((start, out_len + len(prefix)))
        piece = prefix + content[start:end] + suffix
        parts.append(piece)
        out_len += len(piece)

    positions = [_remap(m, placements) for m in matches]

    logger.debug(
        f"Snippet: {len(matches)} matches in {len(windows)} windows, "
        f"{out_len}/{original_length} chars kept"
    )

    return Excerpt(
        text="".join(parts),
        metadata=TruncationMetadata(
            content_truncated=True,
            original_length=original_length,
            snippet_start=first_start,
            snippet_end=last_end,
            truncation_type="snippet",
        ),
        match_positions=positions,
    )


def _remap(match: MatchRange, placements: list[tuple[int, int]]) -> MatchRange:
    """Translate a document-coordinate match into combined-snippet coordinates.

    Snapped starts never decrease and the first one is at or before every
    match, so the last piece starting at or before the match shows it.
    """
    snapped_start, offset = placements[0]
    for piece_start, piece_offset in placements:
        if piece_start > match.start:
            break
        snapped_start, offset = piece_start, piece_offset
    start = offset + max(0, match.start - snapped_start)
    return MatchRange(start=start, end=start + max(0, match.length))


def apply_content_limit(content: str, max_length: int) -> Excerpt:
    """Hard-truncate content to at most `max_length` characters.

    The cut is moved back to a word boundary when one is close and "..."
    is appended. A `max_length` of 0 means unlimited.
    """
    if not content or max_length <= 0 or len(content) <= max_length:
        content = content or ""
        return Excerpt(text=content, metadata=TruncationMetadata.untruncated(len(content)))

    cut = find_word_boundary(content, max_length, "backward")
    return Excerpt(
        text=content[:cut] + ELLIPSIS,
        metadata=TruncationMetadata(
            content_truncated=True,
            original_length=len(content),
            snippet_start=0,
            snippet_end=cut,
            truncation_type="length",
        ),
    )
