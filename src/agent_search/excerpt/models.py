"""Pydantic models for match ranges, excerpts, and truncation metadata.

All of these are transient values: built per search call, rendered, and
discarded. Nothing here holds state between calls.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from agent_search.excerpt.constants import DEFAULT_MAX_CONTENT_LENGTH, DEFAULT_SNIPPET_SIZE

TruncationType = Literal["none", "snippet", "length", "token"]
OutputMode = Literal["snippet", "full", "summary"]


class MatchRange(BaseModel):
    """Half-open [start, end) span of code units within a document."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    end: int = Field(ge=0)

    @property
    def length(self) -> int:
        return self.end - self.start


class TruncationMetadata(BaseModel):
    """How much of the original document an excerpt retains.

    For multi-window excerpts `snippet_start`/`snippet_end` are the outer
    envelope of the retained windows, not the total retained length.
    """

    content_truncated: bool
    original_length: int
    snippet_start: int
    snippet_end: int
    truncation_type: TruncationType = "none"

    @classmethod
    def untruncated(cls, length: int) -> "TruncationMetadata":
        return cls(
            content_truncated=False,
            original_length=length,
            snippet_start=0,
            snippet_end=length,
            truncation_type="none",
        )


class Excerpt(BaseModel):
    """Excerpt text plus metadata; `match_positions` index into `text`."""

    text: str
    metadata: TruncationMetadata
    match_positions: list[MatchRange] = Field(default_factory=list)


class SnippetConfig(BaseModel):
    """Caller-supplied settings for how matched content is shortened."""

    mode: OutputMode = "snippet"
    snippet_size: int = Field(default=DEFAULT_SNIPPET_SIZE, ge=0)
    max_content_length: int = Field(default=DEFAULT_MAX_CONTENT_LENGTH, ge=0)  # 0 = unlimited
    max_tokens: int | None = Field(default=None, ge=0)
