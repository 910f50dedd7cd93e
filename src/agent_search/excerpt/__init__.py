"""Truncation and excerpting engine: snippets, range merging, token budgets."""

from agent_search.excerpt.boundary import find_word_boundary, is_word_boundary
from agent_search.excerpt.budget import (
    TokenBudgetResult,
    enforce_token_budget,
    estimate_item_tokens,
    estimate_tokens,
)
from agent_search.excerpt.models import Excerpt, MatchRange, SnippetConfig, TruncationMetadata
from agent_search.excerpt.ranges import merge_ranges
from agent_search.excerpt.report import (
    calculate_shown_percentage,
    format_truncation_info,
    generate_session_summary,
)
from agent_search.excerpt.snippet import (
    apply_content_limit,
    extract_multi_match_snippet,
    extract_snippet,
)

__all__ = [
    "Excerpt",
    "MatchRange",
    "SnippetConfig",
    "TokenBudgetResult",
    "TruncationMetadata",
    "apply_content_limit",
    "calculate_shown_percentage",
    "enforce_token_budget",
    "estimate_item_tokens",
    "estimate_tokens",
    "extract_multi_match_snippet",
    "extract_snippet",
    "find_word_boundary",
    "format_truncation_info",
    "generate_session_summary",
    "is_word_boundary",
    "merge_ranges",
]
