"""Token estimation and budget enforcement across a batch of results."""

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from agent_search.excerpt.constants import CHARS_PER_TOKEN, TOKEN_OVERHEAD_PER_ITEM

logger = logging.getLogger(__name__)

T = TypeVar("T")


def estimate_tokens(text: str) -> int:
    """Estimate token count from text length (≈4 chars per token)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_item_tokens(text: str, overhead: int = TOKEN_OVERHEAD_PER_ITEM) -> int:
    """Estimated cost of one rendered result, including formatting overhead."""
    return estimate_tokens(text) + overhead


def _text_attr(item) -> str:
    return item.text


@dataclass
class TokenBudgetResult(Generic[T]):
    """Items admitted under a token budget."""

    items: list[T] = field(default_factory=list)
    budget_exceeded: bool = False
    estimated_tokens: int = 0


def enforce_token_budget(
    items: Sequence[T],
    max_tokens: int | None,
    text_of: Callable[[T], str] = _text_attr,
    overhead: int = TOKEN_OVERHEAD_PER_ITEM,
) -> TokenBudgetResult[T]:
    """Admit items in order until the next one would exceed the budget.

    Stops at the first item that doesn't fit; later, cheaper items are not
    backfilled. The caller decides the order (usually most recent first).

    Args:
        items: Results in priority order
        max_tokens: Total token budget, or None for no limit
        text_of: Returns the text payload of an item
        overhead: Fixed per-item cost added to the text estimate

    Returns:
        TokenBudgetResult with the admitted items and their cumulative cost
    """
    result: TokenBudgetResult[T] = TokenBudgetResult()

    for item in items:
        cost = estimate_item_tokens(text_of(item), overhead)
        if max_tokens is not None and result.estimated_tokens + cost > max_tokens:
            result.budget_exceeded = True
            logger.debug(
                f"Token budget {max_tokens} reached after {len(result.items)}/{len(items)} items"
            )
            break
        result.estimated_tokens += cost
        result.items.append(item)

    return result
