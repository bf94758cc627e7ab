from __future__ import annotations

import logging
import random
from typing import Iterable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

GROUP_SIZE = 4
DEFAULT_MAX_ATTEMPTS = 20


def _normalize(word: str) -> str:
    return (word or "").strip().upper()


# PUBLIC_INTERFACE
def has_solved_window(words: Sequence[str], categories: Iterable[Iterable[str]]) -> bool:
    """True if any contiguous run of four words is exactly one category's set."""
    category_sets = [frozenset(_normalize(w) for w in cat) for cat in categories]
    category_sets = [s for s in category_sets if len(s) == GROUP_SIZE]
    if not category_sets:
        return False
    normalized = [_normalize(w) for w in words]
    for start in range(len(normalized) - GROUP_SIZE + 1):
        window = frozenset(normalized[start:start + GROUP_SIZE])
        if window in category_sets:
            return True
    return False


# PUBLIC_INTERFACE
def shuffle_connections(
    words: Sequence[str],
    categories: Iterable[Iterable[str]],
    rng: Optional[random.Random] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> List[str]:
    """Return a display order in which no four-word run spells out a category.

    Retries a Fisher-Yates shuffle up to ``max_attempts`` times. If every
    attempt still shows a solved group, the last unchecked shuffle is
    returned rather than looping forever.
    """
    rng = rng or random.Random()
    categories = [list(cat) for cat in categories]
    order = list(words)
    for _ in range(max(1, max_attempts)):
        rng.shuffle(order)
        if not has_solved_window(order, categories):
            return order
    logger.warning(
        "Connections shuffle kept a solved window after %d attempts; using unchecked order",
        max_attempts,
    )
    rng.shuffle(order)
    return order


# PUBLIC_INTERFACE
def shuffled(items: Iterable[T], rng: Optional[random.Random] = None) -> List[T]:
    """A shuffled copy of ``items``."""
    result = list(items)
    (rng or random.Random()).shuffle(result)
    return result


# PUBLIC_INTERFACE
def move_item(items: Sequence[T], src: int, dst: int) -> List[T]:
    """Move ``items[src]`` so that it ends up at index ``dst`` of the result.

    Removes first, then inserts into the shortened list. ``dst`` is the final
    position, so it is clamped to the last index; moving an item onto itself
    is a no-op.
    """
    result = list(items)
    if not result:
        return result
    if not 0 <= src < len(result):
        raise IndexError(f"source index {src} out of range")
    dst = max(0, min(dst, len(result) - 1))
    item = result.pop(src)
    result.insert(dst, item)
    return result
