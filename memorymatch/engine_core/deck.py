"""
Deck construction.

A deck is the first `pair_count` symbols of the pool, each duplicated,
in uniformly shuffled order.
"""

from __future__ import annotations
import random
from collections import Counter
from typing import Sequence

from .difficulty import Difficulty
from .validation import InvalidConfig


def build_deck(
    difficulty: Difficulty,
    symbol_pool: Sequence[str],
    rng: random.Random,
) -> tuple[str, ...]:
    """Deal a freshly shuffled deck for a difficulty."""
    if difficulty.pair_count > len(symbol_pool):
        raise InvalidConfig([
            f"{difficulty.key}: needs {difficulty.pair_count} symbols, "
            f"pool has {len(symbol_pool)}"
        ])

    symbols = list(symbol_pool[:difficulty.pair_count])
    cards = symbols + symbols
    rng.shuffle(cards)
    return tuple(cards)


def is_well_formed(deck: Sequence[str]) -> bool:
    """Check every symbol in the deck appears exactly twice."""
    return all(count == 2 for count in Counter(deck).values())
