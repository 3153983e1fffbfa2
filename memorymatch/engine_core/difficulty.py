"""
Difficulty presets and the symbol pool.

A difficulty is a board geometry plus the number of distinct pairs
dealt onto it. The symbol pool is the ordered set of card faces;
a deck for N pairs uses the first N symbols.
"""

from __future__ import annotations
from dataclasses import dataclass

from .validation import InvalidConfig


@dataclass(frozen=True)
class Difficulty:
    """A named board configuration."""
    key: str
    columns: int
    rows: int
    pair_count: int

    @property
    def card_count(self) -> int:
        return self.pair_count * 2

    def position_of(self, index: int) -> tuple[int, int]:
        """Return the zero-based (row, column) of a card index."""
        return divmod(index, self.columns)


EASY = Difficulty(key="easy", columns=4, rows=4, pair_count=8)
MEDIUM = Difficulty(key="medium", columns=4, rows=5, pair_count=10)
HARD = Difficulty(key="hard", columns=6, rows=6, pair_count=18)

DIFFICULTIES: dict[str, Difficulty] = {
    d.key: d for d in (EASY, MEDIUM, HARD)
}

DEFAULT_DIFFICULTY = EASY.key

# Ocean set; the first eight are the classic 4x4 board
SYMBOL_POOL: tuple[str, ...] = (
    "🐙", "🦀", "🐳", "🐠", "🐬", "🐚", "🦑", "🧭",
    "🦈", "🐡", "🦞", "🐢", "🦭", "🪼", "⚓", "🌊",
    "🐋", "🦐", "🪸", "⛵",
)


def get_difficulty(
    key: str,
    difficulties: dict[str, Difficulty] | None = None,
) -> Difficulty:
    """
    Look up a difficulty by key.

    Raises InvalidConfig for unknown keys.
    """
    table = DIFFICULTIES if difficulties is None else difficulties
    difficulty = table.get(key)
    if difficulty is None:
        known = ", ".join(sorted(table))
        raise InvalidConfig([f"Unknown difficulty: {key!r} (expected one of {known})"])
    return difficulty
