"""
Session State - Immutable snapshot of one memory match session.

Design principles:
- Immutable: every transition produces a new SessionState
- Versioned: the generation tags which session a value belongs to
- Serializable: to_dict() feeds the API and the terminal client
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .difficulty import Difficulty


class GamePhase(Enum):
    """Turn-resolution phases of a session."""
    IDLE = "idle"  # Fresh deck, clock not started
    AWAITING_FIRST = "awaiting_first"  # Clock running, no card face-up
    AWAITING_SECOND = "awaiting_second"  # One card face-up
    RESOLVING = "resolving"  # Two cards face-up, board locked
    WON = "won"


# Reset (-> IDLE) is legal from any phase and is not listed here
LEGAL_TRANSITIONS: dict[GamePhase, frozenset[GamePhase]] = {
    GamePhase.IDLE: frozenset({GamePhase.AWAITING_SECOND}),
    GamePhase.AWAITING_FIRST: frozenset({GamePhase.AWAITING_SECOND}),
    GamePhase.AWAITING_SECOND: frozenset({GamePhase.RESOLVING}),
    GamePhase.RESOLVING: frozenset({GamePhase.AWAITING_FIRST, GamePhase.WON}),
    GamePhase.WON: frozenset(),
}


def format_elapsed(seconds: int) -> str:
    """Format seconds as m:ss."""
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


@dataclass(frozen=True)
class CardView:
    """What the presentation layer may know about one card."""
    index: int
    row: int
    column: int
    face_up: bool
    matched: bool
    symbol: str | None  # Hidden while face-down


@dataclass(frozen=True)
class SessionState:
    """
    Complete state of a session at a point in time.

    The engine replaces its SessionState on every transition;
    callers only ever hold read-only values.
    """
    difficulty: Difficulty
    deck: tuple[str, ...]
    generation: int = 0
    phase: GamePhase = GamePhase.IDLE

    flipped_indices: tuple[int, ...] = ()
    matched_indices: frozenset[int] = field(default_factory=frozenset)

    moves: int = 0
    elapsed_seconds: int = 0

    @property
    def running(self) -> bool:
        return self.phase in {
            GamePhase.AWAITING_FIRST,
            GamePhase.AWAITING_SECOND,
            GamePhase.RESOLVING,
        }

    @property
    def locked(self) -> bool:
        return self.phase == GamePhase.RESOLVING

    @property
    def won(self) -> bool:
        return self.phase == GamePhase.WON

    @property
    def pairs_found(self) -> int:
        return len(self.matched_indices) // 2

    @property
    def total_pairs(self) -> int:
        return len(self.deck) // 2

    @property
    def time_display(self) -> str:
        return format_elapsed(self.elapsed_seconds)

    def is_face_up(self, index: int) -> bool:
        return index in self.flipped_indices or index in self.matched_indices

    def can_flip(self, index: int) -> bool:
        """Check whether flip(index) would be accepted."""
        if not 0 <= index < len(self.deck):
            return False
        if self.locked or self.won:
            return False
        return not self.is_face_up(index)

    def cards(self) -> list[CardView]:
        """Per-card view, hiding face-down symbols."""
        views = []
        for index, symbol in enumerate(self.deck):
            row, column = self.difficulty.position_of(index)
            face_up = self.is_face_up(index)
            views.append(CardView(
                index=index,
                row=row,
                column=column,
                face_up=face_up,
                matched=index in self.matched_indices,
                symbol=symbol if face_up else None,
            ))
        return views

    def _copy_with(self, **changes: Any) -> SessionState:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dict for the presentation layer."""
        return {
            "generation": self.generation,
            "difficulty": self.difficulty.key,
            "columns": self.difficulty.columns,
            "rows": self.difficulty.rows,
            "phase": self.phase.value,
            "flipped_indices": list(self.flipped_indices),
            "matched_indices": sorted(self.matched_indices),
            "moves": self.moves,
            "elapsed_seconds": self.elapsed_seconds,
            "time_display": self.time_display,
            "running": self.running,
            "locked": self.locked,
            "won": self.won,
            "pairs_found": self.pairs_found,
            "total_pairs": self.total_pairs,
            "cards": [
                {
                    "index": card.index,
                    "row": card.row,
                    "column": card.column,
                    "face_up": card.face_up,
                    "matched": card.matched,
                    "symbol": card.symbol,
                }
                for card in self.cards()
            ],
        }
