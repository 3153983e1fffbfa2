"""
Game Engine - The memory match state machine.

The engine is the single point of state mutation. Callers invoke:
- flip(index): reveal a card (ineligible flips are ignored)
- reset(difficulty): discard the session and deal a new deck
- set_difficulty(level): reset with a different preset

Timed transitions (pair resolution, session clock) are requested from an
injected Scheduler. Every callback captures the session generation it was
scheduled in and does nothing once the engine has moved on.

Flow:
    IDLE --flip--> AWAITING_SECOND --flip--> RESOLVING
    RESOLVING --delay--> AWAITING_FIRST | WON
    AWAITING_FIRST --flip--> AWAITING_SECOND
    any --reset--> IDLE
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import logging
import random

from .config import EngineConfig
from .deck import build_deck
from .difficulty import Difficulty, get_difficulty
from .scheduler import Scheduler, TimerHandle
from .state import GamePhase, SessionState, LEGAL_TRANSITIONS
from .validation import validate_config

logger = logging.getLogger(__name__)

Hook = Callable[[], None]


@dataclass
class GameHooks:
    """
    Optional feedback callbacks (sound, animation).

    Hooks are called after the state change they announce.
    Return values are ignored.
    """
    on_flip: Hook | None = None
    on_match: Hook | None = None
    on_win: Hook | None = None


class GameEngine:
    """
    Owns the deck and all session state for one player.

    Usage:
        engine = GameEngine(VirtualScheduler(), seed=42)
        engine.flip(0)
        engine.flip(5)
        state = engine.snapshot()
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: EngineConfig | None = None,
        hooks: GameHooks | None = None,
        difficulty: str | None = None,
        rng: random.Random | None = None,
        seed: int | None = None,
    ):
        self.config = config or EngineConfig()
        validate_config(self.config).raise_for_errors()

        self.scheduler = scheduler
        self.hooks = hooks or GameHooks()
        self._rng = rng or random.Random(seed)

        self._tick_handle: TimerHandle | None = None
        self._resolution_handle: TimerHandle | None = None

        initial = self._lookup(difficulty or self.config.default_difficulty)
        self._state = self._new_session(initial, generation=0)

    # =========================================================================
    # Queries
    # =========================================================================

    def snapshot(self) -> SessionState:
        """Return the current (immutable) session state."""
        return self._state

    @property
    def difficulty(self) -> Difficulty:
        return self._state.difficulty

    @property
    def generation(self) -> int:
        return self._state.generation

    # =========================================================================
    # Commands
    # =========================================================================

    def reset(self, difficulty: str | None = None) -> None:
        """
        Discard the current session and deal a new deck.

        Raises InvalidConfig for an unknown difficulty; state is unchanged.
        """
        if difficulty is None:
            target = self._state.difficulty
        else:
            target = self._lookup(difficulty)

        self._cancel_timers()
        self._state = self._new_session(target, generation=self._state.generation + 1)
        logger.info(
            "Session %d started: %s (%d pairs)",
            self._state.generation, target.key, target.pair_count,
        )

    def set_difficulty(self, level: str) -> None:
        """Switch preset. Always an implicit reset."""
        self.reset(level)

    def flip(self, index: int) -> None:
        """
        Reveal one card.

        Ignored when the board is locked, the game is won, or the card
        is out of range, already face-up or matched.
        """
        state = self._state
        if not state.can_flip(index):
            logger.debug("Ignored flip %r in phase %s", index, state.phase.value)
            return

        if state.phase == GamePhase.IDLE:
            self._start_clock()

        flipped = state.flipped_indices + (index,)
        if len(flipped) == 1:
            self._state = self._transition(
                GamePhase.AWAITING_SECOND, flipped_indices=flipped,
            )
            logger.debug("Flipped %d", index)
            self._notify(self.hooks.on_flip)
            return

        first, second = flipped
        self._state = self._transition(
            GamePhase.RESOLVING,
            flipped_indices=flipped,
            moves=state.moves + 1,
        )
        logger.debug("Flipped %d, resolving pair (%d, %d)", index, first, second)

        generation = self._state.generation
        if state.deck[first] == state.deck[second]:
            self._resolution_handle = self.scheduler.schedule_once(
                self.config.match_delay_ms,
                lambda: self._resolve_match(generation),
            )
        else:
            self._resolution_handle = self.scheduler.schedule_once(
                self.config.mismatch_delay_ms,
                lambda: self._resolve_mismatch(generation),
            )
        self._notify(self.hooks.on_flip)

    def close(self) -> None:
        """Cancel all pending timers. The engine stays readable."""
        self._cancel_timers()

    # =========================================================================
    # Timed transitions
    # =========================================================================

    def _resolve_match(self, generation: int) -> None:
        if not self._is_current(generation, GamePhase.RESOLVING):
            return
        self._resolution_handle = None

        state = self._state
        matched = state.matched_indices | frozenset(state.flipped_indices)
        won = len(matched) == len(state.deck)
        self._state = self._transition(
            GamePhase.WON if won else GamePhase.AWAITING_FIRST,
            flipped_indices=(),
            matched_indices=matched,
        )
        logger.debug("Matched %s", state.deck[state.flipped_indices[0]])
        if won:
            self._stop_clock()
            logger.info(
                "Session %d won in %d moves, %s",
                generation, self._state.moves, self._state.time_display,
            )

        self._notify(self.hooks.on_match)
        if won:
            self._notify(self.hooks.on_win)

    def _resolve_mismatch(self, generation: int) -> None:
        if not self._is_current(generation, GamePhase.RESOLVING):
            return
        self._resolution_handle = None
        self._state = self._transition(GamePhase.AWAITING_FIRST, flipped_indices=())
        logger.debug("Mismatch, cards turned back")

    def _tick(self, generation: int) -> None:
        if generation != self._state.generation or not self._state.running:
            return
        self._state = self._state._copy_with(
            elapsed_seconds=self._state.elapsed_seconds + 1,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _lookup(self, key: str) -> Difficulty:
        return get_difficulty(key, self.config.difficulties)

    def _new_session(self, difficulty: Difficulty, generation: int) -> SessionState:
        deck = build_deck(difficulty, self.config.symbol_pool, self._rng)
        return SessionState(difficulty=difficulty, deck=deck, generation=generation)

    def _transition(self, phase: GamePhase, **changes) -> SessionState:
        current = self._state.phase
        if phase not in LEGAL_TRANSITIONS[current]:
            raise RuntimeError(f"Illegal transition {current.value} -> {phase.value}")
        return self._state._copy_with(phase=phase, **changes)

    def _is_current(self, generation: int, phase: GamePhase) -> bool:
        if generation != self._state.generation or self._state.phase != phase:
            logger.debug("Dropped stale callback from session %d", generation)
            return False
        return True

    def _start_clock(self) -> None:
        generation = self._state.generation
        self._tick_handle = self.scheduler.schedule_repeating(
            self.config.tick_interval_ms,
            lambda: self._tick(generation),
        )

    def _stop_clock(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _cancel_timers(self) -> None:
        self._stop_clock()
        if self._resolution_handle is not None:
            self._resolution_handle.cancel()
            self._resolution_handle = None

    @staticmethod
    def _notify(hook: Hook | None) -> None:
        if hook is not None:
            hook()
