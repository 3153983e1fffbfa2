"""
Engine Core - Game state machine for memory matching.

The engine is the runtime that:
1. Validates the difficulty presets and symbol pool
2. Builds a shuffled deck
3. Accepts flips and resolves pair-attempts
4. Drives the session clock through an injected scheduler
5. Detects the win
"""

from .state import GamePhase, SessionState, CardView
from .difficulty import Difficulty, DIFFICULTIES, SYMBOL_POOL, get_difficulty
from .deck import build_deck
from .validation import InvalidConfig, ValidationResult, validate_config
from .scheduler import Scheduler, TimerHandle, VirtualScheduler, AsyncioScheduler
from .engine import GameEngine, GameHooks

__all__ = [
    "GamePhase",
    "SessionState",
    "CardView",
    "Difficulty",
    "DIFFICULTIES",
    "SYMBOL_POOL",
    "get_difficulty",
    "build_deck",
    "InvalidConfig",
    "ValidationResult",
    "validate_config",
    "Scheduler",
    "TimerHandle",
    "VirtualScheduler",
    "AsyncioScheduler",
    "GameEngine",
    "GameHooks",
]
