"""
Engine configuration.

Defaults match the classic board timing. Environment overrides:
    MEMORYMATCH_MATCH_DELAY_MS       Pause before a matched pair locks in
    MEMORYMATCH_MISMATCH_DELAY_MS    Pause before a mismatched pair flips back
    MEMORYMATCH_TICK_INTERVAL_MS     Session clock period
    MEMORYMATCH_DEFAULT_DIFFICULTY   Preset used when none is given
"""

from __future__ import annotations
from dataclasses import dataclass, field
import os

from .difficulty import DIFFICULTIES, DEFAULT_DIFFICULTY, SYMBOL_POOL, Difficulty
from .validation import InvalidConfig

MATCH_DELAY_MS = 350
MISMATCH_DELAY_MS = 750
TICK_INTERVAL_MS = 1000


@dataclass(frozen=True)
class EngineConfig:
    """Timing, presets and symbols for a GameEngine."""
    match_delay_ms: int = MATCH_DELAY_MS
    mismatch_delay_ms: int = MISMATCH_DELAY_MS
    tick_interval_ms: int = TICK_INTERVAL_MS
    default_difficulty: str = DEFAULT_DIFFICULTY
    symbol_pool: tuple[str, ...] = SYMBOL_POOL
    difficulties: dict[str, Difficulty] = field(default_factory=lambda: dict(DIFFICULTIES))


def int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidConfig([f"{name} must be an integer, got {raw!r}"]) from None


def load_config() -> EngineConfig:
    """Build an EngineConfig from defaults and environment overrides."""
    return EngineConfig(
        match_delay_ms=int_from_env("MEMORYMATCH_MATCH_DELAY_MS", MATCH_DELAY_MS),
        mismatch_delay_ms=int_from_env("MEMORYMATCH_MISMATCH_DELAY_MS", MISMATCH_DELAY_MS),
        tick_interval_ms=int_from_env("MEMORYMATCH_TICK_INTERVAL_MS", TICK_INTERVAL_MS),
        default_difficulty=os.getenv("MEMORYMATCH_DEFAULT_DIFFICULTY", DEFAULT_DIFFICULTY),
    )
