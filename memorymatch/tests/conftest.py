"""
Pytest fixtures for Memory Match tests.
"""

import pytest

from ..engine_core import GameEngine, GameHooks, VirtualScheduler
from ..engine_core.config import EngineConfig


class HookRecorder:
    """Collects hook calls in order."""

    def __init__(self):
        self.events: list[str] = []

    def hooks(self) -> GameHooks:
        return GameHooks(
            on_flip=lambda: self.events.append("flip"),
            on_match=lambda: self.events.append("match"),
            on_win=lambda: self.events.append("win"),
        )


def find_pair(deck, exclude=()) -> tuple[int, int]:
    """Return two indices holding the same symbol."""
    seen: dict[str, int] = {}
    for index, symbol in enumerate(deck):
        if index in exclude:
            continue
        if symbol in seen:
            return seen[symbol], index
        seen[symbol] = index
    raise AssertionError("No pair left in deck")


def find_mismatch(deck) -> tuple[int, int]:
    """Return two indices holding different symbols."""
    for index in range(1, len(deck)):
        if deck[index] != deck[0]:
            return 0, index
    raise AssertionError("Deck has a single symbol")


def solve(engine: GameEngine, scheduler: VirtualScheduler) -> None:
    """Match every pair, letting each resolution fire."""
    deck = engine.snapshot().deck
    done: set[int] = set()
    while len(done) < len(deck):
        a, b = find_pair(deck, exclude=done)
        engine.flip(a)
        engine.flip(b)
        scheduler.advance(engine.config.match_delay_ms)
        done.update((a, b))


@pytest.fixture
def config() -> EngineConfig:
    """Default engine configuration."""
    return EngineConfig()


@pytest.fixture
def scheduler() -> VirtualScheduler:
    """Virtual clock starting at 0 ms."""
    return VirtualScheduler()


@pytest.fixture
def recorder() -> HookRecorder:
    return HookRecorder()


@pytest.fixture
def engine(scheduler, config, recorder) -> GameEngine:
    """Seeded engine on the easy preset."""
    return GameEngine(
        scheduler,
        config=config,
        hooks=recorder.hooks(),
        difficulty="easy",
        seed=1234,
    )
