"""
Tests for engine configuration validation.

Tests:
- Default configuration is valid
- Preset geometry and pool size checks
- Timing checks
- Environment overrides
"""

import pytest

from ..engine_core import GameEngine, InvalidConfig, VirtualScheduler, validate_config
from ..engine_core.config import EngineConfig, load_config
from ..engine_core.difficulty import Difficulty


class TestValidateConfig:
    """Tests for validate_config."""

    def test_default_config_valid(self):
        """Shipped presets and pool pass validation."""
        result = validate_config(EngineConfig())
        assert result.valid
        assert result.errors == []

    def test_bad_geometry(self):
        """Grid that cannot hold the pairs is rejected."""
        config = EngineConfig(
            difficulties={"odd": Difficulty("odd", 3, 3, 4)},
            default_difficulty="odd",
        )
        result = validate_config(config)

        assert not result.valid
        assert any("cannot hold" in e for e in result.errors)

    def test_pair_count_above_pool(self):
        """Preset needing more symbols than the pool is rejected."""
        config = EngineConfig(symbol_pool=("a", "b", "c"))
        result = validate_config(config)

        assert not result.valid
        assert any("pool has 3" in e for e in result.errors)

    def test_duplicate_symbols(self):
        """Pool must not repeat symbols."""
        config = EngineConfig(
            symbol_pool=("a", "a", "b", "c", "d", "e", "f", "g", "h"),
            difficulties={"tiny": Difficulty("tiny", 2, 2, 2)},
            default_difficulty="tiny",
        )
        result = validate_config(config)

        assert not result.valid
        assert "symbol_pool contains duplicate symbols" in result.errors

    def test_default_must_be_preset(self):
        """default_difficulty must name a preset."""
        result = validate_config(EngineConfig(default_difficulty="zen"))
        assert not result.valid

    def test_mismatched_key(self):
        """Preset keyed under the wrong name is rejected."""
        config = EngineConfig(
            difficulties={"easy": Difficulty("hard", 6, 6, 18)},
        )
        assert not validate_config(config).valid

    @pytest.mark.parametrize("name", ["match_delay_ms", "mismatch_delay_ms", "tick_interval_ms"])
    def test_non_positive_timing(self, name):
        """Delays and tick interval must be positive."""
        config = EngineConfig(**{name: 0})
        result = validate_config(config)
        assert f"{name} must be > 0" in result.errors

    def test_slow_match_warns(self):
        """Match delay longer than mismatch delay is only a warning."""
        result = validate_config(EngineConfig(match_delay_ms=900, mismatch_delay_ms=700))
        assert result.valid
        assert len(result.warnings) == 1

    def test_engine_rejects_invalid_config(self):
        """Engine construction fails fast on bad config."""
        with pytest.raises(InvalidConfig) as exc_info:
            GameEngine(VirtualScheduler(), config=EngineConfig(symbol_pool=("a",)))
        assert exc_info.value.errors


class TestLoadConfig:
    """Tests for environment overrides."""

    def test_defaults(self, monkeypatch):
        """Without env vars the defaults apply."""
        for name in (
            "MEMORYMATCH_MATCH_DELAY_MS",
            "MEMORYMATCH_MISMATCH_DELAY_MS",
            "MEMORYMATCH_TICK_INTERVAL_MS",
            "MEMORYMATCH_DEFAULT_DIFFICULTY",
        ):
            monkeypatch.delenv(name, raising=False)
        config = load_config()

        assert config.match_delay_ms == 350
        assert config.mismatch_delay_ms == 750
        assert config.tick_interval_ms == 1000
        assert config.default_difficulty == "easy"

    def test_overrides(self, monkeypatch):
        """Env vars override timing and default preset."""
        monkeypatch.setenv("MEMORYMATCH_MATCH_DELAY_MS", "300")
        monkeypatch.setenv("MEMORYMATCH_MISMATCH_DELAY_MS", "700")
        monkeypatch.setenv("MEMORYMATCH_DEFAULT_DIFFICULTY", "hard")
        config = load_config()

        assert config.match_delay_ms == 300
        assert config.mismatch_delay_ms == 700
        assert config.default_difficulty == "hard"

    def test_non_integer_raises(self, monkeypatch):
        """Non-integer timing is a configuration error."""
        monkeypatch.setenv("MEMORYMATCH_TICK_INTERVAL_MS", "fast")
        with pytest.raises(InvalidConfig, match="MEMORYMATCH_TICK_INTERVAL_MS"):
            load_config()
