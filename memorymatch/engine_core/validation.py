"""
Config Validation - Startup checks for engine configuration.

Validates that:
1. Every preset's grid holds exactly its pairs (columns * rows == 2 * pairs)
2. No preset needs more pairs than the symbol pool provides
3. The symbol pool has no duplicates
4. Resolution delays and tick interval are positive
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import EngineConfig


class InvalidConfig(ValueError):
    """Raised for unknown difficulty keys and invalid engine configuration."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        if len(errors) == 1:
            message = errors[0]
        else:
            message = f"Invalid configuration with {len(errors)} error(s): " + "; ".join(errors)
        super().__init__(message)


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]

    def raise_for_errors(self) -> None:
        if not self.valid:
            raise InvalidConfig(self.errors)


def validate_config(config: EngineConfig) -> ValidationResult:
    """
    Validate an engine configuration.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    pool = config.symbol_pool
    if len(set(pool)) != len(pool):
        errors.append("symbol_pool contains duplicate symbols")

    if not config.difficulties:
        errors.append("at least one difficulty preset is required")

    for key, difficulty in config.difficulties.items():
        errors.extend(_validate_difficulty(key, difficulty, len(pool)))

    if config.default_difficulty not in config.difficulties:
        errors.append(f"default_difficulty {config.default_difficulty!r} is not a preset")

    for name in ("match_delay_ms", "mismatch_delay_ms", "tick_interval_ms"):
        if getattr(config, name) <= 0:
            errors.append(f"{name} must be > 0")

    if config.match_delay_ms > config.mismatch_delay_ms:
        warnings.append("match_delay_ms is longer than mismatch_delay_ms")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_difficulty(key, difficulty, pool_size: int) -> list[str]:
    errors = []
    if key != difficulty.key:
        errors.append(f"Preset registered as {key!r} is keyed {difficulty.key!r}")
    if difficulty.pair_count < 1:
        errors.append(f"{key}: pair_count must be >= 1")
    if difficulty.columns < 1 or difficulty.rows < 1:
        errors.append(f"{key}: columns and rows must be >= 1")
    if difficulty.columns * difficulty.rows != difficulty.pair_count * 2:
        errors.append(
            f"{key}: {difficulty.columns}x{difficulty.rows} grid cannot hold "
            f"{difficulty.pair_count} pairs"
        )
    if difficulty.pair_count > pool_size:
        errors.append(
            f"{key}: needs {difficulty.pair_count} symbols, pool has {pool_size}"
        )
    return errors
