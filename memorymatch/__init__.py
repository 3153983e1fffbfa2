"""
Memory Match - Pair-finding puzzle game engine.

A deterministic, scheduler-driven state machine for memory matching games.
The engine provides:
- Deck construction per difficulty
- Turn resolution (flip, match, mismatch)
- Session timing through an injected clock
- Win detection

Rendering is left to the presentation layer, which reads snapshots
and calls flip()/reset().
"""

__version__ = "0.1.0"
