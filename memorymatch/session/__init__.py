"""
Session Module - Manages ephemeral game sessions.

A session represents one player's board:
- Created when a player opens a game
- Owns one GameEngine
- Survives resets and difficulty changes
- Destroyed when the player leaves or it goes stale

Sessions are EPHEMERAL: in-memory only, nothing is persisted.
"""

from .manager import SessionManager, Session, SessionStatus

__all__ = [
    "SessionManager",
    "Session",
    "SessionStatus",
]
