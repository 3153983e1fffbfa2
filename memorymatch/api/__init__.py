"""
API Module - Browser board interface.

Exposes the engine via REST API. The board:
1. Creates a session (gets a snapshot with a face-down deck)
2. Sends flips as the player clicks
3. Polls /state or listens on the WebSocket for timed transitions
4. Resets or switches difficulty from its controls

All state is session-scoped. No user accounts.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    FlipRequest,
    ResetRequest,
    DifficultyRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    DifficultyListResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    DifficultyInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "FlipRequest",
    "ResetRequest",
    "DifficultyRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "DifficultyListResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "DifficultyInfo",
    # Service
    "APIService",
    "create_app",
]
