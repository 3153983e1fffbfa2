"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between the browser board and the engine.

Error Codes:
- INVALID_DIFFICULTY: Difficulty key is not a known preset
- SESSION_NOT_FOUND: Session does not exist or has expired
- VALIDATION_ERROR: Request body is malformed
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class GamePhase(str, Enum):
    """Turn-resolution phase of a session."""
    IDLE = "idle"
    AWAITING_FIRST = "awaiting_first"
    AWAITING_SECOND = "awaiting_second"
    RESOLVING = "resolving"
    WON = "won"


class EventType(str, Enum):
    """Events pushed over the WebSocket."""
    STATE_UPDATE = "state_update"
    FLIP = "flip"
    MATCH = "match"
    WIN = "win"
    PONG = "pong"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Structured error codes."""
    INVALID_DIFFICULTY = "INVALID_DIFFICULTY"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class DifficultyInfo(BaseModel):
    """A difficulty preset."""
    key: str
    columns: int
    rows: int
    pair_count: int

    model_config = {"from_attributes": True}


class CardInfo(BaseModel):
    """One card as the board should draw it."""
    index: int
    row: int
    column: int
    face_up: bool = False
    matched: bool = False
    symbol: Optional[str] = Field(None, description="Only present while face-up")

    model_config = {"from_attributes": True}


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session."""
    difficulty: Optional[str] = Field(None, description="Preset key: easy, medium, hard")
    seed: Optional[int] = Field(None, description="Seed for a reproducible deck")


class FlipRequest(BaseModel):
    """Request to flip a card."""
    index: int = Field(..., description="Card position, 0-based")


class ResetRequest(BaseModel):
    """Request to deal a new deck."""
    difficulty: Optional[str] = Field(None, description="Keep current preset if omitted")


class DifficultyRequest(BaseModel):
    """Request to switch difficulty (implies reset)."""
    difficulty: str


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Complete session snapshot for rendering."""
    session_id: str
    generation: int
    difficulty: str
    columns: int
    rows: int
    phase: GamePhase
    flipped_indices: list[int] = Field(default_factory=list)
    matched_indices: list[int] = Field(default_factory=list)
    moves: int = 0
    elapsed_seconds: int = 0
    time_display: str = "0:00"
    running: bool = False
    locked: bool = False
    won: bool = False
    pairs_found: int = 0
    total_pairs: int = 0
    cards: list[CardInfo] = Field(default_factory=list)
    api_version: str = "v1"


class SessionResponse(BaseModel):
    """Response after creating a session."""
    session_id: str
    created_at: float = 0.0
    state: GameStateResponse
    api_version: str = "v1"


class DifficultyListResponse(BaseModel):
    """Available presets."""
    difficulties: list[DifficultyInfo]
    default: str


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
