"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions
3. Formats snapshots for the browser board

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

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
    # Enums
    ErrorCode,
    GamePhase,
)
from ..engine_core import SessionState
from ..session import SessionManager, Session


@dataclass
class APIService:
    """
    Main API service for the browser board.

    Usage:
        service = APIService()

        session_response = service.create_session(CreateSessionRequest())
        state = service.flip(session_id, FlipRequest(index=3))

    Commands with an unknown difficulty raise InvalidConfig.
    Lookups of unknown sessions return an ErrorResponse.
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    def list_difficulties(self) -> DifficultyListResponse:
        """List the configured presets."""
        config = self.session_manager.config
        return DifficultyListResponse(
            difficulties=[
                DifficultyInfo.model_validate(d)
                for d in config.difficulties.values()
            ],
            default=config.default_difficulty,
        )

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Create a new game session with a fresh deck."""
        session = self.session_manager.create_session(
            difficulty=request.difficulty,
            seed=request.seed,
        )
        return SessionResponse(
            session_id=session.session_id,
            created_at=session.created_at,
            state=self._build_game_state(session),
        )

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """Get the current snapshot."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._build_game_state(session)

    def flip(
        self,
        session_id: str,
        request: FlipRequest,
    ) -> GameStateResponse | ErrorResponse:
        """Flip a card. Ineligible flips leave the snapshot unchanged."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        session.touch()
        session.engine.flip(request.index)
        return self._build_game_state(session)

    def reset(
        self,
        session_id: str,
        request: ResetRequest,
    ) -> GameStateResponse | ErrorResponse:
        """Deal a new deck, optionally switching preset."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        session.touch()
        session.engine.reset(request.difficulty)
        return self._build_game_state(session)

    def set_difficulty(
        self,
        session_id: str,
        request: DifficultyRequest,
    ) -> GameStateResponse | ErrorResponse:
        """Switch preset (implicit reset)."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        session.touch()
        session.engine.set_difficulty(request.difficulty)
        return self._build_game_state(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """End a game session."""
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _build_game_state(self, session: Session) -> GameStateResponse:
        """Convert the engine snapshot to a response."""
        return state_to_response(session.session_id, session.engine.snapshot())

    @staticmethod
    def _not_found(session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )


def state_to_response(session_id: str, state: SessionState) -> GameStateResponse:
    """Build a GameStateResponse from a SessionState."""
    data = state.to_dict()
    return GameStateResponse(
        session_id=session_id,
        generation=data["generation"],
        difficulty=data["difficulty"],
        columns=data["columns"],
        rows=data["rows"],
        phase=GamePhase(data["phase"]),
        flipped_indices=data["flipped_indices"],
        matched_indices=data["matched_indices"],
        moves=data["moves"],
        elapsed_seconds=data["elapsed_seconds"],
        time_display=data["time_display"],
        running=data["running"],
        locked=data["locked"],
        won=data["won"],
        pairs_found=data["pairs_found"],
        total_pairs=data["total_pairs"],
        cards=[CardInfo(**card) for card in data["cards"]],
    )
