"""
FastAPI Application - REST API for the browser board.

Endpoints:
    GET    /api/v1/difficulties                   List presets
    POST   /api/v1/sessions                       Create game session
    GET    /api/v1/sessions                       List active sessions
    DELETE /api/v1/sessions/{id}                  End session
    GET    /api/v1/sessions/{id}/state            Get snapshot
    POST   /api/v1/sessions/{id}/flip             Flip a card
    POST   /api/v1/sessions/{id}/reset            Deal a new deck
    PUT    /api/v1/sessions/{id}/difficulty       Switch preset
    WS     /api/v1/sessions/{id}/ws               Push flip/match/win events

Pair resolution and the session clock run on the server event loop,
so a board that only polls /state still sees cards turn back and the
timer advance. The WebSocket pushes each event as it happens.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import asyncio
import concurrent.futures
import json
import logging
import os

from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..engine_core import AsyncioScheduler, InvalidConfig
from ..engine_core.config import int_from_env, load_config
from ..session import SessionManager
from .service import APIService, state_to_response
from .schemas import (
    # Request models
    CreateSessionRequest,
    FlipRequest,
    ResetRequest,
    DifficultyRequest,
    # Response models
    SessionResponse,
    GameStateResponse,
    DifficultyListResponse,
    ErrorResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    # Enums
    ErrorCode,
    EventType,
)

logger = logging.getLogger(__name__)

# Environment configuration
MEMORYMATCH_ENV = os.getenv("MEMORYMATCH_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance. The default one runs
            engine timers on the server event loop.

    Returns:
        FastAPI application instance

    Raises:
        InvalidConfig: MEMORYMATCH_SESSION_MAX_AGE is not an integer
    """
    session_max_age = int_from_env("MEMORYMATCH_SESSION_MAX_AGE", 3600)

    app = FastAPI(
        title="Memory Match API",
        description="""
Memory match engine - flip cards two at a time, find every pair.

## Timing

After the second card of a pair is flipped the board is **locked**:
- matching pairs lock in after a short pause
- mismatched pairs turn back after a longer pause

Flips sent while locked are ignored; the returned snapshot is unchanged.

## Error Codes

| Code | Description |
|------|-------------|
| `INVALID_DIFFICULTY` | Difficulty key is not a preset |
| `SESSION_NOT_FOUND` | Session does not exist |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # WebSocket connections, the loop serving them, and in-flight broadcasts
    ws_connections: dict[str, list[WebSocket]] = {}
    ws_loops: dict[str, asyncio.AbstractEventLoop] = {}
    pending_broadcasts: set[concurrent.futures.Future] = set()
    app.state.ws_connections = ws_connections

    def on_engine_event(session_id: str, event: str) -> None:
        """Engine hook: push the event to connected boards."""
        loop = ws_loops.get(session_id)
        if not ws_connections.get(session_id) or loop is None:
            return
        session = api_service.session_manager.get_session(session_id)
        if session is None:
            return
        state = state_to_response(session_id, session.engine.snapshot())
        # Timers may fire off the loop thread
        future = asyncio.run_coroutine_threadsafe(
            broadcast_to_session(session_id, {
                "type": EventType(event).value,
                "payload": state.model_dump(mode="json"),
            }),
            loop,
        )
        pending_broadcasts.add(future)
        future.add_done_callback(pending_broadcasts.discard)

    def drop_connections(session_id: str) -> None:
        ws_connections.pop(session_id, None)
        ws_loops.pop(session_id, None)

    if service is None:
        service = APIService(
            session_manager=SessionManager(
                config=load_config(),
                scheduler_factory=AsyncioScheduler,
                listener=on_engine_event,
            )
        )
    elif service.session_manager.listener is None:
        service.session_manager.listener = on_engine_event
    api_service = service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def invalid_difficulty(exc: InvalidConfig) -> JSONResponse:
        return make_error_response(
            ErrorCode.INVALID_DIFFICULTY,
            str(exc),
            details={"valid_keys": sorted(api_service.session_manager.config.difficulties)},
        )

    def state_or_error(response) -> Union[GameStateResponse, JSONResponse]:
        if isinstance(response, ErrorResponse):
            return make_error_response(
                response.error_code,
                response.error,
                status_code=404,
            )
        return response

    async def broadcast_to_session(session_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a session."""
        if session_id in ws_connections:
            dead_connections = []
            for ws in ws_connections[session_id]:
                try:
                    await ws.send_json(message)
                except (WebSocketDisconnect, RuntimeError):
                    dead_connections.append(ws)
            for ws in dead_connections:
                ws_connections[session_id].remove(ws)

    # =========================================================================
    # Difficulty Endpoint
    # =========================================================================

    @app.get(
        "/api/v1/difficulties",
        response_model=DifficultyListResponse,
        tags=["Config"],
        summary="List difficulty presets",
    )
    async def list_difficulties() -> DifficultyListResponse:
        """List the difficulty presets and the default."""
        return api_service.list_difficulties()

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Unknown difficulty"}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(
        body: Optional[CreateSessionRequest] = None,
    ) -> Union[SessionResponse, JSONResponse]:
        """Create a session with a freshly shuffled deck."""
        removed = api_service.session_manager.cleanup_stale_sessions(session_max_age)
        if removed:
            logger.info("Removed %d stale session(s)", removed)
            active = set(api_service.list_sessions())
            for session_id in [sid for sid in ws_connections if sid not in active]:
                drop_connections(session_id)

        try:
            return api_service.create_session(body or CreateSessionRequest())
        except InvalidConfig as e:
            return invalid_difficulty(e)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a game session and cancel its timers."""
        success = api_service.end_session(session_id, reason)
        drop_connections(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get current snapshot",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Get the complete current session state for rendering."""
        return state_or_error(api_service.get_game_state(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/flip",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Flip a card",
    )
    async def flip(
        session_id: str,
        body: FlipRequest,
    ) -> Union[GameStateResponse, JSONResponse]:
        """
        Flip the card at `index`.

        Flips on locked boards, face-up cards, matched cards or
        out-of-range indices are ignored.
        """
        return state_or_error(api_service.flip(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/reset",
        response_model=GameStateResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown difficulty"},
            404: {"model": ErrorResponse},
        },
        tags=["Game"],
        summary="Deal a new deck",
    )
    async def reset(
        session_id: str,
        body: Optional[ResetRequest] = None,
    ) -> Union[GameStateResponse, JSONResponse]:
        """Discard the current game and deal a new deck."""
        try:
            response = api_service.reset(session_id, body or ResetRequest())
        except InvalidConfig as e:
            return invalid_difficulty(e)
        return state_or_error(response)

    @app.put(
        "/api/v1/sessions/{session_id}/difficulty",
        response_model=GameStateResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown difficulty"},
            404: {"model": ErrorResponse},
        },
        tags=["Game"],
        summary="Switch difficulty",
    )
    async def set_difficulty(
        session_id: str,
        body: DifficultyRequest,
    ) -> Union[GameStateResponse, JSONResponse]:
        """Switch preset. The current game is discarded."""
        try:
            response = api_service.set_difficulty(session_id, body)
        except InvalidConfig as e:
            return invalid_difficulty(e)
        return state_or_error(response)

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Current snapshot (sent on connect)
        - flip / match / win: Engine event with the snapshot after it
        - error: Bad message

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()
        ws_connections.setdefault(session_id, []).append(websocket)
        ws_loops[session_id] = asyncio.get_running_loop()

        try:
            response = api_service.get_game_state(session_id)
            if isinstance(response, GameStateResponse):
                await websocket.send_json({
                    "type": EventType.STATE_UPDATE.value,
                    "payload": response.model_dump(mode="json"),
                })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": EventType.ERROR.value,
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if isinstance(message, dict) and message.get("type") == "ping":
                    await websocket.send_json({"type": EventType.PONG.value})

        except WebSocketDisconnect:
            logger.debug("WebSocket closed for session %s", session_id)
        finally:
            connections = ws_connections.get(session_id)
            if connections and websocket in connections:
                connections.remove(websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="memorymatch-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Memory Match API",
            "version": __version__,
            "env": MEMORYMATCH_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn memorymatch.api.app:app
app = create_app()
