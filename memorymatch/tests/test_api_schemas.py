"""
Tests for API Pydantic schemas.

Validates that:
- Request/response models serialize correctly
- Error codes are properly structured
- OpenAPI schema lists every endpoint
"""

import pytest
from pydantic import ValidationError


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_game_state_response_schema(self):
        """GameStateResponse has all required fields."""
        from memorymatch.api.schemas import GameStateResponse, GamePhase, CardInfo

        response = GameStateResponse(
            session_id="session-123",
            generation=2,
            difficulty="easy",
            columns=4,
            rows=4,
            phase=GamePhase.RESOLVING,
            flipped_indices=[0, 5],
            moves=3,
            elapsed_seconds=65,
            time_display="1:05",
            running=True,
            locked=True,
            total_pairs=8,
            cards=[
                CardInfo(index=0, row=0, column=0, face_up=True, symbol="🐙"),
                CardInfo(index=1, row=0, column=1),
            ],
        )

        data = response.model_dump(mode="json")
        assert data["phase"] == "resolving"
        assert data["time_display"] == "1:05"
        assert data["cards"][1]["symbol"] is None
        assert data["api_version"] == "v1"

    def test_game_state_from_engine_snapshot(self):
        """state_to_response mirrors SessionState.to_dict."""
        from memorymatch.api.service import state_to_response
        from memorymatch.engine_core import GameEngine, VirtualScheduler

        engine = GameEngine(VirtualScheduler(), seed=1)
        engine.flip(4)
        response = state_to_response("sid", engine.snapshot())

        assert response.model_dump(mode="json", exclude={"session_id", "api_version"}) == (
            engine.snapshot().to_dict()
        )

    def test_flip_request_requires_index(self):
        """FlipRequest rejects a missing index."""
        from memorymatch.api.schemas import FlipRequest

        with pytest.raises(ValidationError):
            FlipRequest()

        assert FlipRequest(index=3).index == 3

    def test_create_session_defaults(self):
        """CreateSessionRequest fields are optional."""
        from memorymatch.api.schemas import CreateSessionRequest

        request = CreateSessionRequest()
        assert request.difficulty is None
        assert request.seed is None

    def test_difficulty_info_from_preset(self):
        """DifficultyInfo reads a Difficulty by attributes."""
        from memorymatch.api.schemas import DifficultyInfo
        from memorymatch.engine_core import DIFFICULTIES

        info = DifficultyInfo.model_validate(DIFFICULTIES["hard"])
        assert info.model_dump() == {"key": "hard", "columns": 6, "rows": 6, "pair_count": 18}

    def test_error_response_schema(self):
        """ErrorResponse serializes the code as a string."""
        from memorymatch.api.schemas import ErrorResponse, ErrorCode

        response = ErrorResponse(
            error="Unknown difficulty",
            error_code=ErrorCode.INVALID_DIFFICULTY,
            details={"valid_keys": ["easy"]},
        )

        data = response.model_dump(mode="json")
        assert data["error_code"] == "INVALID_DIFFICULTY"
        assert data["details"]["valid_keys"] == ["easy"]


class TestErrorCodes:
    """Tests for error code coverage."""

    def test_all_error_codes_defined(self):
        """All required error codes are defined."""
        from memorymatch.api.schemas import ErrorCode

        required_codes = [
            "INVALID_DIFFICULTY",
            "SESSION_NOT_FOUND",
            "VALIDATION_ERROR",
        ]

        for code in required_codes:
            assert hasattr(ErrorCode, code), f"Missing error code: {code}"
            assert ErrorCode[code].value == code

    def test_error_code_values_are_strings(self):
        """Error codes are string enums for JSON serialization."""
        from memorymatch.api.schemas import ErrorCode

        for code in ErrorCode:
            assert isinstance(code.value, str)
            assert code.value == code.value.upper()

    def test_phases_match_engine(self):
        """API phases mirror the engine's phases."""
        from memorymatch.api.schemas import GamePhase as APIPhase
        from memorymatch.engine_core import GamePhase

        assert {p.value for p in APIPhase} == {p.value for p in GamePhase}


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    @pytest.fixture
    def schema(self):
        from memorymatch.api.app import app
        from fastapi.openapi.utils import get_openapi

        return get_openapi(
            title=app.title,
            version=app.version,
            routes=app.routes,
        )

    def test_response_models_in_schema(self, schema):
        """Response models appear in OpenAPI schema."""
        schemas = schema["components"]["schemas"]

        for name in [
            "SessionResponse",
            "GameStateResponse",
            "DifficultyListResponse",
            "ErrorResponse",
        ]:
            assert name in schemas, f"Missing schema: {name}"

    def test_endpoints_present(self, schema):
        """Game endpoints are published."""
        paths = schema["paths"]

        assert "post" in paths["/api/v1/sessions"]
        assert "get" in paths["/api/v1/sessions/{session_id}/state"]
        assert "post" in paths["/api/v1/sessions/{session_id}/flip"]
        assert "post" in paths["/api/v1/sessions/{session_id}/reset"]
        assert "put" in paths["/api/v1/sessions/{session_id}/difficulty"]
