"""
FastAPI Application - REST API for solitaire clients.

Endpoints:
    GET    /api/health                         Health check
    POST   /api/v1/sessions                    Create game session (fresh deal)
    GET    /api/v1/sessions                    List active sessions
    GET    /api/v1/sessions/{id}               Get session status
    DELETE /api/v1/sessions/{id}               End session
    GET    /api/v1/sessions/{id}/state         Get game state
    POST   /api/v1/sessions/{id}/actions       Apply an action
    POST   /api/v1/sessions/{id}/tick          Advance the clock one second
    PUT    /api/v1/sessions/{id}/state         Replace state (test harness only)

Client Flow:
    1. POST /sessions deals a game (status idle)
    2. Each click becomes one POST /actions; render the returned state
    3. While status is "playing", POST /tick once per second
    4. "changed": false means the action was a no-op

Illegal moves are not HTTP errors: they return 200 with the state the
rules produced. All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Union
import os

from .. import __version__

# Environment configuration
KLONDIKE_ENV = os.getenv("KLONDIKE_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
KLONDIKE_SESSION_TTL = int(os.getenv("KLONDIKE_SESSION_TTL", "3600"))
KLONDIKE_ENABLE_STATE_LOAD = os.getenv(
    "KLONDIKE_ENABLE_STATE_LOAD",
    "true" if KLONDIKE_ENV == "development" else "false",
).lower() in ("1", "true", "yes")


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Body, Request
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
        from fastapi.encoders import jsonable_encoder
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from ..session import SessionManager
    from .service import APIService
    from .schemas import (
        # Request models
        ActionBody,
        CreateSessionRequest,
        LoadStateRequest,
        # Response models
        SessionResponse,
        GameStateResponse,
        SessionListResponse,
        EndSessionResponse,
        ErrorResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Klondike Engine API",
        description="""
Klondike solitaire rules engine.

## Playing

Every click is an action. `POST /actions` returns the next state; render it
as-is. Rejected moves return the state the rules produced (usually the same
layout with the selection cleared) and `changed` tells you whether anything
happened at all.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `VALIDATION_ERROR` | Request is invalid (e.g. column out of range) |
| `STATE_LOAD_DISABLED` | State replacement is switched off |
| `INVALID_STATE` | A loaded state breaks the card invariants |
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

    api_service = service or APIService(
        session_manager=SessionManager(allow_state_load=KLONDIKE_ENABLE_STATE_LOAD),
        session_ttl=KLONDIKE_SESSION_TTL,
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_codes = {
        ErrorCode.SESSION_NOT_FOUND: 404,
        ErrorCode.VALIDATION_ERROR: 422,
        ErrorCode.STATE_LOAD_DISABLED: 403,
        ErrorCode.INVALID_STATE: 422,
        ErrorCode.INTERNAL_ERROR: 500,
    }

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Turn a service ErrorResponse into a JSON response with a matching status."""
        return JSONResponse(
            status_code=status_codes.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return make_error_response(ErrorResponse(
            error="Request validation failed",
            error_code=ErrorCode.VALIDATION_ERROR,
            details={"errors": jsonable_encoder(exc.errors())},
        ))

    def respond(result):
        if isinstance(result, ErrorResponse):
            return make_error_response(result)
        return result

    error_responses = {404: {"model": ErrorResponse}}

    # =========================================================================
    # System
    # =========================================================================

    @app.get(
        "/api/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health() -> HealthResponse:
        api_service.expire_idle_sessions()
        return HealthResponse(
            version=__version__,
            environment=KLONDIKE_ENV,
            active_sessions=api_service.list_sessions().count,
        )

    # =========================================================================
    # Sessions
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        status_code=201,
        tags=["Sessions"],
        summary="Create a game session",
    )
    def create_session(
        body: Annotated[CreateSessionRequest, Body()] = CreateSessionRequest(),
    ) -> SessionResponse:
        """Deal a new game. Pass a seed for a reproducible deal."""
        return api_service.create_session(body)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    def list_sessions() -> SessionListResponse:
        return api_service.list_sessions()

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses=error_responses,
        tags=["Sessions"],
        summary="Get session status",
    )
    def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        responses=error_responses,
        tags=["Sessions"],
        summary="End a session",
    )
    def end_session(session_id: str) -> Union[EndSessionResponse, JSONResponse]:
        """End the session. All of its state is dropped."""
        return respond(api_service.end_session(session_id))

    # =========================================================================
    # Game
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Get the current game state",
    )
    def get_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.get_game_state(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/actions",
        response_model=GameStateResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Apply an action",
    )
    def apply_action(
        session_id: str,
        action: ActionBody,
    ) -> Union[GameStateResponse, JSONResponse]:
        """
        Apply one action and return the next state.

        The body is tagged by `type`: `new_game`, `set_draw_count`, `tick`,
        `click_stock`, `click_waste`, `click_tableau`, `click_foundation`,
        `auto_move_to_foundation`.
        """
        return respond(api_service.apply_action(session_id, action.root))

    @app.post(
        "/api/v1/sessions/{session_id}/tick",
        response_model=GameStateResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Advance the game clock",
    )
    def tick(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.tick(session_id))

    @app.put(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={
            403: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            422: {"model": ErrorResponse},
        },
        tags=["Testing"],
        summary="Replace the game state (test harness only)",
    )
    def load_state(
        session_id: str,
        body: LoadStateRequest,
    ) -> Union[GameStateResponse, JSONResponse]:
        """
        Install a state verbatim, bypassing the rules.

        Disabled unless KLONDIKE_ENABLE_STATE_LOAD is set (on by default in
        development).
        """
        return respond(api_service.load_state(session_id, body))

    return app
