"""
API Module - HTTP interface for solitaire clients.

Exposes the engine via a REST API. A client:
1. Creates a session (fresh deal)
2. Sends one action per click
3. Renders the state it gets back
4. Sends a tick once per second while the game is in progress

All state is session-scoped. Nothing is persisted.
"""

from .schemas import (
    # Requests
    ActionRequest,
    ActionBody,
    CreateSessionRequest,
    LoadStateRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    SessionListResponse,
    EndSessionResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    CardModel,
    SelectionModel,
    GameStateModel,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "ActionBody",
    "CreateSessionRequest",
    "LoadStateRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "SessionListResponse",
    "EndSessionResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "CardModel",
    "SelectionModel",
    "GameStateModel",
    # Service
    "APIService",
    "create_app",
]
