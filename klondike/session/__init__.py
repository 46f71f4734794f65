"""
Session Module - In-memory game sessions.

A session wraps one evolving GameState and the reducer that drives it.
Collaborators (the HTTP API, the terminal client) dispatch actions to a
session and render whatever state comes back.
"""

from .manager import SessionManager, Session, SessionState

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
]
