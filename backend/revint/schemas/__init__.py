"""Marshmallow schemas for session payloads."""

from .session import (
    NewSessionResultSchema,
    NewSessionSchema,
    ReactionQuerySchema,
    ReactionSchema,
    SessionInfoSchema,
    SessionStateSchema,
)

__all__ = [
    "NewSessionResultSchema",
    "NewSessionSchema",
    "ReactionQuerySchema",
    "ReactionSchema",
    "SessionInfoSchema",
    "SessionStateSchema",
]
