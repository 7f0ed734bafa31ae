"""
Core error definitions for MetaPoker

Provides error codes and the exception hierarchy shared by the validation gate,
the game room and the socket handlers. Nothing here depends on other services.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorCode(Enum):
    """Standardized error codes for the application."""

    # Payload shape errors
    INVALID_DATA = "INVALID_DATA"
    MISSING_DATA = "MISSING_DATA"

    # Identity errors
    MISSING_PLAYER_ID = "MISSING_PLAYER_ID"
    INVALID_PLAYER_ID = "INVALID_PLAYER_ID"
    MISSING_PLAYER_NAME = "MISSING_PLAYER_NAME"
    INVALID_PLAYER_NAME = "INVALID_PLAYER_NAME"
    PLAYER_NAME_TOO_SHORT = "PLAYER_NAME_TOO_SHORT"
    PLAYER_NAME_TOO_LONG = "PLAYER_NAME_TOO_LONG"
    PLAYER_NAME_BLOCKED = "PLAYER_NAME_BLOCKED"

    # Room membership errors
    ROOM_FULL = "ROOM_FULL"
    DUPLICATE_PLAYER_ID = "DUPLICATE_PLAYER_ID"
    ALREADY_IN_ROOM = "ALREADY_IN_ROOM"
    NOT_IN_ROOM = "NOT_IN_ROOM"

    # Voting errors
    MISSING_VOTE = "MISSING_VOTE"
    INVALID_VOTE = "INVALID_VOTE"
    WRONG_PHASE = "WRONG_PHASE"
    NO_VOTES_CAST = "NO_VOTES_CAST"

    # Story errors
    MISSING_STORY = "MISSING_STORY"
    INVALID_STORY = "INVALID_STORY"
    STORY_TOO_LONG = "STORY_TOO_LONG"

    # Timer errors
    INVALID_TIMER_DURATION = "INVALID_TIMER_DURATION"

    # Movement errors
    INVALID_POSITION = "INVALID_POSITION"
    INVALID_ROTATION = "INVALID_ROTATION"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RATE_LIMITED = "RATE_LIMITED"


class GameError(Exception):
    """Base class for errors that are reported back to the triggering client."""

    def __init__(self, code: ErrorCode, message: str, details: Optional[Dict] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(GameError):
    """Raised when an inbound payload or a handler precondition is rejected."""
    pass


class RoomError(GameError):
    """Raised by the game room when a membership change cannot be applied."""
    pass


class RoomFullError(RoomError):
    """The room already holds the configured maximum number of players."""

    def __init__(self, max_players: int):
        super().__init__(
            ErrorCode.ROOM_FULL,
            f"Room is full (maximum {max_players} players)",
            {"max_players": max_players}
        )


class DuplicatePlayerError(RoomError):
    """A participant with the same id is already in the room."""

    def __init__(self, player_id: str):
        super().__init__(
            ErrorCode.DUPLICATE_PLAYER_ID,
            "A player with this ID is already in the room",
            {"player_id": player_id}
        )
