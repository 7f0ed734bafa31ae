"""
Socket.IO event names and typed request payloads.

Handlers never pass raw client dictionaries to the game room: the validation
service converts each inbound payload into one of the request types below.
"""

from dataclasses import dataclass
from typing import Dict


ROOM_NAME = "game-room"


class ClientEvents:
    """Events emitted by clients."""
    JOIN_ROOM = "join-room"
    LEAVE_ROOM = "leave-room"
    REQUEST_GAME_STATE = "request-game-state"
    CAST_VOTE = "cast-vote"
    RESET_GAME = "reset-game"
    UPDATE_STORY = "update-story"
    START_TIMER = "start-timer"
    PLAYER_MOVE = "player-move"
    ADMIN_REVEAL_VOTES = "admin-reveal-votes"


class ServerEvents:
    """Events emitted by the server."""
    CONNECTED = "connected"
    PLAYER_JOINED = "player-joined"
    GAME_STATE = "game-state"
    VOTE_CAST = "vote-cast"
    VOTES_REVEALED = "votes-revealed"
    GAME_RESET = "game-reset"
    STORY_UPDATED = "story-updated"
    TIMER_STARTED = "timer-started"
    TIMER_UPDATE = "timer-update"
    PLAYER_MOVED = "player-moved"
    PLAYER_LEFT = "player-left"
    ROOM_LEFT = "room-left"
    ERROR = "error"


@dataclass(frozen=True)
class Vector3:
    """A validated 3D coordinate triple."""
    x: float
    y: float
    z: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True)
class JoinRoomRequest:
    player_id: str
    player_name: str


@dataclass(frozen=True)
class CastVoteRequest:
    player_id: str
    vote: str


@dataclass(frozen=True)
class UpdateStoryRequest:
    story: str


@dataclass(frozen=True)
class StartTimerRequest:
    duration: int


@dataclass(frozen=True)
class PlayerMoveRequest:
    player_id: str
    position: Vector3
    rotation: Vector3
