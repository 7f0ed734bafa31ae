"""
Broadcast Service - Centralized Socket.IO message broadcasting.

This service handles all Socket.IO emissions in a centralized way:
- Room-wide broadcasts
- Individual player messages
- Room-wide broadcasts that skip the originating connection

Fan-out is best-effort: a failed emit is logged and never propagates.
"""

import logging
from typing import Any, Dict, Optional

from src.core.events import ROOM_NAME, ServerEvents

logger = logging.getLogger(__name__)


class BroadcastService:
    """Centralized service for all Socket.IO broadcasting operations."""

    def __init__(self, socketio, room_state_presenter, room_name: str = ROOM_NAME):
        """Initialize the broadcast service.

        Args:
            socketio: Flask-SocketIO instance for emitting messages
            room_state_presenter: Builds payloads from game room state
            room_name: Socket.IO room all participants are members of
        """
        self.socketio = socketio
        self.room_state_presenter = room_state_presenter
        self.room_name = room_name

    # Core emission methods

    def emit_to_room(self, event: str, data: Dict[str, Any], room_id: Optional[str] = None):
        """Emit an event to all players in a room."""
        room_id = room_id or self.room_name
        try:
            self.socketio.emit(event, data, room=room_id)
            logger.debug(f'Emitted {event} to room {room_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to room {room_id}: {e}')

    def emit_to_player(self, event: str, data: Dict[str, Any], socket_id: str):
        """Emit an event to a specific player."""
        try:
            self.socketio.emit(event, data, room=socket_id)
            logger.debug(f'Emitted {event} to player {socket_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to player {socket_id}: {e}')

    def emit_to_room_except(self, event: str, data: Dict[str, Any], skip_socket_id: str,
                            room_id: Optional[str] = None):
        """Emit an event to every player in a room except one connection."""
        room_id = room_id or self.room_name
        try:
            self.socketio.emit(event, data, room=room_id, skip_sid=skip_socket_id)
            logger.debug(f'Emitted {event} to room {room_id} except {skip_socket_id}')
        except Exception as e:
            logger.error(f'Error emitting {event} to room {room_id}: {e}')

    # High-level broadcast methods

    def send_game_state_to_player(self, socket_id: str, game_state: Optional[Dict[str, Any]] = None):
        """Send the full room state to one connection."""
        if game_state is None:
            game_state = self.room_state_presenter.create_game_state()
        self.emit_to_player(ServerEvents.GAME_STATE, game_state, socket_id)

    def broadcast_player_joined(self, payload: Dict[str, Any]):
        self.emit_to_room(ServerEvents.PLAYER_JOINED, payload)

    def broadcast_player_left(self, payload: Dict[str, Any]):
        self.emit_to_room(ServerEvents.PLAYER_LEFT, payload)

    def broadcast_vote_cast(self, payload: Dict[str, Any]):
        self.emit_to_room(ServerEvents.VOTE_CAST, payload)

    def broadcast_votes_revealed(self, payload: Dict[str, Any]):
        """Broadcast the reveal to everyone in the room."""
        self.emit_to_room(ServerEvents.VOTES_REVEALED, payload)
        logger.info(f"Broadcasted votes revealed: {payload['summary'].get('totalVotes', 0)} votes")

    def broadcast_game_reset(self, payload: Dict[str, Any]):
        self.emit_to_room(ServerEvents.GAME_RESET, payload)

    def broadcast_story_updated(self, payload: Dict[str, Any]):
        self.emit_to_room(ServerEvents.STORY_UPDATED, payload)

    def broadcast_timer_started(self, payload: Dict[str, Any]):
        self.emit_to_room(ServerEvents.TIMER_STARTED, payload)

    def broadcast_timer_update(self, payload: Dict[str, Any]):
        self.emit_to_room(ServerEvents.TIMER_UPDATE, payload)

    def broadcast_player_moved(self, payload: Dict[str, Any], sender_socket_id: str):
        """Relay an avatar move to everyone but the mover."""
        self.emit_to_room_except(ServerEvents.PLAYER_MOVED, payload, sender_socket_id)
