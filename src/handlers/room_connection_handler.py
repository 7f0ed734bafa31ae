"""
Room Connection Handler

This module handles Socket.IO events related to room membership,
including joining the room, leaving it and requesting the room state.
"""

import logging
from typing import Dict, Optional
from flask import request

from src.core.errors import ErrorCode, ValidationError
from src.core.events import ServerEvents
from src.error_handler import with_error_handling
from src.services.rate_limit_service import prevent_event_overflow
from .base_handler import BaseRoomHandler

logger = logging.getLogger(__name__)


class RoomConnectionHandler(BaseRoomHandler):
    """Handler for room membership operations like join, leave and state retrieval."""

    @prevent_event_overflow('join-room')
    @with_error_handling
    def handle_join_room(self, data):
        """
        Handle player joining the room.

        Expected data format:
        {
            'playerId': 'player_XXXXXXXXX',
            'playerName': 'display name'
        }
        """
        self.log_handler_start('handle_join_room', data)

        join_request = self.validation_service.parse_join_room(data)

        # Session check, join and session creation happen under one room lock
        # Raises RoomFullError / DuplicatePlayerError, reported by with_error_handling
        with self.game_room.operation():
            if self.session_service.has_session(request.sid):
                raise ValidationError(
                    ErrorCode.ALREADY_IN_ROOM,
                    'You are already in the room. Leave first.'
                )

            self.game_room.join(join_request.player_id, join_request.player_name, request.sid)
            self.session_service.create_session(request.sid, join_request.player_id, join_request.player_name)
            joined_payload = self.room_state_presenter.create_player_joined(
                join_request.player_id, join_request.player_name
            )
            game_state = self.room_state_presenter.create_game_state()

        self.join_socketio_room()

        self.log_handler_success(
            'handle_join_room',
            f'Player {join_request.player_name} ({join_request.player_id}) joined'
        )

        self.broadcast_service.broadcast_player_joined(joined_payload)
        self.broadcast_service.send_game_state_to_player(request.sid, game_state)

    @prevent_event_overflow('leave-room')
    @with_error_handling
    def handle_leave_room(self, data=None):
        """Handle player leaving the room without disconnecting."""
        self.log_handler_start('handle_leave_room', data)

        # Leave the broadcast room first so the leaver gets room-left, not player-left
        self.leave_socketio_room()

        session_info = self.remove_connection(request.sid)
        if not session_info:
            raise ValidationError(
                ErrorCode.NOT_IN_ROOM,
                'You are not currently in the room'
            )

        self.broadcast_service.emit_to_player(
            ServerEvents.ROOM_LEFT, {'playerId': session_info['player_id']}, request.sid
        )
        self.log_handler_success('handle_leave_room', f"Player {session_info['player_id']} left")

    @prevent_event_overflow('request-game-state')
    @with_error_handling
    def handle_request_game_state(self, data=None):
        """Send the current room state to the requesting client."""
        self.log_handler_start('handle_request_game_state', data)
        self.broadcast_service.send_game_state_to_player(request.sid)

    def remove_connection(self, socket_id: str) -> Optional[Dict[str, str]]:
        """
        Remove a connection's session and its participant, then tell the room.

        Shared by leave-room and disconnect. The session is popped under the
        room lock, so each departure is processed once and never interleaves
        with a join from the same connection.

        Returns:
            The removed session info, or None if the connection had not joined
        """
        with self.game_room.operation():
            session_info = self.session_service.remove_session(socket_id)
            if not session_info:
                return None

            player_id = session_info['player_id']
            participant = self.game_room.leave(player_id)
            payload = None
            if participant is not None:
                payload = self.room_state_presenter.create_player_left(player_id, participant.player_name)

        if payload is not None:
            logger.info(f'Player {participant.player_name} ({player_id}) removed from room')
            self.broadcast_service.broadcast_player_left(payload)
        return session_info
