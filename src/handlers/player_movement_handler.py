"""
Player Movement Handler

Relays avatar position and rotation updates between clients. Moves are
throttled per connection instead of counting toward the rate-limit window.
"""

import logging
from flask import request

from src.error_handler import with_error_handling
from src.services.rate_limit_service import throttle_event
from .base_handler import BaseHandler

logger = logging.getLogger(__name__)


class PlayerMovementHandler(BaseHandler):
    """Handler for avatar movement updates."""

    @throttle_event('player-move')
    @with_error_handling
    def handle_player_move(self, data):
        """
        Record a player's avatar pose and relay it to everyone else.

        Expected data format:
        {
            'playerId': 'player_XXXXXXXXX',
            'position': {'x': 0, 'y': 1.6, 'z': 3},
            'rotation': {'x': 0, 'y': 90, 'z': 0}
        }
        """
        move_request = self.validation_service.parse_player_move(data)
        position = move_request.position.to_dict()
        rotation = move_request.rotation.to_dict()

        with self.game_room.operation():
            if not self.game_room.update_position(move_request.player_id, position, rotation):
                return
            payload = self.room_state_presenter.create_player_moved(move_request.player_id, position, rotation)

        self.broadcast_service.broadcast_player_moved(payload, request.sid)
