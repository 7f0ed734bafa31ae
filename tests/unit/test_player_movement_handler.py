"""
Unit tests for PlayerMovementHandler.
"""

import inspect
from unittest.mock import Mock, patch

import pytest

from src.core.errors import ErrorCode, ValidationError
from src.core.events import ServerEvents
from src.handlers.player_movement_handler import PlayerMovementHandler
from src.services.rate_limit_service import get_event_queue_manager, set_event_queue_manager
from tests.helpers.room_helpers import join_players, make_player_id
from tests.helpers.socket_mocks import MockSocketIOTestHelper

player_move = inspect.unwrap(PlayerMovementHandler.handle_player_move)


class TestPlayerMovementHandler:

    @pytest.fixture(autouse=True)
    def setup(self, container, mock_socketio):
        self.game_room = container.get('GameRoom')
        self.helper = MockSocketIOTestHelper(mock_socketio)
        mock_request = Mock(sid='sid_mover')

        with patch('src.handlers.base_handler.get_container', return_value=container), \
                patch('src.handlers.player_movement_handler.request', mock_request):
            self.handler = PlayerMovementHandler()
            yield

    def test_move_updates_room_and_relays(self):
        [player_id] = join_players(self.game_room, 1)

        player_move(self.handler, {
            'playerId': player_id,
            'position': {'x': 2, 'y': 1.6, 'z': -4},
            'rotation': {'x': 0, 'y': 90, 'z': 0}
        })

        participant = self.game_room.get_player(player_id)
        assert participant.position == {'x': 2.0, 'y': 1.6, 'z': -4.0}
        assert participant.rotation == {'x': 0.0, 'y': 90.0, 'z': 0.0}

        call = self.helper.mock_socketio.emit.call_args
        assert call.args[0] == ServerEvents.PLAYER_MOVED
        assert call.args[1]['playerId'] == player_id
        assert call.kwargs == {'room': 'game-room', 'skip_sid': 'sid_mover'}

    def test_move_from_unknown_player_is_ignored(self):
        player_move(self.handler, {
            'playerId': make_player_id(),
            'position': {'x': 0, 'y': 0, 'z': 0},
            'rotation': {'x': 0, 'y': 0, 'z': 0}
        })
        assert self.helper.emitted_events() == []

    def test_out_of_bounds_position_rejected(self):
        [player_id] = join_players(self.game_room, 1)

        with pytest.raises(ValidationError) as exc_info:
            player_move(self.handler, {
                'playerId': player_id,
                'position': {'x': 500, 'y': 0, 'z': 0},
                'rotation': {'x': 0, 'y': 0, 'z': 0}
            })

        assert exc_info.value.code == ErrorCode.INVALID_POSITION
        assert self.game_room.get_player(player_id).position == {'x': 0.0, 'y': 1.6, 'z': 3.0}

    def test_excess_moves_are_dropped_silently(self):
        [player_id] = join_players(self.game_room, 1)
        manager = Mock()
        manager.can_process_throttled_event.return_value = False
        original_manager = get_event_queue_manager()
        set_event_queue_manager(manager)

        try:
            with patch('src.services.rate_limit_service.request', Mock(sid='sid_mover')):
                self.handler.handle_player_move({
                    'playerId': player_id,
                    'position': {'x': 2, 'y': 1.6, 'z': -4},
                    'rotation': {'x': 0, 'y': 0, 'z': 0}
                })
        finally:
            set_event_queue_manager(original_manager)

        manager.can_process_throttled_event.assert_called_once_with('sid_mover', 'player-move')
        manager.can_process_event.assert_not_called()
        assert self.game_room.get_player(player_id).position == {'x': 0.0, 'y': 1.6, 'z': 3.0}
        assert self.helper.emitted_events() == []
