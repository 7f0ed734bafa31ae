"""
Unit tests for GameActionHandler.
"""

import inspect
from unittest.mock import Mock, patch

import pytest

from src.core.errors import ErrorCode, ValidationError
from src.core.events import ServerEvents
from src.core.game_phases import GamePhase
from src.handlers.game_action_handler import GameActionHandler
from tests.helpers.room_helpers import join_players, make_player_id
from tests.helpers.socket_mocks import MockSocketIOTestHelper

cast_vote = inspect.unwrap(GameActionHandler.handle_cast_vote)
admin_reveal_votes = inspect.unwrap(GameActionHandler.handle_admin_reveal_votes)
reset_game = inspect.unwrap(GameActionHandler.handle_reset_game)
update_story = inspect.unwrap(GameActionHandler.handle_update_story)
start_timer = inspect.unwrap(GameActionHandler.handle_start_timer)


class TestGameActionHandler:

    @pytest.fixture(autouse=True)
    def setup(self, container, mock_socketio):
        self.container = container
        self.game_room = container.get('GameRoom')
        self.timer_service = container.get('TimerService')
        self.helper = MockSocketIOTestHelper(mock_socketio)
        mock_request = Mock(sid='sid_1')

        with patch('src.handlers.base_handler.get_container', return_value=container), \
                patch('src.handlers.base_handler.request', mock_request), \
                patch('src.handlers.game_action_handler.request', mock_request):
            self.handler = GameActionHandler()
            yield

    # cast-vote

    def test_vote_broadcasts_without_value(self):
        first, _ = join_players(self.game_room, 2)

        cast_vote(self.handler, {'playerId': first, 'vote': '8'})

        assert self.helper.emitted_events() == [ServerEvents.VOTE_CAST]
        payload = self.helper.payloads_for(ServerEvents.VOTE_CAST)[0]
        assert payload['playerId'] == first
        assert payload['gameState'] == 'voting'
        assert 'vote' not in payload

    def test_last_vote_reveals(self):
        first, second = join_players(self.game_room, 2)

        cast_vote(self.handler, {'playerId': first, 'vote': '3'})
        cast_vote(self.handler, {'playerId': second, 'vote': '?'})

        assert self.helper.emitted_events() == [
            ServerEvents.VOTE_CAST, ServerEvents.VOTE_CAST, ServerEvents.VOTES_REVEALED
        ]
        revealed = self.helper.payloads_for(ServerEvents.VOTES_REVEALED)[0]
        assert revealed['summary'] == {
            'voteCounts': {'3': 1, '?': 1},
            'numericValues': [3],
            'average': 3.0,
            'mostCommon': '3',
            'totalVotes': 2
        }
        assert self.game_room.phase == GamePhase.REVEALED

    def test_votes_and_auto_reveal_are_counted(self):
        metrics_service = self.container.get('MetricsService')
        first, second = join_players(self.game_room, 2)

        cast_vote(self.handler, {'playerId': first, 'vote': '3'})
        assert metrics_service.counters['totalGames'] == 0

        cast_vote(self.handler, {'playerId': second, 'vote': '5'})

        assert metrics_service.counters['totalVotes'] == 2
        assert metrics_service.counters['totalGames'] == 1

    def test_ignored_vote_is_not_counted(self):
        cast_vote(self.handler, {'playerId': make_player_id(), 'vote': '3'})
        assert self.container.get('MetricsService').counters['totalVotes'] == 0

    def test_revote_overwrites(self):
        first, _ = join_players(self.game_room, 2)

        cast_vote(self.handler, {'playerId': first, 'vote': '3'})
        cast_vote(self.handler, {'playerId': first, 'vote': '13'})

        assert self.game_room.get_all_votes()[0]['vote'] == '13'
        self.helper.assert_not_emitted(ServerEvents.VOTES_REVEALED)

    def test_vote_after_reveal_rejected(self):
        [player_id] = join_players(self.game_room, 1)
        cast_vote(self.handler, {'playerId': player_id, 'vote': '5'})

        with pytest.raises(ValidationError) as exc_info:
            cast_vote(self.handler, {'playerId': player_id, 'vote': '8'})
        assert exc_info.value.code == ErrorCode.WRONG_PHASE

    def test_vote_from_unknown_player_is_ignored(self):
        join_players(self.game_room, 1)

        cast_vote(self.handler, {'playerId': make_player_id(), 'vote': '5'})

        assert self.game_room.vote_count == 0
        assert self.helper.emitted_events() == []

    def test_invalid_vote_rejected(self):
        [player_id] = join_players(self.game_room, 1)

        with pytest.raises(ValidationError) as exc_info:
            cast_vote(self.handler, {'playerId': player_id, 'vote': '4'})
        assert exc_info.value.code == ErrorCode.INVALID_VOTE

    # admin-reveal-votes

    def test_admin_reveal(self):
        first, _ = join_players(self.game_room, 2)
        self.game_room.cast_vote(first, '5')

        admin_reveal_votes(self.handler)

        revealed = self.helper.payloads_for(ServerEvents.VOTES_REVEALED)[0]
        assert revealed['summary']['totalVotes'] == 1
        assert revealed['votes'] == [{'playerId': first, 'vote': '5', 'playerName': 'Player1'}]

    def test_repeat_admin_reveal_counts_one_round(self):
        metrics_service = self.container.get('MetricsService')
        first, _ = join_players(self.game_room, 2)
        self.game_room.cast_vote(first, '5')

        admin_reveal_votes(self.handler)
        admin_reveal_votes(self.handler)

        assert metrics_service.counters['totalGames'] == 1
        assert len(self.helper.payloads_for(ServerEvents.VOTES_REVEALED)) == 2

    def test_admin_reveal_without_votes(self):
        join_players(self.game_room, 2)

        with pytest.raises(ValidationError) as exc_info:
            admin_reveal_votes(self.handler)
        assert exc_info.value.code == ErrorCode.NO_VOTES_CAST

    def test_admin_reveal_stops_timer(self):
        [player_id] = join_players(self.game_room, 1)
        self.game_room.start_timer(60)
        self.game_room.cast_vote(player_id, '5')

        admin_reveal_votes(self.handler)

        assert self.game_room.timer_active is False

    # reset-game

    def test_reset_game(self):
        first, second = join_players(self.game_room, 2)
        self.game_room.cast_vote(first, '5')
        self.game_room.cast_vote(second, '8')
        self.game_room.reveal()

        reset_game(self.handler)

        assert self.game_room.vote_count == 0
        payload = self.helper.payloads_for(ServerEvents.GAME_RESET)[0]
        assert payload['gameState'] == 'voting'
        assert all(player['hasVoted'] is False for player in payload['players'])

    # update-story

    def test_update_story(self):
        update_story(self.handler, {'story': '  Checkout <flow> '})

        assert self.game_room.story == 'Checkout flow'
        self.helper.assert_emit_called_with(ServerEvents.STORY_UPDATED, {'story': 'Checkout flow'}, room='game-room')

    def test_update_story_too_long(self):
        with pytest.raises(ValidationError) as exc_info:
            update_story(self.handler, {'story': 'x' * 501})
        assert exc_info.value.code == ErrorCode.STORY_TOO_LONG

    # start-timer

    def test_start_timer_with_duration(self):
        start_timer(self.handler, {'duration': 60})

        self.helper.assert_emit_called_with(ServerEvents.TIMER_STARTED, {'duration': 60, 'timeLeft': 60})
        assert self.game_room.timer_active is True
        assert self.game_room.phase == GamePhase.VOTING
        self.timer_service.stop()

    def test_start_timer_default_duration(self):
        start_timer(self.handler, None)

        self.helper.assert_emit_called_with(ServerEvents.TIMER_STARTED, {'duration': 300, 'timeLeft': 300})
        self.timer_service.stop()

    def test_start_timer_invalid_duration(self):
        with pytest.raises(ValidationError) as exc_info:
            start_timer(self.handler, {'duration': 5})

        assert exc_info.value.code == ErrorCode.INVALID_TIMER_DURATION
        assert self.game_room.timer_active is False
