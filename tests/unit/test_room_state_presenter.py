"""
Unit tests for RoomStatePresenter payload shapes.
"""

from tests.helpers.room_helpers import join_players


class TestRoomStatePresenter:

    def test_game_state_is_room_snapshot(self, room_state_presenter, game_room):
        join_players(game_room, 2)

        state = room_state_presenter.create_game_state()

        assert set(state) == {'gameState', 'story', 'timeLeft', 'timerActive', 'timerDuration', 'players'}
        assert state['gameState'] == 'waiting'
        assert state['timerDuration'] == 300
        assert len(state['players']) == 2

    def test_player_joined(self, room_state_presenter, game_room):
        [player_id] = join_players(game_room, 1)

        payload = room_state_presenter.create_player_joined(player_id, 'Player1')

        assert payload['playerId'] == player_id
        assert payload['playerName'] == 'Player1'
        assert payload['players'][0]['playerId'] == player_id

    def test_player_left_lists_remaining_players(self, room_state_presenter, game_room):
        first, second = join_players(game_room, 2)
        game_room.leave(first)

        payload = room_state_presenter.create_player_left(first, 'Player1')

        assert [player['playerId'] for player in payload['players']] == [second]

    def test_vote_cast_hides_vote_value(self, room_state_presenter, game_room):
        [player_id] = join_players(game_room, 1)
        game_room.cast_vote(player_id, '8')

        payload = room_state_presenter.create_vote_cast(player_id)

        assert payload['gameState'] == 'voting'
        assert payload['players'][0]['hasVoted'] is True
        assert '8' not in str(payload)

    def test_votes_revealed(self, room_state_presenter, game_room):
        first, second = join_players(game_room, 2)
        game_room.cast_vote(first, '3')
        game_room.cast_vote(second, '5')
        summary = game_room.reveal()

        payload = room_state_presenter.create_votes_revealed(summary)

        assert [vote['vote'] for vote in payload['votes']] == ['3', '5']
        assert payload['summary']['average'] == 4.0
        assert payload['summary']['totalVotes'] == 2

    def test_game_reset(self, room_state_presenter, game_room):
        join_players(game_room, 1)
        game_room.reset()

        assert room_state_presenter.create_game_reset()['gameState'] == 'voting'

    def test_simple_payloads(self, room_state_presenter):
        assert room_state_presenter.create_story_updated('Story') == {'story': 'Story'}
        assert room_state_presenter.create_timer_started(60, 60) == {'duration': 60, 'timeLeft': 60}
        assert room_state_presenter.create_timer_update(12) == {'timeLeft': 12}
        position = {'x': 1.0, 'y': 1.6, 'z': 2.0}
        rotation = {'x': 0.0, 'y': 90.0, 'z': 0.0}
        assert room_state_presenter.create_player_moved('player_aB3dE6gH9', position, rotation) == {
            'playerId': 'player_aB3dE6gH9', 'position': position, 'rotation': rotation
        }
