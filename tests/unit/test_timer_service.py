"""
Unit tests for TimerService.
"""

import time
from unittest.mock import Mock

from config_factory import AppConfig, Environment
from src.config.game_settings import GameSettings
from src.core.game_phases import GamePhase
from src.game_room import GameRoom
from src.services.room_state_presenter import RoomStatePresenter
from src.services.timer_service import TimerService
from tests.helpers.room_helpers import join_players


def wait_for(condition, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if condition():
            return True
        time.sleep(0.005)
    return condition()


class TestTimerServiceTicks:
    """Drive ticks by hand; no background thread involved."""

    def setup_method(self):
        self.room = GameRoom(GameSettings(AppConfig(environment=Environment.TESTING)))
        self.presenter = RoomStatePresenter(self.room)
        self.broadcast_service = Mock()
        self.service = TimerService(self.room, self.broadcast_service, self.presenter, tick_interval=60)

    def teardown_method(self):
        self.service.stop()

    def test_start_sets_room_state_and_broadcasts(self):
        self.service.start(30)

        assert self.room.timer_active is True
        assert self.room.time_left == 30
        self.broadcast_service.broadcast_timer_started.assert_called_once_with(
            {'duration': 30, 'timeLeft': 30}
        )

    def test_start_without_duration_uses_default(self):
        self.service.start()
        self.broadcast_service.broadcast_timer_started.assert_called_once_with(
            {'duration': 300, 'timeLeft': 300}
        )

    def test_process_tick_broadcasts_update(self):
        generation = self.service.start(30)

        assert self.service.process_tick(generation) is True

        self.broadcast_service.broadcast_timer_update.assert_called_once_with({'timeLeft': 29})

    def test_full_countdown_reveals_once_without_zero_update(self):
        alice, = join_players(self.room, 1)
        self.room.cast_vote(alice, '8')
        generation = self.service.start(30)

        keep_running = [self.service.process_tick(generation) for _ in range(30)]

        assert keep_running == [True] * 29 + [False]
        assert self.broadcast_service.broadcast_timer_update.call_count == 29
        updates = [c[0][0]['timeLeft'] for c in self.broadcast_service.broadcast_timer_update.call_args_list]
        assert updates == list(range(29, 0, -1))

        self.broadcast_service.broadcast_votes_revealed.assert_called_once()
        payload = self.broadcast_service.broadcast_votes_revealed.call_args[0][0]
        assert payload['votes'] == [{'playerId': alice, 'vote': '8', 'playerName': 'Player1'}]
        assert payload['summary']['totalVotes'] == 1
        assert self.room.phase == GamePhase.REVEALED

        # The cadence is over; further ticks do nothing
        assert self.service.process_tick(generation) is False
        assert self.broadcast_service.broadcast_timer_update.call_count == 29

    def test_stale_generation_emits_nothing(self):
        old_generation = self.service.start(30)
        self.service.start(60)
        self.broadcast_service.reset_mock()

        assert self.service.process_tick(old_generation) is False

        self.broadcast_service.broadcast_timer_update.assert_not_called()
        assert self.room.time_left == 60

    def test_no_update_after_manual_reveal(self):
        generation = self.service.start(30)
        self.room.reveal()

        assert self.service.process_tick(generation) is False
        self.broadcast_service.broadcast_timer_update.assert_not_called()

    def test_stop_halts_room_timer(self):
        self.service.start(30)
        self.service.stop()
        assert self.room.timer_active is False


class TestTimerServiceCadence:
    """Exercise the real background cadence with a short interval."""

    def setup_method(self):
        self.room = GameRoom(GameSettings(AppConfig(environment=Environment.TESTING)))
        self.broadcast_service = Mock()
        self.service = TimerService(self.room, self.broadcast_service, RoomStatePresenter(self.room),
                                    tick_interval=0.01)

    def teardown_method(self):
        self.service.stop()

    def test_cadence_counts_down_to_reveal(self):
        self.service.start(30)

        assert wait_for(lambda: self.broadcast_service.broadcast_votes_revealed.called)
        assert self.room.phase == GamePhase.REVEALED
        assert self.room.time_left == 0
        assert self.broadcast_service.broadcast_timer_update.call_count == 29
        self.service.timer_thread.join(timeout=1)
        assert not self.service.timer_thread.is_alive()

    def test_restart_cancels_previous_cadence(self):
        self.service.start(30)
        first_thread = self.service.timer_thread
        self.service.start(30)

        first_thread.join(timeout=1)
        assert not first_thread.is_alive()
        assert wait_for(lambda: self.broadcast_service.broadcast_votes_revealed.called)
        # One decrement per tick: exactly one full countdown after the restart
        assert self.broadcast_service.broadcast_votes_revealed.call_count == 1
        assert self.room.time_left == 0

    def test_stop_joins_thread(self):
        self.service.start(3600)
        thread = self.service.timer_thread

        self.service.stop()

        assert not thread.is_alive()
        assert self.room.timer_active is False


class TestTimerServiceMetrics:

    def setup_method(self):
        self.room = GameRoom(GameSettings(AppConfig(environment=Environment.TESTING)))
        self.metrics_service = Mock()
        self.service = TimerService(self.room, Mock(), RoomStatePresenter(self.room),
                                    metrics_service=self.metrics_service, tick_interval=60)

    def teardown_method(self):
        self.service.stop()

    def test_timer_reveal_counts_a_round(self):
        generation = self.service.start(2)

        self.service.process_tick(generation)
        self.metrics_service.record_game.assert_not_called()

        self.service.process_tick(generation)
        self.metrics_service.record_game.assert_called_once()

    def test_stale_tick_counts_nothing(self):
        old_generation = self.service.start(1)
        self.service.start(30)

        self.service.process_tick(old_generation)

        self.metrics_service.record_game.assert_not_called()
