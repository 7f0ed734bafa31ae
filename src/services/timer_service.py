"""
Timer Service - Drives the room countdown and the timer-triggered reveal.

This service handles:
- Starting and restarting the countdown
- Broadcasting one timer-update per second while time remains
- Revealing the votes when the countdown reaches zero
- Stopping the cadence at shutdown
"""

import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class TimerService:
    """Owns the single countdown cadence for the game room."""

    def __init__(self, game_room, broadcast_service, room_state_presenter, metrics_service=None,
                 tick_interval: float = 1.0):
        """Initialize the timer service.

        Args:
            game_room: The GameRoom holding the countdown state
            broadcast_service: Service for broadcasting messages to the room
            room_state_presenter: Builds the timer and reveal payloads
            metrics_service: Counts timer-driven reveals as completed rounds
            tick_interval: Seconds between ticks (shortened by tests)
        """
        self.game_room = game_room
        self.broadcast_service = broadcast_service
        self.room_state_presenter = room_state_presenter
        self.metrics_service = metrics_service
        self.tick_interval = tick_interval

        self._lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self.timer_thread: Optional[threading.Thread] = None

        logger.info("TimerService initialized")

    def start(self, duration: Optional[int] = None) -> int:
        """
        Start the countdown, replacing any cadence already running.

        Args:
            duration: Countdown length in seconds; the configured default when None

        Returns:
            Generation number bound to the new cadence
        """
        with self._lock:
            self._cancel_cadence()

            with self.game_room.operation():
                generation = self.game_room.start_timer(duration)
                payload = self.room_state_presenter.create_timer_started(
                    self.game_room.time_left, self.game_room.time_left
                )

            self.broadcast_service.broadcast_timer_started(payload)

            stop_event = threading.Event()
            self._stop_event = stop_event
            self.timer_thread = threading.Thread(
                target=self._run,
                args=(generation, stop_event),
                name=f"timer-{generation}",
                daemon=True
            )
            self.timer_thread.start()

        logger.info(f"Timer cadence {generation} started for {payload['duration']} seconds")
        return generation

    def cancel(self):
        """Stop the current cadence without touching room state."""
        with self._lock:
            self._cancel_cadence()

    def stop(self):
        """Stop the timer service. Used at process shutdown."""
        with self._lock:
            self._cancel_cadence()
            thread = self.timer_thread
        self.game_room.stop_timer()
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=2)
        logger.info("TimerService stopped")

    def _cancel_cadence(self):
        if self._stop_event is not None:
            self._stop_event.set()
            self._stop_event = None

    def _run(self, generation: int, stop_event: threading.Event):
        """Cadence loop: one tick per interval until the countdown ends or is replaced."""
        while not stop_event.wait(self.tick_interval):
            try:
                if not self.process_tick(generation):
                    break
            except Exception as e:
                logger.error(f"Error in timer cadence {generation}: {e}")
        logger.debug(f"Timer cadence {generation} exited")

    def process_tick(self, generation: Optional[int] = None) -> bool:
        """
        Advance the countdown once and broadcast the result.

        Args:
            generation: Cadence generation; stale generations are ignored

        Returns:
            True if the cadence should keep running
        """
        with self.game_room.operation():
            result = self.game_room.tick(generation)
            if result is None:
                return False

            if result['revealed']:
                payload = self.room_state_presenter.create_votes_revealed(result['summary'], result['votes'])
            else:
                payload = self.room_state_presenter.create_timer_update(result['timeLeft'])

        if result['revealed']:
            logger.info("Timer expired, revealing votes")
            if self.metrics_service is not None:
                self.metrics_service.record_game()
            self.broadcast_service.broadcast_votes_revealed(payload)
            return False

        self.broadcast_service.broadcast_timer_update(payload)
        return True
