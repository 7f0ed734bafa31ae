"""
Rate limiting service for preventing event flooding from a single connection.
"""

import os
import time
import threading
import logging
from collections import defaultdict, deque
from functools import wraps
from flask import request
from flask_socketio import emit

from src.core.errors import ErrorCode
from src.core.events import ServerEvents
from src.services.error_response_factory import ErrorResponseFactory

logger = logging.getLogger(__name__)


class EventQueueManager:
    """Tracks per-connection event rates and blocks flooding clients."""

    def __init__(self, max_events_per_window: int = 100, window_seconds: int = 900,
                 max_events_per_second: int = 10, max_throttled_events_per_second: int = 20,
                 bypass_in_testing: bool = True):
        """
        Args:
            max_events_per_window: Events allowed per client within the sliding window
            window_seconds: Sliding window length; also how long an offender stays blocked
            max_events_per_second: Burst cap per client
            max_throttled_events_per_second: Per-second cap for throttled events such as player-move
            bypass_in_testing: Skip all checks when TESTING=1
        """
        self.client_rates = defaultdict(deque)
        self.throttled_rates = defaultdict(deque)
        self.blocked_clients = {}  # client_id -> blocked_at
        self.lock = threading.RLock()

        self.max_events_per_window = max_events_per_window
        self.window_seconds = window_seconds
        self.max_events_per_second = max_events_per_second
        self.max_throttled_events_per_second = max_throttled_events_per_second
        self.block_duration = window_seconds
        self.bypass_in_testing = bypass_in_testing

    def _is_testing(self):
        """Check if we're in a testing environment at runtime"""
        return self.bypass_in_testing and os.environ.get('TESTING') == '1'

    def is_client_blocked(self, client_id: str) -> bool:
        """Check if a client is currently blocked."""
        with self.lock:
            if client_id in self.blocked_clients:
                if time.time() - self.blocked_clients[client_id] > self.block_duration:
                    del self.blocked_clients[client_id]
                    logger.info(f"Unblocked client {client_id}")
                    return False
                return True
            return False

    def block_client(self, client_id: str, reason: str = "Rate limit exceeded"):
        """Block a client for the configured window."""
        with self.lock:
            self.blocked_clients[client_id] = time.time()
            self.client_rates.pop(client_id, None)
            logger.warning(f"Blocked client {client_id}: {reason}")

    def can_process_event(self, client_id: str, event_type: str) -> bool:
        """Record an event for a client and report whether it may be processed."""
        if self._is_testing():
            return True

        with self.lock:
            current_time = time.time()

            if self.is_client_blocked(client_id):
                return False

            client_events = self.client_rates[client_id]
            while client_events and current_time - client_events[0] > self.window_seconds:
                client_events.popleft()
            client_events.append(current_time)

            recent_events = sum(1 for t in client_events if current_time - t <= 1)
            if recent_events > self.max_events_per_second:
                self.block_client(client_id, f"Too many events per second: {recent_events} ({event_type})")
                return False

            if len(client_events) > self.max_events_per_window:
                self.block_client(
                    client_id,
                    f"Too many events in {self.window_seconds}s: {len(client_events)} ({event_type})"
                )
                return False

            return True

    def forget_client(self, client_id: str):
        """
        Drop all state for a disconnected client.

        Socket ids are never reused, so the client's own block goes too, and
        expired blocks of other clients are swept.
        """
        with self.lock:
            self.client_rates.pop(client_id, None)
            self.throttled_rates.pop(client_id, None)
            self.blocked_clients.pop(client_id, None)
            self._sweep_expired_blocks(time.time())

    def _sweep_expired_blocks(self, current_time: float):
        expired = [client_id for client_id, blocked_at in self.blocked_clients.items()
                   if current_time - blocked_at > self.block_duration]
        for client_id in expired:
            del self.blocked_clients[client_id]
        if expired:
            logger.debug(f"Swept {len(expired)} expired client blocks")

    def can_process_throttled_event(self, client_id: str, event_type: str) -> bool:
        """
        Per-second cap for high-frequency events.

        Excess events are dropped without blocking the client, and they do not
        count toward the sliding window.
        """
        if self._is_testing():
            return True

        with self.lock:
            current_time = time.time()
            client_events = self.throttled_rates[client_id]
            while client_events and current_time - client_events[0] >= 1:
                client_events.popleft()

            if len(client_events) >= self.max_throttled_events_per_second:
                return False

            client_events.append(current_time)
            return True

    def get_queue_stats(self, client_id: str = None) -> dict:
        """Get rate statistics for monitoring."""
        with self.lock:
            if client_id:
                return {
                    'recent_events': len(self.client_rates.get(client_id, ())),
                    'blocked': self.is_client_blocked(client_id)
                }

            return {
                'total_clients': len(self.client_rates),
                'blocked_clients': len(self.blocked_clients)
            }


# Global instance - will be set by app.py
_event_queue_manager = None


def set_event_queue_manager(manager):
    """Set the global event queue manager instance."""
    global _event_queue_manager
    _event_queue_manager = manager


def get_event_queue_manager():
    return _event_queue_manager


def prevent_event_overflow(event_type: str = "generic"):
    """Decorator rejecting events from connections that exceed their rate limit."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if _event_queue_manager is None:
                raise RuntimeError("Event queue manager not initialized. Call set_event_queue_manager() first.")

            client_id = request.sid

            if not _event_queue_manager.can_process_event(client_id, event_type):
                logger.warning(f"Event {event_type} blocked for client {client_id}")
                emit(ServerEvents.ERROR, ErrorResponseFactory().create_error_response(
                    ErrorCode.RATE_LIMITED,
                    'Too many requests. Please slow down.',
                    {'retry_after': _event_queue_manager.block_duration}
                ))
                return

            return func(*args, **kwargs)

        return wrapper
    return decorator


def throttle_event(event_type: str):
    """Decorator silently dropping high-frequency events over the per-second cap."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if _event_queue_manager is None:
                raise RuntimeError("Event queue manager not initialized. Call set_event_queue_manager() first.")

            client_id = request.sid

            if not _event_queue_manager.can_process_throttled_event(client_id, event_type):
                logger.debug(f"Event {event_type} throttled for client {client_id}")
                return

            return func(*args, **kwargs)

        return wrapper
    return decorator
