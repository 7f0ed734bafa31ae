"""
Base Handler Classes

This module provides base classes for Socket.IO handlers with common patterns
for service access, session management and logging.
"""

import logging
from abc import ABC
from typing import Any, Dict, Optional
from flask import request
from flask_socketio import join_room, leave_room

from container import get_container
from src.core.errors import ErrorCode, ValidationError
from src.core.events import ROOM_NAME
from src.core.game_phases import GamePhase

logger = logging.getLogger(__name__)


class BaseHandler(ABC):
    """
    Abstract base class for all Socket.IO handlers.

    Provides service access through the container, session lookup and
    standardized handler logging.
    """

    def __init__(self):
        self._container = get_container()

    @property
    def game_room(self):
        """Get the game room."""
        return self._container.get('GameRoom')

    @property
    def validation_service(self):
        """Get the validation service."""
        return self._container.get('ValidationService')

    @property
    def session_service(self):
        """Get the session service."""
        return self._container.get('SessionService')

    @property
    def broadcast_service(self):
        """Get the broadcast service."""
        return self._container.get('BroadcastService')

    @property
    def room_state_presenter(self):
        return self._container.get('RoomStatePresenter')

    @property
    def timer_service(self):
        """Get the timer service."""
        return self._container.get('TimerService')

    @property
    def metrics_service(self):
        return self._container.get('MetricsService')

    def get_current_session(self) -> Optional[Dict[str, Any]]:
        """Get the current session info for the requesting client."""
        return self.session_service.get_session(request.sid)  # type: ignore[attr-defined]

    def require_session(self) -> Dict[str, Any]:
        """
        Get the current session info, raising an error if not in the room.

        Returns:
            Session info dictionary

        Raises:
            ValidationError: If the connection has not joined the room
        """
        session_info = self.get_current_session()
        if not session_info:
            raise ValidationError(
                ErrorCode.NOT_IN_ROOM,
                'You are not currently in the room'
            )
        return session_info

    def log_handler_start(self, handler_name: str, data: Any = None) -> None:
        """Log the start of handler execution."""
        logger.info(f'{handler_name} called by client: {request.sid}')  # type: ignore[attr-defined]
        if data:
            logger.debug(f'{handler_name} data: {data}')

    def log_handler_success(self, handler_name: str, message: Optional[str] = None) -> None:
        """Log successful handler completion."""
        log_msg = f'{handler_name} completed successfully for client: {request.sid}'  # type: ignore[attr-defined]
        if message:
            log_msg += f' - {message}'
        logger.info(log_msg)


class RoomHandlerMixin:
    """
    Mixin for handlers that move connections in and out of the Socket.IO room.
    """

    def join_socketio_room(self, room_id: str = ROOM_NAME) -> None:
        """Join a Socket.IO room for broadcasting."""
        join_room(room_id)
        logger.debug(f'Client {request.sid} joined Socket.IO room: {room_id}')  # type: ignore[attr-defined]

    def leave_socketio_room(self, room_id: str = ROOM_NAME) -> None:
        """Leave a Socket.IO room."""
        leave_room(room_id)
        logger.debug(f'Client {request.sid} left Socket.IO room: {room_id}')  # type: ignore[attr-defined]


class GameHandlerMixin:
    """
    Mixin for handlers that deal with game operations.
    """

    # Type hints for expected attributes from BaseHandler
    game_room: Any  # Will be injected by container

    def check_not_revealed(self) -> None:
        """
        Reject actions that are only allowed before the votes are revealed.

        Must be called while holding ``game_room.operation()``.

        Raises:
            ValidationError: If the room is in the revealed phase
        """
        if self.game_room.phase == GamePhase.REVEALED:
            raise ValidationError(
                ErrorCode.WRONG_PHASE,
                'Votes have already been revealed. Reset the game to vote again.'
            )


class BaseRoomHandler(BaseHandler, RoomHandlerMixin):
    """Base class for handlers that deal with room membership."""
    pass


class BaseGameHandler(BaseHandler, GameHandlerMixin):
    """Base class for handlers that deal with game operations."""
    pass
