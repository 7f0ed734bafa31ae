"""
Services package for MetaPoker

Contains the service classes wired together by the dependency injection container.
"""

from .validation_service import ValidationService
from .error_response_factory import ErrorResponseFactory
from .session_service import SessionService
from .room_state_presenter import RoomStatePresenter
from .broadcast_service import BroadcastService
from .timer_service import TimerService

__all__ = [
    'ValidationService',
    'ErrorResponseFactory',
    'SessionService',
    'RoomStatePresenter',
    'BroadcastService',
    'TimerService'
]
