"""
Game Settings Configuration Module

Provides centralized access to game-specific values: the card deck, room
capacity, timer bounds and the input limits enforced by the validation gate.
"""

import logging
from typing import Tuple

logger = logging.getLogger(__name__)


CARD_VALUES: Tuple[str, ...] = ('1', '2', '3', '5', '8', '13', '21', '?')
UNKNOWN_CARD = '?'
BLOCKED_NAME_WORDS: Tuple[str, ...] = ('admin', 'system', 'bot', 'null', 'undefined')

MIN_TIMER_DURATION = 30
MAX_TIMER_DURATION = 3600
MIN_NAME_LENGTH = 2
MAX_STORY_LENGTH = 500
MAX_POSITION_COORDINATE = 100
MAX_ROTATION_COORDINATE = 360


class GameSettings:
    """Centralized game settings management."""

    def __init__(self, app_config=None):
        """
        Initialize game settings.

        Args:
            app_config: Application configuration instance from config_factory
        """
        self._config = app_config
        if app_config is None:
            try:
                from config_factory import get_config
                self._config = get_config()
            except (ImportError, Exception) as e:
                logger.warning(f"Could not load configuration: {e}, using defaults")
                self._config = None

    @property
    def card_values(self) -> Tuple[str, ...]:
        """The fixed deck players vote from."""
        return CARD_VALUES

    @property
    def blocked_name_words(self) -> Tuple[str, ...]:
        return BLOCKED_NAME_WORDS

    @property
    def max_players(self) -> int:
        """
        Get maximum players in the room.

        Returns:
            Maximum number of participants allowed at once
        """
        if self._config is None:
            return 8
        return self._config.max_players

    @property
    def timer_duration(self) -> int:
        """Default countdown length in seconds when a client omits one."""
        if self._config is None:
            return 300
        return self._config.timer_duration

    @property
    def timer_bounds(self) -> Tuple[int, int]:
        return MIN_TIMER_DURATION, MAX_TIMER_DURATION

    @property
    def default_story(self) -> str:
        if self._config is None:
            from config_factory import DEFAULT_STORY
            return DEFAULT_STORY
        return self._config.default_story

    @property
    def min_name_length(self) -> int:
        return MIN_NAME_LENGTH

    @property
    def max_name_length(self) -> int:
        """
        Get maximum display name length after sanitization.

        Returns:
            Maximum allowed name length
        """
        if self._config is None:
            return 20
        return self._config.max_name_length

    @property
    def max_story_length(self) -> int:
        return MAX_STORY_LENGTH

    @property
    def max_position_coordinate(self) -> int:
        return MAX_POSITION_COORDINATE

    @property
    def max_rotation_coordinate(self) -> int:
        return MAX_ROTATION_COORDINATE


# Global instance for easy access
_game_settings_instance = None


def get_game_settings(app_config=None) -> GameSettings:
    """
    Get or create the global game settings instance.

    Args:
        app_config: Optional app config to use

    Returns:
        GameSettings instance
    """
    global _game_settings_instance

    if _game_settings_instance is None or app_config is not None:
        _game_settings_instance = GameSettings(app_config)

    return _game_settings_instance


def reset_game_settings():
    """Reset the global game settings instance (mainly for testing)."""
    global _game_settings_instance
    _game_settings_instance = None
