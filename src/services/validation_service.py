"""
Validation Service for MetaPoker

Every inbound Socket.IO payload passes through here before it reaches the
game room. Raw dictionaries go in; typed requests from ``src.core.events``
come out, or a ValidationError is raised.
"""

import logging
import math
import re
from typing import Any, Dict, Optional

from src.config.game_settings import get_game_settings
from src.core.errors import ErrorCode, ValidationError
from src.core.events import (
    CastVoteRequest,
    JoinRoomRequest,
    PlayerMoveRequest,
    StartTimerRequest,
    UpdateStoryRequest,
    Vector3,
)

logger = logging.getLogger(__name__)


class ValidationService:
    """Service responsible for input validation and sanitization."""

    MAX_SANITIZED_LENGTH = 1000

    PLAYER_ID_PATTERN = re.compile(r'^player_[a-zA-Z0-9]{9}$')

    def __init__(self, game_settings=None):
        """
        Initialize ValidationService.

        Args:
            game_settings: GameSettings supplying the deck and input limits
        """
        self.settings = game_settings or get_game_settings()

    def sanitize_string(self, value: Any) -> str:
        """
        Strip markup-significant characters from user text.

        Trims whitespace, drops angle brackets and quotes, escapes ampersands
        and caps the result at MAX_SANITIZED_LENGTH characters. Non-strings
        sanitize to the empty string.
        """
        if not isinstance(value, str):
            return ''
        value = value.strip()
        value = re.sub(r'[<>]', '', value)
        value = value.replace('&', '&amp;')
        value = re.sub(r'[\'"]', '', value)
        return value[:self.MAX_SANITIZED_LENGTH]

    def validate_socket_data(self, data: Any, required_fields: Optional[list] = None) -> Dict:
        """
        Validate Socket.IO event data.

        Args:
            data: Raw data from Socket.IO event
            required_fields: List of required field names

        Returns:
            Validated data dictionary

        Raises:
            ValidationError: If data is not a dictionary or a field is missing
        """
        if data is None and not required_fields:
            return {}

        if not isinstance(data, dict):
            raise ValidationError(
                ErrorCode.INVALID_DATA,
                "Invalid data format - expected dictionary"
            )

        if required_fields:
            missing_fields = [field for field in required_fields if field not in data]
            if missing_fields:
                if len(missing_fields) == 1:
                    field = missing_fields[0]
                    if field == 'playerId':
                        raise ValidationError(ErrorCode.MISSING_PLAYER_ID, "Player ID is required")
                    elif field == 'playerName':
                        raise ValidationError(ErrorCode.MISSING_PLAYER_NAME, "Player name is required")
                    elif field == 'vote':
                        raise ValidationError(ErrorCode.MISSING_VOTE, "Vote is required")
                    elif field == 'story':
                        raise ValidationError(ErrorCode.MISSING_STORY, "Story is required")

                raise ValidationError(
                    ErrorCode.MISSING_DATA,
                    f"Missing required fields: {', '.join(missing_fields)}",
                    {"missing_fields": missing_fields, "required_fields": required_fields}
                )

        return data

    def validate_player_id(self, player_id: Any) -> str:
        """
        Validate a client-generated player id of the form ``player_XXXXXXXXX``.

        Raises:
            ValidationError: If the id is missing or malformed
        """
        if not player_id or not isinstance(player_id, str):
            raise ValidationError(ErrorCode.MISSING_PLAYER_ID, "Player ID is required")

        if not self.PLAYER_ID_PATTERN.match(player_id):
            raise ValidationError(
                ErrorCode.INVALID_PLAYER_ID,
                "Invalid player ID format"
            )

        return player_id

    def validate_player_name(self, player_name: Any) -> str:
        """
        Validate and sanitize player name.

        Args:
            player_name: Raw player name string

        Returns:
            Sanitized player name

        Raises:
            ValidationError: If the sanitized name is empty, too short, too long
                or contains a blocked word
        """
        if not player_name or not isinstance(player_name, str):
            raise ValidationError(ErrorCode.MISSING_PLAYER_NAME, "Player name is required")

        sanitized = self.sanitize_string(player_name)

        if not sanitized:
            raise ValidationError(
                ErrorCode.INVALID_PLAYER_NAME,
                "Player name cannot be empty after sanitization"
            )

        max_length = self.settings.max_name_length
        if len(sanitized) > max_length:
            raise ValidationError(
                ErrorCode.PLAYER_NAME_TOO_LONG,
                f"Player name must be {max_length} characters or less",
                {"max_length": max_length, "actual_length": len(sanitized)}
            )

        min_length = self.settings.min_name_length
        if len(sanitized) < min_length:
            raise ValidationError(
                ErrorCode.PLAYER_NAME_TOO_SHORT,
                f"Player name must be at least {min_length} characters",
                {"min_length": min_length, "actual_length": len(sanitized)}
            )

        lowered = sanitized.lower()
        if any(word in lowered for word in self.settings.blocked_name_words):
            logger.warning(f"Blocked player name rejected: {sanitized}")
            raise ValidationError(
                ErrorCode.PLAYER_NAME_BLOCKED,
                "Player name contains inappropriate content"
            )

        return sanitized

    def validate_vote(self, vote: Any) -> str:
        """Validate that a vote is one of the deck's card values."""
        if not vote or not isinstance(vote, str):
            raise ValidationError(ErrorCode.MISSING_VOTE, "Vote is required")

        card_values = self.settings.card_values
        if vote not in card_values:
            raise ValidationError(
                ErrorCode.INVALID_VOTE,
                f"Invalid vote value. Must be one of: {', '.join(card_values)}",
                {"allowed_values": list(card_values)}
            )

        return vote

    def validate_story(self, story: Any) -> str:
        """
        Validate and sanitize the story text.

        Returns:
            Sanitized story

        Raises:
            ValidationError: If the story is missing, empty after sanitization
                or longer than the maximum story length
        """
        if not story or not isinstance(story, str):
            raise ValidationError(ErrorCode.MISSING_STORY, "Story is required")

        sanitized = self.sanitize_string(story)

        if not sanitized:
            raise ValidationError(
                ErrorCode.INVALID_STORY,
                "Story cannot be empty after sanitization"
            )

        max_length = self.settings.max_story_length
        if len(sanitized) > max_length:
            raise ValidationError(
                ErrorCode.STORY_TOO_LONG,
                f"Story must be {max_length} characters or less",
                {"max_length": max_length, "actual_length": len(sanitized)}
            )

        return sanitized

    def validate_vector(self, value: Any, limit: float, code: ErrorCode, field_name: str) -> Vector3:
        """
        Validate a ``{x, y, z}`` mapping of finite numbers within ``±limit``.

        Args:
            value: Raw mapping from the client
            limit: Maximum absolute value per coordinate
            code: Error code to raise on failure
            field_name: Name used in error messages

        Returns:
            Vector3 with float coordinates
        """
        if not isinstance(value, dict):
            raise ValidationError(code, f"{field_name.capitalize()} is required")

        coordinates = []
        for axis in ('x', 'y', 'z'):
            coordinate = value.get(axis)
            if isinstance(coordinate, bool) or not isinstance(coordinate, (int, float)) \
                    or not math.isfinite(coordinate):
                raise ValidationError(
                    code,
                    f"{field_name.capitalize()} coordinates must be numbers",
                    {"axis": axis}
                )
            if abs(coordinate) > limit:
                raise ValidationError(
                    code,
                    f"{field_name.capitalize()} coordinates are out of bounds",
                    {"axis": axis, "limit": limit}
                )
            coordinates.append(float(coordinate))

        return Vector3(*coordinates)

    def validate_timer_duration(self, duration: Any) -> int:
        """
        Validate a countdown length in whole seconds.

        A missing duration falls back to the configured default.
        """
        if duration is None:
            return self.settings.timer_duration

        min_duration, max_duration = self.settings.timer_bounds
        if isinstance(duration, bool) or not isinstance(duration, int) \
                or duration < min_duration or duration > max_duration:
            raise ValidationError(
                ErrorCode.INVALID_TIMER_DURATION,
                f"Timer duration must be between {min_duration} and {max_duration} seconds",
                {"min_duration": min_duration, "max_duration": max_duration}
            )

        return duration

    # Typed request builders

    def parse_join_room(self, data: Any) -> JoinRoomRequest:
        data = self.validate_socket_data(data, ['playerId', 'playerName'])
        return JoinRoomRequest(
            player_id=self.validate_player_id(data['playerId']),
            player_name=self.validate_player_name(data['playerName'])
        )

    def parse_cast_vote(self, data: Any) -> CastVoteRequest:
        data = self.validate_socket_data(data, ['playerId', 'vote'])
        return CastVoteRequest(
            player_id=self.validate_player_id(data['playerId']),
            vote=self.validate_vote(data['vote'])
        )

    def parse_update_story(self, data: Any) -> UpdateStoryRequest:
        data = self.validate_socket_data(data, ['story'])
        return UpdateStoryRequest(story=self.validate_story(data['story']))

    def parse_start_timer(self, data: Any) -> StartTimerRequest:
        data = self.validate_socket_data(data)
        return StartTimerRequest(duration=self.validate_timer_duration(data.get('duration')))

    def parse_player_move(self, data: Any) -> PlayerMoveRequest:
        """Build a PlayerMoveRequest from a ``player-move`` payload."""
        data = self.validate_socket_data(data, ['playerId', 'position', 'rotation'])
        return PlayerMoveRequest(
            player_id=self.validate_player_id(data['playerId']),
            position=self.validate_vector(
                data['position'], self.settings.max_position_coordinate,
                ErrorCode.INVALID_POSITION, 'position'
            ),
            rotation=self.validate_vector(
                data['rotation'], self.settings.max_rotation_coordinate,
                ErrorCode.INVALID_ROTATION, 'rotation'
            )
        )
