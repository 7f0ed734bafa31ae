"""
Game Action Handler

This module handles Socket.IO events that change the round: casting votes,
revealing, resetting, editing the story and starting the countdown.
"""

import logging
from flask import request

from src.core.errors import ErrorCode, ValidationError
from src.core.game_phases import GamePhase
from src.error_handler import with_error_handling
from src.services.rate_limit_service import prevent_event_overflow
from .base_handler import BaseGameHandler

logger = logging.getLogger(__name__)


class GameActionHandler(BaseGameHandler):
    """Handler for voting, reveal, reset, story and timer operations."""

    @prevent_event_overflow('cast-vote')
    @with_error_handling
    def handle_cast_vote(self, data):
        """
        Handle a vote from a player. Reveals automatically once everyone has voted.

        Expected data format:
        {
            'playerId': 'player_XXXXXXXXX',
            'vote': '5'
        }
        """
        self.log_handler_start('handle_cast_vote', data)

        vote_request = self.validation_service.parse_cast_vote(data)

        reveal_payload = None
        with self.game_room.operation():
            self.check_not_revealed()

            if not self.game_room.cast_vote(vote_request.player_id, vote_request.vote):
                return

            vote_payload = self.room_state_presenter.create_vote_cast(vote_request.player_id)

            if self.game_room.all_voted():
                summary = self.game_room.reveal()
                reveal_payload = self.room_state_presenter.create_votes_revealed(summary)

        self.metrics_service.record_vote()
        if reveal_payload is not None:
            self.metrics_service.record_game()

        self.log_handler_success('handle_cast_vote', f'Player {vote_request.player_id} voted')

        self.broadcast_service.broadcast_vote_cast(vote_payload)
        if reveal_payload is not None:
            logger.info('All players voted, revealing votes')
            self.broadcast_service.broadcast_votes_revealed(reveal_payload)

    @prevent_event_overflow('admin-reveal-votes')
    @with_error_handling
    def handle_admin_reveal_votes(self, data=None):
        """Reveal the votes on demand. Requires at least one vote in the round."""
        self.log_handler_start('handle_admin_reveal_votes', data)

        with self.game_room.operation():
            if self.game_room.vote_count == 0:
                raise ValidationError(
                    ErrorCode.NO_VOTES_CAST,
                    'No votes have been cast yet'
                )
            already_revealed = self.game_room.phase == GamePhase.REVEALED
            summary = self.game_room.reveal()
            reveal_payload = self.room_state_presenter.create_votes_revealed(summary)

        if not already_revealed:
            self.metrics_service.record_game()

        self.log_handler_success('handle_admin_reveal_votes')
        self.broadcast_service.broadcast_votes_revealed(reveal_payload)

    @prevent_event_overflow('reset-game')
    @with_error_handling
    def handle_reset_game(self, data=None):
        """Clear the round and start a new one."""
        self.log_handler_start('handle_reset_game', data)

        with self.game_room.operation():
            self.game_room.reset()
            reset_payload = self.room_state_presenter.create_game_reset()

        self.log_handler_success('handle_reset_game')
        self.broadcast_service.broadcast_game_reset(reset_payload)

    @prevent_event_overflow('update-story')
    @with_error_handling
    def handle_update_story(self, data):
        """
        Replace the story under estimation.

        Expected data format:
        {
            'story': 'As a user I want ...'
        }
        """
        self.log_handler_start('handle_update_story', data)

        story_request = self.validation_service.parse_update_story(data)

        with self.game_room.operation():
            self.game_room.set_story(story_request.story)
            story_payload = self.room_state_presenter.create_story_updated(self.game_room.story)

        self.log_handler_success('handle_update_story')
        self.broadcast_service.broadcast_story_updated(story_payload)

    @prevent_event_overflow('start-timer')
    @with_error_handling
    def handle_start_timer(self, data=None):
        """
        Start (or restart) the countdown.

        Expected data format:
        {
            'duration': 300    # optional, seconds
        }
        """
        self.log_handler_start('handle_start_timer', data)

        timer_request = self.validation_service.parse_start_timer(data)
        self.timer_service.start(timer_request.duration)

        self.log_handler_success(
            'handle_start_timer',
            f'Timer started for {timer_request.duration} seconds by {request.sid}'
        )
