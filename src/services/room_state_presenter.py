"""
Room State Presenter - Canonical payload shapes for room broadcasts.

Every payload is built from a single call into the game room, so callers that
already hold the room lock get a snapshot consistent with the change they
just made. Emission happens elsewhere, after the lock is released.
"""

import logging
from typing import Any, Dict, List

from src.services.vote_aggregator import VoteSummary

logger = logging.getLogger(__name__)


class RoomStatePresenter:
    """Transforms game room state into client payloads."""

    def __init__(self, game_room):
        """Initialize the room state presenter.

        Args:
            game_room: The GameRoom whose state is presented
        """
        self.game_room = game_room

    def create_game_state(self) -> Dict[str, Any]:
        """Full state sent to a joining or requesting client."""
        return self.game_room.snapshot()

    def create_player_joined(self, player_id: str, player_name: str) -> Dict[str, Any]:
        return {
            'playerId': player_id,
            'playerName': player_name,
            'players': self.game_room.get_players()
        }

    def create_player_left(self, player_id: str, player_name: str) -> Dict[str, Any]:
        return {
            'playerId': player_id,
            'playerName': player_name,
            'players': self.game_room.get_players()
        }

    def create_vote_cast(self, player_id: str) -> Dict[str, Any]:
        """Vote notification. The vote value itself stays hidden until reveal."""
        return {
            'playerId': player_id,
            'players': self.game_room.get_players(),
            'gameState': self.game_room.phase.value
        }

    def create_votes_revealed(self, summary: VoteSummary, votes: List[Dict[str, str]] = None) -> Dict[str, Any]:
        """Reveal payload.

        Args:
            summary: Summary of the round
            votes: Vote records; read from the room when omitted
        """
        if votes is None:
            votes = self.game_room.get_all_votes()
        return {
            'votes': votes,
            'summary': summary.to_dict()
        }

    def create_game_reset(self) -> Dict[str, Any]:
        return {
            'gameState': self.game_room.phase.value,
            'players': self.game_room.get_players()
        }

    def create_story_updated(self, story: str) -> Dict[str, Any]:
        return {'story': story}

    def create_timer_started(self, duration: int, time_left: int) -> Dict[str, Any]:
        return {'duration': duration, 'timeLeft': time_left}

    def create_timer_update(self, time_left: int) -> Dict[str, Any]:
        return {'timeLeft': time_left}

    def create_player_moved(self, player_id: str, position: Dict[str, float],
                            rotation: Dict[str, float]) -> Dict[str, Any]:
        return {
            'playerId': player_id,
            'position': position,
            'rotation': rotation
        }
