"""
Game Room for MetaPoker

The single authoritative room: participants, the current round's votes, the
lifecycle phase, the story under estimation and the countdown state.

Every public method takes the room lock, so each call is atomic on its own.
Handlers that need several steps to observe one consistent state (cast a
vote, check whether everyone voted, reveal) wrap them in ``operation()``.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from src.config.game_settings import get_game_settings
from src.core.errors import DuplicatePlayerError, RoomFullError
from src.core.game_phases import GamePhase
from src.services.vote_aggregator import VoteSummary, summarize
from src.utils.timestamps import utc_now, utc_timestamp

logger = logging.getLogger(__name__)


def default_spawn_position() -> Dict[str, float]:
    return {'x': 0.0, 'y': 1.6, 'z': 3.0}


def default_rotation() -> Dict[str, float]:
    return {'x': 0.0, 'y': 0.0, 'z': 0.0}


@dataclass
class Participant:
    """A connected player. Owned exclusively by the room."""
    player_id: str
    player_name: str
    socket_id: Optional[str] = None
    has_voted: bool = False
    position: Dict[str, float] = field(default_factory=default_spawn_position)
    rotation: Dict[str, float] = field(default_factory=default_rotation)
    joined_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'playerId': self.player_id,
            'playerName': self.player_name,
            'hasVoted': self.has_voted,
            'position': dict(self.position),
            'rotation': dict(self.rotation),
            'joinedAt': utc_timestamp(self.joined_at)
        }


class GameRoom:
    """Room state machine with thread-safe operations."""

    def __init__(self, game_settings=None):
        settings = game_settings or get_game_settings()
        self.max_players = settings.max_players
        self.timer_duration = settings.timer_duration

        self._participants: Dict[str, Participant] = {}
        self._votes: Dict[str, str] = {}
        self.phase = GamePhase.WAITING
        self.story = settings.default_story
        self.time_left = 0
        self.timer_active = False
        self._timer_generation = 0
        self._lock = threading.RLock()

    @contextmanager
    def operation(self) -> Iterator['GameRoom']:
        """Hold the room lock across a compound operation."""
        with self._lock:
            yield self

    # Membership

    def join(self, player_id: str, player_name: str, socket_id: Optional[str] = None) -> Participant:
        """
        Add a participant to the room.

        Args:
            player_id: Validated player identifier
            player_name: Sanitized display name
            socket_id: Socket.IO session id of the player's connection

        Returns:
            The new Participant

        Raises:
            DuplicatePlayerError: If the id is already in the room
            RoomFullError: If the room holds the maximum number of players
        """
        with self._lock:
            if player_id in self._participants:
                raise DuplicatePlayerError(player_id)
            if len(self._participants) >= self.max_players:
                raise RoomFullError(self.max_players)

            participant = Participant(player_id=player_id, player_name=player_name, socket_id=socket_id)
            self._participants[player_id] = participant
            logger.info(f"Player added: {player_name} ({player_id})")
            return participant

    def leave(self, player_id: str) -> Optional[Participant]:
        """
        Remove a participant and any vote it cast.

        Does not re-evaluate whether everyone else has voted; that check only
        runs when a vote is cast.

        Returns:
            The removed Participant, or None if the id was not in the room
        """
        with self._lock:
            participant = self._participants.pop(player_id, None)
            if participant is None:
                logger.debug(f"Leave ignored for unknown player {player_id}")
                return None
            self._votes.pop(player_id, None)
            logger.info(f"Player removed: {participant.player_name} ({player_id})")
            return participant

    def has_player(self, player_id: str) -> bool:
        with self._lock:
            return player_id in self._participants

    def get_player(self, player_id: str) -> Optional[Participant]:
        with self._lock:
            return self._participants.get(player_id)

    @property
    def player_count(self) -> int:
        with self._lock:
            return len(self._participants)

    @property
    def vote_count(self) -> int:
        with self._lock:
            return len(self._votes)

    # Voting

    def cast_vote(self, player_id: str, value: str) -> bool:
        """
        Record a vote. A later vote from the same player overwrites the earlier one.

        Returns:
            True if recorded, False if the player is not in the room
        """
        with self._lock:
            participant = self._participants.get(player_id)
            if participant is None:
                logger.debug(f"Vote ignored for unknown player {player_id}")
                return False

            self._votes[player_id] = value
            participant.has_voted = True
            if self.phase == GamePhase.WAITING:
                self.phase = GamePhase.VOTING
            logger.info(f"Vote cast: {participant.player_name} voted {value}")
            return True

    def all_voted(self) -> bool:
        """True iff the room is non-empty and every participant has voted."""
        with self._lock:
            return bool(self._participants) and all(
                participant.has_voted for participant in self._participants.values()
            )

    def get_all_votes(self) -> List[Dict[str, str]]:
        """Votes of the current round in the order they were first cast."""
        with self._lock:
            votes = []
            for player_id, value in self._votes.items():
                participant = self._participants.get(player_id)
                votes.append({
                    'playerId': player_id,
                    'vote': value,
                    'playerName': participant.player_name if participant else 'Unknown'
                })
            return votes

    def reveal(self) -> VoteSummary:
        """
        Conclude the round: stop the countdown and summarize the votes.

        Calling it again while revealed recomputes the same summary.
        """
        with self._lock:
            self.phase = GamePhase.REVEALED
            self.stop_timer()
            summary = summarize(self.get_all_votes())
            logger.info(f"Votes revealed: {summary.total_votes} votes, average {summary.average}")
            return summary

    def reset(self) -> None:
        """Clear the round and prime the room for the next one."""
        with self._lock:
            self._votes.clear()
            for participant in self._participants.values():
                participant.has_voted = False
            self.phase = GamePhase.VOTING
            logger.info("Votes reset, new round started")

    # Story

    def set_story(self, text: str) -> None:
        with self._lock:
            self.story = text
            logger.info(f"Story updated: {text}")

    # Countdown

    def start_timer(self, duration: Optional[int] = None) -> int:
        """
        Start (or restart) the countdown.

        Each start issues a new generation number. Ticks carrying an older
        generation are ignored, so a restarted countdown never decrements twice.

        Returns:
            The generation number the new cadence must pass to ``tick()``
        """
        with self._lock:
            duration = self.timer_duration if duration is None else duration
            self._timer_generation += 1
            self.time_left = duration
            self.phase = GamePhase.VOTING
            self.timer_active = True
            logger.info(f"Timer started: {duration} seconds")
            return self._timer_generation

    def stop_timer(self) -> None:
        """Halt the countdown, keeping the remaining time as-is."""
        with self._lock:
            if self.timer_active:
                logger.debug(f"Timer stopped with {self.time_left} seconds left")
            self.timer_active = False

    def tick(self, generation: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """
        Advance the countdown by one second.

        Args:
            generation: Generation returned by ``start_timer()``; None means current

        Returns:
            None if the countdown is inactive or the generation is stale.
            Otherwise a dict with ``timeLeft`` and ``revealed``; when the
            countdown reached zero it also carries ``votes`` and ``summary``.
        """
        with self._lock:
            if not self.timer_active:
                return None
            if generation is not None and generation != self._timer_generation:
                return None

            self.time_left -= 1
            if self.time_left > 0:
                return {'timeLeft': self.time_left, 'revealed': False}

            self.time_left = 0
            summary = self.reveal()
            return {
                'timeLeft': 0,
                'revealed': True,
                'votes': self.get_all_votes(),
                'summary': summary
            }

    # Movement

    def update_position(self, player_id: str, position: Dict[str, float], rotation: Dict[str, float]) -> bool:
        """
        Overwrite a participant's avatar position and rotation.

        Returns:
            True if updated, False if the player is not in the room
        """
        with self._lock:
            participant = self._participants.get(player_id)
            if participant is None:
                logger.debug(f"Move ignored for unknown player {player_id}")
                return False
            participant.position = dict(position)
            participant.rotation = dict(rotation)
            return True

    # Snapshots

    def get_players(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [participant.to_dict() for participant in self._participants.values()]

    def snapshot(self) -> Dict[str, Any]:
        """Full room state, taken atomically."""
        with self._lock:
            return {
                'gameState': self.phase.value,
                'story': self.story,
                'timeLeft': self.time_left,
                'timerActive': self.timer_active,
                'timerDuration': self.timer_duration,
                'players': self.get_players()
            }
