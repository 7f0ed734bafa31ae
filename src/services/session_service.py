"""
Session Service - Maps Socket.IO connections to joined players.

This service handles:
- Session creation when a connection joins the room
- Socket ID to player mapping
- Idempotent session removal on leave and disconnect
"""

import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class SessionService:
    """Manages player sessions and Socket.IO connections."""

    def __init__(self):
        """Initialize the session service."""
        # socket_id -> {'player_id', 'player_name'}
        self._player_sessions: Dict[str, Dict[str, str]] = {}
        logger.info("SessionService initialized")

    def create_session(self, socket_id: str, player_id: str, player_name: str) -> None:
        """Create or update a player session.

        Args:
            socket_id: Socket.IO connection ID
            player_id: Unique player identifier
            player_name: Player's display name
        """
        self._player_sessions[socket_id] = {
            'player_id': player_id,
            'player_name': player_name
        }
        logger.debug(f"Created session for player {player_name} ({player_id})")

    def get_session(self, socket_id: str) -> Optional[Dict[str, str]]:
        """Get player session information by socket ID.

        Args:
            socket_id: Socket.IO connection ID

        Returns:
            Dict with session info or None if not found
        """
        return self._player_sessions.get(socket_id)

    def has_session(self, socket_id: str) -> bool:
        return socket_id in self._player_sessions

    def remove_session(self, socket_id: str) -> Optional[Dict[str, str]]:
        """Remove a player session.

        Only the first caller for a given socket receives the session; later
        calls return None, which keeps leave processing to exactly once.

        Args:
            socket_id: Socket.IO connection ID

        Returns:
            The removed session info or None if not found
        """
        session_info = self._player_sessions.pop(socket_id, None)
        if session_info:
            logger.debug(f"Removed session for player {session_info['player_name']} ({session_info['player_id']})")
        return session_info

    def get_sessions_count(self) -> int:
        """Get the total number of active sessions."""
        return len(self._player_sessions)

    def clear(self) -> None:
        """Drop all sessions (mainly for testing)."""
        self._player_sessions.clear()
