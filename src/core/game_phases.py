"""
Game Phase Enumeration

Defines the lifecycle phases of the estimation room.
"""

from enum import Enum


class GamePhase(Enum):
    """Game phase enumeration."""
    WAITING = "waiting"
    VOTING = "voting"
    REVEALED = "revealed"
