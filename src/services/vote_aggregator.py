"""
Vote Aggregator for MetaPoker

Turns the votes of one round into the summary shown when cards are revealed.
Pure functions only: no room access, no locking, no emission.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from src.config.game_settings import UNKNOWN_CARD


@dataclass
class VoteSummary:
    """Aggregated statistics for one round."""
    vote_counts: Dict[str, int] = field(default_factory=dict)
    numeric_values: List[int] = field(default_factory=list)
    average: float = 0
    most_common: Optional[str] = None
    total_votes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'voteCounts': dict(self.vote_counts),
            'numericValues': list(self.numeric_values),
            'average': self.average,
            'mostCommon': self.most_common,
            'totalVotes': self.total_votes
        }


def round_half_up(value: float, digits: int = 1) -> float:
    """Round to ``digits`` decimals with halves rounded away from zero for positives."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _parse_numeric(value: str) -> Optional[int]:
    if value == UNKNOWN_CARD:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def summarize(votes: Iterable[Mapping[str, Any]]) -> VoteSummary:
    """
    Summarize a round's votes.

    Args:
        votes: Vote records as produced by ``GameRoom.get_all_votes()``; each
            record carries at least a ``vote`` key. Order matters: it decides
            the ``most_common`` tie-break.

    Returns:
        VoteSummary with counts, numeric values, average, mode and total
    """
    vote_counts: Dict[str, int] = {}
    numeric_values: List[int] = []
    total = 0

    for record in votes:
        value = record['vote']
        vote_counts[value] = vote_counts.get(value, 0) + 1
        total += 1

        numeric = _parse_numeric(value)
        if numeric is not None:
            numeric_values.append(numeric)

    if numeric_values:
        average = round_half_up(sum(numeric_values) / len(numeric_values))
    else:
        average = 0

    # max() keeps the first key reaching the top count, in first-seen order
    most_common = max(vote_counts, key=vote_counts.get) if vote_counts else None

    return VoteSummary(
        vote_counts=vote_counts,
        numeric_values=numeric_values,
        average=average,
        most_common=most_common,
        total_votes=total
    )
