"""
Unit tests for vote summarization.
"""

from src.services.vote_aggregator import VoteSummary, round_half_up, summarize


def votes(*values):
    return [{'playerId': f'player_{i:09d}', 'vote': value, 'playerName': f'P{i}'}
            for i, value in enumerate(values)]


class TestSummarize:

    def test_average_of_numeric_votes(self):
        summary = summarize(votes('5', '8'))
        assert summary.average == 6.5
        assert summary.numeric_values == [5, 8]

    def test_unknown_card_excluded_from_average(self):
        summary = summarize(votes('3', '?', '5'))
        assert summary.average == 4.0
        assert summary.total_votes == 3
        assert summary.vote_counts == {'3': 1, '?': 1, '5': 1}

    def test_only_unknown_cards(self):
        summary = summarize(votes('?', '?'))
        assert summary.average == 0
        assert summary.numeric_values == []
        assert summary.most_common == '?'
        assert summary.total_votes == 2

    def test_empty_round(self):
        summary = summarize([])
        assert summary == VoteSummary()
        assert summary.most_common is None
        assert summary.total_votes == 0

    def test_average_rounds_half_up(self):
        # 1, 2, 2, 2 -> 1.75 -> 1.8
        assert summarize(votes('1', '2', '2', '2')).average == 1.8
        # 1, 1, 2 -> 1.333 -> 1.3
        assert summarize(votes('1', '1', '2')).average == 1.3

    def test_most_common_picks_highest_count(self):
        summary = summarize(votes('3', '8', '8', '5'))
        assert summary.most_common == '8'

    def test_most_common_tie_goes_to_first_seen(self):
        assert summarize(votes('8', '3', '3', '8')).most_common == '8'
        assert summarize(votes('3', '8', '8', '3')).most_common == '3'

    def test_deterministic(self):
        round_votes = votes('1', '21', '?', '13', '13')
        assert summarize(round_votes) == summarize(round_votes)

    def test_wire_form(self):
        assert summarize(votes('5', '8')).to_dict() == {
            'voteCounts': {'5': 1, '8': 1},
            'numericValues': [5, 8],
            'average': 6.5,
            'mostCommon': '5',
            'totalVotes': 2
        }


class TestRoundHalfUp:

    def test_rounds_half_away_from_even(self):
        assert round_half_up(0.25) == 0.3
        assert round_half_up(2.45) == 2.5

    def test_keeps_exact_values(self):
        assert round_half_up(6.5) == 6.5
        assert round_half_up(3) == 3.0
