"""
Tests for card-based suspension rules.
Run with: pytest tests/test_suspension.py -v
"""

import pytest

from backend.core.suspension import (
    REASON_ACCUMULATED,
    REASON_RED_CARD,
    STATUS_SUSPENDED,
    CardRecord,
    evaluate_suspension,
)


def _rec(jornada, yellow=0, red=0):
    return CardRecord(player_id=1, season=2025, jornada=jornada, yellow_cards=yellow, red_cards=red)


class TestRedCard:

    def test_red_in_latest_matchday_suspends(self):
        result = evaluate_suspension([_rec(10, red=1), _rec(9)])
        assert result.status == STATUS_SUSPENDED
        assert result.reason == REASON_RED_CARD

    def test_red_in_earlier_matchday_served(self):
        # Played jornada 11 after the red in 10
        assert evaluate_suspension([_rec(11), _rec(10, red=1)]) is None

    def test_unordered_input_ranked_by_jornada(self):
        result = evaluate_suspension([_rec(3), _rec(12, red=1), _rec(7)])
        assert result.reason == REASON_RED_CARD

    def test_red_takes_priority_over_yellows(self):
        records = [_rec(10, yellow=1, red=1)] + [_rec(j, yellow=1) for j in range(6, 10)]
        assert evaluate_suspension(records).reason == REASON_RED_CARD


class TestAccumulatedYellows:

    def test_five_yellows_in_last_five_suspends(self):
        records = [_rec(j, yellow=1) for j in range(1, 6)]
        result = evaluate_suspension(records)
        assert result.status == STATUS_SUSPENDED
        assert result.reason == REASON_ACCUMULATED

    def test_four_yellows_not_enough(self):
        records = [_rec(j, yellow=1) for j in range(1, 5)] + [_rec(5)]
        assert evaluate_suspension(records) is None

    def test_only_five_most_recent_count(self):
        # Yellows in 1..4 fall outside the window once 5..9 are recorded
        records = [_rec(j, yellow=1) for j in range(1, 5)] + [_rec(j) for j in range(5, 10)]
        assert evaluate_suspension(records) is None

    def test_multiple_yellows_per_matchday(self):
        assert evaluate_suspension([_rec(8, yellow=2), _rec(7, yellow=3)]).reason == REASON_ACCUMULATED

    @pytest.mark.parametrize("records", [
        [],
        [_rec(1)],
        [_rec(4, yellow=1), _rec(3, yellow=1)],
    ])
    def test_clean_history_is_none(self, records):
        assert evaluate_suspension(records) is None
