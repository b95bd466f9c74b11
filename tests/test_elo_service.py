"""Tests for the Elo rating engine."""

import pytest

from services.elo_service import EloRatingService, compute_elo, expected_score, margin_multiplier
from tests.factories import make_match, make_team


def test_expected_score_equal_ratings():
    assert expected_score(1500, 1500) == pytest.approx(0.5)
    assert expected_score(1900, 1500) == pytest.approx(1 / (1 + 10 ** (-1)))


@pytest.mark.parametrize("diff,expected", [(0, 1.0), (1, 1.0), (-2, 1.5), (3, 2.0), (9, 3.0)])
def test_margin_multiplier(diff, expected):
    assert margin_multiplier(diff) == expected


def test_three_one_scenario():
    result = compute_elo([make_match("M1", "T1", "T2", 3, 1)])
    # expected 0.5, multiplier 1.5 -> delta 20 * 1.5 * 0.5
    assert result["T1"].rating == pytest.approx(1515.0)
    assert result["T2"].rating == pytest.approx(1485.0)
    assert result["T1"].games == result["T2"].games == 1


def test_ratings_are_zero_sum():
    matches = [
        make_match("M1", "T1", "T2", 5, 0),
        make_match("M2", "T2", "T3", 1, 1),
        make_match("M3", "T3", "T1", 2, 1),
    ]
    result = compute_elo(matches)
    total = sum(r.rating for r in result.values())
    assert total == pytest.approx(1500.0 * 3)


def test_not_played_and_anonymous_matches_are_skipped():
    matches = [
        make_match("M1", "T1", "T2", played=False),
        make_match("M2", "", "T2", 4, 0),
    ]
    assert compute_elo(matches) == {}


def test_leaderboard_orders_by_rating_and_defaults_unrated_teams():
    service = EloRatingService(initial_rating=1000.0, k_factor=10.0)
    teams = [make_team("T1", "B-Team"), make_team("T2", "Loser"), make_team("T3", "A-Team")]
    board = service.leaderboard(teams, [make_match("M1", "T1", "T2", 1, 0)])
    assert [e.team.team_id for e in board] == ["T1", "T3", "T2"]
    assert board[1].elo == 1000.0
    assert board[1].games == 0
    assert board[0].elo == pytest.approx(1005.0)


def test_service_sorts_matches_by_id():
    service = EloRatingService()
    a = [make_match("M2", "T1", "T2", 0, 1), make_match("M1", "T1", "T2", 2, 0)]
    assert service.compute(a) == compute_elo(sorted(a, key=lambda m: m.id))
