"""Elo Rating Service

Relative skill rating from the sequence of played matches:

 - Unknown teams start at the initial rating.
 - Home expectation is the standard logistic curve with base 400.
 - Actual result is 1 / 0.5 / 0 for win / draw / loss.
 - Decisive results are scaled by the goal margin
   (``min(3, 1 + 0.5 * (|diff| - 1))``), draws by 1.
 - The delta is added to home and subtracted from away, so every match is
   zero-sum.

Matches are processed in the order given. Callers sort by match id; ids are
not chronological but provide a stable order.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from config import settings
from domain.models import EloResult, MatchResult, TeamElo, TeamStats

__all__ = ["compute_elo", "expected_score", "margin_multiplier", "EloRatingService"]


def expected_score(rating: float, opponent: float) -> float:
    return 1.0 / (1.0 + 10 ** ((opponent - rating) / 400.0))


def margin_multiplier(goal_diff: int) -> float:
    margin = abs(goal_diff)
    if margin == 0:
        return 1.0
    return min(3.0, 1.0 + 0.5 * (margin - 1))


def compute_elo(
    matches: Iterable[MatchResult],
    initial_rating: float = settings.ELO_INITIAL_RATING,
    k_factor: float = settings.ELO_K_FACTOR,
) -> Dict[str, EloResult]:
    ratings: Dict[str, float] = {}
    games: Dict[str, int] = {}

    for m in matches:
        if not m.played():
            continue
        home_id = m.home_team_id.strip()
        away_id = m.away_team_id.strip()
        if not home_id or not away_id:
            continue

        rh = ratings.get(home_id, initial_rating)
        ra = ratings.get(away_id, initial_rating)
        expected = expected_score(rh, ra)

        diff = m.home_score - m.away_score
        if diff > 0:
            actual = 1.0
        elif diff < 0:
            actual = 0.0
        else:
            actual = 0.5

        delta = k_factor * margin_multiplier(diff) * (actual - expected)
        ratings[home_id] = rh + delta
        ratings[away_id] = ra - delta
        games[home_id] = games.get(home_id, 0) + 1
        games[away_id] = games.get(away_id, 0) + 1

    return {
        team_id: EloResult(rating=rating, games=games[team_id])
        for team_id, rating in ratings.items()
    }


class EloRatingService:
    """Holds rating parameters and builds leaderboards over scraped teams."""

    def __init__(
        self,
        initial_rating: float = settings.ELO_INITIAL_RATING,
        k_factor: float = settings.ELO_K_FACTOR,
    ) -> None:
        self.initial_rating = initial_rating
        self.k_factor = k_factor

    def compute(self, matches: Iterable[MatchResult]) -> Dict[str, EloResult]:
        ordered = sorted(matches, key=lambda m: m.id)
        return compute_elo(ordered, self.initial_rating, self.k_factor)

    def rating_for(self, results: Dict[str, EloResult], team_id: str) -> EloResult:
        return results.get(team_id.strip(), EloResult(rating=self.initial_rating, games=0))

    def leaderboard(
        self,
        teams: Iterable[TeamStats],
        matches: Iterable[MatchResult] = (),
        results: Optional[Dict[str, EloResult]] = None,
    ) -> List[TeamElo]:
        """Teams ordered by rating desc, then goal diff, points, name."""
        if results is None:
            results = self.compute(matches)
        board = []
        for team in teams:
            elo = self.rating_for(results, team.team_id)
            board.append(TeamElo(team=team, elo=elo.rating, games=elo.games))
        board.sort(
            key=lambda e: (-e.elo, -e.team.goal_diff, -e.team.points, e.team.team_name)
        )
        return board
