"""Fold played matches back into team win/draw/loss/goal totals.

The standings table and the cross table can disagree (late forfeits, table
caches on the portal side), so totals derived from matches replace whatever
the table reported whenever a team has at least one played match.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List

from domain.models import MatchResult, TeamStats


@dataclass(slots=True)
class _Totals:
    games: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0


def build_aggregate_map(matches: Iterable[MatchResult]) -> Dict[str, _Totals]:
    totals: Dict[str, _Totals] = {}
    for match in matches:
        if not match.played():
            continue
        home = totals.setdefault(match.home_team_id.strip(), _Totals())
        away = totals.setdefault(match.away_team_id.strip(), _Totals())

        home.games += 1
        away.games += 1
        home.goals_for += match.home_score
        home.goals_against += match.away_score
        away.goals_for += match.away_score
        away.goals_against += match.home_score

        if match.home_score > match.away_score:
            home.wins += 1
            away.losses += 1
        elif match.home_score < match.away_score:
            home.losses += 1
            away.wins += 1
        else:
            home.draws += 1
            away.draws += 1
    return totals


def apply_match_aggregates(
    teams: Iterable[TeamStats], matches: Iterable[MatchResult]
) -> List[TeamStats]:
    """Return copies of ``teams`` with games/goals/W-D-L taken from ``matches``."""
    totals = build_aggregate_map(matches)
    updated: List[TeamStats] = []
    for team in teams:
        agg = totals.get(team.team_id.strip())
        if agg is None:
            updated.append(team)
            continue
        updated.append(
            replace(
                team,
                games=agg.games,
                wins=agg.wins,
                draws=agg.draws,
                losses=agg.losses,
                goals_for=agg.goals_for,
                goals_against=agg.goals_against,
                goal_diff=agg.goals_for - agg.goals_against,
            )
        )
    return updated
