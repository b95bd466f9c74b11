"""Derived read models over a ``SnapshotRepository``.

All functions are pure: they read the repository once per call and return
fresh structures owned by the caller. Metrics and ratings are recomputed on
every call, nothing is cached.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from config import settings
from domain.models import GroupDetail, GroupSnapshot, MatchResult, MetricSet, TeamElo, TeamPower
from services.elo_service import EloRatingService
from services.grouping_service import Recommendation, balance
from services.power_metrics import DEFAULT_WEIGHTS, PowerWeights, compute_metrics
from services.snapshot_repository import SnapshotRepository

__all__ = [
    "normalize_group_id",
    "group_detail",
    "overall",
    "overall_elo",
    "simple_recommendation",
    "filter_team_matches",
]


def normalize_group_id(value: str) -> str:
    """Accept ``2``, ``group2`` or ``Group2`` for the configured id ``group2``."""
    value = value.strip().lower()
    if not value:
        return ""
    if value.startswith("group"):
        return value
    if value.isdigit():
        return "group" + value
    return value


def _group_metric_map(snaps: Iterable[GroupSnapshot], weights: PowerWeights) -> Dict[str, Dict[str, MetricSet]]:
    return {snap.config.id: compute_metrics(snap.teams, weights) for snap in snaps}


def group_detail(
    repo: SnapshotRepository, group_id: str, weights: PowerWeights = DEFAULT_WEIGHTS
) -> Optional[GroupDetail]:
    group_id = normalize_group_id(group_id)
    snaps = repo.snapshots()
    snap = next((s for s in snaps if s.config.id == group_id), None)
    if snap is None:
        return None
    teams = sorted(
        snap.teams, key=lambda t: (t.rank, -t.goal_diff, -t.points, -t.goals_for)
    )
    group_metrics = compute_metrics(teams, weights)
    overall_metrics = compute_metrics([t for s in snaps for t in s.teams], weights)
    return GroupDetail(
        summary=snap.summary(),
        teams=[
            TeamPower(
                team=t,
                group_metrics=group_metrics.get(t.team_id, MetricSet()),
                overall_metrics=overall_metrics.get(t.team_id, MetricSet()),
            )
            for t in teams
        ],
    )


def _team_powers(repo: SnapshotRepository, weights: PowerWeights) -> List[TeamPower]:
    snaps = repo.snapshots()
    teams = [t for snap in snaps for t in snap.teams]
    overall_metrics = compute_metrics(teams, weights)
    group_metrics = _group_metric_map(snaps, weights)
    return [
        TeamPower(
            team=t,
            group_metrics=group_metrics.get(t.group_id, {}).get(t.team_id, MetricSet()),
            overall_metrics=overall_metrics.get(t.team_id, MetricSet()),
        )
        for t in teams
    ]


def overall(repo: SnapshotRepository, weights: PowerWeights = DEFAULT_WEIGHTS) -> List[TeamPower]:
    powers = _team_powers(repo, weights)
    powers.sort(
        key=lambda p: (
            -p.overall_metrics.power_score,
            -p.team.goal_diff,
            -p.team.points,
            -p.team.goals_for,
        )
    )
    return powers


def overall_elo(
    repo: SnapshotRepository,
    initial_rating: float = settings.ELO_INITIAL_RATING,
    k_factor: float = settings.ELO_K_FACTOR,
) -> List[TeamElo]:
    snaps = repo.snapshots()
    matches = [m for snap in snaps for m in snap.matches]
    teams = [t for snap in snaps for t in snap.teams]
    return EloRatingService(initial_rating, k_factor).leaderboard(teams, matches)


def simple_recommendation(
    repo: SnapshotRepository,
    group_count: int,
    weights: PowerWeights = DEFAULT_WEIGHTS,
    *,
    now: Optional[datetime] = None,
) -> Recommendation:
    powers = _team_powers(repo, weights)
    powers.sort(
        key=lambda p: (
            -p.overall_metrics.power_score,
            -p.team.goal_diff,
            -p.team.points,
            p.team.team_name,
        )
    )
    group_count = max(1, group_count)
    return Recommendation(
        generated_at=now or datetime.now(timezone.utc),
        total_teams=len(powers),
        group_count=group_count,
        groups=balance(powers, group_count),
    )


def filter_team_matches(matches: Iterable[MatchResult], team_id: str) -> List[MatchResult]:
    team_id = team_id.strip()
    return [m for m in matches if m.involves(team_id)]
