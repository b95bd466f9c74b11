"""Power Metric Engine

Per team with at least one game:

 - offense   = goals_for / games
 - defense   = 1 - goals_against / games
 - dominance = (goals_for - goals_against) / games

Each dimension is min-max normalized across the teams that played, and the
power score is the weighted sum of the normalized dimensions. Teams without
games stay in the output with zero metrics so they never stretch the range
used for the playing teams.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from domain.models import MetricSet, NormalizedSet, TeamStats

__all__ = ["PowerWeights", "DEFAULT_WEIGHTS", "compute_metrics", "calculate_raw", "normalize"]


@dataclass(frozen=True, slots=True)
class PowerWeights:
    offense: float = 0.4
    defense: float = 0.4
    dominance: float = 0.2


DEFAULT_WEIGHTS = PowerWeights()


def calculate_raw(team: TeamStats) -> tuple[float, float, float]:
    if team.games <= 0:
        return 0.0, 0.0, 0.0
    games = float(team.games)
    offense = team.goals_for / games
    defense = 1.0 - team.goals_against / games
    dominance = (team.goals_for - team.goals_against) / games
    return offense, defense, dominance


def normalize(values: Sequence[float], valid: Sequence[bool]) -> List[float]:
    """Min-max normalize ``values`` over the entries flagged ``valid``.

    Invalid entries come back as 0.0. When every valid value is equal
    (including a single valid entry) all of them map to 0.5.
    """
    considered = [v for v, ok in zip(values, valid) if ok]
    if not considered:
        return [0.0] * len(values)
    lo, hi = min(considered), max(considered)
    span = hi - lo
    out: List[float] = []
    for v, ok in zip(values, valid):
        if not ok:
            out.append(0.0)
        elif span == 0:
            out.append(0.5)
        else:
            out.append((v - lo) / span)
    return out


def compute_metrics(
    teams: Iterable[TeamStats], weights: PowerWeights = DEFAULT_WEIGHTS
) -> Dict[str, MetricSet]:
    team_list = list(teams)
    raw = [calculate_raw(t) for t in team_list]
    valid = [t.games > 0 for t in team_list]

    norm_offense = normalize([r[0] for r in raw], valid)
    norm_defense = normalize([r[1] for r in raw], valid)
    norm_dominance = normalize([r[2] for r in raw], valid)

    result: Dict[str, MetricSet] = {}
    for i, team in enumerate(team_list):
        offense, defense, dominance = raw[i]
        normalized = NormalizedSet(
            offense=norm_offense[i], defense=norm_defense[i], dominance=norm_dominance[i]
        )
        power = 0.0
        if valid[i]:
            power = (
                weights.offense * normalized.offense
                + weights.defense * normalized.defense
                + weights.dominance * normalized.dominance
            )
        result[team.team_id] = MetricSet(
            offense=offense,
            defense=defense,
            dominance=dominance,
            normalized=normalized,
            power_score=power,
        )
    return result
