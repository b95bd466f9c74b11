"""Balanced grouping recommendation.

Teams arrive ranked; each one goes into the first bucket that still has room
and holds no team of the same club. When every open bucket already has that
club, size balance wins and the team goes into the first open bucket.
The assignment is greedy: ties and clubs with more teams than buckets are
resolved by input order alone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Sequence, Set

from domain.models import EPOCH, TeamPower, isoformat_utc

__all__ = ["Group", "Recommendation", "balance", "base_club_key", "target_sizes"]

_ROMAN_SUFFIXES = frozenset({"i", "ii", "iii", "iv", "v", "vi", "vii", "viii", "ix", "x"})
_INT_RE = re.compile(r"[+-]?\d+")


@dataclass(frozen=True, slots=True)
class Group:
    index: int  # 1-based
    teams: List[TeamPower] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "teams": [t.as_dict() for t in self.teams]}


@dataclass(frozen=True, slots=True)
class Recommendation:
    generated_at: datetime = EPOCH
    total_teams: int = 0
    group_count: int = 0
    groups: List[Group] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": isoformat_utc(self.generated_at),
            "totalTeams": self.total_teams,
            "groupCount": self.group_count,
            "groups": [g.as_dict() for g in self.groups],
        }


def base_club_key(name: str) -> str:
    """Club identity of a team name: "FC Example II" and "FC Example 2" -> "fc example"."""
    tokens = name.strip().lower().split()
    if not tokens:
        return ""
    while len(tokens) > 1:
        last = tokens[-1]
        if last in _ROMAN_SUFFIXES or _INT_RE.fullmatch(last):
            tokens.pop()
            continue
        break
    return " ".join(tokens)


def target_sizes(total: int, group_count: int) -> List[int]:
    group_count = max(1, group_count)
    base, remainder = divmod(total, group_count)
    return [base + 1 if i < remainder else base for i in range(group_count)]


def balance(ranked_teams: Sequence[TeamPower], group_count: int) -> List[Group]:
    group_count = max(1, group_count)
    sizes = target_sizes(len(ranked_teams), group_count)
    buckets: List[List[TeamPower]] = [[] for _ in range(group_count)]
    clubs: List[Set[str]] = [set() for _ in range(group_count)]

    def assign(team: TeamPower, idx: int, key: str) -> None:
        buckets[idx].append(team)
        if key:
            clubs[idx].add(key)

    for team in ranked_teams:
        key = base_club_key(team.team.team_name)
        open_buckets = [i for i in range(group_count) if len(buckets[i]) < sizes[i]]
        for idx in open_buckets:
            if not key or key not in clubs[idx]:
                assign(team, idx, key)
                break
        else:
            assign(team, open_buckets[0], key)

    return [Group(index=i + 1, teams=teams) for i, teams in enumerate(buckets)]
