"""Domain models for the scoreboard scraping pipeline.

Records are frozen so a snapshot handed out by the repository can be shared
between concurrent readers without copying. ``as_dict`` produces the camelCase
JSON shape consumed by the web frontend and the export command.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

__all__ = [
    "EPOCH",
    "isoformat_utc",
    "GroupConfig",
    "TeamStats",
    "MatchStatus",
    "MatchResult",
    "GroupSnapshot",
    "GroupSummary",
    "NormalizedSet",
    "MetricSet",
    "TeamPower",
    "EloResult",
    "TeamElo",
    "GroupDetail",
]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def isoformat_utc(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class GroupConfig:
    id: str
    name: str
    staffel_id: str

    def as_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "staffelId": self.staffel_id}


@dataclass(frozen=True, slots=True)
class TeamStats:
    group_id: str
    group_name: str
    staffel_id: str
    team_id: str
    team_name: str
    logo_url: Optional[str] = None
    rank: int = 0
    games: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_diff: int = 0
    points: int = 0
    scraped_at: datetime = EPOCH

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "groupId": self.group_id,
            "groupName": self.group_name,
            "staffelId": self.staffel_id,
            "teamId": self.team_id,
            "teamName": self.team_name,
            "rank": self.rank,
            "games": self.games,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "goalsFor": self.goals_for,
            "goalsAgainst": self.goals_against,
            "goalDiff": self.goal_diff,
            "points": self.points,
            "scrapedAt": isoformat_utc(self.scraped_at),
        }
        if self.logo_url:
            data["logoUrl"] = self.logo_url
        return data


class MatchStatus(str, Enum):
    PLAYED = "played"  # verifiable score
    NOT_PLAYED = "not_played"  # Nichtantritt, Absetzung, undecodable score


@dataclass(frozen=True, slots=True)
class MatchResult:
    id: str
    group_id: str
    staffel_id: str
    home_team_id: str
    home_team: str
    away_team_id: str
    away_team: str
    home_score: int = 0
    away_score: int = 0
    status: MatchStatus = MatchStatus.NOT_PLAYED
    note: str = ""
    url: str = ""
    match_date: str = ""
    matchday_tag: str = ""

    def played(self) -> bool:
        return self.status is MatchStatus.PLAYED

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "groupId": self.group_id,
            "staffelId": self.staffel_id,
            "homeTeamId": self.home_team_id,
            "homeTeam": self.home_team,
            "awayTeamId": self.away_team_id,
            "awayTeam": self.away_team,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "status": self.status.value,
            "url": self.url,
        }
        for key, value in (
            ("note", self.note),
            ("matchDate", self.match_date),
            ("matchdayTag", self.matchday_tag),
        ):
            if value:
                data[key] = value
        return data


@dataclass(frozen=True, slots=True)
class GroupSnapshot:
    """Everything known about one group as of one scrape."""

    config: GroupConfig
    teams: Tuple[TeamStats, ...] = ()
    matches: Tuple[MatchResult, ...] = ()
    scraped_at: datetime = EPOCH

    def summary(self) -> "GroupSummary":
        return GroupSummary(
            id=self.config.id,
            name=self.config.name,
            staffel_id=self.config.staffel_id,
            last_updated=self.scraped_at,
            team_count=len(self.teams),
        )


@dataclass(frozen=True, slots=True)
class GroupSummary:
    id: str
    name: str
    staffel_id: str
    last_updated: datetime
    team_count: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "staffelId": self.staffel_id,
            "lastUpdated": isoformat_utc(self.last_updated),
            "teamCount": self.team_count,
        }


@dataclass(frozen=True, slots=True)
class NormalizedSet:
    offense: float = 0.0
    defense: float = 0.0
    dominance: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {"offense": self.offense, "defense": self.defense, "dominance": self.dominance}


@dataclass(frozen=True, slots=True)
class MetricSet:
    offense: float = 0.0
    defense: float = 0.0
    dominance: float = 0.0
    normalized: NormalizedSet = field(default_factory=NormalizedSet)
    power_score: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "offense": self.offense,
            "defense": self.defense,
            "dominance": self.dominance,
            "normalized": self.normalized.as_dict(),
            "powerScore": self.power_score,
        }


@dataclass(frozen=True, slots=True)
class TeamPower:
    """A team coupled with its group-level and overall metrics."""

    team: TeamStats
    group_metrics: MetricSet = field(default_factory=MetricSet)
    overall_metrics: MetricSet = field(default_factory=MetricSet)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "team": self.team.as_dict(),
            "groupMetrics": self.group_metrics.as_dict(),
            "overallMetrics": self.overall_metrics.as_dict(),
        }


@dataclass(frozen=True, slots=True)
class EloResult:
    rating: float = 1500.0
    games: int = 0


@dataclass(frozen=True, slots=True)
class TeamElo:
    team: TeamStats
    elo: float
    games: int

    def as_dict(self) -> Dict[str, Any]:
        return {"team": self.team.as_dict(), "elo": self.elo, "games": self.games}


@dataclass(frozen=True, slots=True)
class GroupDetail:
    summary: GroupSummary
    teams: List[TeamPower] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {"group": self.summary.as_dict(), "teams": [t.as_dict() for t in self.teams]}
