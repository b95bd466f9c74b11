"""Parsing of cross tables and match pages into match candidates.

Parsing stays synchronous: score spans are captured as ``ScoreSpan`` (raw
text + obfuscation font id) and resolved to numbers later by the scraper,
which owns the glyph decoder. ``build_match_result`` then applies the
played/not-played rules to the resolved text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from domain.models import GroupConfig, MatchResult, MatchStatus
from parsing import link_extractor
from parsing.errors import ValueExtractionError
from utils import html_utils

__all__ = [
    "CrossTeam",
    "ScoreSpan",
    "MatchCandidate",
    "extract_cross_teams",
    "extract_grid_candidates",
    "parse_match_page",
    "parse_score",
    "build_match_result",
]

_SCORE_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True, slots=True)
class CrossTeam:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class ScoreSpan:
    text: str = ""
    font_id: Optional[str] = None  # None when the span is not obfuscated

    @classmethod
    def from_tag(cls, tag: Optional[Tag]) -> "ScoreSpan":
        if tag is None:
            return cls()
        return cls(text=tag.get_text(), font_id=tag.get("data-obfuscation"))


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    match_id: str
    home: CrossTeam
    away: CrossTeam
    url: str
    note: str = ""
    home_span: ScoreSpan = ScoreSpan()
    away_span: ScoreSpan = ScoreSpan()
    match_date: str = ""


def _soup(doc: BeautifulSoup | str) -> BeautifulSoup:
    return BeautifulSoup(doc, "html.parser") if isinstance(doc, str) else doc


def _team_from_anchor(anchor: Optional[Tag]) -> Optional[CrossTeam]:
    if anchor is None:
        return None
    team_id = html_utils.parse_team_id(anchor.get("href", ""))
    name_el = anchor.select_one(".club-name") or anchor
    name = html_utils.clean_cell(name_el.get_text(" ", strip=True))
    if not team_id or not name:
        return None
    return CrossTeam(id=team_id, name=name)


def extract_cross_teams(doc: BeautifulSoup | str) -> List[CrossTeam]:
    """Team index of the cross table; position i labels grid row/column i."""
    soup = _soup(doc)
    teams: List[CrossTeam] = []
    for row in soup.select(".cross-table-teams-container table tbody tr"):
        anchor = row.find("a")
        if anchor is None:
            continue
        href = anchor.get("href", "")
        name_el = anchor.select_one(".club-name")
        name = html_utils.clean_cell(name_el.get_text(" ", strip=True)) if name_el else ""
        team_id = html_utils.parse_team_id(href)
        if not team_id or not name:
            continue
        teams.append(CrossTeam(id=team_id, name=name))
    return teams


def extract_grid_candidates(doc: BeautifulSoup | str) -> List[MatchCandidate]:
    """Walk the team x team grid; cell (i, j) is team i at home against team j."""
    soup = _soup(doc)
    teams = extract_cross_teams(soup)
    if not teams:
        return []

    candidates: List[MatchCandidate] = []
    seen: set[str] = set()
    for i, row in enumerate(soup.select("table.cross-table tbody tr")):
        if i >= len(teams):
            break
        home = teams[i]
        for j, cell in enumerate(row.find_all("td")):
            if j >= len(teams):
                break
            away = teams[j]
            if home.id == away.id:
                continue
            link = cell.find("a")
            if link is None:
                continue
            href = link.get("href", "")
            match_id = html_utils.parse_match_id(href)
            if not match_id or match_id in seen:
                continue
            seen.add(match_id)
            note_el = link.select_one(".info-text")
            candidates.append(
                MatchCandidate(
                    match_id=match_id,
                    home=home,
                    away=away,
                    url=href,
                    note=html_utils.clean_cell(note_el.get_text(" ", strip=True)) if note_el else "",
                    home_span=ScoreSpan.from_tag(link.select_one(".score-left")),
                    away_span=ScoreSpan.from_tag(link.select_one(".score-right")),
                )
            )
    return candidates


def parse_match_page(doc: BeautifulSoup | str, *, match_id: str, url: str) -> MatchCandidate:
    """Read team identity and score spans from a single match page.

    Raises ``ValueExtractionError`` when either team cannot be identified; the page is
    a required source in enumeration mode.
    """
    soup = _soup(doc)
    home = _team_from_anchor(soup.select_one(".team-home a[href*='team-id']"))
    away = _team_from_anchor(soup.select_one(".team-away a[href*='team-id']"))
    if home is None or away is None:
        raise ValueExtractionError(
            f"match page {match_id} has no home/away team", url=url, context={"match_id": match_id}
        )
    result = soup.select_one(".end-result") or soup
    note_el = soup.select_one(".info-text")
    return MatchCandidate(
        match_id=match_id,
        home=home,
        away=away,
        url=url,
        note=html_utils.clean_cell(note_el.get_text(" ", strip=True)) if note_el else "",
        home_span=ScoreSpan.from_tag(result.select_one(".score-left")),
        away_span=ScoreSpan.from_tag(result.select_one(".score-right")),
        match_date=link_extractor.extract_match_date(soup) or "",
    )


def parse_score(text: Optional[str]) -> Optional[int]:
    """Non-negative integer score, or None for anything only partially decoded."""
    if text is None:
        return None
    text = text.strip()
    if not _SCORE_RE.fullmatch(text):
        return None
    return int(text)


def build_match_result(
    candidate: MatchCandidate,
    cfg: GroupConfig,
    home_text: Optional[str],
    away_text: Optional[str],
) -> MatchResult:
    """Apply the result rules to decoded score text.

    A note (Nichtantritt, Absetzung, ...) or a side that is not a clean number
    makes the match ``not_played`` with a 0:0 score, whatever digits survived.
    """
    home_score = parse_score(home_text)
    away_score = parse_score(away_text)
    played = home_score is not None and away_score is not None and not candidate.note
    return MatchResult(
        id=candidate.match_id,
        group_id=cfg.id,
        staffel_id=cfg.staffel_id,
        home_team_id=candidate.home.id,
        home_team=candidate.home.name,
        away_team_id=candidate.away.id,
        away_team=candidate.away.name,
        home_score=home_score if played else 0,
        away_score=away_score if played else 0,
        status=MatchStatus.PLAYED if played else MatchStatus.NOT_PLAYED,
        note=candidate.note,
        url=candidate.url,
        match_date=candidate.match_date,
    )
