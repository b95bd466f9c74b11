"""Parsing of fussball.de standings tables into ``TeamStats`` (BeautifulSoup)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from domain.models import GroupConfig, TeamStats
from utils import html_utils

# rank | club | games | W | D | L | goals | diff | points (+ leading marker cell)
MIN_COLUMNS = 10


def _cell_text(cell: Tag) -> str:
    return html_utils.clean_cell(cell.get_text(" ", strip=True))


def extract_team_row(
    tr: Tag, cfg: GroupConfig, *, scraped_at: Optional[datetime] = None
) -> Optional[TeamStats]:
    """Return the team of one standings row, or None when the row is not a team row.

    Numeric cells are coerced leniently: a malformed value becomes 0 for that
    field only so one broken cell never drops the whole row.
    """
    cols = tr.find_all("td")
    if len(cols) < MIN_COLUMNS:
        return None

    club_cell = cols[2]
    name_el = club_cell.select_one(".club-name")
    name = _cell_text(name_el) if name_el else ""
    if not name:
        return None

    rank = html_utils.parse_int(_cell_text(cols[1]).removesuffix("."))
    logo = club_cell.select_one(".club-logo img")
    logo_url = html_utils.absolute_url(logo.get("src")) if logo and logo.get("src") else None
    anchor = club_cell.find("a", href=True)
    team_id = html_utils.parse_team_id(anchor["href"] if anchor else "")

    goals_for, goals_against = html_utils.parse_goals(_cell_text(cols[7]))
    return TeamStats(
        group_id=cfg.id,
        group_name=cfg.name,
        staffel_id=cfg.staffel_id,
        team_id=team_id,
        team_name=name,
        logo_url=logo_url,
        rank=rank,
        games=html_utils.parse_int(_cell_text(cols[3])),
        wins=html_utils.parse_int(_cell_text(cols[4])),
        draws=html_utils.parse_int(_cell_text(cols[5])),
        losses=html_utils.parse_int(_cell_text(cols[6])),
        goals_for=goals_for,
        goals_against=goals_against,
        goal_diff=html_utils.parse_int(_cell_text(cols[8])),
        points=html_utils.parse_int(_cell_text(cols[9])),
        scraped_at=scraped_at or datetime.now(timezone.utc),
    )


def extract_team_stats(
    doc: BeautifulSoup | str, cfg: GroupConfig, *, scraped_at: Optional[datetime] = None
) -> List[TeamStats]:
    soup = BeautifulSoup(doc, "html.parser") if isinstance(doc, str) else doc
    scraped_at = scraped_at or datetime.now(timezone.utc)
    teams: List[TeamStats] = []
    for tr in soup.select("table.table tbody tr"):
        team = extract_team_row(tr, cfg, scraped_at=scraped_at)
        if team is not None:
            teams.append(team)
    return teams
