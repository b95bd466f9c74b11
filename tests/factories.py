from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import httpx
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from config import settings
from domain.models import GroupConfig, GroupSnapshot, MatchResult, MatchStatus, TeamStats

ROOT = settings.ROOT_URL
SCRAPED_AT = datetime(2025, 10, 4, 12, 0, tzinfo=timezone.utc)

# Obfuscated digits used by the test font: U+E600 draws "0" ... U+E609 draws "9".
DIGIT_GLYPHS = ["zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine"]
OBFUSCATED_CMAP: Dict[int, str] = {0xE600 + i: name for i, name in enumerate(DIGIT_GLYPHS)}
OBFUSCATED_CMAP[0xE60A] = "hyphen"


def obfuscate(text: str) -> str:
    return "".join(chr(0xE600 + int(ch)) if ch.isdigit() else ch for ch in text)


def build_font(cmap: Optional[Dict[int, str]] = None) -> bytes:
    """Minimal TrueType font whose cmap points code points at digit glyph names."""
    cmap = OBFUSCATED_CMAP if cmap is None else cmap
    names = [".notdef"] + sorted(set(cmap.values()))
    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(names)
    fb.setupCharacterMap(cmap)
    fb.setupGlyf({name: TTGlyphPen(None).glyph() for name in names})
    fb.setupHorizontalMetrics({name: (500, 0) for name in names})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": "Obfuscated", "styleName": "Regular"})
    fb.setupOS2()
    fb.setupPost()
    buf = io.BytesIO()
    fb.save(buf)
    return buf.getvalue()


def font_url(font_id: str) -> str:
    return settings.FONT_URL_TEMPLATE.format(font_id=font_id)


def table_url(staffel_id: str) -> str:
    return settings.TABLE_URL_TEMPLATE.format(staffel_id=staffel_id)


def cross_url(staffel_id: str) -> str:
    return settings.CROSS_TABLE_URL_TEMPLATE.format(staffel_id=staffel_id)


def match_url(match_id: str) -> str:
    return f"{ROOT}/spiel/heim-gast/-/spiel/{match_id}"


Route = Union[str, bytes, int, Exception]


def mock_client(routes: Dict[str, Route], calls: Optional[List[str]] = None) -> httpx.AsyncClient:
    """AsyncClient answering from ``routes``: body, status code, or an exception to raise."""

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if calls is not None:
            calls.append(url)
        target = routes.get(url)
        if target is None:
            return httpx.Response(404, request=request)
        if isinstance(target, Exception):
            raise target
        if isinstance(target, int):
            return httpx.Response(target, request=request)
        if isinstance(target, str):
            target = target.encode("utf-8")
        return httpx.Response(200, content=target, request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# --- HTML ---------------------------------------------------------------------------


def _club_anchor(team_id: str, name: str, logo: bool = False) -> str:
    img = (
        f'<div class="club-logo table-image"><img src="//www.fussball.de/export.media/-/id/{team_id}"/></div>'
        if logo
        else ""
    )
    return (
        f'<a class="club-wrapper" href="{ROOT}/mannschaft/x/-/saison/2526/team-id/{team_id}#!/">'
        f'{img}<div class="club-name">{name}</div></a>'
    )


def standings_html(rows: Iterable[Sequence[str]], extra_rows: str = "") -> str:
    """Rows of (rank, name, team_id, games, W, D, L, goals, diff, points)."""
    body = []
    for rank, name, team_id, games, wins, draws, losses, goals, diff, points in rows:
        body.append(
            "<tr>"
            '<td class="column-icon"></td>'
            f'<td class="column-rank">{rank}</td>'
            f'<td class="column-club">{_club_anchor(team_id, name, logo=True)}</td>'
            f"<td>{games}</td><td>{wins}</td><td>{draws}</td><td>{losses}</td>"
            f"<td>{goals}</td><td>{diff}</td><td>{points}</td>"
            "</tr>"
        )
    return (
        '<html><body><table class="table"><thead><tr><th>Pl.</th></tr></thead><tbody>'
        + "".join(body)
        + extra_rows
        + "</tbody></table></body></html>"
    )


def score_cell(
    match_id: str,
    home: str = "",
    away: str = "",
    *,
    font_id: Optional[str] = None,
    note: str = "",
) -> str:
    attr = f' data-obfuscation="{font_id}"' if font_id else ""
    note_html = f'<span class="info-text">{note}</span>' if note else ""
    return (
        f'<a href="{match_url(match_id)}">'
        f'<span class="score-left"{attr}>{home}</span>'
        '<span class="colon">:</span>'
        f'<span class="score-right"{attr}>{away}</span>{note_html}</a>'
    )


def cross_table_html(teams: Sequence[Tuple[str, str]], cells: Sequence[Sequence[str]]) -> str:
    """Team index + grid; ``cells[i][j]`` is the inner HTML of home team i vs team j."""
    index = "".join(f"<tr><td>{_club_anchor(tid, name)}</td></tr>" for tid, name in teams)
    grid = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in cells
    )
    return (
        "<html><body>"
        f'<div class="cross-table-teams-container"><table><tbody>{index}</tbody></table></div>'
        f'<table class="cross-table"><tbody>{grid}</tbody></table>'
        "</body></html>"
    )


def match_list_html(match_ids: Iterable[str]) -> str:
    links = "".join(f'<li><a href="{match_url(mid)}">Spiel</a></li>' for mid in match_ids)
    return f"<html><body><ul class='fixtures'>{links}</ul></body></html>"


def match_page_html(
    home: Tuple[str, str],
    away: Tuple[str, str],
    home_score: str = "",
    away_score: str = "",
    *,
    font_id: Optional[str] = None,
    note: str = "",
    match_date: str = "",
    matchday: str = "",
) -> str:
    attr = f' data-obfuscation="{font_id}"' if font_id else ""
    date_link = (
        f'<a href="{ROOT}/spieltagsuebersicht/-/spieldatum/{match_date}/staffel/X">{match_date}</a>'
        if match_date
        else ""
    )
    matchday_row = (
        f'<ul><li class="row"><span>Spiel:</span><span>{matchday}. Spieltag | 12</span></li></ul>'
        if matchday
        else ""
    )
    note_html = f'<span class="info-text">{note}</span>' if note else ""
    return (
        "<html><body>"
        f'<div class="team-home">{_club_anchor(*home)}</div>'
        f'<div class="team-away">{_club_anchor(*away)}</div>'
        f'<div class="end-result"><span class="score-left"{attr}>{home_score}</span>'
        f'<span class="colon">:</span><span class="score-right"{attr}>{away_score}</span></div>'
        f"{note_html}{date_link}{matchday_row}"
        "</body></html>"
    )


# --- Domain records -------------------------------------------------------------------


def make_config(group_id: str = "group1", staffel_id: str = "STAFFEL1-G") -> GroupConfig:
    return GroupConfig(id=group_id, name=f"Gruppe {group_id}", staffel_id=staffel_id)


def make_team(team_id: str, name: Optional[str] = None, group_id: str = "group1", **kw) -> TeamStats:
    base = dict(
        group_id=group_id,
        group_name=f"Gruppe {group_id}",
        staffel_id="STAFFEL1-G",
        team_id=team_id,
        team_name=name or f"Team {team_id}",
        scraped_at=SCRAPED_AT,
    )
    base.update(kw)
    return TeamStats(**base)


def make_match(
    match_id: str,
    home: str,
    away: str,
    home_score: int = 0,
    away_score: int = 0,
    *,
    played: bool = True,
    group_id: str = "group1",
    **kw,
) -> MatchResult:
    base = dict(
        id=match_id,
        group_id=group_id,
        staffel_id="STAFFEL1-G",
        home_team_id=home,
        home_team=f"Team {home}",
        away_team_id=away,
        away_team=f"Team {away}",
        home_score=home_score if played else 0,
        away_score=away_score if played else 0,
        status=MatchStatus.PLAYED if played else MatchStatus.NOT_PLAYED,
    )
    base.update(kw)
    return MatchResult(**base)


def make_snapshot(
    group_id: str = "group1",
    teams: Iterable[TeamStats] = (),
    matches: Iterable[MatchResult] = (),
    scraped_at: datetime = SCRAPED_AT,
) -> GroupSnapshot:
    return GroupSnapshot(
        config=make_config(group_id, staffel_id=f"STAFFEL-{group_id}"),
        teams=tuple(teams),
        matches=tuple(matches),
        scraped_at=scraped_at,
    )


__all__ = [
    "SCRAPED_AT",
    "OBFUSCATED_CMAP",
    "obfuscate",
    "build_font",
    "font_url",
    "table_url",
    "cross_url",
    "match_url",
    "mock_client",
    "standings_html",
    "score_cell",
    "cross_table_html",
    "match_list_html",
    "match_page_html",
    "make_config",
    "make_team",
    "make_match",
    "make_snapshot",
]
