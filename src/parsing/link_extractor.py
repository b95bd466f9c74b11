"""Link and metadata extraction from cross tables, match pages and tournament overviews."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup

from domain.models import GroupConfig
from utils import html_utils

MATCHDAY_RE = re.compile(r"(\d+)\.\s*spieltag", re.IGNORECASE)
MATCH_DATE_RE = re.compile(r"/spieldatum/(\d{4}-\d{2}-\d{2})/")
TOURNAMENT_GROUP_NUM_RE = re.compile(r"gr\.\s*(\d+)", re.IGNORECASE)

MATCH_ROW_LABEL = "Spiel:"


def _soup(doc: BeautifulSoup | str) -> BeautifulSoup:
    return BeautifulSoup(doc, "html.parser") if isinstance(doc, str) else doc


def extract_match_links(doc: BeautifulSoup | str) -> List[Tuple[str, str]]:
    """Every distinct (match id, href) referenced anywhere in the document, in page order."""
    soup = _soup(doc)
    links: Dict[str, str] = {}
    for a in soup.find_all("a", href=lambda h: h and "/spiel/" in h):
        match_id = html_utils.parse_match_id(a["href"])
        if match_id and match_id not in links:
            links[match_id] = a["href"]
    return list(links.items())


def extract_match_date(doc: BeautifulSoup | str) -> Optional[str]:
    soup = _soup(doc)
    anchor = soup.select_one("a[href*='/spieldatum/']")
    if anchor is None:
        return None
    m = MATCH_DATE_RE.search(anchor.get("href", ""))
    return m.group(1) if m else None


def extract_matchday(doc: BeautifulSoup | str) -> Optional[str]:
    """Matchday number from the ``Spiel: <N>. Spieltag`` info row."""
    soup = _soup(doc)
    for row in soup.select("li.row"):
        spans = row.find_all("span")
        if len(spans) < 2 or spans[0].get_text(strip=True) != MATCH_ROW_LABEL:
            continue
        m = MATCHDAY_RE.search(spans[1].get_text(" ", strip=True))
        if m:
            return m.group(1)
    return None


def _matches_marker(label: str, markers: Iterable[str]) -> bool:
    norm = label.lower()
    return any(marker in norm for marker in markers)


def extract_tournament_groups(
    doc: BeautifulSoup | str, markers: Iterable[str]
) -> List[GroupConfig]:
    """Group configs embedded in a tournament overview page.

    The overview only links the groups through ajax headers; the label
    (e.g. "E - Junioren Gr. 1") selects the age group and yields the id.
    """
    soup = _soup(doc)
    markers = tuple(m.lower() for m in markers)
    found: Dict[str, GroupConfig] = {}
    for a in soup.select("a[data-ajax-resource*='ajax.fixtures.tournament']"):
        span = a.find("span")
        label = html_utils.clean_cell(span.get_text(" ", strip=True)) if span else ""
        if not label or not _matches_marker(label, markers):
            continue
        staffel_id = html_utils.parse_staffel_id(a.get("data-ajax-resource") or a.get("href"))
        if not staffel_id:
            staffel_id = html_utils.parse_staffel_id(a.get("data-ajax-target"))
        if not staffel_id:
            continue
        m = TOURNAMENT_GROUP_NUM_RE.search(label)
        group_id = f"indoor-group{m.group(1)}" if m else f"indoor-{staffel_id}"
        found[staffel_id] = GroupConfig(id=group_id, name=label, staffel_id=staffel_id)
    return sorted(found.values(), key=lambda cfg: cfg.id)
