"""HTML helper utilities shared by the table and match parsers."""

from __future__ import annotations

import re
from typing import Tuple

from config import settings

NBSP_RE = re.compile(r"\xa0|&nbsp;?")
WS_RE = re.compile(r"\s+")
TEAM_ID_RE = re.compile(r"team-id/([A-Z0-9]+)/?")
MATCH_ID_RE = re.compile(r"/spiel/([A-Z0-9]+)/?")
STAFFEL_ID_RE = re.compile(r"staffel/([A-Z0-9-]+)")
_MATCH_PATH_MARKER = "/-/spiel/"


def clean_cell(text: str) -> str:
    text = NBSP_RE.sub(" ", text)
    return WS_RE.sub(" ", text).strip()


def parse_int(value: str | None) -> int:
    """Lenient int coercion: anything that is not a plain integer becomes 0."""
    value = (value or "").strip()
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        return 0


def parse_goals(value: str | None) -> Tuple[int, int]:
    parts = (value or "").split(":")
    if len(parts) != 2:
        return 0, 0
    return parse_int(parts[0]), parse_int(parts[1])


def parse_team_id(href: str | None) -> str:
    href = href or ""
    m = TEAM_ID_RE.search(href)
    return m.group(1) if m else href


def parse_match_id(href: str | None) -> str:
    if not href:
        return ""
    idx = href.rfind(_MATCH_PATH_MARKER)
    if idx >= 0:
        return href[idx + len(_MATCH_PATH_MARKER) :].strip("/")
    m = MATCH_ID_RE.search(href)
    return m.group(1) if m else ""


def parse_staffel_id(value: str | None) -> str:
    m = STAFFEL_ID_RE.search(value or "")
    return m.group(1) if m else ""


def absolute_url(url: str | None) -> str:
    url = (url or "").strip()
    if url.startswith("//"):
        return "https:" + url
    if url.startswith("/"):
        return settings.ROOT_URL + url
    return url

