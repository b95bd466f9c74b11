"""Global configuration and constants for the scoreboard scraping pipeline."""

from __future__ import annotations

import os
from typing import Final

ROOT_URL: Final = "https://www.fussball.de"

# Season table (no specific matchday) to capture full stats.
TABLE_URL_TEMPLATE: Final = ROOT_URL + "/ajax.table/-/staffel/{staffel_id}"
CROSS_TABLE_URL_TEMPLATE: Final = ROOT_URL + "/ajax.table.cross/-/staffel/{staffel_id}"
TOURNAMENT_URL_TEMPLATE: Final = ROOT_URL + "/spieltagsuebersicht/-/staffel/{staffel_id}"
FONT_URL_TEMPLATE: Final = ROOT_URL + "/export.fontface/-/format/ttf/id/{font_id}/type/font"

DEFAULT_USER_AGENT: Final = "score-board/0.1 (+https://github.com/schlubbi/score_board)"
DEFAULT_TIMEOUT: Final = float(os.environ.get("SCOREBOARD_HTTP_TIMEOUT", "20"))  # seconds
REFRESH_TIMEOUT: Final = float(os.environ.get("SCOREBOARD_REFRESH_TIMEOUT", "60"))
MAX_CONCURRENT_FETCHES: Final = int(os.environ.get("SCOREBOARD_MAX_CONCURRENT_FETCHES", "8"))

# grid | enumeration | auto
MATCH_MODE: Final = os.environ.get("SCOREBOARD_MATCH_MODE", "auto")

ELO_INITIAL_RATING: Final = 1500.0
ELO_K_FACTOR: Final = 20.0

# Labels on the tournament overview that mark the groups we care about.
TOURNAMENT_GROUP_MARKERS: Final = ("e - junioren", "e-junioren")

EXPORT_DIR: Final = os.environ.get("SCOREBOARD_EXPORT_DIR", os.path.join("web", "public", "data"))
