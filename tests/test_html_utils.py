import pytest

from utils import html_utils


@pytest.mark.parametrize("value,expected", [("3", 3), (" -2 ", -2), ("", 0), (None, 0), ("x", 0), ("1.5", 0)])
def test_parse_int(value, expected):
    assert html_utils.parse_int(value) == expected


def test_parse_goals():
    assert html_utils.parse_goals("12 : 3") == (12, 3)
    assert html_utils.parse_goals("12-3") == (0, 0)


def test_clean_cell_collapses_whitespace():
    assert html_utils.clean_cell("  SV\xa0Alpha \n II ") == "SV Alpha II"


def test_ids_from_hrefs():
    assert html_utils.parse_team_id("/mannschaft/x/-/team-id/011MIE/") == "011MIE"
    assert html_utils.parse_match_id("https://www.fussball.de/spiel/a-b/-/spiel/02TM5") == "02TM5"
    assert html_utils.parse_match_id("/spiel/02TM6/") == "02TM6"
    assert html_utils.parse_match_id("/mannschaft/x") == ""
    assert html_utils.parse_staffel_id("/ajax.table/-/staffel/02TMJ-G/x") == "02TMJ-G"


def test_absolute_url():
    assert html_utils.absolute_url("//www.fussball.de/logo.png") == "https://www.fussball.de/logo.png"
    assert html_utils.absolute_url("/spiel/-/spiel/M1") == "https://www.fussball.de/spiel/-/spiel/M1"
    assert html_utils.absolute_url("https://example.org/x") == "https://example.org/x"
