# Shared fixtures for the scraping tests. HTML and font builders live in
# tests/factories.py so individual test modules can compose their own pages.

import pytest

from tests.factories import build_font, make_config


@pytest.fixture(scope="session")
def font_bytes() -> bytes:
    return build_font()


@pytest.fixture
def group_cfg():
    return make_config("group1", staffel_id="STAFFEL1-G")
