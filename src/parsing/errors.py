"""Structured parsing errors for the scoreboard scraping pipeline.

Parsing errors raised while handling a required document (standings table,
cross table, match page in enumeration mode) abort the scrape of that group
just like transport errors do. Best-effort callers catch them per item.
"""

from __future__ import annotations
from typing import Any


class ParsingError(Exception):
    """Base class for parsing related issues."""

    def __init__(
        self, message: str, *, url: str | None = None, context: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.url = url
        self.context = context or {}


class MissingSectionError(ParsingError):
    """Raised when an expected HTML section is absent (e.g. no tournament groups)."""


class GlyphDecodeError(ParsingError):
    """Raised when an obfuscation font cannot be read into a code point mapping."""


class ValueExtractionError(ParsingError):
    """Raised when a critical value (team id, match id) cannot be extracted."""
