"""Decoder for fussball.de obfuscated score text.

The portal renders scores with a per-page web font whose private-use code
points draw digits. The font's glyph names still say which digit each code
point stands for, so one download per font id is enough to translate every
score span rendered with it.
"""

from __future__ import annotations

import io
import logging
from threading import Lock
from typing import Dict, List, Optional

import httpx
from fontTools.ttLib import TTFont

from config import settings
from core import async_http
from parsing.errors import GlyphDecodeError

__all__ = ["GlyphDecoder", "glyph_name_to_char", "mapping_from_font_bytes"]

log = logging.getLogger(__name__)

PUA_START = 0xE600
PUA_END = 0xF8FF

_GLYPH_CHARS: Dict[str, str] = {
    "zero": "0",
    "one": "1",
    "two": "2",
    "three": "3",
    "four": "4",
    "five": "5",
    "six": "6",
    "seven": "7",
    "eight": "8",
    "nine": "9",
    "hyphen": "-",
}


def glyph_name_to_char(name: str) -> Optional[str]:
    return _GLYPH_CHARS.get(name.lower())


def mapping_from_font_bytes(data: bytes) -> Dict[int, str]:
    """Build the code point -> character map from a TrueType font binary."""
    try:
        font = TTFont(io.BytesIO(data), lazy=True)
        cmap = font.getBestCmap() or {}
    except Exception as e:  # noqa: BLE001 - fontTools raises a wide range of errors
        raise GlyphDecodeError(f"Could not parse obfuscation font: {e}") from e
    mapping: Dict[int, str] = {}
    for code, glyph_name in cmap.items():
        if code < PUA_START or code > PUA_END:
            continue
        decoded = glyph_name_to_char(glyph_name)
        if decoded is not None:
            mapping[code] = decoded
    return mapping


class GlyphDecoder:
    """Translate obfuscated text, caching one mapping per font id.

    Concurrent first use of the same font id may download it twice; both
    downloads produce the same mapping, so the later cache write is harmless.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        font_url_template: str = settings.FONT_URL_TEMPLATE,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._font_url_template = font_url_template
        self._lock = Lock()
        self._cache: Dict[str, Dict[int, str]] = {}

    async def decode(self, font_id: str, text: str) -> str:
        if not text.strip() or not font_id.strip():
            return text.strip()
        mapping = await self.mapping(font_id)
        return "".join(mapping.get(ord(ch), ch) for ch in text)

    async def mapping(self, font_id: str) -> Dict[int, str]:
        with self._lock:
            cached = self._cache.get(font_id)
        if cached is not None:
            return cached

        url = self._font_url_template.format(font_id=font_id)
        data = await async_http.fetch_bytes(url, client=self._client, timeout=self._timeout)
        mapping = mapping_from_font_bytes(data)
        log.debug("font %s: %d obfuscated glyphs", font_id, len(mapping))

        with self._lock:
            self._cache[font_id] = mapping
        return mapping

    def cached_font_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._cache)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
