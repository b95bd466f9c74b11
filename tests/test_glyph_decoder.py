"""Tests for the obfuscation font decoder."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from core.async_http import AsyncHttpError, HttpStatusError
from core.glyph_decoder import GlyphDecoder, glyph_name_to_char, mapping_from_font_bytes
from parsing.errors import GlyphDecodeError, ParsingError
from tests.factories import build_font, font_url, mock_client, obfuscate


def test_mapping_covers_digits_and_hyphen(font_bytes):
    mapping = mapping_from_font_bytes(font_bytes)
    assert mapping[0xE600] == "0"
    assert mapping[0xE609] == "9"
    assert mapping[0xE60A] == "-"
    assert len(mapping) == 11


def test_mapping_ignores_codepoints_outside_private_use_area():
    data = build_font({0x41: "zero", 0xE600: "one", 0xE601: "A"})
    assert mapping_from_font_bytes(data) == {0xE600: "1"}


def test_glyph_names_are_case_insensitive():
    assert glyph_name_to_char("Zero") == "0"
    assert glyph_name_to_char("HYPHEN") == "-"
    assert glyph_name_to_char("period") is None


def test_unreadable_font_raises_glyph_decode_error():
    with pytest.raises(GlyphDecodeError) as exc:
        mapping_from_font_bytes(b"definitely not a font")
    assert isinstance(exc.value, ParsingError)


@pytest.mark.asyncio
async def test_plain_text_without_font_id_is_trimmed_and_never_fetched():
    calls: list[str] = []
    async with mock_client({}, calls) as client:
        decoder = GlyphDecoder(client)
        assert await decoder.decode("", "  3 ") == "3"
        assert await decoder.decode("F1", "   ") == ""
    assert calls == []


@pytest.mark.asyncio
async def test_decode_downloads_font_once_per_id(font_bytes):
    calls: list[str] = []
    async with mock_client({font_url("F1"): font_bytes}, calls) as client:
        decoder = GlyphDecoder(client)
        assert await decoder.decode("F1", obfuscate("12")) == "12"
        assert await decoder.decode("F1", obfuscate("7")) == "7"
        assert decoder.cached_font_ids() == ["F1"]
    assert calls == [font_url("F1")]


@pytest.mark.asyncio
async def test_unmapped_characters_pass_through(font_bytes):
    async with mock_client({font_url("F1"): font_bytes}) as client:
        decoder = GlyphDecoder(client)
        assert await decoder.decode("F1", obfuscate("3") + "x") == "3x"
        assert await decoder.decode("F1", "\ue60a") == "-"


@pytest.mark.asyncio
async def test_font_download_error_propagates():
    async with mock_client({font_url("F1"): 404}) as client:
        decoder = GlyphDecoder(client)
        with pytest.raises(HttpStatusError) as exc:
            await decoder.decode("F1", obfuscate("1"))
    assert isinstance(exc.value, AsyncHttpError)
    assert exc.value.status_code == 404
    assert decoder.cached_font_ids() == []


@pytest.mark.asyncio
async def test_clear_forgets_cached_fonts(font_bytes):
    calls: list[str] = []
    async with mock_client({font_url("F1"): font_bytes}, calls) as client:
        decoder = GlyphDecoder(client)
        await decoder.decode("F1", obfuscate("1"))
        decoder.clear()
        await decoder.decode("F1", obfuscate("1"))
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_slow_font_download_is_bounded_by_timeout(font_bytes):
    async def handler(request):
        await asyncio.sleep(5)
        return httpx.Response(200, content=font_bytes)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        decoder = GlyphDecoder(client, timeout=0.05)
        with pytest.raises(AsyncHttpError, match="Timed out"):
            await decoder.decode("F1", obfuscate("1"))
    assert decoder.cached_font_ids() == []
