"""Per-group scraping: standings table + match extraction + aggregation.

Matches come from the cross table in one of two ways:

* ``grid`` reads the team x team matrix directly,
* ``enumeration`` collects every match link in the cross document and
  fetches each match page.

``auto`` probes the page shape (grid when the cross table has a team index).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence, TypeVar

import httpx
from bs4 import BeautifulSoup

from config import settings
from core import async_http
from core.async_http import AsyncHttpError
from core.glyph_decoder import GlyphDecoder
from domain.aggregation import apply_match_aggregates
from domain.models import GroupConfig, GroupSnapshot, MatchResult
from parsing import cross_table_parser, link_extractor, standings_parser
from parsing.cross_table_parser import MatchCandidate, ScoreSpan
from parsing.errors import MissingSectionError, ParsingError
from utils import html_utils

__all__ = ["MatchMode", "GroupScraper", "GridStrategy", "EnumerationStrategy"]

log = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class MatchMode(str, Enum):
    GRID = "grid"
    ENUMERATION = "enumeration"
    AUTO = "auto"


class MatchStrategy(Protocol):
    mode: MatchMode

    async def extract(self, doc: BeautifulSoup, cfg: GroupConfig) -> List[MatchResult]: ...


class GridStrategy:
    mode = MatchMode.GRID

    def __init__(self, scraper: "GroupScraper") -> None:
        self._scraper = scraper

    async def extract(self, doc: BeautifulSoup, cfg: GroupConfig) -> List[MatchResult]:
        candidates = cross_table_parser.extract_grid_candidates(doc)
        return await self._scraper.bounded_map(
            lambda c: self._scraper.resolve_candidate(c, cfg), candidates
        )


class EnumerationStrategy:
    mode = MatchMode.ENUMERATION

    def __init__(self, scraper: "GroupScraper") -> None:
        self._scraper = scraper

    async def extract(self, doc: BeautifulSoup, cfg: GroupConfig) -> List[MatchResult]:
        links = link_extractor.extract_match_links(doc)
        log.debug("%s: %d match links to fetch", cfg.id, len(links))

        async def load(link: tuple[str, str]) -> MatchResult:
            match_id, href = link
            page = await self._scraper.fetch_document(html_utils.absolute_url(href))
            candidate = cross_table_parser.parse_match_page(page, match_id=match_id, url=href)
            return await self._scraper.resolve_candidate(candidate, cfg)

        return await self._scraper.bounded_map(load, links)


class GroupScraper:
    """Downloads and parses the table data of one group.

    The scraper owns its HTTP client unless one is passed in; use it as an
    async context manager (or call ``aclose``) to release an owned client.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        decoder: Optional[GlyphDecoder] = None,
        *,
        match_mode: MatchMode | str = settings.MATCH_MODE,
        enrich_metadata: bool = False,
        max_concurrency: int = settings.MAX_CONCURRENT_FETCHES,
        request_timeout: float | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or async_http.build_client()
        self._decoder = decoder or GlyphDecoder(self._client, timeout=request_timeout)
        self.match_mode = MatchMode(match_mode)
        self.enrich_metadata = enrich_metadata
        self._max_concurrency = max(1, max_concurrency)
        self._request_timeout = request_timeout

    async def __aenter__(self) -> "GroupScraper":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def decoder(self) -> GlyphDecoder:
        return self._decoder

    # --- Fetching -------------------------------------------------------------------
    async def fetch_document(self, url: str) -> BeautifulSoup:
        return await async_http.fetch_document(
            url, client=self._client, timeout=self._request_timeout
        )

    async def bounded_map(
        self, func: Callable[[T], Awaitable[R]], items: Sequence[T]
    ) -> List[R]:
        """Run ``func`` over ``items`` with at most ``max_concurrency`` in flight, keeping order."""
        sem = asyncio.Semaphore(self._max_concurrency)

        async def run(item: T) -> R:
            async with sem:
                return await func(item)

        return await async_http.gather_or_cancel(*(run(item) for item in items))

    # --- Group scrape ---------------------------------------------------------------
    async def fetch_group(self, cfg: GroupConfig) -> GroupSnapshot:
        """Scrape standings and matches of one group.

        Both documents must load before aggregation; any transport or parse
        error of a required fetch propagates and no snapshot is produced.
        """
        table_url = settings.TABLE_URL_TEMPLATE.format(staffel_id=cfg.staffel_id)
        cross_url = settings.CROSS_TABLE_URL_TEMPLATE.format(staffel_id=cfg.staffel_id)
        table_doc, cross_doc = await async_http.gather_or_cancel(
            self.fetch_document(table_url), self.fetch_document(cross_url)
        )
        scraped_at = datetime.now(timezone.utc)

        teams = standings_parser.extract_team_stats(table_doc, cfg, scraped_at=scraped_at)
        matches = await self.extract_matches(cross_doc, cfg)
        if self.enrich_metadata:
            matches = await self.enrich_match_metadata(matches)
        teams = apply_match_aggregates(teams, matches)
        log.info("%s: %d teams, %d matches", cfg.id, len(teams), len(matches))

        return GroupSnapshot(
            config=GroupConfig(id=cfg.id, name=cfg.name, staffel_id=cfg.staffel_id),
            teams=tuple(teams),
            matches=tuple(matches),
            scraped_at=scraped_at,
        )

    def strategy_for(self, doc: BeautifulSoup) -> MatchStrategy:
        mode = self.match_mode
        if mode is MatchMode.AUTO:
            has_grid = bool(cross_table_parser.extract_cross_teams(doc))
            mode = MatchMode.GRID if has_grid else MatchMode.ENUMERATION
        if mode is MatchMode.GRID:
            return GridStrategy(self)
        return EnumerationStrategy(self)

    async def extract_matches(self, doc: BeautifulSoup, cfg: GroupConfig) -> List[MatchResult]:
        strategy = self.strategy_for(doc)
        log.debug("%s: extracting matches in %s mode", cfg.id, strategy.mode.value)
        return await strategy.extract(doc, cfg)

    # --- Scores ---------------------------------------------------------------------
    async def resolve_score(self, span: ScoreSpan) -> Optional[str]:
        """Visible text of a score span; None when the obfuscation cannot be decoded."""
        if not span.text:
            return ""
        if span.font_id is None:
            return span.text.strip()
        try:
            decoded = await self._decoder.decode(span.font_id, span.text)
        except (AsyncHttpError, ParsingError) as e:
            log.warning("could not decode score with font %s: %s", span.font_id, e)
            return None
        return decoded.strip()

    async def resolve_candidate(self, candidate: MatchCandidate, cfg: GroupConfig) -> MatchResult:
        home_text = await self.resolve_score(candidate.home_span)
        away_text = await self.resolve_score(candidate.away_span)
        return cross_table_parser.build_match_result(candidate, cfg, home_text, away_text)

    # --- Metadata -------------------------------------------------------------------
    async def enrich_match_metadata(self, matches: Sequence[MatchResult]) -> List[MatchResult]:
        """Fill match date and matchday from the match pages.

        Best-effort: a match whose page cannot be loaded or read keeps its
        current values; the remaining matches are still enriched.
        """

        async def enrich(match: MatchResult) -> MatchResult:
            if not match.url or (match.match_date and match.matchday_tag):
                return match
            try:
                page = await self.fetch_document(html_utils.absolute_url(match.url))
            except (AsyncHttpError, ParsingError) as e:
                log.warning("metadata for match %s unavailable: %s", match.id, e)
                return match
            return replace(
                match,
                match_date=match.match_date or link_extractor.extract_match_date(page) or "",
                matchday_tag=match.matchday_tag or link_extractor.extract_matchday(page) or "",
            )

        return await self.bounded_map(enrich, list(matches))

    # --- Discovery ------------------------------------------------------------------
    async def discover_tournament_groups(
        self,
        tournament_staffel_id: str,
        markers: Sequence[str] = settings.TOURNAMENT_GROUP_MARKERS,
    ) -> List[GroupConfig]:
        url = settings.TOURNAMENT_URL_TEMPLATE.format(staffel_id=tournament_staffel_id)
        doc = await self.fetch_document(url)
        groups = link_extractor.extract_tournament_groups(doc, markers)
        if not groups:
            raise MissingSectionError("no tournament groups discovered", url=url)
        log.info("discovered %d tournament groups", len(groups))
        return groups
