"""Orchestration of refresh cycles into the snapshot repositories.

A full refresh fans out one scrape per configured group under a single
deadline. Only a complete success reaches the repository; the first failure
cancels the remaining scrapes and the previous snapshots stay authoritative.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from config import settings
from core import async_http
from core.async_http import AsyncHttpError
from domain.models import GroupConfig, GroupSnapshot, MatchResult
from parsing.errors import ParsingError
from scraping.group_scraper import GroupScraper
from services.snapshot_repository import SnapshotRepository
from services.standings_views import filter_team_matches, normalize_group_id

__all__ = ["RefreshError", "ScoreboardService"]

log = logging.getLogger(__name__)


class RefreshError(RuntimeError):
    pass


class ScoreboardService:
    def __init__(
        self,
        scraper: GroupScraper,
        repository: SnapshotRepository,
        groups: Sequence[GroupConfig],
        *,
        indoor_repository: Optional[SnapshotRepository] = None,
        tournament_staffel_id: Optional[str] = None,
        refresh_timeout: float = settings.REFRESH_TIMEOUT,
    ) -> None:
        self._scraper = scraper
        self._repository = repository
        self._groups = list(groups)
        self._indoor_repository = indoor_repository
        self._tournament_staffel_id = tournament_staffel_id
        self._refresh_timeout = refresh_timeout

    @property
    def repository(self) -> SnapshotRepository:
        return self._repository

    @property
    def indoor_repository(self) -> Optional[SnapshotRepository]:
        return self._indoor_repository

    @property
    def groups(self) -> List[GroupConfig]:
        return list(self._groups)

    def group_config(self, group_id: str) -> Optional[GroupConfig]:
        group_id = normalize_group_id(group_id)
        for cfg in self._groups:
            if cfg.id == group_id:
                return cfg
        return None

    # --- Refresh ---------------------------------------------------------------------
    async def _fetch(self, cfg: GroupConfig) -> GroupSnapshot:
        try:
            return await self._scraper.fetch_group(cfg)
        except (AsyncHttpError, ParsingError) as e:
            raise RefreshError(f"fetch {cfg.id}: {e}") from e

    async def _fetch_all(self, configs: Sequence[GroupConfig]) -> List[GroupSnapshot]:
        try:
            return await asyncio.wait_for(
                async_http.gather_or_cancel(*(self._fetch(cfg) for cfg in configs)),
                self._refresh_timeout,
            )
        except asyncio.TimeoutError as e:
            raise RefreshError(f"refresh timed out after {self._refresh_timeout:g}s") from e

    async def refresh(self) -> None:
        """Scrape every configured group and swap the repository contents in one step."""
        log.info("refreshing %d groups", len(self._groups))
        snapshots = await self._fetch_all(self._groups)
        self._repository.replace(snapshots)
        log.info("refresh complete: %d groups", len(snapshots))

    async def refresh_group(self, group_id: str) -> Optional[GroupSnapshot]:
        cfg = self.group_config(group_id)
        if cfg is None:
            return None
        (snapshot,) = await self._fetch_all([cfg])
        self._repository.upsert(snapshot)
        return snapshot

    async def refresh_indoor(self) -> None:
        """Discover the tournament groups and replace the indoor repository."""
        if self._indoor_repository is None or not self._tournament_staffel_id:
            raise RefreshError("indoor tournament not configured")
        try:
            configs = await self._scraper.discover_tournament_groups(self._tournament_staffel_id)
        except (AsyncHttpError, ParsingError) as e:
            raise RefreshError(f"discover tournament groups: {e}") from e
        snapshots = await self._fetch_all(configs)
        self._indoor_repository.replace(snapshots)
        log.info("indoor refresh complete: %d groups", len(snapshots))

    # --- Queries ---------------------------------------------------------------------
    async def team_matches(self, group_id: str, team_id: str) -> Optional[List[MatchResult]]:
        """Matches of one team sorted by id, refreshing the group once when none are held."""
        group_id = normalize_group_id(group_id)
        snap = self._repository.snapshot(group_id)
        if snap is None:
            return None
        matches = filter_team_matches(snap.matches, team_id)
        if not matches:
            try:
                refreshed = await self.refresh_group(group_id)
            except RefreshError as e:
                log.warning("on-demand refresh of %s failed: %s", group_id, e)
            else:
                if refreshed is not None:
                    matches = filter_team_matches(refreshed.matches, team_id)
        return sorted(matches, key=lambda m: m.id)
