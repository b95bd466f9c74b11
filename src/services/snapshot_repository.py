"""In-memory store of the latest ``GroupSnapshot`` per group.

Writers build a fresh read-only mapping under a lock and swap the reference.
Every read grabs the current mapping once, so a reader sees exactly one
version even while a refresh replaces the data concurrently.
"""

from __future__ import annotations

import logging
from datetime import datetime
from threading import Lock
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from domain.models import EPOCH, GroupSnapshot, GroupSummary, TeamStats

__all__ = ["SnapshotRepository"]

log = logging.getLogger(__name__)


class SnapshotRepository:
    def __init__(self, snapshots: Iterable[GroupSnapshot] = ()) -> None:
        self._write_lock = Lock()
        self._groups: Mapping[str, GroupSnapshot] = MappingProxyType(
            {snap.config.id: snap for snap in snapshots}
        )

    def replace(self, snapshots: Iterable[GroupSnapshot]) -> None:
        """Swap the whole snapshot set for ``snapshots``."""
        fresh = {snap.config.id: snap for snap in snapshots}
        with self._write_lock:
            self._groups = MappingProxyType(fresh)
        log.debug("repository replaced with %d groups", len(fresh))

    def upsert(self, snapshot: GroupSnapshot) -> None:
        """Replace one group, leaving the others untouched."""
        with self._write_lock:
            fresh = dict(self._groups)
            fresh[snapshot.config.id] = snapshot
            self._groups = MappingProxyType(fresh)

    def summaries(self) -> List[GroupSummary]:
        groups = self._groups
        return [groups[gid].summary() for gid in sorted(groups)]

    def snapshot(self, group_id: str) -> Optional[GroupSnapshot]:
        return self._groups.get(group_id)

    def snapshots(self) -> List[GroupSnapshot]:
        groups = self._groups
        return [groups[gid] for gid in sorted(groups)]

    def all_teams(self) -> List[TeamStats]:
        teams: List[TeamStats] = []
        for snap in self.snapshots():
            teams.extend(snap.teams)
        return teams

    def last_updated(self) -> datetime:
        groups = self._groups
        if not groups:
            return EPOCH
        return max(snap.scraped_at for snap in groups.values())

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._groups
