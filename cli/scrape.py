"""Command line entrypoint for the scoreboard scraping pipeline.

Sub-commands:
  team    scrape one group and print a team's summary and matches
  export  refresh league + indoor groups and write the derived views as JSON
"""

from __future__ import annotations
import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional, Sequence

from config import groups, settings
from core import filesystem
from core.async_http import AsyncHttpError
from domain.models import GroupConfig, MatchResult, TeamStats, isoformat_utc
from parsing.errors import ParsingError
from scraping.group_scraper import GroupScraper
from services import standings_views
from services.scoreboard_service import RefreshError, ScoreboardService
from services.snapshot_repository import SnapshotRepository

log = logging.getLogger("scoreboard.cli")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Scoreboard scraping pipeline")
    sub = p.add_subparsers(dest="command", required=True)

    team = sub.add_parser("team", help="Scrape one group and print a team summary")
    team.add_argument("--team", required=True, help="Team name (exact or partial match)")
    team.add_argument("--group", default="", help="Group id or number (e.g. 2 or group2)")
    team.add_argument("--no-matches", action="store_true", help="Do not print individual matches")
    team.add_argument("--debug", action="store_true", help="Print every scraped match of the group")
    team.add_argument("--timeout", type=float, default=settings.DEFAULT_TIMEOUT, help="Scrape timeout (s)")

    export = sub.add_parser("export", help="Write derived views as static JSON")
    export.add_argument("--out", default=settings.EXPORT_DIR, help="Output directory")
    export.add_argument("--timeout", type=float, default=settings.REFRESH_TIMEOUT, help="Refresh timeout (s)")
    return p.parse_args(argv)


def resolve_group(configs: Sequence[GroupConfig], arg: str) -> Optional[GroupConfig]:
    """Match ``2``, ``group2`` or a fragment of the group name; first group when empty."""
    if not configs:
        return None
    arg = arg.strip().lower()
    if not arg:
        return configs[0]
    number = arg.removeprefix("group")
    for cfg in configs:
        cid = cfg.id.lower()
        if cid.removeprefix("group") == number or cid == arg or arg in cfg.name.lower():
            return cfg
    return None


def find_team(teams: Sequence[TeamStats], query: str) -> Optional[TeamStats]:
    """Exact name match wins; otherwise the first team whose name contains ``query``."""
    q = query.strip().lower()
    partial: Optional[TeamStats] = None
    for team in teams:
        name = team.team_name.strip().lower()
        if name == q:
            return team
        if partial is None and q in name:
            partial = team
    return partial


def format_team_summary(team: TeamStats, group_name: str) -> List[str]:
    return [
        f"Team: {team.team_name} (Group: {group_name})",
        f"Games: {team.games}  W:{team.wins}  D:{team.draws}  L:{team.losses}  "
        f"GF:{team.goals_for}  GA:{team.goals_against}  GD:{team.goal_diff}  Pts:{team.points}",
    ]


def format_match(match: MatchResult) -> str:
    score = f"{match.home_score}:{match.away_score}" if match.played() else "-:-"
    line = f"  {match.id}  {match.home_team} {score} {match.away_team}"
    if match.match_date:
        line += f"  [{match.match_date}]"
    if match.note:
        line += f"  ({match.note})"
    return line


async def run_team(args: argparse.Namespace, scraper: Optional[GroupScraper] = None) -> int:
    cfg = resolve_group(groups.kassel_e_jugend(), args.group)
    if cfg is None:
        print(f"unknown group {args.group!r}", file=sys.stderr)
        return 2

    owned = scraper is None
    scraper = scraper or GroupScraper()
    try:
        snap = await asyncio.wait_for(scraper.fetch_group(cfg), args.timeout)
    except (AsyncHttpError, ParsingError, asyncio.TimeoutError) as e:
        print(f"scrape group {cfg.id} failed: {e}", file=sys.stderr)
        return 1
    finally:
        if owned:
            await scraper.aclose()

    team = find_team(snap.teams, args.team)
    if team is None:
        print(f"no team matched {args.team!r} in {cfg.name}", file=sys.stderr)
        return 1

    for line in format_team_summary(team, snap.config.name):
        print(line)
    if args.debug:
        print(f"All matches of {cfg.id}:")
        for match in snap.matches:
            print(format_match(match))
    if not args.no_matches:
        matches = sorted(
            standings_views.filter_team_matches(snap.matches, team.team_id), key=lambda m: m.id
        )
        print(f"Total matches scraped for group: {len(snap.matches)}")
        print(f"Matches found for {team.team_name}: {len(matches)}")
        for match in matches:
            print(format_match(match))
    return 0


def write_export(
    out_dir: str, league: SnapshotRepository, indoor: SnapshotRepository, group_count: int
) -> List[str]:
    """Write every derived view of ``league``/``indoor`` below ``out_dir``."""
    filesystem.ensure_dir(out_dir)
    written: List[str] = []

    def emit(name: str, payload) -> None:
        written.append(filesystem.write_json(os.path.join(out_dir, name), payload))

    emit("groups.json", {"groups": [s.as_dict() for s in league.summaries()]})
    emit("indoor_groups.json", {"groups": [s.as_dict() for s in indoor.summaries()]})

    for snap in league.snapshots():
        detail = standings_views.group_detail(league, snap.config.id)
        if detail is not None:
            emit(f"group_{snap.config.id}.json", detail.as_dict())
        for team in snap.teams:
            matches = sorted(
                standings_views.filter_team_matches(snap.matches, team.team_id),
                key=lambda m: m.id,
            )
            emit(
                f"matches_{snap.config.id}_{team.team_id}.json",
                {
                    "group": {"id": snap.config.id, "name": snap.config.name},
                    "teamId": team.team_id,
                    "count": len(matches),
                    "matches": [m.as_dict() for m in matches],
                },
            )

    for name, repo in (("overall.json", league), ("indoor_overall.json", indoor)):
        emit(
            name,
            {
                "updatedAt": _iso(repo),
                "teams": [p.as_dict() for p in standings_views.overall(repo)],
            },
        )
    emit(
        "recommendations_simple.json",
        standings_views.simple_recommendation(league, group_count).as_dict(),
    )
    emit(
        "overall_elo.json",
        {
            "updatedAt": _iso(league),
            "teams": [e.as_dict() for e in standings_views.overall_elo(league)],
        },
    )
    return written


def _iso(repo: SnapshotRepository) -> str:
    return isoformat_utc(repo.last_updated())


async def run_export(args: argparse.Namespace, scraper: Optional[GroupScraper] = None) -> int:
    league_groups = groups.kassel_e_jugend()
    league = SnapshotRepository()
    indoor = SnapshotRepository()

    owned = scraper is None
    scraper = scraper or GroupScraper()
    svc = ScoreboardService(
        scraper,
        league,
        league_groups,
        indoor_repository=indoor,
        tournament_staffel_id=groups.INDOOR_PRE_GAMES_STAFFEL_ID,
        refresh_timeout=args.timeout,
    )
    try:
        log.info("scraping league ...")
        try:
            await svc.refresh()
        except RefreshError as e:
            print(f"league scrape failed: {e}", file=sys.stderr)
            return 1
        log.info("scraping indoor ...")
        try:
            await svc.refresh_indoor()
        except RefreshError as e:
            log.warning("indoor scrape failed: %s", e)
    finally:
        if owned:
            await scraper.aclose()

    written = write_export(args.out, league, indoor, len(league_groups))
    log.info("done. wrote %d files to %s", len(written), args.out)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "debug", False) else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "team":
        return asyncio.run(run_team(args))
    return asyncio.run(run_export(args))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
