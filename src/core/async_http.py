"""Async document fetching on top of httpx.

Clients built here carry the fixed scoreboard user agent; every request is
bound to a deadline. There is no retry here; the refresh cycle decides what a failure
means for the snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, List, Optional, TypeVar

import httpx
from bs4 import BeautifulSoup

from config import settings
from parsing.errors import ParsingError

log = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncHttpError(RuntimeError):
    pass


class HttpStatusError(AsyncHttpError):
    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"unexpected status {status_code} for {url}")
        self.url = url
        self.status_code = status_code


async def gather_or_cancel(*aws: Awaitable[T]) -> List[T]:
    """Like ``asyncio.gather`` but the first failure cancels the siblings still running."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def build_client(*, timeout: float | None = None, **kwargs) -> httpx.AsyncClient:
    headers = {"User-Agent": settings.DEFAULT_USER_AGENT}
    return httpx.AsyncClient(
        headers=headers, timeout=timeout or settings.DEFAULT_TIMEOUT, **kwargs
    )


async def fetch_bytes(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float | None = None,
) -> bytes:
    close_client = False
    if client is None:
        client = build_client()
        close_client = True
    try:
        log.debug("GET %s", url)
        try:
            resp = await asyncio.wait_for(client.get(url), timeout)
        except asyncio.TimeoutError as e:
            raise AsyncHttpError(f"Timed out fetching {url}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise AsyncHttpError(f"Failed to fetch {url}: {e}") from e
        if resp.status_code != 200:
            raise HttpStatusError(url, resp.status_code)
        return resp.content
    finally:
        if close_client:
            await client.aclose()


async def fetch(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float | None = None,
) -> str:
    content = await fetch_bytes(url, client=client, timeout=timeout)
    return content.decode("utf-8", errors="replace")


async def fetch_document(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float | None = None,
) -> BeautifulSoup:
    html = await fetch(url, client=client, timeout=timeout)
    try:
        return BeautifulSoup(html, "html.parser")
    except Exception as e:  # noqa: BLE001
        raise ParsingError(f"Could not parse document from {url}: {e}", url=url) from e
