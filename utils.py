from __future__ import annotations

import asyncio
import re
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

USER_AGENT = "Mozilla/5.0 (compatible; HearingBot/1.0)"

T = TypeVar("T")

# Committee-print package ids: CHRG-<congress><h|s>hrg<jacket 2><jacket 3>
PAGE_ID_RE = re.compile(r"CHRG-(\d{3})([hs])hrg(\d{2})(\d{3})")


def get_http_client(timeout: float = 30.0) -> httpx.AsyncClient:
    """Create an async httpx client with standard headers. No retries."""
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


class RateLimiter:
    """Cap the rate of work starts to ``requests_per_second``, admitting in FIFO order.

    Callers queue on an asyncio.Lock (FIFO wakeup), so one instance can be
    shared by hundreds of concurrently submitted tasks.
    """

    def __init__(self, requests_per_second: float):
        if requests_per_second <= 0:
            raise ValueError(f"requests_per_second must be positive, got {requests_per_second!r}")
        self.min_interval = 1.0 / requests_per_second
        self._next_start = 0.0
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        """Block until the next start slot is free, then claim it."""
        async with self._lock:
            now = time.monotonic()
            if self._next_start > now:
                await asyncio.sleep(self._next_start - now)
                now = time.monotonic()
            self._next_start = max(now, self._next_start) + self.min_interval

    async def submit(self, factory: Callable[[], Awaitable[T]]) -> T:
        """Start ``factory()`` once a slot is free and return its result."""
        await self.wait()
        return await factory()


# ---------------------------------------------------------------------------
# GPO URL helpers
# ---------------------------------------------------------------------------

def mods_url(detail_url: str) -> str:
    """MODS metadata URL for a hearing detail page."""
    return detail_url.replace("content-detail.html", "mods.xml")


def page_id(detail_url: str) -> str:
    """Package id: the last-but-one path segment of a detail URL."""
    parts = detail_url.split("/")
    return parts[-2] if len(parts) >= 2 else ""


def content_url(detail_url: str, template: str) -> str:
    """Transcript .htm URL for a detail page, built from ``template`` with {page_id}."""
    return template.format(page_id=page_id(detail_url))


def hearing_id(chamber: str, congress: int | str, jacket_id: str) -> str:
    """Canonical index id, e.g. H-110-12-345."""
    prefix = "H" if chamber == "house" else "S"
    return f"{prefix}-{congress}-{jacket_id}"


def hearing_id_from_url(detail_url: str) -> str | None:
    """Derive the index id from a CHRG page id without fetching MODS.

    Returns None when the page id doesn't follow the committee-print pattern.
    """
    m = PAGE_ID_RE.search(page_id(detail_url))
    if not m:
        return None
    congress, chamber, jacket1, jacket2 = m.groups()
    return hearing_id("house" if chamber == "h" else "senate", congress, f"{jacket1}-{jacket2}")
