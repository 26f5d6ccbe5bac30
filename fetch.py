"""Rate-limited GPO fetching plus the XML and HTML decoders applied to fetched bodies."""

from __future__ import annotations

import logging
import re
from xml.parsers.expat import ExpatError

import httpx
import xmltodict
from bs4 import BeautifulSoup

from utils import RateLimiter

log = logging.getLogger(__name__)

_BLANK_RUN_RE = re.compile(r"\n\s*\n+")


class FetchError(Exception):
    """A GPO request came back with a non-2xx status."""

    def __init__(self, url: str, status_code: int):
        super().__init__(f"HTTP {status_code} for {url}")
        self.url = url
        self.status_code = status_code


def decode_xml(body: bytes | str) -> dict:
    """Parse an XML document into nested dicts/lists (attributes as '@name', text as '#text')."""
    return xmltodict.parse(body)


def html_to_text(html: bytes | str) -> str:
    """Plaintext rendition of an HTML page, with runs of blank lines collapsed."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    text = soup.get_text(separator="\n")
    return _BLANK_RUN_RE.sub("\n\n", text).strip()


class Fetcher:
    """HTTP GET for the document repository. Every request waits on the shared limiter."""

    def __init__(self, client: httpx.AsyncClient, limiter: RateLimiter, strict_status: bool = True):
        self.client = client
        self.limiter = limiter
        self.strict_status = strict_status

    async def fetch(self, url: str) -> bytes:
        """Return the raw response body. Transport errors propagate.

        With strict_status, a non-2xx response raises FetchError instead of
        handing an error page back as content.
        """
        resp = await self.limiter.submit(lambda: self.client.get(url))
        if self.strict_status and not resp.is_success:
            raise FetchError(url, resp.status_code)
        if not resp.is_success:
            log.debug("HTTP %s for %s (lenient mode, using body)", resp.status_code, url)
        return resp.content

    async def fetch_xml(self, url: str) -> dict:
        body = await self.fetch(url)
        try:
            return decode_xml(body)
        except ExpatError as e:
            log.error("Malformed XML from %s: %s", url, e)
            raise

    async def fetch_text(self, url: str) -> str:
        body = await self.fetch(url)
        return html_to_text(body)
