"""Configuration: crawl year range, GPO endpoints, rate limit, Elasticsearch connection."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

log = logging.getLogger(__name__)

# Load .env from the project root (won't override existing env vars)
load_dotenv(Path(__file__).parent / ".env")

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_FIRST_YEAR = 1993
DEFAULT_LAST_YEAR = 2017
DEFAULT_REQUESTS_PER_SECOND = 5.0

GPO_ROOT = "https://www.gpo.gov"
SITEMAP_URL_TEMPLATE = "{root}/smap/fdsys/sitemap_{year}/{year}_CHRG_sitemap.xml"
CONTENT_URL_TEMPLATE = "{root}/fdsys/pkg/{page_id}/html/{page_id}.htm"

ELASTIC_HOST = "http://localhost:9200"
ELASTIC_INDEX = "hearings"


def env_bool(name: str, default: str = "false") -> bool:
    value = os.environ.get(name, default).strip().lower()
    return value in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


# ---------------------------------------------------------------------------
# Elasticsearch connection: read from environment each call so tests / late-set vars work
# ---------------------------------------------------------------------------

def get_elastic_host() -> str:
    return os.environ.get("ELASTIC_HOST", ELASTIC_HOST)


def normalize_elastic_host(host: str) -> str:
    """Return an http(s) URL for ``host``. Raises ValueError.

    A bare ``host`` or ``host:port`` gets http://, and :9200 when it has no port.
    """
    bare = "://" not in host.strip()
    url = f"http://{host.strip()}" if bare else host.strip()
    parsed = urlparse(url.rstrip("/"))
    if parsed.scheme not in {"http", "https"} or not parsed.hostname:
        raise ValueError(f"ELASTIC_HOST must be an http(s) URL or host:port, got {host!r}")
    try:
        port = parsed.port
    except ValueError:
        raise ValueError(f"ELASTIC_HOST has an invalid port: {host!r}") from None
    if bare and port is None:
        parsed = parsed._replace(netloc=f"{parsed.netloc}:9200")
    return parsed.geturl()


def get_elastic_auth() -> tuple[str, str] | None:
    """Return (user, password) for basic auth, or None when either is missing."""
    user = os.environ.get("ELASTIC_USER", "")
    password = os.environ.get("ELASTIC_PASSWORD", "")
    if not user or not password:
        if user or password:
            log.warning("Only one of ELASTIC_USER / ELASTIC_PASSWORD is set; connecting without auth")
        return None
    return user, password


# ---------------------------------------------------------------------------
# Run settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Settings:
    first_year: int
    last_year: int
    requests_per_second: float
    sitemap_url_template: str
    content_url_template: str
    strict_status: bool
    http_timeout: float
    elastic_host: str
    elastic_auth: tuple[str, str] | None
    elastic_index: str

    @property
    def years(self) -> range:
        """Inclusive crawl range, ascending."""
        return range(self.first_year, self.last_year + 1)


def load_settings() -> Settings:
    """Read settings from the environment once. Raises ValueError on bad values."""
    first_year = _env_int("HEARINGS_FIRST_YEAR", DEFAULT_FIRST_YEAR)
    last_year = _env_int("HEARINGS_LAST_YEAR", DEFAULT_LAST_YEAR)
    if first_year > last_year:
        raise ValueError(f"HEARINGS_FIRST_YEAR ({first_year}) is after HEARINGS_LAST_YEAR ({last_year})")

    rps = _env_float("GPO_REQUESTS_PER_SECOND", DEFAULT_REQUESTS_PER_SECOND)
    if rps <= 0:
        raise ValueError(f"GPO_REQUESTS_PER_SECOND must be positive, got {rps!r}")

    timeout = _env_float("HTTP_TIMEOUT", 30.0)
    if timeout <= 0:
        raise ValueError(f"HTTP_TIMEOUT must be positive, got {timeout!r}")

    # Templates may reference {root}; expand it now so later code only fills year/page_id
    root = os.environ.get("GPO_ROOT", GPO_ROOT).rstrip("/")
    sitemap_template = os.environ.get("GPO_SITEMAP_URL_TEMPLATE", SITEMAP_URL_TEMPLATE)
    content_template = os.environ.get("GPO_CONTENT_URL_TEMPLATE", CONTENT_URL_TEMPLATE)

    return Settings(
        first_year=first_year,
        last_year=last_year,
        requests_per_second=rps,
        sitemap_url_template=sitemap_template.replace("{root}", root),
        content_url_template=content_template.replace("{root}", root),
        strict_status=env_bool("GPO_STRICT_STATUS", "true"),
        http_timeout=timeout,
        elastic_host=normalize_elastic_host(get_elastic_host()),
        elastic_auth=get_elastic_auth(),
        elastic_index=os.environ.get("ELASTIC_INDEX", ELASTIC_INDEX),
    )
