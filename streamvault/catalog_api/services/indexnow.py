"""IndexNow submission of catalog URLs to search engines."""
from __future__ import annotations

import logging
import secrets
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

import httpx

from ..utils.paths import ensure_parent_directory

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://www.bing.com/indexnow"
MAX_URLS_PER_REQUEST = 10_000
SITEMAP_NS = "{http://www.sitemaps.org/schemas/sitemap/0.9}"


class IndexNowError(RuntimeError):
    """Raised when submissions cannot be prepared."""


@dataclass(slots=True)
class IndexNowResult:
    """Outcome of submitting a URL list."""

    submitted: int = 0
    batches: int = 0
    failed_batches: list[int] = field(default_factory=list)


def load_or_create_key(path: Path) -> str:
    """Return the 32-character key stored at ``path``, generating one if needed."""

    if path.exists():
        key = path.read_text(encoding="utf-8").strip()
        if len(key) == 32:
            return key
        logger.warning("Ignoring malformed IndexNow key in %s", path)
    key = secrets.token_hex(16)
    ensure_parent_directory(path).write_text(key, encoding="utf-8")
    logger.info("Generated new IndexNow key; publish %s.txt at the site root", key)
    return key


def extract_sitemap_urls(xml_text: str) -> list[str]:
    """Return every ``<loc>`` of a urlset, ignoring image locations."""

    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise IndexNowError(f"Invalid sitemap XML: {exc}") from exc
    return [
        loc.text.strip()
        for url in root.findall(f"{SITEMAP_NS}url")
        for loc in url.findall(f"{SITEMAP_NS}loc")
        if loc.text
    ]


class IndexNowClient:
    """Post URL batches to an IndexNow endpoint."""

    def __init__(
        self,
        *,
        site_url: str,
        key: str,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._site_url = site_url.rstrip("/")
        self._key = key
        self._endpoint = endpoint
        self._timeout = timeout
        self._transport = transport

    def submit(self, urls: list[str]) -> IndexNowResult:
        """Submit ``urls`` in batches; 200 and 202 responses count as accepted."""

        result = IndexNowResult()
        host = urlparse(self._site_url).hostname
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            for start in range(0, len(urls), MAX_URLS_PER_REQUEST):
                batch = urls[start : start + MAX_URLS_PER_REQUEST]
                result.batches += 1
                try:
                    response = client.post(
                        self._endpoint,
                        json={
                            "host": host,
                            "key": self._key,
                            "keyLocation": f"{self._site_url}/{self._key}.txt",
                            "urlList": batch,
                        },
                    )
                except httpx.HTTPError as exc:
                    logger.error("IndexNow batch %d failed: %s", result.batches, exc)
                    result.failed_batches.append(result.batches)
                    continue
                if response.status_code in (200, 202):
                    result.submitted += len(batch)
                else:
                    logger.error(
                        "IndexNow batch %d rejected with HTTP %d", result.batches, response.status_code
                    )
                    result.failed_batches.append(result.batches)
        return result
