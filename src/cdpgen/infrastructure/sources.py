"""Schema source loading with a local cache fallback.

A location is either a file path or an ``http(s)`` URL. URLs are fetched
with httpx; each successful fetch refreshes the cached copy, and a
failed fetch falls back to it. With ``offline=True`` the network is
never touched and only the cache is consulted.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Literal
from urllib.parse import urlparse

import httpx

from cdpgen.config.logging import run_context
from cdpgen.domain.errors import CacheWriteError, SourceUnavailableError
from cdpgen.infrastructure.filesystem import write_text_atomic

logger = logging.getLogger(__name__)

type Origin = Literal["file", "remote", "cache"]


@dataclass(frozen=True)
class SchemaSource:
    """Raw schema text and where it actually came from."""

    location: str
    text: str
    origin: Origin

    @property
    def size(self) -> int:
        return len(self.text.encode("utf-8"))


def is_remote(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def cache_path(cache_dir: Path, url: str) -> Path:
    """Stable cache filename for *url*: short digest plus the URL's basename."""
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]
    basename = Path(urlparse(url).path).name or "schema.json"
    return cache_dir / f"{digest}-{basename}"


class SourceLoader:
    """Loads schema documents from files, URLs, or the cache."""

    def __init__(
        self,
        cache_dir: Path,
        *,
        timeout: float = 30.0,
        offline: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.cache_dir = cache_dir
        self.timeout = timeout
        self.offline = offline
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> SourceLoader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self, location: str) -> SchemaSource:
        """Load one location, falling back to the cache when a fetch fails.

        A download that succeeds is returned even when the cache cannot
        be refreshed; the failed refresh is only logged.
        """
        with run_context(source=location):
            return self._load(location)

    def _load(self, location: str) -> SchemaSource:
        if not is_remote(location):
            return self._load_file(location)
        if self.offline:
            return self._load_cached(location, reason="offline mode")
        try:
            source = self.download(location)
        except SourceUnavailableError as exc:
            logger.warning("Fetch failed for %s, trying cache: %s", location, exc.message)
            return self._load_cached(location, reason=exc.message)
        try:
            self.store(source)
        except CacheWriteError as exc:
            logger.warning("Using %s without caching it: %s", location, exc.message)
        return source

    def load_all(self, locations: Iterable[str]) -> list[SchemaSource]:
        return [self.load(location) for location in locations]

    def fetch(self, url: str) -> tuple[SchemaSource, Path]:
        """Download *url* and refresh its cached copy.

        Raises:
            SourceUnavailableError: Network error or non-success status.
            CacheWriteError: The download succeeded but the cache is not writable.
        """
        source = self.download(url)
        return source, self.store(source)

    def download(self, url: str) -> SchemaSource:
        """GET *url* without touching the cache."""
        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            msg = f"Timed out fetching {url}"
            raise SourceUnavailableError(msg, location=url) from exc
        except httpx.HTTPStatusError as exc:
            msg = f"HTTP {exc.response.status_code} fetching {url}"
            raise SourceUnavailableError(msg, location=url) from exc
        except httpx.HTTPError as exc:
            msg = f"Could not fetch {url}: {exc}"
            raise SourceUnavailableError(msg, location=url) from exc

        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return SchemaSource(location=url, text=response.text, origin="remote")

    def store(self, source: SchemaSource) -> Path:
        """Write *source* to its cache file and return the file path."""
        target = cache_path(self.cache_dir, source.location)
        try:
            write_text_atomic(target, source.text)
        except OSError as exc:
            msg = f"Cannot cache {source.location} at {target}: {exc.strerror or exc}"
            raise CacheWriteError(msg, location=source.location) from exc
        logger.debug("Cached %s at %s", source.location, target)
        return target

    def _load_file(self, location: str) -> SchemaSource:
        path = Path(location)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot read schema file {location}: {exc.strerror or exc}"
            raise SourceUnavailableError(msg, location=location) from exc
        logger.debug("Loaded %s (%d bytes)", location, len(text))
        return SchemaSource(location=location, text=text, origin="file")

    def _load_cached(self, url: str, *, reason: str) -> SchemaSource:
        target = cache_path(self.cache_dir, url)
        try:
            text = target.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            msg = f"No cached copy of {url} ({reason})"
            raise SourceUnavailableError(msg, location=url) from exc
        except OSError as exc:
            msg = f"Cannot read cached copy of {url}: {exc.strerror or exc}"
            raise SourceUnavailableError(msg, location=url) from exc
        logger.debug("Using cached copy of %s from %s", url, target)
        return SchemaSource(location=url, text=text, origin="cache")
