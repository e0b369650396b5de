"""FetchService — download schema documents into the local cache."""

from __future__ import annotations

from collections.abc import Sequence

from cdpgen.domain.errors import BindgenError, SourceUnavailableError
from cdpgen.infrastructure.sources import is_remote
from cdpgen.services.base import BaseService
from cdpgen.services.result import FetchedSource, FetchFailure, ServiceResult, dump_rows
from cdpgen.services.telemetry import traced


class FetchService(BaseService):
    """Refreshes cached copies of remote schema documents."""

    @traced
    def fetch(self, urls: Sequence[str] | None = None) -> ServiceResult:
        """Download every URL and store it in the cache.

        A URL that cannot be downloaded, or whose cache file cannot be
        written, lands in ``error.detail["failed"]``; the remaining URLs
        are still attempted.
        """
        op = "fetch"
        if self._settings.sources.offline:
            return ServiceResult.fail(
                op,
                SourceUnavailableError.code,
                "Cannot fetch while [sources].offline is enabled",
            )

        fetched: list[FetchedSource] = []
        failed: list[FetchFailure] = []
        warnings: list[str] = []
        with self._loader(offline=False) as loader:
            for url in self._locations(urls):
                if not is_remote(url):
                    warnings.append(f"Skipped {url}: not an http(s) URL")
                    continue
                try:
                    source, path = loader.fetch(url)
                except BindgenError as exc:
                    failed.append(FetchFailure.from_exception(url, exc))
                    continue
                fetched.append(FetchedSource(url=url, bytes=source.size, path=str(path)))

        if failed:
            # Mixed failures report the first one's code.
            return ServiceResult.fail(
                op,
                failed[0].code,
                f"{len(failed)} of {len(failed) + len(fetched)} sources failed",
                warnings=warnings,
                failed=dump_rows(failed),
                fetched=dump_rows(fetched),
            )
        return ServiceResult(
            ok=True, op=op, data={"fetched": dump_rows(fetched)}, warnings=warnings
        )

