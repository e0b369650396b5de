"""BaseService — shared foundation for all cdpgen services.

Every service receives the resolved :class:`CdpSettings` at construction
time. Sources are loaded through a :class:`SourceLoader` configured from
the ``[sources]`` section; tests inject an httpx transport instead of
touching the network.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from cdpgen.config.logging import run_context
from cdpgen.domain.errors import BindgenError
from cdpgen.domain.model import Protocol
from cdpgen.domain.parsing import loads_protocol, merge_protocols
from cdpgen.infrastructure.sources import SchemaSource, SourceLoader
from cdpgen.services.result import ServiceError, ServiceResult
from cdpgen.services.telemetry import trace_span

if TYPE_CHECKING:
    import httpx

    from cdpgen.config.settings import CdpSettings

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class GenerateService(BaseService):
            @traced
            def generate(self, sources=None) -> ServiceResult:
                protocol, loaded = self._load_protocol(sources)
                ...
    """

    def __init__(
        self,
        settings: CdpSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _loader(self, *, offline: bool | None = None) -> SourceLoader:
        sources = self._settings.sources
        return SourceLoader(
            self._settings.cache_dir,
            timeout=sources.timeout,
            offline=sources.offline if offline is None else offline,
            transport=self._transport,
        )

    def _locations(self, sources: Sequence[str] | None) -> list[str]:
        """Explicit *sources*, or the configured default URLs."""
        return list(sources) if sources else list(self._settings.sources.urls)

    def _load_protocol(
        self,
        sources: Sequence[str] | None,
        *,
        offline: bool | None = None,
    ) -> tuple[Protocol, list[SchemaSource]]:
        """Load, parse, and merge every source into one protocol.

        Raises:
            BindgenError: Any source is unavailable or malformed. Parse
                errors carry the offending location in ``source``.
        """
        locations = self._locations(sources)
        with trace_span("load") as span, self._loader(offline=offline) as loader:
            loaded = loader.load_all(locations)
            if span:
                span.annotate("sources", len(loaded))

        protocols: list[Protocol] = []
        with trace_span("parse"):
            for source in loaded:
                with run_context(source=source.location):
                    try:
                        protocols.append(loads_protocol(source.text))
                    except BindgenError as exc:
                        exc.source = source.location
                        raise
            protocol = merge_protocols(protocols)
        logger.debug(
            "Parsed %d domains from %d sources", len(protocol.domains), len(loaded)
        )
        return protocol, loaded

    @staticmethod
    def _failure(op: str, exc: BindgenError, **detail: Any) -> ServiceResult:
        """Translate a core error into an error :class:`ServiceResult`."""
        logger.debug("%s failed: %s", op, exc)
        return ServiceResult(
            ok=False, op=op, error=ServiceError.from_exception(exc, **detail)
        )
