"""GenerateService — schema sources in, Rust bindings out.

Pipeline: load → parse/merge → assemble → render → write. Any core
error aborts the run before anything is written.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from cdpgen.codegen.protocol import ProtocolGenerator, summarize
from cdpgen.codegen.render import render_file
from cdpgen.domain.errors import BindgenError
from cdpgen.infrastructure.filesystem import write_text_atomic
from cdpgen.services.base import BaseService
from cdpgen.services.result import ServiceResult, SourceSummary, dump_rows
from cdpgen.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class GenerateService(BaseService):
    """Generates the Rust binding module for one or more schema documents."""

    @traced
    def generate(
        self,
        sources: Sequence[str] | None = None,
        *,
        output: Path | None = None,
        overrides: dict[str, Any] | None = None,
        offline: bool | None = None,
    ) -> ServiceResult:
        """Generate bindings.

        Args:
            sources: Files or URLs; defaults to ``[sources].urls``.
            output: Destination file; defaults to ``[output].path``. When
                neither is set the rendered text is returned in
                ``data["source"]``.
            overrides: ``[generator]`` fields overriding the configured values.
            offline: Force (or forbid) cache-only loading for this run.
        """
        op = "generate"
        config = self._settings.generator
        if overrides:
            config = config.model_copy(update=overrides)

        try:
            protocol, loaded = self._load_protocol(sources, offline=offline)

            with trace_span("generate") as span:
                generator = ProtocolGenerator(config)
                file = generator.generate(protocol)
                if span:
                    span.annotate("domains", len(protocol.domains))

            with trace_span("render"):
                text = render_file(file)
        except BindgenError as exc:
            return self._failure(op, exc)

        modules = summarize(file)
        data: dict[str, Any] = {
            "version": str(protocol.version),
            "domains": len(protocol.domains),
            "sources": dump_rows(
                SourceSummary(location=s.location, origin=s.origin, bytes=s.size)
                for s in loaded
            ),
            "modules": modules,
            "structs": sum(m["structs"] for m in modules),
            "enums": sum(m["enums"] for m in modules),
            "aliases": sum(m["aliases"] for m in modules),
            "impls": sum(m["impls"] for m in modules),
            "boxed_fields": generator.report.boxed_fields,
            "enum_defaults": generator.report.enum_defaults,
            "bytes": len(text.encode("utf-8")),
        }

        warnings = [
            f"{s.location}: network unavailable, used cached copy"
            for s in loaded
            if s.origin == "cache" and not (offline or self._settings.sources.offline)
        ]

        target = output if output is not None else self._settings.output_path

        if target is None:
            data["source"] = text
        else:
            try:
                with trace_span("write"):
                    write_text_atomic(target, text)
            except OSError as exc:
                return ServiceResult.fail(
                    op,
                    "WRITE_FAILED",
                    f"Cannot write {target}: {exc.strerror or exc}",
                    warnings=warnings,
                    path=str(target),
                )
            data["path"] = str(target)
            logger.debug("Wrote %d bytes to %s", data["bytes"], target)

        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
