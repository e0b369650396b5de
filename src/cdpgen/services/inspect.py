"""InspectService — summarize a protocol without generating code.

Reports per-domain declaration counts, declared versus actually
referenced dependencies, and the dependency graph's cycles and
topological order.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from cdpgen.domain.errors import BindgenError
from cdpgen.infrastructure.graph.engine import DomainGraph
from cdpgen.services.base import BaseService
from cdpgen.services.result import ServiceResult
from cdpgen.services.telemetry import trace_span, traced


class InspectService(BaseService):
    """Read-only protocol analysis."""

    @traced
    def inspect(
        self,
        sources: Sequence[str] | None = None,
        *,
        offline: bool | None = None,
    ) -> ServiceResult:
        op = "inspect"
        try:
            protocol, loaded = self._load_protocol(sources, offline=offline)
        except BindgenError as exc:
            return self._failure(op, exc)

        with trace_span("graph"):
            graph = DomainGraph(protocol)
            rows: list[dict[str, Any]] = []
            for domain in protocol.domains:
                name = domain.domain.original
                rows.append(
                    {
                        "name": name,
                        "types": len(domain.types or ()),
                        "commands": len(domain.commands),
                        "events": len(domain.events),
                        "experimental": domain.experimental,
                        "deprecated": domain.deprecated,
                        "dependencies": graph.declared(name),
                        "references": graph.referenced(name),
                    }
                )
            cycles = graph.cycles()
            order = graph.topological_order()

        warnings = [
            f"{source} references {target} without declaring it"
            for source, target in graph.undeclared_references()
        ]
        warnings.extend(
            f"{source} depends on unknown domain {target}"
            for source, target in graph.unknown_domains()
        )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "version": str(protocol.version),
                "sources": [s.location for s in loaded],
                "domains": rows,
                "totals": {
                    "domains": len(rows),
                    "types": sum(r["types"] for r in rows),
                    "commands": sum(r["commands"] for r in rows),
                    "events": sum(r["events"] for r in rows),
                },
                "cycles": cycles,
                "order": order,
            },
            warnings=warnings,
        )
