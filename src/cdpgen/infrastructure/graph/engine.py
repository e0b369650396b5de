"""DomainGraph — NetworkX view of inter-domain dependencies.

Built per invocation from a parsed protocol. Nodes are domain wire names;
an edge ``A -> B`` means domain ``A`` depends on ``B``, either because
``B`` is listed in ``A``'s ``dependencies`` (``declared=True``) or because
one of ``A``'s types refers to ``B.Something`` (``referenced=True``).
"""

from __future__ import annotations

from collections.abc import Iterator

import networkx as nx

from cdpgen.domain.model import (
    ArrayType,
    Domain,
    Field,
    ObjectType,
    Protocol,
    ReferenceType,
    Type,
)

type _Graph = nx.DiGraph


def _type_references(ty: Type) -> Iterator[str]:
    if isinstance(ty, ReferenceType):
        if ty.path.domain is not None:
            yield ty.path.domain.original
    elif isinstance(ty, ArrayType):
        yield from _type_references(ty.item_type)
    elif isinstance(ty, ObjectType):
        yield from _field_references(ty.fields or ())


def _field_references(fields: tuple[Field, ...]) -> Iterator[str]:
    for fld in fields:
        yield from _type_references(fld.type)


def referenced_domains(domain: Domain) -> set[str]:
    """Other domains named by qualified ``$ref``s anywhere in *domain*."""
    found: set[str] = set()
    for decl in domain.types or ():
        found.update(_type_references(decl.type))
    for cmd in domain.commands:
        found.update(_field_references(cmd.parameters or ()))
        found.update(_field_references(cmd.returns or ()))
    for evt in domain.events:
        found.update(_field_references(evt.parameters or ()))
    found.discard(domain.domain.original)
    return found


class DomainGraph:
    """Lazy-built dependency graph over the domains of one protocol."""

    def __init__(self, protocol: Protocol) -> None:
        self._protocol = protocol
        self._graph: _Graph | None = None

    @property
    def graph(self) -> _Graph:
        """Return the graph, building it on first access."""
        if self._graph is None:
            self._graph = self._build()
        return self._graph

    @property
    def domains(self) -> list[str]:
        return [d.domain.original for d in self._protocol.domains]

    def _build(self) -> _Graph:
        g: _Graph = nx.DiGraph()
        # All domains first so isolated ones are visible to algorithms
        for domain in self._protocol.domains:
            g.add_node(domain.domain.original, known=True)

        for domain in self._protocol.domains:
            source = domain.domain.original
            for dep in domain.dependencies or ():
                target = dep.original
                if target == source:
                    continue
                if target not in g:
                    g.add_node(target, known=False)
                g.add_edge(source, target, declared=True, referenced=False)
            for target in referenced_domains(domain):
                if target not in g:
                    g.add_node(target, known=False)
                if g.has_edge(source, target):
                    g.edges[source, target]["referenced"] = True
                else:
                    g.add_edge(source, target, declared=False, referenced=True)
        return g

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def declared(self, domain: str) -> list[str]:
        return sorted(
            t for t in self.graph.successors(domain) if self.graph.edges[domain, t]["declared"]
        )

    def referenced(self, domain: str) -> list[str]:
        return sorted(
            t for t in self.graph.successors(domain) if self.graph.edges[domain, t]["referenced"]
        )

    def undeclared_references(self) -> list[tuple[str, str]]:
        """``(domain, target)`` pairs referenced through ``$ref`` but not declared."""
        return sorted(
            (s, t)
            for s, t, data in self.graph.edges(data=True)
            if data["referenced"] and not data["declared"]
        )

    def unknown_domains(self) -> list[tuple[str, str]]:
        """``(domain, target)`` pairs whose target is not a domain of the protocol."""
        return sorted(
            (s, t) for s, t in self.graph.edges() if not self.graph.nodes[t].get("known", False)
        )

    def cycles(self) -> list[list[str]]:
        """Dependency cycles, each rotated to start at its smallest member."""
        found: list[list[str]] = []
        for cycle in nx.simple_cycles(self.graph):
            start = cycle.index(min(cycle))
            found.append(cycle[start:] + cycle[:start])
        return sorted(found)

    def topological_order(self) -> list[str] | None:
        """Known domains with dependencies first, or None when cyclic."""
        known = self.graph.subgraph(n for n, d in self.graph.nodes(data=True) if d.get("known"))
        try:
            order = list(nx.lexicographical_topological_sort(known.reverse(copy=True)))
        except nx.NetworkXUnfeasible:
            return None
        return order
