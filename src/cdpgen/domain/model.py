"""Semantic model of a protocol document.

Created once per run by :mod:`cdpgen.domain.parsing` and never mutated
afterwards. ``Type`` is a tagged union of five frozen dataclasses; each
variant carries its own ``optional`` flag, orthogonal to the variant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from cdpgen.domain.conventions import Identifier


class Primitive(StrEnum):
    """Primitive kinds, keyed by their schema tag."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    INTEGER = "integer"
    STRING = "string"
    ANY = "any"


@dataclass(frozen=True)
class TypePath:
    """``[Domain.]Type`` reference; ``domain`` is None for same-domain refs."""

    domain: Identifier | None
    name: Identifier

    def __str__(self) -> str:
        if self.domain is None:
            return self.name.original
        return f"{self.domain.original}.{self.name.original}"


# ---------------------------------------------------------------------------
# Type variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PrimitiveType:
    kind: Primitive
    optional: bool = False


@dataclass(frozen=True)
class ReferenceType:
    path: TypePath
    optional: bool = False


@dataclass(frozen=True)
class ArrayType:
    item_type: Type
    optional: bool = False


@dataclass(frozen=True)
class ObjectType:
    """Struct-like object; ``fields=None`` means an untyped key→Any map."""

    fields: tuple[Field, ...] | None = None
    optional: bool = False


@dataclass(frozen=True)
class EnumType:
    """String-literal union."""

    values: tuple[Identifier, ...]
    optional: bool = False


type Type = PrimitiveType | ReferenceType | ArrayType | ObjectType | EnumType


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Documentation:
    """Description text split into lines."""

    lines: tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> Documentation:
        return cls(tuple(text.split("\n")))


@dataclass(frozen=True)
class Field:
    name: Identifier
    type: Type
    description: Documentation | None = None
    experimental: bool = False
    deprecated: bool = False


@dataclass(frozen=True)
class TypeDeclaration:
    """Named top-level type: alias, struct, or enum."""

    id: Identifier
    type: Type
    description: Documentation | None = None
    experimental: bool = False
    deprecated: bool = False


@dataclass(frozen=True)
class Command:
    """Client-to-server operation with optional parameter and return groups."""

    name: Identifier
    description: Documentation | None = None
    experimental: bool = False
    deprecated: bool = False
    parameters: tuple[Field, ...] | None = None
    returns: tuple[Field, ...] | None = None

    def wire_id(self, domain: Identifier) -> str:
        return f"{domain.original}.{self.name.original}"


@dataclass(frozen=True)
class Event:
    """Server-to-client notification with an optional payload."""

    name: Identifier
    description: Documentation | None = None
    experimental: bool = False
    deprecated: bool = False
    parameters: tuple[Field, ...] | None = None

    def wire_id(self, domain: Identifier) -> str:
        return f"{domain.original}.{self.name.original}"


@dataclass(frozen=True)
class Domain:
    domain: Identifier
    description: Documentation | None = None
    experimental: bool = False
    deprecated: bool = False
    dependencies: tuple[Identifier, ...] | None = None
    types: tuple[TypeDeclaration, ...] | None = None
    commands: tuple[Command, ...] = ()
    events: tuple[Event, ...] = ()


@dataclass(frozen=True)
class ProtocolVersion:
    major: str
    minor: str

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


@dataclass(frozen=True)
class Protocol:
    """Root of the model: one version and an ordered list of domains."""

    version: ProtocolVersion
    domains: tuple[Domain, ...] = field(default_factory=tuple)

    def merged(self, *others: Protocol) -> Protocol:
        """Append the domains of *others*, keeping this document's version."""
        domains = list(self.domains)
        for other in others:
            domains.extend(other.domains)
        return Protocol(version=self.version, domains=tuple(domains))
