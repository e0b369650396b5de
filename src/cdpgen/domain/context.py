"""Parse-position context stack.

Resolution always knows how deep it is and through which named
ancestors it arrived, so anonymous inline shapes can be given plausible
names. The stack has exactly four levels::

    Protocol -> Domain(d) -> Item(d, i) -> Field(d, i, f)

Advancing past ``Field`` yields ``None``: deeper nesting is unsupported.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from cdpgen.domain.conventions import Identifier, to_snake, type_ident


class ContextLevel(IntEnum):
    """Depth of a :class:`Context`; the value is the number of named levels."""

    PROTOCOL = 0
    DOMAIN = 1
    ITEM = 2
    FIELD = 3


@dataclass(frozen=True)
class Context:
    """Immutable, appendable stack of named ancestors."""

    levels: tuple[Identifier, ...] = ()

    @classmethod
    def protocol(cls) -> Context:
        return cls()

    @property
    def level(self) -> ContextLevel:
        return ContextLevel(len(self.levels))

    @property
    def domain(self) -> Identifier | None:
        return self.levels[0] if len(self.levels) > 0 else None

    @property
    def item(self) -> Identifier | None:
        return self.levels[1] if len(self.levels) > 1 else None

    @property
    def field(self) -> Identifier | None:
        return self.levels[2] if len(self.levels) > 2 else None

    def next(self, ident: Identifier) -> Context | None:
        """Push *ident*, or return None when already at ``Field`` depth."""
        if self.level is ContextLevel.FIELD:
            return None
        return Context((*self.levels, ident))

    def inline_enum_name(self, *, include_domain: bool = False) -> Identifier:
        """Synthesize a top-level type name for an enum declared inline in a field.

        Each remaining level's wire spelling is folded to ``lower_snake``,
        the pieces are joined with ``_``, and the Type convention is
        re-applied: ``Item("Badger")`` + ``Field("HungerLevel")`` gives
        ``BadgerHungerLevel``. The domain level is dropped unless
        *include_domain* is set.
        """
        parts = self.levels if include_domain else self.levels[1:]
        return type_ident("_".join(to_snake(part.original) for part in parts))

    def __repr__(self) -> str:
        names = ", ".join(part.original for part in self.levels)
        return f"Context.{self.level.name}({names})"
