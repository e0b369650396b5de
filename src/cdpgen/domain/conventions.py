"""Naming conventions and convention-tagged identifiers.

Each protocol entity kind owns a fixed convention (DESIGN.md "Naming"):

- Domain  -> ``lower_snake`` (a Rust ``mod``)
- Type    -> ``UpperCamel``
- Command -> ``UpperCamel``
- Event   -> ``UpperCamel`` + literal ``Event`` suffix
- Field   -> ``lower_snake``

Word splitting follows the usual case-conversion boundaries: ``_``,
``-`` and spaces separate words, as do lower→upper, acronym→word
(``DOMStorage`` → ``DOM`` + ``Storage``) and letter↔digit transitions.

INVARIANT: An :class:`Identifier` always keeps its original wire
spelling. The cased spelling is derived, never stored in place of it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from cdpgen.domain.errors import UnescapableIdentifier

# Strict and reserved keywords of the 2021 edition.
# fmt: off
RUST_KEYWORDS = frozenset({
    "as", "async", "await", "break", "const", "continue", "crate", "dyn", "else",
    "enum", "extern", "false", "fn", "for", "if", "impl", "in", "let", "loop",
    "match", "mod", "move", "mut", "pub", "ref", "return", "self", "Self",
    "static", "struct", "super", "trait", "true", "type", "unsafe", "use",
    "where", "while", "abstract", "become", "box", "do", "final", "macro",
    "override", "priv", "try", "typeof", "unsized", "virtual", "yield",
})
# fmt: on

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_DELIMITERS = frozenset("_- ")


class Convention(StrEnum):
    """Naming convention owned by each entity kind."""

    DOMAIN = "domain"
    TYPE = "type"
    COMMAND = "command"
    EVENT = "event"
    FIELD = "field"


def split_words(text: str) -> list[str]:
    """Split *text* into words on delimiters and case/digit boundaries."""
    words: list[str] = []
    current: list[str] = []

    def flush() -> None:
        if current:
            words.append("".join(current))
            current.clear()

    for i, ch in enumerate(text):
        if ch in _DELIMITERS:
            flush()
            continue
        if current:
            prev = current[-1]
            nxt = text[i + 1] if i + 1 < len(text) else ""
            if (
                (prev.islower() and ch.isupper())
                or (prev.isupper() and ch.isupper() and nxt.islower())
                or (prev.isalpha() and ch.isdigit())
                or (prev.isdigit() and ch.isalpha())
            ):
                flush()
        current.append(ch)
    flush()
    return words


def to_snake(text: str) -> str:
    """``callFrames`` → ``call_frames``."""
    return "_".join(word.lower() for word in split_words(text))


def to_pascal(text: str) -> str:
    """``call-frames`` → ``CallFrames``."""
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(text))


def apply_case(convention: Convention, text: str) -> str:
    """Apply *convention*'s case transform (and suffix) to *text*."""
    if convention in (Convention.DOMAIN, Convention.FIELD):
        return to_snake(text)
    if convention is Convention.EVENT:
        return f"{to_pascal(text)}Event"
    return to_pascal(text)


def is_valid_identifier(text: str) -> bool:
    """Return True when *text* is usable as a bare Rust identifier."""
    return bool(_IDENT_RE.match(text)) and text != "_" and text not in RUST_KEYWORDS


def escape_identifier(original: str, cased: str) -> str:
    """Return *cased*, or ``cased_`` on a keyword collision.

    Raises:
        UnescapableIdentifier: Neither spelling is a valid identifier.
    """
    if is_valid_identifier(cased):
        return cased
    escaped = f"{cased}_"
    if is_valid_identifier(escaped):
        return escaped
    raise UnescapableIdentifier(original, cased)


@dataclass(frozen=True)
class Identifier:
    """A wire identifier tagged with its naming convention.

    Attributes:
        original: Spelling exactly as it appears in the schema.
        convention: Convention that determines the cased spelling.
    """

    original: str
    convention: Convention

    @property
    def cased(self) -> str:
        """Case-converted spelling, before keyword escaping."""
        return apply_case(self.convention, self.original)

    @property
    def ident(self) -> str:
        """Output identifier: cased and escaped if it collides with a keyword."""
        return escape_identifier(self.original, self.cased)

    def __str__(self) -> str:
        return self.ident


def domain_ident(raw: str) -> Identifier:
    return Identifier(raw, Convention.DOMAIN)


def type_ident(raw: str) -> Identifier:
    return Identifier(raw, Convention.TYPE)


def command_ident(raw: str) -> Identifier:
    return Identifier(raw, Convention.COMMAND)


def event_ident(raw: str) -> Identifier:
    return Identifier(raw, Convention.EVENT)


def field_ident(raw: str) -> Identifier:
    return Identifier(raw, Convention.FIELD)
