"""Error taxonomy for the generation pipeline.

INVARIANT: Every error is fatal for the run. There is no partial output:
a single malformed domain aborts generation of the whole protocol unit.

Each class carries a stable ``code`` that services copy into
:class:`~cdpgen.services.result.ServiceError`.
"""

from __future__ import annotations


class BindgenError(Exception):
    """Base class for all generator failures."""

    code = "BINDGEN_ERROR"

    def __init__(self, message: str, *, location: str | None = None) -> None:
        self.message = message
        self.location = location
        self.source: str | None = None
        super().__init__(f"{message} (at {location})" if location else message)


# ---------------------------------------------------------------------------
# Schema parse errors
# ---------------------------------------------------------------------------


class SchemaParseError(BindgenError, ValueError):
    """Structural problem in the raw schema document."""

    code = "SCHEMA_PARSE"


class MissingKeyError(SchemaParseError):
    """A mandatory key (``name``, ``id``, ``domain``, ``version``...) is absent."""

    code = "MISSING_KEY"

    def __init__(self, key: str, owner: str, *, location: str | None = None) -> None:
        self.key = key
        super().__init__(f"Missing key `{key}` from {owner} declaration", location=location)


class MissingTypeField(SchemaParseError):
    """A type node matched no discriminator and has no ``type`` key."""

    code = "MISSING_TYPE_FIELD"

    def __init__(self, *, location: str | None = None) -> None:
        super().__init__("Type declaration missing `type` field", location=location)


class MissingItemsField(SchemaParseError):
    """An ``array`` type node has no ``items`` sub-node."""

    code = "MISSING_ITEMS_FIELD"

    def __init__(self, *, location: str | None = None) -> None:
        super().__init__("Array type declaration missing `items` field", location=location)


class InvalidFlagError(SchemaParseError):
    """``deprecated``/``experimental`` present with a value other than ``true``."""

    code = "INVALID_FLAG"

    def __init__(self, flag: str, value: object, *, location: str | None = None) -> None:
        self.flag = flag
        super().__init__(
            f"`{flag}`, if defined, should always be `true` (got {value!r})",
            location=location,
        )


class UnknownPrimitiveError(SchemaParseError):
    """The ``type`` tag names no known primitive."""

    code = "UNKNOWN_PRIMITIVE"

    def __init__(self, tag: object, *, location: str | None = None) -> None:
        self.tag = tag
        super().__init__(f"Invalid primitive type `{tag}`", location=location)


# ---------------------------------------------------------------------------
# Naming, structural-support and context-depth errors
# ---------------------------------------------------------------------------


class UnescapableIdentifier(BindgenError, ValueError):
    """Identifier is invalid even after the trailing-underscore fallback."""

    code = "UNESCAPABLE_IDENTIFIER"

    def __init__(self, original: str, cased: str) -> None:
        self.original = original
        self.cased = cased
        super().__init__(f"Could not escape identifier {original!r} (cased as {cased!r})")


class UnsupportedNestedComplexType(BindgenError, TypeError):
    """An anonymous struct/enum appeared where only a type reference is allowed."""

    code = "UNSUPPORTED_NESTING"


class ContextDepthError(BindgenError, NotImplementedError):
    """Resolution descended past the four supported context levels."""

    code = "CONTEXT_DEPTH"


class SourceUnavailableError(BindgenError, OSError):
    """A schema source could not be read, fetched, or recovered from cache."""

    code = "SOURCE_UNAVAILABLE"


class CacheWriteError(BindgenError, OSError):
    """A fetched schema could not be stored in the local cache."""

    code = "CACHE_WRITE_FAILED"


class DuplicateDeclarationError(BindgenError, ValueError):
    """Two different declarations in one domain module share a Rust name."""

    code = "DUPLICATE_DECLARATION"
