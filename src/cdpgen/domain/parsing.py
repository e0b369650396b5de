"""Schema parser — raw JSON into the semantic model.

The schema is a tag-less discriminated-union dialect: a field's own
metadata (``name``, ``description``, flags) shares one JSON object with
its type-tag keys. Field and declaration parsing therefore pops the
admin keys first and re-reads the *remaining* keys as a type node.

Type discriminators are tried in strict priority order:

1. ``$ref``  → :class:`ReferenceType`
2. ``enum``  → :class:`EnumType` (declared kind must be ``string``)
3. ``type == "array"``  → :class:`ArrayType` (``items`` required)
4. ``type == "object"`` → :class:`ObjectType` (``properties`` optional)
5. otherwise a primitive named by ``type``

Any failure raises a :class:`SchemaParseError` subclass carrying a JSON
path to the offending node; the whole run aborts.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from cdpgen.domain.conventions import (
    Identifier,
    command_ident,
    domain_ident,
    event_ident,
    field_ident,
    type_ident,
)
from cdpgen.domain.errors import (
    InvalidFlagError,
    MissingItemsField,
    MissingKeyError,
    MissingTypeField,
    SchemaParseError,
    UnknownPrimitiveError,
)
from cdpgen.domain.model import (
    ArrayType,
    Command,
    Documentation,
    Domain,
    EnumType,
    Event,
    Field,
    ObjectType,
    Primitive,
    PrimitiveType,
    Protocol,
    ProtocolVersion,
    ReferenceType,
    Type,
    TypeDeclaration,
    TypePath,
)

_T = TypeVar("_T")

_PRIMITIVES: dict[str, Primitive] = {p.value: p for p in Primitive}


# ---------------------------------------------------------------------------
# Raw-map helpers
# ---------------------------------------------------------------------------


def _expect_object(node: Any, loc: str) -> dict[str, Any]:
    if not isinstance(node, dict):
        msg = f"Expected a JSON object, got {type(node).__name__}"
        raise SchemaParseError(msg, location=loc)
    return dict(node)


def _expect_str(value: Any, key: str, loc: str) -> str:
    if not isinstance(value, str):
        msg = f"`{key}` must be a string, got {type(value).__name__}"
        raise SchemaParseError(msg, location=loc)
    return value


def _take_str(raw: dict[str, Any], key: str, owner: str, loc: str) -> str:
    if key not in raw:
        raise MissingKeyError(key, owner, location=loc)
    return _expect_str(raw.pop(key), key, loc)


def _take_flag(raw: dict[str, Any], key: str, loc: str) -> bool:
    """Pop a ``deprecated``/``experimental`` flag; present means ``true``."""
    if key not in raw:
        return False
    value = raw.pop(key)
    if value is not True:
        raise InvalidFlagError(key, value, location=loc)
    return True


def _take_description(raw: dict[str, Any], loc: str) -> Documentation | None:
    if "description" not in raw:
        return None
    return Documentation.from_text(_expect_str(raw.pop("description"), "description", loc))


def _take_list(
    raw: dict[str, Any],
    key: str,
    loc: str,
    parse: Callable[[Any, str], _T],
) -> tuple[_T, ...] | None:
    if key not in raw:
        return None
    value = raw.pop(key)
    if not isinstance(value, list):
        msg = f"`{key}` must be a list, got {type(value).__name__}"
        raise SchemaParseError(msg, location=loc)
    return tuple(parse(item, f"{loc}.{key}[{i}]") for i, item in enumerate(value))


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def parse_type_path(raw: str) -> TypePath:
    """``"Runtime.RemoteObject"`` → (runtime, RemoteObject); no dot ⇒ same domain."""
    domain, sep, name = raw.partition(".")
    if not sep:
        return TypePath(None, type_ident(raw))
    return TypePath(domain_ident(domain), type_ident(name))


def parse_type(node: Any, loc: str = "$") -> Type:
    """Interpret a raw object node as a :data:`Type`."""
    raw = _expect_object(node, loc)

    optional = False
    if "optional" in raw:
        value = raw.pop("optional")
        if not isinstance(value, bool):
            msg = f"`optional` must be a boolean, got {value!r}"
            raise SchemaParseError(msg, location=loc)
        optional = value

    if "$ref" in raw:
        path = parse_type_path(_expect_str(raw.pop("$ref"), "$ref", loc))
        return ReferenceType(path=path, optional=optional)

    if "enum" in raw:
        values = raw.pop("enum")
        if not isinstance(values, list):
            msg = "`enum` must be a list of strings"
            raise SchemaParseError(msg, location=loc)
        declared = raw.get("type")
        if declared is None:
            raise MissingTypeField(location=loc)
        if declared != Primitive.STRING:
            msg = f"Only string enums are supported (declared `{declared}`)"
            raise SchemaParseError(msg, location=loc)
        return EnumType(
            values=tuple(
                type_ident(_expect_str(v, f"enum[{i}]", loc)) for i, v in enumerate(values)
            ),
            optional=optional,
        )

    if "type" not in raw:
        raise MissingTypeField(location=loc)
    declared = raw["type"]

    if declared == "array":
        if "items" not in raw:
            raise MissingItemsField(location=loc)
        item_type = parse_type(raw.pop("items"), f"{loc}.items")
        return ArrayType(item_type=item_type, optional=optional)

    if declared == "object":
        fields = _take_list(raw, "properties", loc, parse_field)
        return ObjectType(fields=fields, optional=optional)

    kind = _PRIMITIVES.get(declared) if isinstance(declared, str) else None
    if kind is None:
        raise UnknownPrimitiveError(declared, location=loc)
    return PrimitiveType(kind=kind, optional=optional)


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


def parse_field(node: Any, loc: str = "$") -> Field:
    raw = _expect_object(node, loc)
    name = field_ident(_take_str(raw, "name", "Field", loc))
    description = _take_description(raw, loc)
    experimental = _take_flag(raw, "experimental", loc)
    deprecated = _take_flag(raw, "deprecated", loc)
    return Field(
        name=name,
        type=parse_type(raw, loc),
        description=description,
        experimental=experimental,
        deprecated=deprecated,
    )


def parse_type_declaration(node: Any, loc: str = "$") -> TypeDeclaration:
    raw = _expect_object(node, loc)
    ident = type_ident(_take_str(raw, "id", "TypeDeclaration", loc))
    description = _take_description(raw, loc)
    experimental = _take_flag(raw, "experimental", loc)
    deprecated = _take_flag(raw, "deprecated", loc)
    return TypeDeclaration(
        id=ident,
        type=parse_type(raw, loc),
        description=description,
        experimental=experimental,
        deprecated=deprecated,
    )


def parse_command(node: Any, loc: str = "$") -> Command:
    raw = _expect_object(node, loc)
    return Command(
        name=command_ident(_take_str(raw, "name", "Command", loc)),
        description=_take_description(raw, loc),
        experimental=_take_flag(raw, "experimental", loc),
        deprecated=_take_flag(raw, "deprecated", loc),
        parameters=_take_list(raw, "parameters", loc, parse_field),
        returns=_take_list(raw, "returns", loc, parse_field),
    )


def parse_event(node: Any, loc: str = "$") -> Event:
    raw = _expect_object(node, loc)
    return Event(
        name=event_ident(_take_str(raw, "name", "Event", loc)),
        description=_take_description(raw, loc),
        experimental=_take_flag(raw, "experimental", loc),
        deprecated=_take_flag(raw, "deprecated", loc),
        parameters=_take_list(raw, "parameters", loc, parse_field),
    )


def _parse_dependency(node: Any, loc: str) -> Identifier:
    return domain_ident(_expect_str(node, "dependencies", loc))


def parse_domain(node: Any, loc: str = "$") -> Domain:
    raw = _expect_object(node, loc)
    return Domain(
        domain=domain_ident(_take_str(raw, "domain", "Domain", loc)),
        description=_take_description(raw, loc),
        experimental=_take_flag(raw, "experimental", loc),
        deprecated=_take_flag(raw, "deprecated", loc),
        dependencies=_take_list(raw, "dependencies", loc, _parse_dependency),
        types=_take_list(raw, "types", loc, parse_type_declaration),
        commands=_take_list(raw, "commands", loc, parse_command) or (),
        events=_take_list(raw, "events", loc, parse_event) or (),
    )


def _version_part(raw: dict[str, Any], key: str, loc: str) -> str:
    if key not in raw:
        raise MissingKeyError(key, "version", location=loc)
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        msg = f"`version.{key}` must be a string or integer, got {value!r}"
        raise SchemaParseError(msg, location=loc)
    return str(value)


def parse_protocol(node: Any, loc: str = "$") -> Protocol:
    """Parse a whole schema document (``{version, domains}``)."""
    raw = _expect_object(node, loc)
    if "version" not in raw:
        raise MissingKeyError("version", "Protocol", location=loc)
    version_raw = _expect_object(raw.pop("version"), f"{loc}.version")
    version = ProtocolVersion(
        major=_version_part(version_raw, "major", f"{loc}.version"),
        minor=_version_part(version_raw, "minor", f"{loc}.version"),
    )
    domains = _take_list(raw, "domains", loc, parse_domain)
    if domains is None:
        raise MissingKeyError("domains", "Protocol", location=loc)
    return Protocol(version=version, domains=domains)


def loads_protocol(text: str) -> Protocol:
    """Decode JSON *text* and parse it as a schema document."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON: {exc}"
        raise SchemaParseError(msg) from exc
    return parse_protocol(data)


def merge_protocols(protocols: Iterable[Protocol]) -> Protocol:
    """Concatenate documents: later domain lists are appended to the first.

    Only the first document's version is retained.
    """
    items = list(protocols)
    if not items:
        msg = "At least one schema document is required"
        raise SchemaParseError(msg)
    first, *rest = items
    return first.merged(*rest)
