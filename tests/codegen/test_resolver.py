"""Tests for type resolution, inline enum hoisting, and declarations."""

from __future__ import annotations

from typing import Any

import pytest

from cdpgen.codegen.render import render_type
from cdpgen.codegen.resolver import TypeResolver, declaration_attrs
from cdpgen.codegen.syntax import (
    Doc,
    EnumItem,
    Marker,
    PendingEnum,
    PendingStruct,
    Serde,
    StructItem,
    TypeAliasItem,
)
from cdpgen.config.models import GeneratorConfig
from cdpgen.domain.context import Context
from cdpgen.domain.conventions import domain_ident, event_ident, field_ident, type_ident
from cdpgen.domain.errors import ContextDepthError, UnsupportedNestedComplexType
from cdpgen.domain.model import Documentation
from cdpgen.domain.parsing import parse_field, parse_type, parse_type_declaration

DOMAIN_CTX = Context((domain_ident("Zoo"),))
ITEM_CTX = Context((domain_ident("Zoo"), type_ident("Cage")))
PAUSED_CTX = Context((domain_ident("Debugger"), event_ident("paused")))


@pytest.fixture
def resolver() -> TypeResolver:
    return TypeResolver(GeneratorConfig())


def _field_type(resolver: TypeResolver, node: dict[str, Any], ctx: Context = ITEM_CTX) -> str:
    struct_field, _ = resolver.resolve_field(parse_field(node), ctx)
    return render_type(struct_field.ty)


class TestResolveField:
    def test_reference_field(self, resolver: TypeResolver) -> None:
        struct_field, hoisted = resolver.resolve_field(
            parse_field({"name": "x", "$ref": "Foo"}), ITEM_CTX
        )
        assert struct_field.name == "x"
        assert render_type(struct_field.ty) == "Foo"
        assert struct_field.attrs == [Serde("rename", "x")]
        assert hoisted == []

    def test_optional_boolean(self, resolver: TypeResolver) -> None:
        struct_field, _ = resolver.resolve_field(
            parse_field({"name": "y", "optional": True, "type": "boolean"}), ITEM_CTX
        )
        assert render_type(struct_field.ty) == "Option<bool>"
        assert Serde("skip_serializing_if", "Option::is_none") in struct_field.attrs

    def test_skip_serializing_can_be_disabled(self) -> None:
        resolver = TypeResolver(GeneratorConfig(skip_serializing_none=False))
        struct_field, _ = resolver.resolve_field(
            parse_field({"name": "y", "optional": True, "type": "boolean"}), ITEM_CTX
        )
        assert struct_field.attrs == [Serde("rename", "y")]

    @pytest.mark.parametrize(
        ("node", "expected"),
        [
            ({"type": "boolean"}, "bool"),
            ({"type": "number"}, "f64"),
            ({"type": "integer"}, "i64"),
            ({"type": "string"}, "String"),
            ({"type": "any"}, "serde_json::Value"),
            ({"type": "object"}, "serde_json::Map<String, serde_json::Value>"),
            ({"$ref": "Runtime.ScriptId"}, "crate::protocol::runtime::ScriptId"),
            ({"type": "array", "items": {"$ref": "Foo"}}, "Vec<Foo>"),
            ({"type": "array", "items": {"type": "array", "items": {"type": "number"}}},
             "Vec<Vec<f64>>"),
            ({"optional": True, "type": "array", "items": {"$ref": "Foo"}}, "Option<Vec<Foo>>"),
        ],
    )
    def test_type_mapping(
        self, resolver: TypeResolver, node: dict[str, Any], expected: str
    ) -> None:
        assert _field_type(resolver, {"name": "f", **node}) == expected

    def test_keyword_field_is_escaped_and_renamed(self, resolver: TypeResolver) -> None:
        struct_field, _ = resolver.resolve_field(
            parse_field({"name": "type", "type": "string"}), ITEM_CTX
        )
        assert struct_field.name == "type_"
        assert Serde("rename", "type") in struct_field.attrs

    def test_field_docs(self, resolver: TypeResolver) -> None:
        struct_field, _ = resolver.resolve_field(
            parse_field(
                {"name": "a", "description": "First.\nSecond.", "deprecated": True, "type": "any"}
            ),
            ITEM_CTX,
        )
        assert struct_field.attrs[:3] == [Doc(" First."), Doc(" Second."), Marker("deprecated")]

    def test_nested_object_in_field_raises(self, resolver: TypeResolver) -> None:
        node = {"name": "n", "type": "object", "properties": [{"name": "a", "type": "string"}]}
        with pytest.raises(UnsupportedNestedComplexType):
            resolver.resolve_field(parse_field(node), ITEM_CTX)

    def test_field_at_field_depth_raises(self, resolver: TypeResolver) -> None:
        field_ctx = ITEM_CTX.next(field_ident("outer"))
        assert field_ctx is not None
        with pytest.raises(ContextDepthError):
            resolver.resolve_field(parse_field({"name": "x", "type": "string"}), field_ctx)


class TestInlineEnum:
    NODE: dict[str, Any] = {"name": "reason", "type": "string", "enum": ["ambiguous", "other"]}

    def test_hoists_named_enum(self, resolver: TypeResolver) -> None:
        struct_field, hoisted = resolver.resolve_field(parse_field(self.NODE), PAUSED_CTX)
        assert render_type(struct_field.ty) == "PausedReason"
        assert len(hoisted) == 1
        enum = hoisted[0]
        assert isinstance(enum, EnumItem)
        assert enum.name == "PausedReason"
        assert [v.name for v in enum.variants] == ["Ambiguous", "Other"]
        assert enum.variants[0].attrs == [Serde("rename", "ambiguous")]

    def test_hoisted_docs(self, resolver: TypeResolver) -> None:
        _, hoisted = resolver.resolve_field(parse_field(self.NODE), PAUSED_CTX)
        texts = [a.text for a in hoisted[0].attrs if isinstance(a, Doc)]
        assert texts == [" ", " Enum for [PausedEvent]'s `reason`", " ---", " Autogenerated", " "]

    def test_domain_prefixed_name(self) -> None:
        resolver = TypeResolver(GeneratorConfig(inline_enum_domain_prefix=True))
        struct_field, hoisted = resolver.resolve_field(parse_field(self.NODE), PAUSED_CTX)
        assert render_type(struct_field.ty) == "DebuggerPausedReason"
        assert hoisted[0].name == "DebuggerPausedReason"  # type: ignore[union-attr]

    def test_optional_enum_wrapped_exactly_once(self, resolver: TypeResolver) -> None:
        node = {**self.NODE, "optional": True}
        assert _field_type(resolver, node, PAUSED_CTX) == "Option<PausedReason>"

    def test_array_of_inline_enum(self, resolver: TypeResolver) -> None:
        node = {"name": "kinds", "type": "array", "items": {"type": "string", "enum": ["a"]}}
        struct_field, hoisted = resolver.resolve_field(parse_field(node), ITEM_CTX)
        assert render_type(struct_field.ty) == "Vec<CageKinds>"
        assert [h.name for h in hoisted] == ["CageKinds"]  # type: ignore[union-attr]


class TestResolve:
    def test_object_at_item_level_is_pending(self, resolver: TypeResolver) -> None:
        ty = parse_type({"type": "object", "properties": [{"name": "a", "type": "string"}]})
        resolution = resolver.resolve(ty, ITEM_CTX)
        assert resolution.is_pending
        assert isinstance(resolution.shape, PendingStruct)

    def test_enum_at_item_level_is_pending(self, resolver: TypeResolver) -> None:
        resolution = resolver.resolve(parse_type({"type": "string", "enum": ["a"]}), ITEM_CTX)
        assert isinstance(resolution.shape, PendingEnum)
        assert resolution.hoisted == []

    def test_optional_never_wraps_non_optional(self, resolver: TypeResolver) -> None:
        resolution = resolver.resolve(parse_type({"type": "string"}), ITEM_CTX)
        assert render_type(resolution.shape) == "String"  # type: ignore[arg-type]


class TestDeclare:
    def test_alias(self, resolver: TypeResolver) -> None:
        decl = parse_type_declaration(
            {"id": "ScriptId", "description": "Unique.", "type": "string"}
        )
        (item,) = resolver.declare(decl, DOMAIN_CTX)
        assert isinstance(item, TypeAliasItem)
        assert item.name == "ScriptId"
        assert render_type(item.ty) == "String"
        assert item.attrs == [Doc(" Unique.")]

    def test_struct_with_hoisted_enum(self, resolver: TypeResolver, sample_document: dict) -> None:
        decl = parse_type_declaration(sample_document["domains"][0]["types"][1])
        items = resolver.declare(decl, Context((domain_ident("Runtime"),)))
        assert [type(i) for i in items] == [EnumItem, StructItem]
        enum, struct = items
        assert enum.name == "RemoteObjectType"  # type: ignore[union-attr]
        assert isinstance(struct, StructItem)
        assert struct.name == "RemoteObject"
        assert [f.name for f in struct.fields or ()] == ["type_", "object_id", "value"]
        assert [render_type(f.ty) for f in struct.fields or ()] == [
            "RemoteObjectType",
            "Option<String>",
            "Option<serde_json::Value>",
        ]

    def test_enum_declaration(self, resolver: TypeResolver) -> None:
        decl = parse_type_declaration(
            {"id": "ScopeType", "type": "string", "enum": ["global", "with"]}
        )
        (item,) = resolver.declare(decl, DOMAIN_CTX)
        assert isinstance(item, EnumItem)
        assert item.name == "ScopeType"
        assert [v.name for v in item.variants] == ["Global", "With"]

    def test_array_of_inline_struct_raises(self, resolver: TypeResolver) -> None:
        decl = parse_type_declaration(
            {
                "id": "Things",
                "type": "array",
                "items": {"type": "object", "properties": [{"name": "a", "type": "string"}]},
            }
        )
        with pytest.raises(UnsupportedNestedComplexType):
            resolver.declare(decl, DOMAIN_CTX)

    def test_array_of_inline_enum_declaration_raises(self, resolver: TypeResolver) -> None:
        decl = parse_type_declaration(
            {"id": "Kinds", "type": "array", "items": {"type": "string", "enum": ["a"]}}
        )
        with pytest.raises(UnsupportedNestedComplexType, match="enum"):
            resolver.declare(decl, DOMAIN_CTX)

    def test_declare_outside_domain_raises(self, resolver: TypeResolver) -> None:
        decl = parse_type_declaration({"id": "X", "type": "string"})
        with pytest.raises(ContextDepthError):
            resolver.declare(decl, Context.protocol())


class TestDeclarationAttrs:
    def test_experimental_note_after_description(self) -> None:
        attrs = declaration_attrs(
            GeneratorConfig(),
            description=Documentation.from_text("Hello."),
            deprecated=False,
            experimental=True,
        )
        assert attrs == [Doc(" Hello."), Doc(""), Doc(" **Experimental**")]

    def test_experimental_note_disabled(self) -> None:
        attrs = declaration_attrs(
            GeneratorConfig(experimental_notes=False),
            description=None,
            deprecated=True,
            experimental=True,
        )
        assert attrs == [Marker("deprecated")]

    def test_trailer_follows_description(self) -> None:
        attrs = declaration_attrs(
            GeneratorConfig(),
            description=Documentation.from_text("Does it."),
            deprecated=False,
            experimental=False,
            trailer=["---", "* Parameter Type: [XParams]"],
        )
        assert [a.text for a in attrs] == [" Does it.", " ---", " * Parameter Type: [XParams]"]  # type: ignore[union-attr]
