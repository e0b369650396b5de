"""Type Resolver & Hoisting.

``resolve(type, context)`` turns a model :data:`~cdpgen.domain.model.Type`
into either a plain type expression or a *pending* anonymous shape, plus
any auxiliary declarations hoisted along the way:

- Primitive / Reference / Array / field-less Object → type expression.
- Object with fields → :class:`PendingStruct`, named by the caller.
- Enum at ``Field`` depth → hoisted :class:`EnumItem` under a synthesized
  name, and a reference to it in place of the field's type.
- Enum anywhere else → :class:`PendingEnum`, named by the caller.

Optionality is a wrap/no-wrap decision applied once, after the unwrapped
shape is computed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from cdpgen.codegen.paths import JSON_MAP, PRIMITIVES, VEC, optionalize, type_path, wrap
from cdpgen.codegen.syntax import (
    Attribute,
    Doc,
    EnumItem,
    EnumVariant,
    Item,
    Marker,
    PathType,
    Pending,
    PendingEnum,
    PendingStruct,
    Serde,
    StructField,
    TypeAliasItem,
    TypeExpr,
    rustdoc,
)
from cdpgen.config.models import GeneratorConfig
from cdpgen.domain.context import Context, ContextLevel
from cdpgen.domain.errors import ContextDepthError, UnsupportedNestedComplexType
from cdpgen.domain.model import (
    ArrayType,
    Documentation,
    EnumType,
    Field,
    ObjectType,
    PrimitiveType,
    ReferenceType,
    Type,
    TypeDeclaration,
)

logger = logging.getLogger(__name__)

AUTOGENERATED = "Autogenerated"


@dataclass
class Resolution:
    """Result of resolving one type node."""

    shape: TypeExpr | Pending
    hoisted: list[Item] = field(default_factory=list)

    @property
    def is_pending(self) -> bool:
        return isinstance(self.shape, (PendingStruct, PendingEnum))

    def expect_type(self, where: str, ctx: Context) -> TypeExpr:
        """Return the plain type expression, rejecting anonymous shapes.

        Raises:
            UnsupportedNestedComplexType: The shape is a pending struct/enum.
        """
        if isinstance(self.shape, PendingStruct):
            msg = f"Nested struct inside {where} is not supported"
            raise UnsupportedNestedComplexType(msg, location=repr(ctx))
        if isinstance(self.shape, PendingEnum):
            msg = f"Nested enum inside {where} is not supported"
            raise UnsupportedNestedComplexType(msg, location=repr(ctx))
        return self.shape


def declaration_attrs(
    config: GeneratorConfig,
    *,
    description: Documentation | None,
    deprecated: bool,
    experimental: bool,
    trailer: Iterable[str] = (),
) -> list[Attribute]:
    """Docs, ``#[deprecated]`` and the experimental note for a declaration."""
    lines: list[str] = []
    if description is not None:
        lines.extend(description.lines)
        lines.extend(trailer)
    if experimental and config.experimental_notes:
        if lines:
            lines.append("")
        lines.append("**Experimental**")
    attrs: list[Attribute] = [Doc(f" {line}" if line else "") for line in lines]
    if deprecated:
        attrs.append(Marker("deprecated"))
    return attrs


class TypeResolver:
    """Resolves model types into Rust type expressions and declarations."""

    def __init__(self, config: GeneratorConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def resolve(self, ty: Type, ctx: Context) -> Resolution:
        if isinstance(ty, PrimitiveType):
            return Resolution(optionalize(PRIMITIVES[ty.kind], ty.optional))

        if isinstance(ty, ReferenceType):
            return Resolution(optionalize(type_path(self.config, ty.path), ty.optional))

        if isinstance(ty, ArrayType):
            inner = self.resolve(ty.item_type, ctx)
            item = inner.expect_type("array item type", ctx)
            return Resolution(optionalize(wrap(VEC, item), ty.optional), inner.hoisted)

        if isinstance(ty, ObjectType):
            return self._resolve_object(ty, ctx)

        if isinstance(ty, EnumType):
            return self._resolve_enum(ty, ctx)

        msg = f"Unknown type node {ty!r}"
        raise TypeError(msg)

    def _resolve_object(self, ty: ObjectType, ctx: Context) -> Resolution:
        if ty.fields is None:
            return Resolution(optionalize(JSON_MAP, ty.optional))
        if ctx.level is ContextLevel.FIELD:
            msg = "Nested structure in a field's type declaration is not supported"
            raise UnsupportedNestedComplexType(msg, location=repr(ctx))
        fields, hoisted = self.resolve_fields(ty.fields, ctx)
        return Resolution(PendingStruct(fields), hoisted)

    def _resolve_enum(self, ty: EnumType, ctx: Context) -> Resolution:
        variants = [EnumVariant(v.ident, [Serde("rename", v.original)]) for v in ty.values]
        if ctx.level is not ContextLevel.FIELD:
            return Resolution(PendingEnum(variants))

        name = ctx.inline_enum_name(include_domain=self.config.inline_enum_domain_prefix).ident
        owner = ctx.item.ident if ctx.item else "?"
        member = ctx.field.ident if ctx.field else "?"
        hoisted = EnumItem(
            name=name,
            variants=variants,
            attrs=list(rustdoc(f"Enum for [{owner}]'s `{member}`\n---\n{AUTOGENERATED}")),
        )
        logger.debug("Hoisted inline enum %s from %r", name, ctx)
        return Resolution(optionalize(PathType.of(name), ty.optional), [hoisted])

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def resolve_field(self, fld: Field, ctx: Context) -> tuple[StructField, list[Item]]:
        """Resolve one struct field under the item context *ctx*."""
        field_ctx = ctx.next(fld.name)
        if field_ctx is None:
            msg = f"Field `{fld.name.original}` is nested deeper than supported"
            raise ContextDepthError(msg, location=repr(ctx))

        resolution = self.resolve(fld.type, field_ctx)
        ty = resolution.expect_type(f"field `{fld.name.original}`", field_ctx)

        attrs = declaration_attrs(
            self.config,
            description=fld.description,
            deprecated=fld.deprecated,
            experimental=fld.experimental,
        )
        attrs.append(Serde("rename", fld.name.original))
        if fld.type.optional and self.config.skip_serializing_none:
            attrs.append(Serde("skip_serializing_if", "Option::is_none"))

        return StructField(name=fld.name.ident, ty=ty, attrs=attrs), resolution.hoisted

    def resolve_fields(
        self, fields: Iterable[Field], ctx: Context
    ) -> tuple[list[StructField], list[Item]]:
        resolved: list[StructField] = []
        hoisted: list[Item] = []
        for fld in fields:
            struct_field, extra = self.resolve_field(fld, ctx)
            resolved.append(struct_field)
            hoisted.extend(extra)
        return resolved, hoisted

    # ------------------------------------------------------------------
    # Top-level declarations
    # ------------------------------------------------------------------

    def declare(self, decl: TypeDeclaration, ctx: Context) -> list[Item]:
        """Emit a named alias, struct, or enum, preceded by hoisted items."""
        item_ctx = ctx.next(decl.id)
        if item_ctx is None or item_ctx.level is not ContextLevel.ITEM:
            msg = f"Type declaration `{decl.id.original}` outside of a domain"
            raise ContextDepthError(msg, location=repr(ctx))

        resolution = self.resolve(decl.type, item_ctx)
        attrs = declaration_attrs(
            self.config,
            description=decl.description,
            deprecated=decl.deprecated,
            experimental=decl.experimental,
        )
        name = decl.id.ident

        main: Item
        if isinstance(resolution.shape, (PendingStruct, PendingEnum)):
            main = resolution.shape.named(name, attrs)
        else:
            main = TypeAliasItem(name=name, ty=resolution.shape, attrs=attrs)
        return [*resolution.hoisted, main]
