"""Output declaration tree.

A small Rust-shaped syntax tree: type expressions are immutable and are
rebuilt rather than edited; items are mutable so post-processing passes
can rewrite field types and attributes in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Type expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PathSegment:
    ident: str
    args: tuple[TypeExpr, ...] = ()


@dataclass(frozen=True)
class PathType:
    """``a::b::C<T, U>``; generic arguments live on the segment."""

    segments: tuple[PathSegment, ...]

    @classmethod
    def of(cls, *idents: str) -> PathType:
        return cls(tuple(PathSegment(i) for i in idents))

    @property
    def leaf(self) -> PathSegment:
        return self.segments[-1]

    def with_args(self, *args: TypeExpr) -> PathType:
        """Copy with *args* attached to the last segment."""
        leaf = PathSegment(self.leaf.ident, tuple(args))
        return PathType((*self.segments[:-1], leaf))


@dataclass(frozen=True)
class TupleType:
    elems: tuple[TypeExpr, ...]


@dataclass(frozen=True)
class ParenType:
    elem: TypeExpr


@dataclass(frozen=True)
class SliceType:
    elem: TypeExpr


@dataclass(frozen=True)
class RefType:
    elem: TypeExpr
    lifetime: str | None = None
    mutable: bool = False


@dataclass(frozen=True)
class PtrType:
    elem: TypeExpr
    mutable: bool = False


@dataclass(frozen=True)
class FnPtrType:
    inputs: tuple[TypeExpr, ...] = ()
    output: TypeExpr | None = None


@dataclass(frozen=True)
class TraitObjectType:
    bound: PathType


@dataclass(frozen=True)
class InferType:
    pass


@dataclass(frozen=True)
class NeverType:
    pass


type TypeExpr = (
    PathType
    | TupleType
    | ParenType
    | SliceType
    | RefType
    | PtrType
    | FnPtrType
    | TraitObjectType
    | InferType
    | NeverType
)


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Doc:
    """``#[doc = "..."]``; ``inner`` renders as ``//!``."""

    text: str
    inner: bool = False


@dataclass(frozen=True)
class Derive:
    paths: tuple[str, ...]


@dataclass(frozen=True)
class Serde:
    """``#[serde(key = "value")]``."""

    key: str
    value: str


@dataclass(frozen=True)
class Marker:
    """Bare path attribute such as ``#[deprecated]`` or ``#[default]``."""

    path: str


@dataclass(frozen=True)
class Allow:
    lints: tuple[str, ...]
    inner: bool = False


type Attribute = Doc | Derive | Serde | Marker | Allow


def rustdoc(text: str) -> list[Doc]:
    """Multi-line doc block padded with an empty line on each side."""
    return [Doc(f" {line}") for line in ["", *text.split("\n"), ""]]


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


@dataclass
class StructField:
    name: str
    ty: TypeExpr
    attrs: list[Attribute] = field(default_factory=list)


@dataclass
class StructItem:
    """Named struct; ``fields=None`` is a unit struct (``pub struct X;``)."""

    name: str
    fields: list[StructField] | None = None
    attrs: list[Attribute] = field(default_factory=list)


@dataclass
class EnumVariant:
    name: str
    attrs: list[Attribute] = field(default_factory=list)


@dataclass
class EnumItem:
    name: str
    variants: list[EnumVariant] = field(default_factory=list)
    attrs: list[Attribute] = field(default_factory=list)


@dataclass
class TypeAliasItem:
    name: str
    ty: TypeExpr
    attrs: list[Attribute] = field(default_factory=list)


@dataclass
class AssocType:
    name: str
    ty: TypeExpr


@dataclass
class FnItem:
    """Trait method whose body is a single string literal expression."""

    name: str
    returns: TypeExpr
    body: str
    receiver: bool = False


@dataclass
class ImplItem:
    """``impl <trait_path> for <self_ty> { ... }``."""

    trait_path: PathType
    self_ty: PathType
    assoc_types: list[AssocType] = field(default_factory=list)
    fns: list[FnItem] = field(default_factory=list)


@dataclass
class UseItem:
    path: tuple[str, ...]


@dataclass
class ModItem:
    name: str
    items: list[Item] = field(default_factory=list)
    attrs: list[Attribute] = field(default_factory=list)


type Item = StructItem | EnumItem | TypeAliasItem | ImplItem | UseItem | ModItem


@dataclass
class SourceFile:
    attrs: list[Attribute] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Pending declarations
# ---------------------------------------------------------------------------


@dataclass
class PendingStruct:
    """Anonymous struct shape awaiting a name from its declaration site."""

    fields: list[StructField]

    def named(self, name: str, attrs: list[Attribute]) -> StructItem:
        return StructItem(name=name, fields=self.fields, attrs=attrs)


@dataclass
class PendingEnum:
    """Anonymous enum shape awaiting a name from its declaration site."""

    variants: list[EnumVariant]

    def named(self, name: str, attrs: list[Attribute]) -> EnumItem:
        return EnumItem(name=name, variants=self.variants, attrs=attrs)


type Pending = PendingStruct | PendingEnum
