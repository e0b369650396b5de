"""Post-assembly passes over the complete declaration tree.

Both passes run once, after every domain module exists, because they
need the final identifier universe:

- :func:`break_recursion` boxes direct self-references in structs so the
  types have a finite size.
- :func:`mark_enum_defaults` tags each enum's first variant ``#[default]``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from cdpgen.codegen.paths import BOX, VEC, wrap
from cdpgen.codegen.syntax import (
    EnumItem,
    Marker,
    ModItem,
    ParenType,
    PathSegment,
    PathType,
    SliceType,
    SourceFile,
    StructItem,
    TupleType,
    TypeExpr,
)

logger = logging.getLogger(__name__)

# Generic arguments of these are already heap-allocated; a cycle through
# them does not make the enclosing type infinitely sized.
HEAP_INDIRECTED = frozenset({VEC, BOX})

DEFAULT_MARKER = Marker("default")


def _modules(file: SourceFile) -> Iterator[ModItem]:
    for item in file.items:
        if isinstance(item, ModItem):
            yield item


def is_self_reference(ty: TypeExpr, name: str, module: str | None = None) -> bool:
    """True when *ty* is a plain path naming struct *name* itself.

    A bare ``Name`` always matches; a qualified path matches only when
    its parent segment is *module* (``crate::protocol::<module>::Name``).
    """
    if not isinstance(ty, PathType):
        return False
    leaf = ty.leaf
    if leaf.ident != name or leaf.args:
        return False
    if len(ty.segments) == 1:
        return True
    return module is not None and ty.segments[-2].ident == module


def box_first_self_reference(
    ty: TypeExpr, name: str, module: str | None = None
) -> TypeExpr | None:
    """Return *ty* with its first self-reference wrapped in ``Box``.

    Descends through grouping, slices, tuple slots, and generic arguments
    of named types other than ``Vec``/``Box``. Stops at references,
    pointers, function types, trait objects, and inferred types. Returns
    None when no self-reference is found.
    """
    if is_self_reference(ty, name, module):
        return wrap(BOX, ty)

    if isinstance(ty, ParenType):
        inner = box_first_self_reference(ty.elem, name, module)
        return ParenType(inner) if inner is not None else None

    if isinstance(ty, SliceType):
        inner = box_first_self_reference(ty.elem, name, module)
        return SliceType(inner) if inner is not None else None

    if isinstance(ty, TupleType):
        for i, elem in enumerate(ty.elems):
            inner = box_first_self_reference(elem, name, module)
            if inner is not None:
                return TupleType((*ty.elems[:i], inner, *ty.elems[i + 1 :]))
        return None

    if isinstance(ty, PathType):
        for s, segment in enumerate(ty.segments):
            if segment.ident in HEAP_INDIRECTED:
                continue
            for a, arg in enumerate(segment.args):
                inner = box_first_self_reference(arg, name, module)
                if inner is None:
                    continue
                args = (*segment.args[:a], inner, *segment.args[a + 1 :])
                segments = (
                    *ty.segments[:s],
                    PathSegment(segment.ident, args),
                    *ty.segments[s + 1 :],
                )
                return PathType(segments)
        return None

    return None


def break_struct_recursion(struct: StructItem, module: str | None = None) -> int:
    """Box the first self-reference in each field of *struct*; return the count."""
    boxed = 0
    for fld in struct.fields or ():
        replaced = box_first_self_reference(fld.ty, struct.name, module)
        if replaced is not None:
            fld.ty = replaced
            boxed += 1
            logger.debug("Boxed recursive field %s.%s", struct.name, fld.name)
    return boxed


def break_recursion(file: SourceFile) -> int:
    """Run the recursion breaker over every struct of every domain module."""
    total = 0
    for module in _modules(file):
        for item in module.items:
            if isinstance(item, StructItem):
                total += break_struct_recursion(item, module.name)
    return total


def mark_enum_defaults(file: SourceFile) -> int:
    """Tag the first variant of every enum as ``#[default]``; return the count."""
    marked = 0
    for module in _modules(file):
        for item in module.items:
            if not isinstance(item, EnumItem) or not item.variants:
                continue
            first = item.variants[0]
            if DEFAULT_MARKER not in first.attrs:
                first.attrs.append(DEFAULT_MARKER)
                marked += 1
    return marked
