"""Well-known Rust paths referenced by generated code."""

from __future__ import annotations

from cdpgen.codegen.syntax import PathType, RefType, TypeExpr
from cdpgen.config.models import GeneratorConfig
from cdpgen.domain.model import Primitive, TypePath

OPTION = "Option"
VEC = "Vec"
BOX = "Box"

JSON_VALUE = PathType.of("serde_json", "Value")
JSON_MAP = PathType.of("serde_json", "Map").with_args(PathType.of("String"), JSON_VALUE)
STATIC_STR = RefType(PathType.of("str"), lifetime="'static")

PRIMITIVES: dict[Primitive, PathType] = {
    Primitive.BOOLEAN: PathType.of("bool"),
    Primitive.NUMBER: PathType.of("f64"),
    Primitive.INTEGER: PathType.of("i64"),
    Primitive.STRING: PathType.of("String"),
    Primitive.ANY: JSON_VALUE,
}


def wrap(outer: str, inner: TypeExpr) -> PathType:
    """``outer<inner>``."""
    return PathType.of(outer).with_args(inner)


def optionalize(ty: TypeExpr, optional: bool) -> TypeExpr:
    return wrap(OPTION, ty) if optional else ty


def util_path(config: GeneratorConfig, name: str) -> PathType:
    """Path to a runtime item (``Command``, ``Event``, ``Nothing``, ``Infallible``)."""
    return PathType.of(*config.util_root, name)


def type_path(config: GeneratorConfig, path: TypePath) -> PathType:
    """``Type`` for same-domain refs, ``<protocol_root>::domain::Type`` otherwise."""
    if path.domain is None:
        return PathType.of(path.name.ident)
    return PathType.of(*config.protocol_root, path.domain.ident, path.name.ident)
