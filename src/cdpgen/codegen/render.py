"""Rust text renderer for the declaration tree.

Output is deterministic: 4-space indentation, one blank line between
items (consecutive ``use`` lines stay together), docs as ``///`` or
``//!`` comments, and a trailing newline.
"""

from __future__ import annotations

import re

from cdpgen.codegen.syntax import (
    Allow,
    Attribute,
    Derive,
    Doc,
    EnumItem,
    FnItem,
    FnPtrType,
    ImplItem,
    InferType,
    Item,
    Marker,
    ModItem,
    NeverType,
    ParenType,
    PathType,
    PtrType,
    RefType,
    Serde,
    SliceType,
    SourceFile,
    StructItem,
    TraitObjectType,
    TupleType,
    TypeAliasItem,
    TypeExpr,
    UseItem,
)

INDENT = "    "

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}
_UNESCAPES = {"\\": "\\", '"': '"', "'": "'", "n": "\n", "r": "\r", "t": "\t", "0": "\0"}

_RENAME_RE = re.compile(r'^\s*#\[serde\(rename\s*=\s*"((?:[^"\\]|\\.)*)"\)\]\s*$')
_UNICODE_ESCAPE_RE = re.compile(r"u\{([0-9A-Fa-f]{1,6})\}")


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------


def rust_string(value: str) -> str:
    """Quote *value* as a Rust string literal."""
    out: list[str] = []
    for ch in value:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{{{ord(ch):x}}}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def unescape_rust_string(body: str) -> str:
    """Inverse of :func:`rust_string` for the text between the quotes.

    Raises:
        ValueError: Unknown or truncated escape sequence.
    """
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        if i + 1 >= len(body):
            msg = "Truncated escape at end of string literal"
            raise ValueError(msg)
        code = body[i + 1]
        if code in _UNESCAPES:
            out.append(_UNESCAPES[code])
            i += 2
            continue
        match = _UNICODE_ESCAPE_RE.match(body, i + 1)
        if match is None:
            msg = f"Unknown escape sequence \\{code}"
            raise ValueError(msg)
        out.append(chr(int(match.group(1), 16)))
        i = match.end()
    return "".join(out)


def parse_rename_attribute(line: str) -> str:
    """Read the wire name back out of a rendered ``#[serde(rename = "...")]`` line.

    Raises:
        ValueError: *line* is not a rename attribute.
    """
    match = _RENAME_RE.match(line)
    if match is None:
        msg = f"Not a serde rename attribute: {line!r}"
        raise ValueError(msg)
    return unescape_rust_string(match.group(1))


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def render_type(ty: TypeExpr) -> str:
    if isinstance(ty, PathType):
        parts = []
        for segment in ty.segments:
            if segment.args:
                args = ", ".join(render_type(arg) for arg in segment.args)
                parts.append(f"{segment.ident}<{args}>")
            else:
                parts.append(segment.ident)
        return "::".join(parts)
    if isinstance(ty, TupleType):
        if len(ty.elems) == 1:
            return f"({render_type(ty.elems[0])},)"
        return "(" + ", ".join(render_type(e) for e in ty.elems) + ")"
    if isinstance(ty, ParenType):
        return f"({render_type(ty.elem)})"
    if isinstance(ty, SliceType):
        return f"[{render_type(ty.elem)}]"
    if isinstance(ty, RefType):
        prefix = "&"
        if ty.lifetime:
            prefix += f"{ty.lifetime} "
        if ty.mutable:
            prefix += "mut "
        return prefix + render_type(ty.elem)
    if isinstance(ty, PtrType):
        return ("*mut " if ty.mutable else "*const ") + render_type(ty.elem)
    if isinstance(ty, FnPtrType):
        text = "fn(" + ", ".join(render_type(i) for i in ty.inputs) + ")"
        if ty.output is not None:
            text += f" -> {render_type(ty.output)}"
        return text
    if isinstance(ty, TraitObjectType):
        return f"dyn {render_type(ty.bound)}"
    if isinstance(ty, InferType):
        return "_"
    if isinstance(ty, NeverType):
        return "!"
    msg = f"Cannot render type expression {ty!r}"
    raise TypeError(msg)


# ---------------------------------------------------------------------------
# Attributes
# ---------------------------------------------------------------------------


def render_attribute(attr: Attribute) -> str:
    if isinstance(attr, Doc):
        return (("//!" if attr.inner else "///") + attr.text).rstrip()
    if isinstance(attr, Derive):
        return f"#[derive({', '.join(attr.paths)})]"
    if isinstance(attr, Serde):
        return f"#[serde({attr.key} = {rust_string(attr.value)})]"
    if isinstance(attr, Marker):
        return f"#[{attr.path}]"
    if isinstance(attr, Allow):
        bang = "!" if attr.inner else ""
        return f"#{bang}[allow({', '.join(attr.lints)})]"
    msg = f"Cannot render attribute {attr!r}"
    raise TypeError(msg)


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


class _Writer:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.depth = 0

    def line(self, text: str = "") -> None:
        self.lines.append(INDENT * self.depth + text if text else "")

    def attrs(self, attrs: list[Attribute]) -> None:
        for attr in attrs:
            self.line(render_attribute(attr))

    def items(self, items: list[Item]) -> None:
        previous: Item | None = None
        for item in items:
            if previous is not None and not (
                isinstance(previous, UseItem) and isinstance(item, UseItem)
            ):
                self.line()
            self.item(item)
            previous = item

    def item(self, item: Item) -> None:
        if isinstance(item, StructItem):
            self.struct(item)
        elif isinstance(item, EnumItem):
            self.enum(item)
        elif isinstance(item, TypeAliasItem):
            self.attrs(item.attrs)
            self.line(f"pub type {item.name} = {render_type(item.ty)};")
        elif isinstance(item, ImplItem):
            self.impl(item)
        elif isinstance(item, UseItem):
            self.line(f"use {'::'.join(item.path)};")
        elif isinstance(item, ModItem):
            self.attrs(item.attrs)
            self.line(f"pub mod {item.name} {{")
            self.depth += 1
            self.items(item.items)
            self.depth -= 1
            self.line("}")
        else:
            msg = f"Cannot render item {item!r}"
            raise TypeError(msg)

    def struct(self, item: StructItem) -> None:
        self.attrs(item.attrs)
        if item.fields is None:
            self.line(f"pub struct {item.name};")
            return
        if not item.fields:
            self.line(f"pub struct {item.name} {{}}")
            return
        self.line(f"pub struct {item.name} {{")
        self.depth += 1
        for fld in item.fields:
            self.attrs(fld.attrs)
            self.line(f"pub {fld.name}: {render_type(fld.ty)},")
        self.depth -= 1
        self.line("}")

    def enum(self, item: EnumItem) -> None:
        self.attrs(item.attrs)
        self.line(f"pub enum {item.name} {{")
        self.depth += 1
        for variant in item.variants:
            self.attrs(variant.attrs)
            self.line(f"{variant.name},")
        self.depth -= 1
        self.line("}")

    def impl(self, item: ImplItem) -> None:
        self.line(f"impl {render_type(item.trait_path)} for {render_type(item.self_ty)} {{")
        self.depth += 1
        for assoc in item.assoc_types:
            self.line(f"type {assoc.name} = {render_type(assoc.ty)};")
        for fn in item.fns:
            self.fn(fn)
        self.depth -= 1
        self.line("}")

    def fn(self, fn: FnItem) -> None:
        receiver = "&self" if fn.receiver else ""
        self.line(f"fn {fn.name}({receiver}) -> {render_type(fn.returns)} {{")
        self.depth += 1
        self.line(rust_string(fn.body))
        self.depth -= 1
        self.line("}")


def render_item(item: Item) -> str:
    writer = _Writer()
    writer.item(item)
    return "\n".join(writer.lines) + "\n"


def render_file(file: SourceFile) -> str:
    """Render a complete source file as Rust text."""
    writer = _Writer()
    writer.attrs(file.attrs)
    if file.attrs and file.items:
        writer.line()
    writer.items(file.items)
    return "\n".join(writer.lines) + "\n"
