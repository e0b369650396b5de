"""Domain/Protocol Assembly.

Each domain becomes one ``pub mod`` holding, in schema order: dependency
imports, type declarations, commands, then events. Every struct and enum
gets the configured derive list. The protocol-level file concatenates
the modules under a version doc header, then runs the global passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from cdpgen.codegen.assembler import CommandAssembler
from cdpgen.codegen.passes import break_recursion, mark_enum_defaults
from cdpgen.codegen.resolver import TypeResolver, declaration_attrs
from cdpgen.codegen.syntax import (
    Allow,
    Derive,
    Doc,
    EnumItem,
    ImplItem,
    Item,
    ModItem,
    SourceFile,
    StructItem,
    TypeAliasItem,
    UseItem,
    rustdoc,
)
from cdpgen.config.models import GeneratorConfig
from cdpgen.domain.context import Context
from cdpgen.domain.errors import DuplicateDeclarationError
from cdpgen.domain.model import Domain, Protocol

logger = logging.getLogger(__name__)


@dataclass
class PassReport:
    """Counts produced by the global post-assembly passes."""

    boxed_fields: int = 0
    enum_defaults: int = 0


class ProtocolGenerator:
    """Turns a parsed :class:`Protocol` into one Rust :class:`SourceFile`."""

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        self.config = config or GeneratorConfig()
        self.resolver = TypeResolver(self.config)
        self.assembler = CommandAssembler(self.resolver)
        self.report = PassReport()

    def domain(self, domain: Domain, ctx: Context) -> ModItem:
        """Assemble one domain module under the protocol-level context *ctx*."""
        domain_ctx = ctx.next(domain.domain)
        assert domain_ctx is not None

        items: list[Item] = []
        if self.config.emit_dependency_imports:
            seen: set[str] = set()
            for dep in domain.dependencies or ():
                if dep.ident == domain.domain.ident or dep.ident in seen:
                    continue
                seen.add(dep.ident)
                items.append(UseItem(("super", dep.ident)))

        for decl in domain.types or ():
            items.extend(self.resolver.declare(decl, domain_ctx))
        for cmd in domain.commands:
            items.extend(self.assembler.command(cmd, domain_ctx))
        for evt in domain.events:
            items.extend(self.assembler.event(evt, domain_ctx))
        items = _unique_declarations(items, domain.domain.original)

        derive = Derive(self.config.derive_list())
        for item in items:
            if isinstance(item, (StructItem, EnumItem)):
                item.attrs.append(derive)

        attrs = declaration_attrs(
            self.config,
            description=domain.description,
            deprecated=domain.deprecated,
            experimental=domain.experimental,
        )
        if self.config.lint_allows:
            attrs.append(Allow(tuple(self.config.lint_allows)))

        logger.debug("Assembled domain %s with %d items", domain.domain.original, len(items))
        return ModItem(name=domain.domain.ident, items=items, attrs=attrs)

    def generate(self, protocol: Protocol) -> SourceFile:
        """Assemble every domain, then run the recursion and default passes."""
        ctx = Context.protocol()
        modules: list[Item] = [self.domain(d, ctx) for d in protocol.domains]

        header = (
            f"# {self.config.title}\n"
            f"Version: `V{protocol.version}`\n\n"
            f"Autogenerated Rust bindings for the {self.config.title}."
        )
        file = SourceFile(
            attrs=[Doc(doc.text, inner=True) for doc in rustdoc(header)],
            items=modules,
        )

        self.report = PassReport(boxed_fields=break_recursion(file))
        if self.config.derive_default:
            self.report.enum_defaults = mark_enum_defaults(file)
        return file


def _unique_declarations(items: list[Item], domain: str) -> list[Item]:
    """Drop repeated inline enums and reject any other Rust name clash.

    A command whose parameters and returns both carry an inline enum
    under the same field name hoists it twice under one name; when the
    variants match, the first copy is kept.

    Raises:
        DuplicateDeclarationError: Two different items share a name.
    """
    declared: dict[str, Item] = {}
    unique: list[Item] = []
    for item in items:
        if not isinstance(item, (StructItem, EnumItem, TypeAliasItem)):
            unique.append(item)
            continue
        previous = declared.get(item.name)
        if previous is None:
            declared[item.name] = item
            unique.append(item)
            continue
        if (
            isinstance(previous, EnumItem)
            and isinstance(item, EnumItem)
            and previous.variants == item.variants
        ):
            logger.debug("Dropped repeated enum %s in %s", item.name, domain)
            continue
        msg = f"Domain {domain} declares `{item.name}` more than once"
        raise DuplicateDeclarationError(msg, location=f"{domain}.{item.name}")
    return unique


def generate_file(protocol: Protocol, config: GeneratorConfig | None = None) -> SourceFile:
    """Convenience wrapper: one-shot generation with *config*."""
    return ProtocolGenerator(config).generate(protocol)


def summarize(file: SourceFile) -> list[dict[str, Any]]:
    """Per-module item counts for reporting."""
    rows: list[dict[str, Any]] = []
    for module in file.items:
        if not isinstance(module, ModItem):
            continue
        row = {"domain": module.name, "structs": 0, "enums": 0, "aliases": 0, "impls": 0}
        for item in module.items:
            if isinstance(item, StructItem):
                row["structs"] += 1
            elif isinstance(item, EnumItem):
                row["enums"] += 1
            elif isinstance(item, TypeAliasItem):
                row["aliases"] += 1
            elif isinstance(item, ImplItem):
                row["impls"] += 1
        rows.append(row)
    return rows
