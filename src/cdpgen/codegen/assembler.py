"""Command/Event Assembler.

A command becomes, in order:

1. declarations hoisted from its parameters, then ``{Ident}Params``
2. declarations hoisted from its returns, then ``{Ident}Returns``
3. a unit marker struct ``{Ident}``
4. ``impl Command for {Ident}`` linking Parameters/Returns/Error and ``id()``

An empty or absent group links the ``Nothing`` sentinel instead of a
synthesized empty struct. The error role is always ``Infallible``.

An event becomes its hoisted declarations, then struct ``{Ident}Event``
and ``impl Event for {Ident}Event``. A parameterless event emits no
struct at all, only whatever its fields hoisted (which is nothing).
"""

from __future__ import annotations

import logging

from cdpgen.codegen.paths import STATIC_STR, util_path
from cdpgen.codegen.resolver import TypeResolver, declaration_attrs
from cdpgen.codegen.syntax import (
    AssocType,
    FnItem,
    ImplItem,
    Item,
    PathType,
    StructItem,
    rustdoc,
)
from cdpgen.domain.context import Context, ContextLevel
from cdpgen.domain.errors import ContextDepthError
from cdpgen.domain.model import Command, Event, Field

logger = logging.getLogger(__name__)


def _item_context(ctx: Context, kind: str, name: str) -> Context:
    if ctx.level is not ContextLevel.ITEM or ctx.domain is None:
        msg = f"{kind} `{name}` must be assembled at item depth"
        raise ContextDepthError(msg, location=repr(ctx))
    return ctx


class CommandAssembler:
    """Builds the declarations for commands and events of one domain."""

    def __init__(self, resolver: TypeResolver) -> None:
        self.resolver = resolver
        self.config = resolver.config

    def _group_struct(
        self,
        ctx: Context,
        fields: tuple[Field, ...] | None,
        name: str,
        role: str,
        owner: str,
    ) -> list[Item]:
        """Hoisted items followed by the named group struct; empty if no fields."""
        if not fields:
            return []
        resolved, hoisted = self.resolver.resolve_fields(fields, ctx)
        struct = StructItem(
            name=name,
            fields=resolved,
            attrs=list(rustdoc(f"{role} value for [{owner}].")),
        )
        return [*hoisted, struct]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def command(self, cmd: Command, ctx: Context) -> list[Item]:
        item_ctx = _item_context(ctx.next(cmd.name) or ctx, "Command", cmd.name.original)
        ident = cmd.name.ident
        has_params = bool(cmd.parameters)
        has_returns = bool(cmd.returns)

        params = self._group_struct(
            item_ctx, cmd.parameters, f"{ident}Params", "Parameter", cmd.name.original
        )
        returns = self._group_struct(
            item_ctx, cmd.returns, f"{ident}Returns", "Return", cmd.name.original
        )

        trailer = ["---"]
        if has_params:
            trailer.append(f"* Parameter Type: [{ident}Params]")
        if has_returns:
            trailer.append(f"* Return Type: [{ident}Returns]")
        marker = StructItem(
            name=ident,
            fields=None,
            attrs=declaration_attrs(
                self.config,
                description=cmd.description,
                deprecated=cmd.deprecated,
                experimental=cmd.experimental,
                trailer=trailer,
            ),
        )

        nothing = util_path(self.config, "Nothing")
        link = ImplItem(
            trait_path=util_path(self.config, "Command"),
            self_ty=PathType.of(ident),
            assoc_types=[
                AssocType("Parameters", PathType.of(f"{ident}Params") if has_params else nothing),
                AssocType("Returns", PathType.of(f"{ident}Returns") if has_returns else nothing),
                AssocType("Error", util_path(self.config, "Infallible")),
            ],
            fns=[FnItem("id", STATIC_STR, cmd.wire_id(item_ctx.domain))],  # type: ignore[arg-type]
        )
        return [*params, *returns, marker, link]

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def event(self, evt: Event, ctx: Context) -> list[Item]:
        item_ctx = _item_context(ctx.next(evt.name) or ctx, "Event", evt.name.original)
        ident = evt.name.ident

        if not evt.parameters:
            logger.debug("Event %s has no parameters; no struct emitted", evt.name.original)
            return []

        fields, hoisted = self.resolver.resolve_fields(evt.parameters, item_ctx)
        struct = StructItem(
            name=ident,
            fields=fields,
            attrs=declaration_attrs(
                self.config,
                description=evt.description,
                deprecated=evt.deprecated,
                experimental=evt.experimental,
            ),
        )
        wire_id = evt.wire_id(item_ctx.domain)  # type: ignore[arg-type]
        link = ImplItem(
            trait_path=util_path(self.config, "Event"),
            self_ty=PathType.of(ident),
            fns=[
                FnItem("id", STATIC_STR, wire_id, receiver=True),
                FnItem("__id", STATIC_STR, wire_id),
            ],
        )
        return [*hoisted, struct, link]
