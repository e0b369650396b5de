"""Command: summarize protocol domains and their dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from cdpgen.commands._base import CdpCommand

if TYPE_CHECKING:
    from cdpgen.commands._context import AppContext


@click.command(
    cls=CdpCommand,
    examples=[
        ("cdpgen inspect", "Domain table for the configured URLs"),
        ("cdpgen inspect browser_protocol.json", "Inspect a local schema file"),
        ("cdpgen -v inspect --offline", "Include dependencies, cached sources only"),
        ("cdpgen --json inspect", "Counts, cycles and load order as JSON"),
    ],
)
@click.argument("sources", nargs=-1)
@click.option("--offline", is_flag=True, default=None, help="Use cached sources only.")
@click.pass_obj
def inspect(app: AppContext, sources: tuple[str, ...], offline: bool | None) -> None:
    """Show domain counts, dependencies, cycles and load order."""
    from cdpgen.services.inspect import InspectService

    app.emit(InspectService(app.settings).inspect(sources or None, offline=offline or None))
