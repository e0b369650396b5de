"""Command: refresh the local schema cache."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from cdpgen.commands._base import CdpCommand

if TYPE_CHECKING:
    from cdpgen.commands._context import AppContext


@click.command(
    cls=CdpCommand,
    examples=[
        ("cdpgen fetch", "Refresh the cache for [sources].urls"),
        ("cdpgen fetch https://example.com/custom_protocol.json", "Cache one extra URL"),
    ],
)
@click.argument("urls", nargs=-1)
@click.pass_obj
def fetch(app: AppContext, urls: tuple[str, ...]) -> None:
    """Download schema URLs into the cache (default: [sources].urls)."""
    from cdpgen.services.fetch import FetchService

    app.emit(FetchService(app.settings).fetch(urls or None))
