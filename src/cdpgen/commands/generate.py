"""Command: generate Rust bindings from protocol schemas."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from cdpgen.commands._base import CdpCommand

if TYPE_CHECKING:
    from cdpgen.commands._context import AppContext


@click.command(
    cls=CdpCommand,
    examples=[
        ("cdpgen generate > src/protocol.rs", "Print bindings to stdout"),
        ("cdpgen generate -o src/protocol.rs", "Write bindings to a file"),
        (
            "cdpgen generate browser_protocol.json js_protocol.json -o src/protocol.rs",
            "Merge split schema documents",
        ),
        ("cdpgen generate --offline --no-default", "Cached sources, no Default derive"),
        ("cdpgen --json generate -o src/protocol.rs", "Summary as JSON"),
    ],
)
@click.argument("sources", nargs=-1)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write to this file instead of stdout.",
)
@click.option("--no-default", is_flag=True, help="Do not derive Default or mark enum defaults.")
@click.option("--no-imports", is_flag=True, help="Omit `use super::<dep>;` dependency imports.")
@click.option(
    "--domain-prefixed-enums",
    is_flag=True,
    help="Keep the domain name in synthesized inline enum names.",
)
@click.option("--offline", is_flag=True, default=None, help="Use cached sources only.")
@click.pass_obj
def generate(
    app: AppContext,
    sources: tuple[str, ...],
    output: Path | None,
    no_default: bool,
    no_imports: bool,
    domain_prefixed_enums: bool,
    offline: bool | None,
) -> None:
    """Generate the Rust binding module.

    SOURCES are schema files or URLs (default: [sources].urls).
    """
    from cdpgen.services.generate import GenerateService

    overrides: dict[str, Any] = {}
    if no_default:
        overrides["derive_default"] = False
    if no_imports:
        overrides["emit_dependency_imports"] = False
    if domain_prefixed_enums:
        overrides["inline_enum_domain_prefix"] = True

    result = GenerateService(app.settings).generate(
        sources or None,
        output=output,
        overrides=overrides or None,
        offline=offline or None,
    )

    # Without an output file the Rust source itself is the stdout payload.
    if result.ok and "source" in result.data and not app.settings.json_output:
        click.echo(result.data["source"], nl=False)
        app.emit_warnings(result)
        return
    app.emit(result)
