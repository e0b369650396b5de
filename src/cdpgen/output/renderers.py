"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from cdpgen.output.console import create_console, get_output, style_for_origin

if TYPE_CHECKING:
    from rich.console import Console

    from cdpgen.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    data = result.data
    if result.op == "generate" and "path" in data:
        return str(data["path"])
    if result.op == "inspect":
        return "\n".join(row["name"] for row in data.get("domains", []))
    if result.op == "fetch":
        return "\n".join(item["path"] for item in data.get("fetched", []))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="cdp.ok")
    op = Text(f"  {result.op}", style="cdp.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="cdp.key")
    if key == "path":
        v = Text(str(value), style="cdp.path")
    elif isinstance(value, int) and not isinstance(value, bool):
        v = Text(str(value), style="cdp.count")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(Text(f"    {k}: {v}"))


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="cdp.error")
    op = Text(f"  {result.op}", style="cdp.op")
    console.print(label, op, Text(": "), Text(msg))

    if err and err.detail:
        for key in ("source", "location"):
            if key in err.detail:
                _field(console, key, err.detail[key])
        if verbose:
            console.print(Text("  detail:", style="dim"))
            for k, v in err.detail.items():
                console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _sources_table(sources: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Source", style="cdp.path")
    table.add_column("Origin")
    table.add_column("Bytes", style="cdp.count", justify="right")
    for source in sources:
        origin = str(source.get("origin", ""))
        table.add_row(
            str(source.get("location", "")),
            Text(origin, style=style_for_origin(origin)),
            str(source.get("bytes", "")),
        )
    return table


def _render_generate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("path", "version", "domains", "structs", "enums", "aliases", "impls"):
        if key in d:
            _field(console, key, d[key])
    if d.get("boxed_fields"):
        _field(console, "boxed_fields", d["boxed_fields"])

    if d.get("sources"):
        console.print()
        console.print(_sources_table(d["sources"]))

    if verbose and d.get("modules"):
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Module", style="cdp.domain", no_wrap=True)
        for col in ("Structs", "Enums", "Aliases", "Impls"):
            table.add_column(col, justify="right")
        for row in d["modules"]:
            table.add_row(
                row["domain"],
                str(row["structs"]),
                str(row["enums"]),
                str(row["aliases"]),
                str(row["impls"]),
            )
        console.print()
        console.print(table)

    if verbose:
        _render_meta(console, result)


def _render_inspect(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "version", d.get("version", ""))
    for key, value in (d.get("totals") or {}).items():
        _field(console, key, value)

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Domain", style="cdp.domain", no_wrap=True)
    table.add_column("Types", justify="right")
    table.add_column("Commands", justify="right")
    table.add_column("Events", justify="right")
    table.add_column("Depends on")
    if verbose:
        table.add_column("References")
    for row in d.get("domains", []):
        name = row["name"]
        if row.get("deprecated"):
            name += " (deprecated)"
        elif row.get("experimental"):
            name += " (experimental)"
        cells = [
            name,
            str(row["types"]),
            str(row["commands"]),
            str(row["events"]),
            ", ".join(row["dependencies"]),
        ]
        if verbose:
            cells.append(", ".join(row["references"]))
        table.add_row(*cells)
    console.print()
    console.print(table)

    cycles = d.get("cycles") or []
    if cycles:
        console.print()
        console.print(Text("  cycles:", style="cdp.warning"))
        for cycle in cycles:
            console.print(f"    {' -> '.join([*cycle, cycle[0]])}")
    elif d.get("order"):
        _field(console, "order", ", ".join(d["order"]))

    if verbose:
        _render_meta(console, result)


def _render_fetch(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("URL", style="cdp.path")
    table.add_column("Bytes", style="cdp.count", justify="right")
    if verbose:
        table.add_column("Cache file", style="cdp.path")
    for item in result.data.get("fetched", []):
        cells = [item["url"], str(item["bytes"])]
        if verbose:
            cells.append(item["path"])
        table.add_row(*cells)
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback: key-value fields for unknown ops."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    "generate": _render_generate,
    "inspect": _render_inspect,
    "fetch": _render_fetch,
}
