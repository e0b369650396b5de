"""Click base classes carrying annotated usage examples.

Each command declares its examples as ``(command line, description)``
pairs. ``--examples`` prints them as an aligned block instead of
cluttering ``--help``; on a group it also collects the examples of every
subcommand, so ``cdpgen --examples`` is a one-page cheat sheet.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click

type Example = tuple[str, str]

# Descriptions line up at this column unless a command line is longer.
EXAMPLE_COLUMN = 44


def format_examples(examples: Sequence[Example], *, indent: str = "  ") -> str:
    """Render examples as shell lines with ``#`` descriptions aligned."""
    width = min(max((len(line) for line, _ in examples), default=0), EXAMPLE_COLUMN)
    rendered = []
    for line, description in examples:
        if description:
            rendered.append(f"{indent}{line.ljust(width)}  # {description}")
        else:
            rendered.append(f"{indent}{line}")
    return "\n".join(rendered)


def collect_examples(ctx: click.Context) -> list[tuple[str, Sequence[Example]]]:
    """Sections of examples for ``ctx.command`` and, for groups, its subcommands.

    Each section is ``(heading, examples)``; the command's own examples
    use an empty heading and come first.
    """
    command = ctx.command
    sections: list[tuple[str, Sequence[Example]]] = []
    own = getattr(command, "examples", None)
    if own:
        sections.append(("", own))
    if isinstance(command, click.Group):
        for name in command.list_commands(ctx):
            sub = command.get_command(ctx, name)
            if sub is None or sub.hidden:
                continue
            examples = getattr(sub, "examples", None)
            if examples:
                sections.append((name, examples))
    return sections


def _show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"Examples for '{ctx.command_path}':")
    for heading, examples in collect_examples(ctx):
        click.echo()
        if heading:
            click.echo(f"{heading}:")
        click.echo(format_examples(examples))
    ctx.exit(0)


def _add_examples_option(cmd: click.Command) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""
    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=_show_examples,
            help="Show usage examples.",
        )
    )


class CdpCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(
        self, *args: Any, examples: Sequence[Example] | None = None, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self.examples = list(examples or ())
        if self.examples:
            _add_examples_option(self)


class CdpGroup(click.Group):
    """Click Group subclass whose ``--examples`` covers every subcommand.

    Sets ``command_class = CdpCommand`` so all subcommands automatically
    accept the ``examples`` parameter without explicit ``cls=`` each time.
    The flag is always attached, since subcommands registered later may
    bring examples of their own.
    """

    command_class = CdpCommand

    def __init__(
        self, *args: Any, examples: Sequence[Example] | None = None, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self.examples = list(examples or ())
        _add_examples_option(self)
