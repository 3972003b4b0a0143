"""icecube command line entry point.

Subcommand modules import icecube-core (pydantic, jinja2, libsass), so they
are only imported once a subcommand is actually selected. `icecube --help`
stays fast.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from icecube_cli import __version__
from icecube_cli.output import configure_logging, set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True

# Subcommand name -> "module.attribute" of its click command
LAZY_COMMANDS = {
    "compile": "icecube_cli.commands.compile.compile_cmd",
    "pack": "icecube_cli.commands.pack.pack",
    "schema": "icecube_cli.commands.schema.schema",
}


class LazyGroup(rclick.RichGroup):
    """Rich group whose subcommands are imported on first lookup.

    Attributes:
        lazy_subcommands: Command name to dotted import path of the command.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*super().list_commands(ctx), *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if command is None and cmd_name in self.lazy_subcommands:
            command = self._import_command(cmd_name)
        return command

    def _import_command(self, cmd_name: str) -> click.Command:
        module_name, attr_name = self.lazy_subcommands[cmd_name].rsplit(".", 1)
        command = getattr(importlib.import_module(module_name), attr_name)
        if not isinstance(command, click.Command):
            raise TypeError(f"{module_name}.{attr_name} is not a click command")
        return command


def _disable_color(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if value:
        set_no_color(True)


def _set_verbosity(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    configure_logging(verbose=value)


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="icecube")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=_disable_color,
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Show debug logs on stderr.",
    is_eager=True,
    expose_value=False,
    callback=_set_verbosity,
)
def cli() -> None:
    """IceCube - Single-file component compiler.

    Compile `.ice.py` components into code, script and style artifacts
    as configured in icecube.yaml.

    **Getting Started:**

    - `icecube compile` - Compile components and store the registry cache
    - `icecube pack` - Fold component stylesheets into the Vite manifest
    - `icecube schema export` - Export JSON Schema for the cache file
    """


if __name__ == "__main__":
    cli()
