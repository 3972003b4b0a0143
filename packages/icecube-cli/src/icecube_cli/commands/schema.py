"""icecube schema command - Export JSON Schema."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from icecube_cli.output import error, success


@click.group()
def schema() -> None:
    """Manage JSON Schema for IDE support and other tooling.

    **Commands:**

    - `icecube schema export` - Export the registry cache file JSON Schema
    - `icecube schema export-config` - Export the icecube.yaml JSON Schema
    """
    pass


@schema.command("export")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./schemas/icecube-cache.schema.json",
    help="Output path [default: ./schemas/icecube-cache.schema.json]",
)
def export_schema(output_path: str) -> None:
    """Export the registry cache file JSON Schema.

    Lets tools outside Python read the cache written by `icecube compile`.

    Examples:

        icecube schema export

        icecube schema export --output custom/path/cache.schema.json
    """
    # Import here to avoid heavy imports at CLI startup
    from icecube_core import export_cache_schema

    _export(export_cache_schema, Path(output_path))


@schema.command("export-config")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./schemas/icecube.schema.json",
    help="Output path [default: ./schemas/icecube.schema.json]",
)
def export_config_schema(output_path: str) -> None:
    """Export the icecube.yaml JSON Schema for IDE autocomplete.

    Examples:

        icecube schema export-config
    """
    from icecube_core import export_config_schema as export_config

    _export(export_config, Path(output_path))


def _export(exporter: Callable[[Path], Any], output: Path) -> None:
    try:
        exporter(output)
        success(f"Schema exported to {output}")

    except PermissionError:
        error(f"Cannot write to: {output}")
        raise SystemExit(2) from None

    except OSError as e:
        error(f"Schema export failed: {e}")
        raise SystemExit(1) from None
