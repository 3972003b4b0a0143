"""icecube pack command - Fold component stylesheets into the Vite manifest.

With the external-bundler script strategy every component script imports its
own stylesheet, so a Vite build emits one CSS chunk per component. pack
concatenates those chunks into a single ``assets/icecube_<name>_styles.css``
per configuration and attaches it to the icecube entry point, so pages load
one stylesheet instead of one per component.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from icecube_cli.commands import load_config, select_compilers
from icecube_cli.errors import EXIT_SYSTEM_ERROR, EXIT_USER_ERROR, CLIError
from icecube_cli.output import info, success, warning

BUNDLER_SCRIPT_COMPILER = "external-bundler"


@click.command("pack")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=False),
    default="./icecube.yaml",
    help="Path to icecube.yaml [default: ./icecube.yaml]",
)
@click.option(
    "--compiler",
    "compiler_name",
    type=str,
    default=None,
    help="Only pack this configuration (default: all)",
)
@click.option(
    "-m",
    "--manifest",
    "manifest_path",
    type=click.Path(exists=False),
    default="./public/build/manifest.json",
    help="Vite manifest [default: ./public/build/manifest.json]",
)
@click.option(
    "--entry",
    "entry",
    type=str,
    default="resources/js/icecube.js",
    help="Manifest key of the icecube entry point [default: resources/js/icecube.js]",
)
def pack(config_path: str, compiler_name: str | None, manifest_path: str, entry: str) -> None:
    """Pack component stylesheets of external-bundler configurations.

    Run after the Vite build. Configurations using another script
    strategy are skipped.

    Examples:

        icecube pack

        icecube pack --manifest dist/.vite/manifest.json --entry src/icecube.js
    """
    config = load_config(config_path)
    selected = select_compilers(config, compiler_name)

    manifest_file = Path(manifest_path)
    if not manifest_file.exists():
        raise CLIError(
            f"Vite manifest not found: {manifest_path}\n\nRun the Vite build first.",
            exit_code=EXIT_USER_ERROR,
        )

    try:
        manifest: dict[str, Any] = json.loads(manifest_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CLIError(f"Invalid manifest {manifest_path}: {e}") from None

    from icecube_core.compiler.parser import flatten_identifier

    build_dir = manifest_file.parent

    try:
        for name, compiler_config in selected.items():
            if compiler_config.script_compiler != BUNDLER_SCRIPT_COMPILER:
                warning(f"Skipping '{name}' - not an {BUNDLER_SCRIPT_COMPILER} configuration")
                continue

            prefix = flatten_identifier(compiler_config.namespace_prefix)
            css_files = extract_css_files(manifest, prefix)
            if not css_files:
                info(f"{name}: No component stylesheets to pack")
                continue

            packed = write_packed_css(build_dir, name, css_files)
            add_packed_entry(manifest, name, entry)
            success(f"{name}: Packed {len(css_files)} stylesheet(s) into {packed}")

        manifest_file.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")

    except FileNotFoundError as e:
        raise CLIError(f"Stylesheet listed in the manifest not found: {e.filename}") from None

    except PermissionError as e:
        raise CLIError(f"Cannot write to: {e.filename}", exit_code=EXIT_SYSTEM_ERROR) from None

    success("All components packed")


def packed_css_name(name: str) -> str:
    """Return the file name of a configuration's packed stylesheet."""
    return f"icecube_{name}_styles.css"


def extract_css_files(manifest: dict[str, Any], prefix: str) -> list[str]:
    """Remove and return the css lists of chunks whose name starts with prefix.

    Files keep manifest order; duplicates are dropped.
    """
    files: list[str] = []
    for meta in manifest.values():
        if not isinstance(meta, dict):
            continue
        if str(meta.get("name", "")).startswith(prefix) and "css" in meta:
            files.extend(meta.pop("css"))
    return list(dict.fromkeys(files))


def write_packed_css(build_dir: Path, name: str, css_files: list[str]) -> Path:
    """Concatenate css_files (relative to build_dir) into the packed stylesheet."""
    content = "\n".join((build_dir / file).read_text(encoding="utf-8") for file in css_files)
    packed = build_dir / "assets" / packed_css_name(name)
    packed.parent.mkdir(parents=True, exist_ok=True)
    packed.write_text(content, encoding="utf-8")
    return packed


def add_packed_entry(manifest: dict[str, Any], name: str, entry: str) -> None:
    """Declare the packed stylesheet and attach it to the entry point."""
    key = packed_css_name(name)
    file = f"assets/{key}"

    manifest[key] = {
        "file": file,
        "name": key,
        "src": file,
        "isEntry": False,
        "isDynamicEntry": False,
    }

    entry_css = manifest.setdefault(entry, {}).setdefault("css", [])
    if file not in entry_css:
        entry_css.append(file)
