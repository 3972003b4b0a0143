"""icecube compile command - Compile components and store the registry cache."""

from __future__ import annotations

import click

from icecube_cli.commands import load_config, select_compilers
from icecube_cli.errors import EXIT_SYSTEM_ERROR, CLIError, handle_icecube_error
from icecube_cli.output import info, success


@click.command("compile")
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
    help="Only compile this configuration (default: all)",
)
def compile_cmd(config_path: str, compiler_name: str | None) -> None:
    """Compile `.ice.py` components of every configuration.

    Writes the code, script and style artifacts of each component, then
    stores the registry cache for configurations that declare a cache_file.
    Compiled CSS is left out of the cache for external-bundler
    configurations.

    Examples:

        icecube compile

        icecube compile --config deploy/icecube.yaml --compiler admin
    """
    config = load_config(config_path)
    selected = select_compilers(config, compiler_name)

    # Import here to avoid heavy imports at CLI startup
    from icecube_core import IceCubeError, Registry, build_compiler

    for name, compiler_config in selected.items():
        # One registry per configuration; caches never mix prefixes
        registry = Registry()

        try:
            compiler = build_compiler(compiler_config, registry)
            compiled = compiler.scan_and_compile()

            success(f"{name}: Compiled {len(compiled)} component(s)")

            if compiler_config.cache_file is None:
                info(f"{name}: No cache_file configured, cache not stored")
                continue

            cache_path = registry.store_cache(
                compiler_config.cache_file,
                include_styles=compiler_config.includes_styles_in_cache,
            )
            success(f"{name}: Cache stored at {cache_path}")

        except PermissionError as e:
            raise CLIError(f"Cannot write to: {e.filename}", exit_code=EXIT_SYSTEM_ERROR) from None

        except IceCubeError as e:
            handle_icecube_error(e)
