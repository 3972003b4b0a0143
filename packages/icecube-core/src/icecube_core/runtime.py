"""Wire configured compilers into a Registry at application start-up.

build_compiler() turns a CompilerConfig into an IceCubeCompiler with the
configured strategies. boot() applies the start-up policy:

- production: load each configuration's cache when enabled, compiling live
  when the cache cannot be loaded
- otherwise: scan and compile every configuration so that sources are
  always fresh
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from icecube_core.compiler.compiler import IceCubeCompiler
from icecube_core.compiler.scripts import (
    BundlerScriptCompiler,
    EmbedStyleScriptCompiler,
    ScriptCompiler,
)
from icecube_core.compiler.styles import ScopingStyleCompiler, ScssStyleCompiler, StyleCompiler

if TYPE_CHECKING:
    from icecube_core.config import CompilerConfig, IceCubeConfig
    from icecube_core.registry import Registry

logger = structlog.get_logger(__name__)

SCRIPT_COMPILERS: dict[str, type[ScriptCompiler]] = {
    EmbedStyleScriptCompiler.name: EmbedStyleScriptCompiler,
    BundlerScriptCompiler.name: BundlerScriptCompiler,
}

STYLE_COMPILERS: dict[str, type[StyleCompiler]] = {
    ScopingStyleCompiler.name: ScopingStyleCompiler,
    ScssStyleCompiler.name: ScssStyleCompiler,
}


def build_compiler(config: CompilerConfig, registry: Registry) -> IceCubeCompiler:
    """Create the compiler described by a configuration.

    Args:
        config: Compiler configuration.
        registry: Registry the compiler registers into and attaches to.

    Returns:
        Configured IceCubeCompiler.
    """
    return IceCubeCompiler(
        namespace_prefix=config.namespace_prefix,
        source_dir=config.source_dir,
        compiled_code_dir=config.compiled_code_dir,
        compiled_assets_dir=config.compiled_assets_dir,
        public_url=config.public_url,
        registry=registry,
        style_compiler=STYLE_COMPILERS[config.style_compiler](),
        script_compiler=SCRIPT_COMPILERS[config.script_compiler](),
    )


def boot(
    config: IceCubeConfig,
    registry: Registry,
    *,
    production: bool,
) -> dict[str, IceCubeCompiler]:
    """Populate a registry from every configured compiler.

    Compilers are attached in every mode, so identifiers missing from a
    loaded cache are still compiled on demand.

    Args:
        config: Loaded icecube.yaml.
        registry: Registry to populate.
        production: Prefer caches over live compilation.

    Returns:
        Compilers by configuration name.
    """
    compilers: dict[str, IceCubeCompiler] = {}

    for name, compiler_config in config.compilers.items():
        log = logger.bind(compiler=name)
        compiler = build_compiler(compiler_config, registry)
        compilers[name] = compiler

        use_cache = (
            production
            and compiler_config.cache_enabled
            and compiler_config.cache_file is not None
        )
        if use_cache and registry.load_cache(compiler_config.cache_file):
            log.info("boot_from_cache", cache_file=str(compiler_config.cache_file))
            continue

        if use_cache:
            log.warning("boot_cache_fallback", cache_file=str(compiler_config.cache_file))
        compiler.scan_and_compile()

    return compilers
