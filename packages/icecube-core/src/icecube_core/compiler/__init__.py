"""Compiler package for icecube.

This package exports the compilation pipeline:
- parse: Split a component source into code, script and style sections
- IceCubeCompiler: Orchestrate parsing, strategies and artifact writes
- StyleCompiler strategies: ScopingStyleCompiler, ScssStyleCompiler
- ScriptCompiler strategies: EmbedStyleScriptCompiler, BundlerScriptCompiler
- Models: ParsedComponent, CompiledComponent, CachedComponent, CacheFile
"""

from __future__ import annotations

from icecube_core.compiler.artifacts import ensure_directory, write_if_changed
from icecube_core.compiler.compiler import SCRIPT_SUFFIX, SOURCE_SUFFIX, IceCubeCompiler
from icecube_core.compiler.models import (
    CACHE_FORMAT_VERSION,
    CachedComponent,
    CacheFile,
    CompiledComponent,
    ParsedComponent,
    RegistryRecord,
    StyleBlock,
)
from icecube_core.compiler.parser import (
    CODE_END_MARKER,
    compute_digest,
    flatten_identifier,
    parse,
)
from icecube_core.compiler.scripts import (
    BundlerScriptCompiler,
    EmbedStyleScriptCompiler,
    ScriptCompiler,
    style_element_id,
)
from icecube_core.compiler.styles import (
    SCOPE_ATTRIBUTE,
    ScopingStyleCompiler,
    ScssStyleCompiler,
    StyleCompiler,
    compile_styles,
)

__all__: list[str] = [
    # Orchestrator
    "IceCubeCompiler",
    "SOURCE_SUFFIX",
    "SCRIPT_SUFFIX",
    # Parser
    "parse",
    "compute_digest",
    "flatten_identifier",
    "CODE_END_MARKER",
    # Style strategies
    "StyleCompiler",
    "ScopingStyleCompiler",
    "ScssStyleCompiler",
    "compile_styles",
    "SCOPE_ATTRIBUTE",
    # Script strategies
    "ScriptCompiler",
    "EmbedStyleScriptCompiler",
    "BundlerScriptCompiler",
    "style_element_id",
    # Artifacts
    "write_if_changed",
    "ensure_directory",
    # Models
    "StyleBlock",
    "ParsedComponent",
    "CompiledComponent",
    "CachedComponent",
    "CacheFile",
    "CACHE_FORMAT_VERSION",
    "RegistryRecord",
]
