"""icecube-core: Single-file component compiler.

This package provides:
- IceCubeCompiler: Compile ``.ice.py`` sources into code, script and style artifacts
- Registry: Index compiled components, resolve them lazily, persist a cache
- SingleFileComponent / IceComponent: Server-side component base classes
- handle_component_call: Validate and dispatch remote component calls
- IceCubeConfig: icecube.yaml configuration
"""

from __future__ import annotations

__version__ = "0.1.0"

# Compiler pipeline
from icecube_core.compiler import (
    BundlerScriptCompiler,
    CachedComponent,
    CacheFile,
    CompiledComponent,
    EmbedStyleScriptCompiler,
    IceCubeCompiler,
    ParsedComponent,
    ScopingStyleCompiler,
    ScriptCompiler,
    ScssStyleCompiler,
    StyleBlock,
    StyleCompiler,
    compute_digest,
    parse,
)

# Components
from icecube_core.components import Component, IceComponent, SingleFileComponent

# Configuration
from icecube_core.config import CompilerConfig, IceCubeConfig

# Error types
from icecube_core.errors import (
    BadComponentRequest,
    CompilationError,
    CompilerConfigNotFoundError,
    ComponentNameCollisionError,
    ComponentNotFoundError,
    ConfigurationError,
    IceCubeError,
)

# JSON Schema exports
from icecube_core.export import export_cache_schema, export_config_schema
from icecube_core.html import HtmlNode

# Registry and runtime
from icecube_core.registry import Registry
from icecube_core.remote import (
    ComponentCall,
    ComponentCallResult,
    handle_component_call,
    sign_snapshot,
)
from icecube_core.runtime import boot, build_compiler

__all__ = [
    "__version__",
    # Compiler
    "IceCubeCompiler",
    "parse",
    "compute_digest",
    "StyleCompiler",
    "ScopingStyleCompiler",
    "ScssStyleCompiler",
    "ScriptCompiler",
    "EmbedStyleScriptCompiler",
    "BundlerScriptCompiler",
    # Models
    "StyleBlock",
    "ParsedComponent",
    "CompiledComponent",
    "CachedComponent",
    "CacheFile",
    # Registry and runtime
    "Registry",
    "boot",
    "build_compiler",
    # Components
    "Component",
    "SingleFileComponent",
    "IceComponent",
    "HtmlNode",
    # Remote calls
    "ComponentCall",
    "ComponentCallResult",
    "handle_component_call",
    "sign_snapshot",
    # Configuration
    "IceCubeConfig",
    "CompilerConfig",
    # Errors
    "IceCubeError",
    "CompilationError",
    "ConfigurationError",
    "CompilerConfigNotFoundError",
    "ComponentNotFoundError",
    "ComponentNameCollisionError",
    "BadComponentRequest",
    # JSON Schema exports
    "export_cache_schema",
    "export_config_schema",
]
