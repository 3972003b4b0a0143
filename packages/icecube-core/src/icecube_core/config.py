"""icecube.yaml configuration models.

One file declares any number of named compiler configurations, each covering
one namespace prefix:

    compilers:
      default:
        namespace_prefix: app.components
        source_dir: app/components
        compiled_code_dir: storage/icecube/private
        compiled_assets_dir: storage/icecube/public
        public_url: /storage/icecube
        script_compiler: external-bundler
        style_compiler: preprocessor
        cache_enabled: true
        cache_file: storage/icecube/default.cache.json

Relative paths are resolved against the directory of icecube.yaml. The
ICECUBE_CACHE environment variable overrides every cache_enabled flag.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Literal

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from icecube_core.errors import CompilerConfigNotFoundError, ConfigurationError

logger = structlog.get_logger(__name__)

# Default configuration file name
CONFIG_FILE_NAME = "icecube.yaml"

# Environment variable overriding cache_enabled
CACHE_ENV_VAR = "ICECUBE_CACHE"

# Valid configuration name pattern
CONFIG_NAME_PATTERN = r"^[a-zA-Z][a-zA-Z0-9_-]*$"

# Valid namespace prefix pattern (dotted Python identifiers)
NAMESPACE_PREFIX_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$"

ScriptCompilerName = Literal["embedded", "external-bundler"]
StyleCompilerName = Literal["scoping-only", "preprocessor"]

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class CompilerConfig(BaseModel):
    """Configuration of one named compiler.

    Attributes:
        namespace_prefix: Identifier prefix of the components (e.g., "app.components").
        source_dir: Directory holding the ``*.ice.py`` sources.
        compiled_code_dir: Output directory for compiled code modules.
        compiled_assets_dir: Output directory for compiled scripts and styles.
        public_url: URL under which compiled_assets_dir is served.
        script_compiler: Script strategy ("embedded" or "external-bundler").
        style_compiler: Style strategy ("scoping-only" or "preprocessor").
        cache_enabled: Load the registry from cache_file in production.
        cache_file: Path of the registry cache file.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    namespace_prefix: str = Field(
        ...,
        pattern=NAMESPACE_PREFIX_PATTERN,
        description="Identifier prefix of the components",
    )
    source_dir: Path = Field(..., description="Directory holding component sources")
    compiled_code_dir: Path = Field(..., description="Output directory for compiled code")
    compiled_assets_dir: Path = Field(
        ...,
        description="Output directory for compiled scripts and styles",
    )
    public_url: str = Field(..., min_length=1, description="Public URL of compiled assets")
    script_compiler: ScriptCompilerName = Field(
        default="embedded",
        description="Script strategy",
    )
    style_compiler: StyleCompilerName = Field(
        default="scoping-only",
        description="Style strategy",
    )
    cache_enabled: bool = Field(default=False, description="Load registry from cache")
    cache_file: Path | None = Field(default=None, description="Registry cache file")

    @model_validator(mode="after")
    def _cache_file_required(self) -> CompilerConfig:
        if self.cache_enabled and self.cache_file is None:
            raise ValueError("cache_file is required when cache_enabled is true")
        return self

    @property
    def includes_styles_in_cache(self) -> bool:
        """Whether compiled CSS is kept in the cache (not with a bundler)."""
        return self.script_compiler != "external-bundler"

    def resolve_paths(self, base_dir: Path) -> CompilerConfig:
        """Return a copy with relative paths anchored at base_dir."""
        updates: dict[str, Any] = {}
        for field_name in ("source_dir", "compiled_code_dir", "compiled_assets_dir", "cache_file"):
            value = getattr(self, field_name)
            if value is not None and not value.is_absolute():
                updates[field_name] = base_dir / value
        return self.model_copy(update=updates)


class IceCubeConfig(BaseModel):
    """Root model of icecube.yaml.

    Example:
        >>> config = IceCubeConfig.from_yaml("icecube.yaml")
        >>> config.get_compiler_config("default").namespace_prefix
        'app.components'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    compilers: dict[str, CompilerConfig] = Field(
        default_factory=dict,
        description="Compiler configurations by name",
    )

    @model_validator(mode="after")
    def _valid_names(self) -> IceCubeConfig:
        for name in self.compilers:
            if not re.match(CONFIG_NAME_PATTERN, name):
                raise ValueError(f"Invalid compiler configuration name: {name!r}")
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> IceCubeConfig:
        """Load and validate icecube.yaml.

        Args:
            path: Path to icecube.yaml.

        Returns:
            Validated IceCubeConfig with absolute paths.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            yaml.YAMLError: If YAML syntax is invalid.
            pydantic.ValidationError: If schema validation fails.
            ConfigurationError: If ICECUBE_CACHE holds an invalid value.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r") as f:
            data: dict[str, Any] | None = yaml.safe_load(f)

        config = cls.model_validate(data or {})
        base_dir = path.resolve().parent
        cache_override = cache_enabled_override()

        compilers: dict[str, CompilerConfig] = {}
        for name, compiler_config in config.compilers.items():
            resolved = compiler_config.resolve_paths(base_dir)
            if cache_override is not None:
                resolved = resolved.model_copy(update={"cache_enabled": cache_override})
            compilers[name] = resolved

        logger.debug("config_loaded", path=str(path), compilers=sorted(compilers))
        return cls(compilers=compilers)

    def get_compiler_config(self, name: str) -> CompilerConfig:
        """Get a compiler configuration by name.

        Raises:
            CompilerConfigNotFoundError: If no configuration has that name.
        """
        if name not in self.compilers:
            raise CompilerConfigNotFoundError(name, sorted(self.compilers))
        return self.compilers[name]

    def select(self, name: str | None = None) -> dict[str, CompilerConfig]:
        """Return every configuration, or only the named one.

        Raises:
            CompilerConfigNotFoundError: If name is given but unknown.
        """
        if name is None:
            return dict(self.compilers)
        return {name: self.get_compiler_config(name)}


def cache_enabled_override() -> bool | None:
    """Read the ICECUBE_CACHE override, if set.

    Raises:
        ConfigurationError: If the variable holds an unrecognized value.
    """
    raw = os.environ.get(CACHE_ENV_VAR)
    if raw is None or raw == "":
        return None

    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False

    raise ConfigurationError(
        f"Invalid {CACHE_ENV_VAR} value '{raw}'",
        internal_details=f"Expected one of {sorted(_TRUE_VALUES | _FALSE_VALUES)}",
    )
