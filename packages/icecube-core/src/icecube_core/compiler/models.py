"""Compiler data models for icecube.

This module defines the records that flow through the pipeline:
- StyleBlock: One inline <style> block of a component source
- ParsedComponent: Sections extracted by the parser
- CompiledComponent: ParsedComponent plus artifact paths and compiled output
- CachedComponent: Reduced projection of CompiledComponent persisted in the cache
- CacheFile: Root document of the persisted cache

Contract Rules:
- Models are immutable (frozen=True)
- Unknown fields are rejected (extra="forbid")
- The cache file is plain JSON read back with model_validate_json, never executed
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

CACHE_FORMAT_VERSION = "1.0"


class StyleBlock(BaseModel):
    """Raw content of one <style> block.

    Attributes:
        content: Style text with surrounding whitespace stripped.
        is_global: True when the opening tag carries the ``global`` token.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    content: str = Field(..., description="Raw style text")
    is_global: bool = Field(default=False, description="Skip component scoping")


class ParsedComponent(BaseModel):
    """Sections extracted from a component source.

    Attributes:
        identifier: Fully-qualified identifier (e.g., "app.components.Counter").
        component_name: Identifier flattened to a single token ("app_components_Counter").
        code_section: Server-side Python code of the component.
        script_section: Client script, colocated or inline (None if absent).
        style_blocks: Style blocks in document order.
        digest: 8-character hex fingerprint of the source.

    Example:
        >>> parsed = parse("app.components.Counter", source)
        >>> parsed.component_name
        'app_components_Counter'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    identifier: str = Field(..., min_length=1, description="Fully-qualified identifier")
    component_name: str = Field(..., min_length=1, description="Flattened identifier")
    code_section: str = Field(..., description="Server-side code section")
    script_section: str | None = Field(default=None, description="Client script section")
    style_blocks: list[StyleBlock] = Field(
        default_factory=list,
        description="Style blocks in document order",
    )
    digest: str = Field(
        ...,
        pattern=r"^[0-9a-f]{8}$",
        description="Source fingerprint (8 hex characters)",
    )


class CompiledComponent(ParsedComponent):
    """A parsed component together with its compiled artifacts.

    Owned by the Registry once registered.

    Attributes:
        compiled_code_path: Path of the compiled code module (<name>.py).
        compiled_assets_base_path: Asset path without extension (<dir>/<name>).
        compiled_script: Final client script text.
        compiled_style: Joined compiled CSS (None when nothing was produced).
        script_url: Public, cache-busted URL of the compiled script.
    """

    compiled_code_path: str = Field(..., description="Path to compiled code module")
    compiled_assets_base_path: str = Field(
        ...,
        description="Compiled asset path without extension",
    )
    compiled_script: str = Field(..., description="Compiled client script")
    compiled_style: str | None = Field(default=None, description="Compiled CSS")
    script_url: str | None = Field(default=None, description="Public script URL")


class CachedComponent(BaseModel):
    """Cache projection of a CompiledComponent.

    Drops the compiled script body and the raw sections. The compiled style
    is dropped too when an external bundler owns style delivery.

    Example:
        >>> cached = CachedComponent.from_component(compiled, include_styles=False)
        >>> cached.compiled_style is None
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    identifier: str = Field(..., min_length=1, description="Fully-qualified identifier")
    component_name: str = Field(..., min_length=1, description="Flattened identifier")
    compiled_code_path: str = Field(..., description="Path to compiled code module")
    compiled_assets_base_path: str = Field(
        ...,
        description="Compiled asset path without extension",
    )
    compiled_style: str | None = Field(default=None, description="Compiled CSS")
    script_url: str | None = Field(default=None, description="Public script URL")
    digest: str = Field(
        ...,
        pattern=r"^[0-9a-f]{8}$",
        description="Source fingerprint (8 hex characters)",
    )

    @classmethod
    def from_component(
        cls,
        component: CompiledComponent | CachedComponent,
        include_styles: bool = True,
    ) -> CachedComponent:
        """Project a registry record to its cached form.

        Args:
            component: Compiled component, or a component previously loaded
                from a cache file.
            include_styles: Keep the compiled style text.

        Returns:
            CachedComponent for the record.
        """
        return cls(
            identifier=component.identifier,
            component_name=component.component_name,
            compiled_code_path=component.compiled_code_path,
            compiled_assets_base_path=component.compiled_assets_base_path,
            compiled_style=component.compiled_style if include_styles else None,
            script_url=component.script_url,
            digest=component.digest,
        )


class CacheFile(BaseModel):
    """Root document of a persisted registry cache.

    Attributes:
        version: Cache format version.
        components: Cached components keyed by component name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(
        default=CACHE_FORMAT_VERSION,
        description="Cache format version",
    )
    components: dict[str, CachedComponent] = Field(
        default_factory=dict,
        description="Cached components keyed by component name",
    )


RegistryRecord = CompiledComponent | CachedComponent
