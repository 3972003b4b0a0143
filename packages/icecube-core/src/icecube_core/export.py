"""JSON Schema export functions for icecube.

Exports JSON Schema Draft 2020-12 documents for the cache file and for
icecube.yaml, so other tools (and other languages) can validate them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from icecube_core.compiler.models import CacheFile
from icecube_core.config import IceCubeConfig

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


def export_cache_schema(output_path: Path | str | None = None) -> dict[str, Any]:
    """Export the CacheFile JSON Schema.

    Args:
        output_path: Optional path to write the schema file to. Parent
            directories are created as needed.

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> schema = export_cache_schema()
        >>> schema["title"]
        'CacheFile'
    """
    return _export(CacheFile, "icecube-cache.schema.json", output_path)


def export_config_schema(output_path: Path | str | None = None) -> dict[str, Any]:
    """Export the icecube.yaml JSON Schema for IDE autocomplete."""
    return _export(IceCubeConfig, "icecube.schema.json", output_path)


def _export(
    model: type[BaseModel],
    schema_name: str,
    output_path: Path | str | None,
) -> dict[str, Any]:
    schema = model.model_json_schema()

    schema["$schema"] = SCHEMA_DIALECT
    schema["$id"] = f"https://icecube.dev/schemas/{schema_name}"

    if "additionalProperties" not in schema:
        schema["additionalProperties"] = False

    if output_path is not None:
        _write_schema_file(schema, output_path)

    return schema


def _write_schema_file(schema: dict[str, Any], path: Path | str) -> None:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(schema, indent=2))
