"""Shared test fixtures for icecube-cli tests.

Provides CliRunner fixtures and icecube project builders for testing
CLI commands.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
import yaml
from click.testing import CliRunner

from icecube_cli.output import configure_logging

# File name constants
ICECUBE_YAML_FILENAME = "icecube.yaml"

BADGE_SOURCE = '''from icecube_core import HtmlNode, SingleFileComponent


class Badge(SingleFileComponent):
    def render(self) -> HtmlNode:
        return HtmlNode("span", {"class": "badge"}, ["new"])
#</py>

<script>
export default ({ root }) => root.classList.add("ready");
</script>

<style>
.badge { font-weight: bold; }
</style>
'''


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo the logging configuration installed by ``icecube`` invocations.

    The CLI binds structlog to the stderr of the runner that invoked it;
    that stream is gone once the invocation returns. Commands invoked
    directly (without the top-level group) get the same configuration the
    group would install.
    """
    configure_logging()
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _no_cache_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ICECUBE_CACHE", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def compiler_fields() -> dict[str, Any]:
    """Return the fields of the default compiler configuration."""
    return {
        "namespace_prefix": "app.components",
        "source_dir": "app/components",
        "compiled_code_dir": "storage/icecube/private",
        "compiled_assets_dir": "storage/icecube/public",
        "public_url": "/storage/icecube",
        "cache_enabled": True,
        "cache_file": "storage/icecube/default.cache.json",
    }


@pytest.fixture
def make_project(tmp_path: Path, compiler_fields: dict[str, Any]) -> Callable[..., Path]:
    """Return a helper creating a project with one component and icecube.yaml.

    Keyword arguments override fields of the default compiler configuration;
    ``compilers`` replaces the whole compilers mapping.
    """

    def _make(compilers: dict[str, Any] | None = None, **overrides: Any) -> Path:
        components = tmp_path / "app" / "components"
        components.mkdir(parents=True, exist_ok=True)
        (components / "Badge.ice.py").write_text(BADGE_SOURCE)

        if compilers is None:
            compilers = {"default": {**compiler_fields, **overrides}}

        config_path = tmp_path / ICECUBE_YAML_FILENAME
        config_path.write_text(yaml.safe_dump({"compilers": compilers}))
        return config_path

    return _make


@pytest.fixture
def vite_build(tmp_path: Path) -> Path:
    """Create a Vite build directory and return its manifest path.

    Two component chunks carry their own stylesheet; an unrelated chunk
    keeps its stylesheet.
    """
    build = tmp_path / "public" / "build"
    assets = build / "assets"
    assets.mkdir(parents=True)
    (assets / "app_components_Counter-1a.css").write_text(".counter{color:red}")
    (assets / "app_components_Badge-2b.css").write_text(".badge{font-weight:bold}")
    (assets / "other-3c.css").write_text(".other{margin:0}")

    manifest = {
        "resources/js/icecube.js": {
            "file": "assets/icecube-0f.js",
            "name": "icecube",
            "src": "resources/js/icecube.js",
            "isEntry": True,
        },
        "storage/icecube/public/app_components_Counter.js": {
            "file": "assets/app_components_Counter-1a.js",
            "name": "app_components_Counter",
            "src": "storage/icecube/public/app_components_Counter.js",
            "isDynamicEntry": True,
            "css": ["assets/app_components_Counter-1a.css"],
        },
        "storage/icecube/public/app_components_Badge.js": {
            "file": "assets/app_components_Badge-2b.js",
            "name": "app_components_Badge",
            "src": "storage/icecube/public/app_components_Badge.js",
            "isDynamicEntry": True,
            "css": ["assets/app_components_Badge-2b.css"],
        },
        "resources/js/other.js": {
            "file": "assets/other-3c.js",
            "name": "other",
            "src": "resources/js/other.js",
            "isEntry": True,
            "css": ["assets/other-3c.css"],
        },
    }
    manifest_path = build / "manifest.json"
    manifest_path.write_text(json.dumps(manifest, indent=2))
    return manifest_path
