"""Shared pytest fixtures for icecube-core tests.

This module provides component sources, a source tree builder and a
compiler wired to a fresh registry, used across unit and integration tests.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

from icecube_core.compiler.compiler import IceCubeCompiler
from icecube_core.registry import Registry

PREFIX = "app.components"

COUNTER_SOURCE = '''from icecube_core import HtmlNode, IceComponent


class Counter(IceComponent):
    state_fields = ("count",)

    def __init__(self, count: int = 0) -> None:
        self.count = count

    def increment(self, step: int = 1) -> None:
        self.count += step

    def reset(self) -> str:
        self.count = 0
        return str(self)

    def render(self) -> HtmlNode:
        return HtmlNode("button", {"class": "counter"}, [str(self.count)])
#</py>

<script>
export default ({ root, props }) => {
    root.addEventListener("click", () => console.log(props.count));
};
</script>

<style>
button { color: red; }
</style>

<style global>
body { margin: 0; }
</style>
'''

BADGE_SOURCE = '''from icecube_core import HtmlNode, SingleFileComponent


class Badge(SingleFileComponent):
    state_fields = ("label",)

    def __init__(self, label: str = "new") -> None:
        self.label = label

    def render(self) -> HtmlNode:
        return HtmlNode("span", {"class": "badge"}, [self.label])
#</py>

<style>
.badge { font-weight: bold; }
</style>
'''


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    cache_logger_on_first_use stays off so that each test sees the
    configuration in place when it runs.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def secret_key(monkeypatch: pytest.MonkeyPatch) -> str:
    """Set ICECUBE_SECRET_KEY for components that sign their state."""
    secret = "test-secret"
    monkeypatch.setenv("ICECUBE_SECRET_KEY", secret)
    return secret


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Return an empty component source directory."""
    path = tmp_path / "app" / "components"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def write_source(source_dir: Path) -> Callable[..., Path]:
    """Return a helper writing ``<name>.ice.py`` (and ``<name>.js``) sources."""

    def _write(name: str, source: str, script: str | None = None) -> Path:
        path = source_dir / f"{name}.ice.py"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        if script is not None:
            path.with_name(f"{name.rsplit('/', 1)[-1]}.js").write_text(script, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def registry() -> Registry:
    """Return a fresh registry."""
    return Registry()


@pytest.fixture
def compiler(tmp_path: Path, source_dir: Path, registry: Registry) -> IceCubeCompiler:
    """Return a compiler for the app.components prefix with default strategies."""
    return IceCubeCompiler(
        namespace_prefix=PREFIX,
        source_dir=source_dir,
        compiled_code_dir=tmp_path / "storage" / "private",
        compiled_assets_dir=tmp_path / "storage" / "public",
        public_url="/storage/icecube/",
        registry=registry,
    )


@pytest.fixture
def counter_source() -> str:
    """Return an IceComponent source with a script, a scoped and a global style."""
    return COUNTER_SOURCE


@pytest.fixture
def badge_source() -> str:
    """Return a SingleFileComponent source with one scoped style and no script."""
    return BADGE_SOURCE
