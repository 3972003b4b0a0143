"""Style compilation strategies for icecube.

A style strategy turns the raw text of one <style> block into CSS scoped to
its component:
- ScopingStyleCompiler: wraps non-global blocks in a nested attribute selector
- ScssStyleCompiler: same scope, resolved through libsass (compressed output)

Scoping relies on the data-icecube attribute that SingleFileComponent stamps
on the root element of every rendered component.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import structlog

from icecube_core.errors import CompilationError

if TYPE_CHECKING:
    from icecube_core.compiler.models import StyleBlock

logger = structlog.get_logger(__name__)

# Root element attribute carrying the component name
SCOPE_ATTRIBUTE = "data-icecube"


class StyleCompiler(ABC):
    """Strategy interface for compiling one style block."""

    #: Name used in icecube.yaml to select the strategy
    name: str = ""

    @abstractmethod
    def compile(self, component_name: str, style_text: str, is_global: bool) -> str:
        """Compile a style block.

        Args:
            component_name: Flattened component name used as the scope.
            style_text: Raw style text.
            is_global: Skip scoping when True.

        Returns:
            Compiled CSS text.
        """


class ScopingStyleCompiler(StyleCompiler):
    """Scope non-global blocks with CSS nesting, leaving the rest to the browser.

    Example:
        >>> ScopingStyleCompiler().compile("Foo", "color:red", False)
        '[data-icecube=Foo] { color:red }'
    """

    name = "scoping-only"

    def compile(self, component_name: str, style_text: str, is_global: bool) -> str:
        if is_global:
            return style_text

        return f"[{SCOPE_ATTRIBUTE}={component_name}] {{ {style_text} }}"


class ScssStyleCompiler(StyleCompiler):
    """Scope and compile blocks with libsass.

    Nested selectors in the block resolve against the component scope, so
    ``button { color: red }`` becomes ``[data-icecube="Foo"] button{color:red}``.

    Args:
        output_style: libsass output style (default "compressed").
        compile_options: Extra keyword arguments for ``sass.compile``.
    """

    name = "preprocessor"

    def __init__(
        self,
        output_style: str = "compressed",
        compile_options: dict[str, Any] | None = None,
    ) -> None:
        self.output_style = output_style
        self.compile_options = compile_options or {}

    def compile(self, component_name: str, style_text: str, is_global: bool) -> str:
        if not style_text:
            return ""

        # Import here to keep libsass off the import path of scoping-only setups
        import sass

        source = (
            style_text
            if is_global
            else f'[{SCOPE_ATTRIBUTE}="{component_name}"] {{ {style_text} }}'
        )

        try:
            return sass.compile(
                string=source,
                output_style=self.output_style,
                source_comments=False,
                **self.compile_options,
            )
        except sass.CompileError as e:
            raise CompilationError(
                f"Style compilation failed for {component_name}",
                internal_details=str(e),
            ) from e


def compile_styles(
    strategy: StyleCompiler,
    component_name: str,
    blocks: Iterable[StyleBlock],
) -> str:
    """Compile style blocks independently and join them in source order.

    Args:
        strategy: Style strategy to apply to each block.
        component_name: Flattened component name used as the scope.
        blocks: Style blocks in document order.

    Returns:
        Compiled CSS of all blocks joined with newlines.
    """
    compiled = [
        strategy.compile(component_name, block.content, block.is_global) for block in blocks
    ]
    logger.debug("styles_compiled", component=component_name, blocks=len(compiled))
    return "\n".join(compiled)
