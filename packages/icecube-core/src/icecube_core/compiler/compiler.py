"""IceCubeCompiler: component sources -> compiled artifacts.

This module implements the orchestrator that drives the parser and the two
compilation strategies, writes the code/script/style artifacts and registers
the resulting CompiledComponent.

Source layout:
- <source_dir>/<Name>.ice.py      component source
- <source_dir>/<Name>.js          optional colocated script

Output layout (component_name = flattened identifier):
- <compiled_code_dir>/<component_name>.py
- <compiled_assets_dir>/<component_name>.js
- <compiled_assets_dir>/<component_name>.css
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from icecube_core.compiler.artifacts import ensure_directory, write_if_changed
from icecube_core.compiler.models import CompiledComponent, ParsedComponent
from icecube_core.compiler.parser import NAMESPACE_SEPARATOR, parse
from icecube_core.compiler.scripts import EmbedStyleScriptCompiler, ScriptCompiler
from icecube_core.compiler.styles import ScopingStyleCompiler, StyleCompiler, compile_styles
from icecube_core.errors import CompilationError, ComponentNotFoundError

if TYPE_CHECKING:
    from icecube_core.registry import Registry

logger = structlog.get_logger(__name__)

# Suffix of component source files
SOURCE_SUFFIX = ".ice.py"

# Suffix of colocated script files
SCRIPT_SUFFIX = ".js"

Parser = Callable[[str, str, "str | None"], ParsedComponent]


class IceCubeCompiler:
    """Compile component sources under one namespace prefix.

    The compiler attaches itself to the given registry, which then uses it to
    compile identifiers under ``namespace_prefix`` on first resolution.

    Attributes:
        namespace_prefix: Identifier prefix served by this compiler.
        source_dir: Directory holding ``*.ice.py`` sources.
        compiled_code_dir: Directory for compiled code modules.
        compiled_assets_dir: Directory for compiled scripts and stylesheets.
        public_url: Public URL under which compiled assets are served.

    Example:
        >>> registry = Registry()
        >>> compiler = IceCubeCompiler(
        ...     namespace_prefix="app.components",
        ...     source_dir=Path("app/components"),
        ...     compiled_code_dir=Path("storage/icecube/private"),
        ...     compiled_assets_dir=Path("storage/icecube/public"),
        ...     public_url="/storage/icecube",
        ...     registry=registry,
        ... )
        >>> compiler.scan_and_compile()
        >>> Counter = registry.resolve("app.components.Counter")
    """

    def __init__(
        self,
        namespace_prefix: str,
        source_dir: Path | str,
        compiled_code_dir: Path | str,
        compiled_assets_dir: Path | str,
        public_url: str,
        registry: Registry,
        parser: Parser = parse,
        style_compiler: StyleCompiler | None = None,
        script_compiler: ScriptCompiler | None = None,
    ) -> None:
        self.namespace_prefix = namespace_prefix.strip(NAMESPACE_SEPARATOR)
        self.source_dir = Path(source_dir)
        self.compiled_code_dir = Path(compiled_code_dir)
        self.compiled_assets_dir = Path(compiled_assets_dir)
        self.public_url = public_url.rstrip("/")
        self.registry = registry
        self.parser = parser
        self.style_compiler = style_compiler or ScopingStyleCompiler()
        self.script_compiler = script_compiler or EmbedStyleScriptCompiler()
        self._log = logger.bind(namespace_prefix=self.namespace_prefix)

        self._ensure_compiled_dirs()
        registry.attach(self)

    def handles(self, identifier: str) -> bool:
        """Tell whether an identifier lives under this compiler's prefix."""
        return identifier.startswith(self.namespace_prefix + NAMESPACE_SEPARATOR)

    def source_path_for(self, identifier: str) -> Path:
        """Map an identifier under the prefix to its source file.

        Example:
            >>> compiler.source_path_for("app.components.admin.Panel")
            PosixPath('app/components/admin/Panel.ice.py')
        """
        relative = identifier[len(self.namespace_prefix) + 1 :]
        *parents, name = relative.split(NAMESPACE_SEPARATOR)
        return self.source_dir.joinpath(*parents, name + SOURCE_SUFFIX)

    def scan_and_compile(self) -> list[CompiledComponent]:
        """Compile every component source directly inside source_dir.

        Returns:
            Compiled components, in file name order.
        """
        self._ensure_compiled_dirs()

        compiled: list[CompiledComponent] = []
        for source_path in sorted(self.source_dir.glob("*" + SOURCE_SUFFIX)):
            base_name = source_path.name[: -len(SOURCE_SUFFIX)]
            identifier = f"{self.namespace_prefix}{NAMESPACE_SEPARATOR}{base_name}"
            compiled.append(self.compile(identifier, source_path))

        self._log.info("scan_completed", source_dir=str(self.source_dir), count=len(compiled))
        return compiled

    def compile_identifier(self, identifier: str) -> CompiledComponent:
        """Compile an identifier under the prefix from its conventional source path.

        Raises:
            ComponentNotFoundError: If the identifier is outside the prefix or
                its source file does not exist.
        """
        if not self.handles(identifier):
            raise ComponentNotFoundError(identifier)

        source_path = self.source_path_for(identifier)
        if not source_path.is_file():
            raise ComponentNotFoundError(
                identifier,
                internal_details=f"Missing component source at {source_path}",
            )

        return self.compile(identifier, source_path)

    def compile(self, identifier: str, source_path: Path | str) -> CompiledComponent:
        """Compile one component source and register it.

        Args:
            identifier: Fully-qualified component identifier.
            source_path: Path to the ``.ice.py`` source.

        Returns:
            The registered CompiledComponent.

        Raises:
            FileNotFoundError: If the source does not exist.
            CompilationError: If the source is not valid UTF-8 or a style
                block fails to compile.
            ComponentNameCollisionError: If another registered identifier
                flattens to the same name. Nothing is written in that case.
            OSError: If an artifact cannot be written.
        """
        source_path = Path(source_path)
        source_text = self._read_source(source_path)
        colocated_script = self._read_colocated_script(source_path)

        parsed = self.parser(identifier, source_text, colocated_script)
        self.registry.check_name(identifier, parsed.component_name)
        compiled = self._compile_parsed(parsed)

        self.registry.register(identifier, compiled)
        self._log.info(
            "component_compiled",
            identifier=identifier,
            component_name=compiled.component_name,
            digest=compiled.digest,
        )
        return compiled

    def _compile_parsed(self, parsed: ParsedComponent) -> CompiledComponent:
        """Run the strategies on a parsed component and persist its artifacts."""
        self._ensure_compiled_dirs()

        code_path = self.compiled_code_dir / f"{parsed.component_name}.py"
        assets_base_path = self.compiled_assets_dir / parsed.component_name
        script_path = self.compiled_assets_dir / f"{parsed.component_name}.js"
        style_path = self.compiled_assets_dir / f"{parsed.component_name}.css"

        compiled_style = compile_styles(
            self.style_compiler,
            parsed.component_name,
            parsed.style_blocks,
        )
        compiled_script = self.script_compiler.compile(
            parsed.component_name,
            parsed.script_section or "",
            compiled_style,
        )

        write_if_changed(code_path, parsed.code_section)
        write_if_changed(script_path, compiled_script)
        write_if_changed(style_path, compiled_style)

        return CompiledComponent(
            **parsed.model_dump(),
            compiled_code_path=str(code_path),
            compiled_assets_base_path=str(assets_base_path),
            compiled_script=compiled_script,
            compiled_style=compiled_style,
            script_url=f"{self.public_url}/{parsed.component_name}.js?digest={parsed.digest}",
        )

    def _read_source(self, source_path: Path) -> str:
        data = source_path.read_bytes()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CompilationError(
                f"Component source is not valid UTF-8: {source_path.name}",
                internal_details=f"{source_path}: {e}",
            ) from e

    def _read_colocated_script(self, source_path: Path) -> str | None:
        """Read the colocated script, treating any read failure as absence."""
        name = source_path.name
        if name.endswith(SOURCE_SUFFIX):
            name = name[: -len(SOURCE_SUFFIX)]
        script_path = source_path.with_name(name + SCRIPT_SUFFIX)

        try:
            return script_path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    def _ensure_compiled_dirs(self) -> None:
        ensure_directory(self.compiled_code_dir)
        ensure_directory(self.compiled_assets_dir)
