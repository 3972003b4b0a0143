"""Registry of compiled components for icecube.

The Registry is an explicit context object owned by one execution context
(a process, a worker). It maps identifiers to compiled (or cached) component
records and resolves identifiers to loaded component classes:

- Components are registered by IceCubeCompiler.compile() or by load_cache().
- resolve() loads a component's compiled code module on first use only.
- Identifiers missing from the registry are compiled on demand by the
  compiler attached for their namespace prefix.
- store_cache()/load_cache() persist the registry metadata as JSON so a later
  process can skip compilation entirely.

The registry is not synchronized; give each execution context its own.
"""

from __future__ import annotations

import re
import sys
import types
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from jinja2 import Environment, PackageLoader
from markupsafe import Markup
from pydantic import ValidationError as PydanticValidationError

from icecube_core.compiler.artifacts import ensure_directory, write_if_changed
from icecube_core.compiler.models import (
    CACHE_FORMAT_VERSION,
    CachedComponent,
    CacheFile,
    RegistryRecord,
)
from icecube_core.compiler.parser import NAMESPACE_SEPARATOR
from icecube_core.compiler.scripts import style_element_id
from icecube_core.errors import ComponentNameCollisionError, ComponentNotFoundError

if TYPE_CHECKING:
    from icecube_core.compiler.compiler import IceCubeCompiler

logger = structlog.get_logger(__name__)

# Prefix of the module names given to loaded compiled code
COMPILED_MODULE_PREFIX = "icecube_compiled_"

_STYLE_CLOSE_TAG = re.compile(r"</(style)", re.IGNORECASE)

_templates = Environment(
    loader=PackageLoader("icecube_core", "templates"),
    autoescape=False,
    keep_trailing_newline=True,
)


class Registry:
    """Index of compiled components for one execution context.

    Example:
        >>> registry = Registry()
        >>> if not registry.load_cache(Path("storage/icecube/default.cache.json")):
        ...     compiler = IceCubeCompiler(..., registry=registry)
        ...     compiler.scan_and_compile()
        >>> Counter = registry.resolve("app.components.Counter")
        >>> str(Counter(count=3))
        '<button id="icecube-..." data-icecube="app_components_Counter" ...>3</button>'
    """

    def __init__(self) -> None:
        self._components: dict[str, RegistryRecord] = {}
        self._names: dict[str, str] = {}
        self._loaded: dict[str, type] = {}
        self._compilers: list[IceCubeCompiler] = []

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._components

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[RegistryRecord]:
        return iter(list(self._components.values()))

    def attach(self, compiler: IceCubeCompiler) -> None:
        """Use a compiler to compile unregistered identifiers under its prefix."""
        if compiler not in self._compilers:
            self._compilers.append(compiler)

    def register(self, identifier: str, component: RegistryRecord) -> None:
        """Insert or replace the record of an identifier.

        Raises:
            ComponentNameCollisionError: If a different identifier already
                owns the component's flattened name.
        """
        self.check_name(identifier, component.component_name)

        self._components[identifier] = component
        self._names[component.component_name] = identifier

    def check_name(self, identifier: str, component_name: str) -> None:
        """Make sure identifier may own component_name.

        Raises:
            ComponentNameCollisionError: If a different identifier already
                owns the name.
        """
        existing = self._names.get(component_name)
        if existing is not None and existing != identifier:
            raise ComponentNameCollisionError(component_name, identifier, existing)

    def get(self, identifier: str) -> RegistryRecord | None:
        """Return the record of an identifier, if registered."""
        return self._components.get(identifier)

    def get_by_name(self, component_name: str) -> RegistryRecord | None:
        """Return the record registered under a flattened component name."""
        identifier = self._names.get(component_name)
        if identifier is None:
            return None
        return self._components.get(identifier)

    def resolve(self, identifier: str, *, force: bool = False) -> type:
        """Return the component class of an identifier, loading it on first use.

        Args:
            identifier: Fully-qualified component identifier.
            force: Recompile (when a compiler covers the identifier) and reload
                even if the class was already loaded.

        Returns:
            The class defined by the component's compiled code.

        Raises:
            ComponentNotFoundError: If no record exists and no attached
                compiler can produce one, or the compiled code does not
                define the component class.
        """
        if not force and identifier in self._loaded:
            return self._loaded[identifier]

        record = self._components.get(identifier)
        if record is None or force:
            compiler = self._compiler_for(identifier)
            if compiler is not None:
                record = compiler.compile_identifier(identifier)

        if record is None:
            raise ComponentNotFoundError(identifier)

        component_cls = self._load(record)
        self._loaded[identifier] = component_cls
        return component_cls

    def store_cache(self, path: Path | str, include_styles: bool = True) -> Path:
        """Persist the metadata of every registered component.

        Args:
            path: Cache file to write.
            include_styles: Keep compiled CSS in the cache. Disable when an
                external bundler delivers the stylesheets.

        Returns:
            Path of the cache file.
        """
        path = Path(path)
        records = sorted(self._components.values(), key=lambda r: r.component_name)
        cache = CacheFile(
            components={
                record.component_name: CachedComponent.from_component(record, include_styles)
                for record in records
            },
        )

        ensure_directory(path.parent)
        write_if_changed(path, cache.model_dump_json(indent=2) + "\n")
        logger.info(
            "cache_stored",
            path=str(path),
            components=len(cache.components),
            include_styles=include_styles,
        )
        return path

    def load_cache(self, path: Path | str) -> bool:
        """Populate the registry from a cache file.

        Compiled code is not loaded here; resolve() loads each component's
        code module on first use.

        Args:
            path: Cache file written by store_cache().

        Returns:
            True if the cache was loaded. False if the file is missing,
            unreadable, not a valid cache document, or names a component
            that collides with a registered one; the registry is then left
            unchanged and the caller should compile live.
        """
        path = Path(path)
        log = logger.bind(path=str(path))

        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.info("cache_unavailable", reason=str(e))
            return False

        try:
            cache = CacheFile.model_validate_json(raw)
        except PydanticValidationError as e:
            log.warning("cache_invalid", errors=e.error_count())
            return False

        if cache.version != CACHE_FORMAT_VERSION:
            log.warning("cache_version_mismatch", version=cache.version)
            return False

        collision = self._first_collision(cache)
        if collision is not None:
            log.warning("cache_name_collision", component_name=collision)
            return False

        for cached in cache.components.values():
            self.register(cached.identifier, cached)

        log.info("cache_loaded", components=len(cache.components))
        return True

    def all_styles(self) -> Markup:
        """Render one <style> element per component with compiled CSS."""
        elements = [
            Markup('<style id="{}">{}</style>').format(
                style_element_id(record.component_name),
                Markup(_close_tag_safe(record.compiled_style)),
            )
            for record in self._components.values()
            if record.compiled_style
        ]
        return Markup("\n").join(elements)

    def bootstrap_script(self) -> Markup:
        """Render the client script that mounts every [data-icecube] element."""
        component_scripts = {
            record.component_name: record.script_url
            for record in self._components.values()
            if record.script_url
        }
        template = _templates.get_template("bootstrap.js.j2")
        return Markup(template.render(component_scripts=component_scripts))

    def _first_collision(self, cache: CacheFile) -> str | None:
        """Return the first component name the cache cannot own, if any."""
        owners = dict(self._names)
        for cached in cache.components.values():
            owner = owners.setdefault(cached.component_name, cached.identifier)
            if owner != cached.identifier:
                return cached.component_name
        return None

    def _compiler_for(self, identifier: str) -> IceCubeCompiler | None:
        for compiler in self._compilers:
            if compiler.handles(identifier):
                return compiler
        return None

    def _load(self, record: RegistryRecord) -> type:
        """Execute a compiled code module and return its component class."""
        module_name = COMPILED_MODULE_PREFIX + record.component_name
        code_path = Path(record.compiled_code_path)

        try:
            source = code_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ComponentNotFoundError(
                record.identifier,
                internal_details=f"Compiled code unreadable at {code_path}: {e}",
            ) from e

        module = types.ModuleType(module_name)
        module.__file__ = str(code_path)
        sys.modules[module_name] = module
        try:
            exec(compile(source, str(code_path), "exec"), module.__dict__)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise

        class_name = record.identifier.rsplit(NAMESPACE_SEPARATOR, 1)[-1]
        component_cls = getattr(module, class_name, None)
        if not isinstance(component_cls, type):
            raise ComponentNotFoundError(
                record.identifier,
                internal_details=f"{code_path} does not define class {class_name}",
            )

        component_cls.component_name = record.component_name
        component_cls.identifier = record.identifier
        logger.debug("component_loaded", identifier=record.identifier, path=str(code_path))
        return component_cls


def _close_tag_safe(css: str) -> str:
    """Escape ``</style`` so inlined CSS cannot end its <style> element."""
    return _STYLE_CLOSE_TAG.sub(r"<\\/\1", css)
