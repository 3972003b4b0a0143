"""Server-side component base classes for icecube.

- Component: id, named slots and render()
- SingleFileComponent: stamps the scope attribute and serialized state on the
  rendered root element so the bootstrap script can mount the client script
- IceComponent: additionally signs the serialized state so the component can
  receive remote method calls (see icecube_core.remote)

Component state is declared explicitly through ``state_fields``; only those
attributes are serialized to ``data-props`` and accepted back from remote
calls.
"""

from __future__ import annotations

import json
import uuid
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from markupsafe import Markup

from icecube_core.compiler.parser import flatten_identifier
from icecube_core.compiler.styles import SCOPE_ATTRIBUTE
from icecube_core.html import HtmlNode

DEFAULT_SLOT = "children"


class Component(ABC):
    """Base class of renderable components.

    Subclasses may define their own __init__ without calling super().
    """

    _id: str | None = None

    @property
    def slots(self) -> dict[str, Any]:
        return self.__dict__.setdefault("_slots", {})

    @property
    def id(self) -> str:
        if self._id is None:
            self.set_id()
        return self._id  # type: ignore[return-value]

    def set_id(self, component_id: str | None = None) -> Component:
        self._id = component_id or f"icecube-{uuid.uuid4().hex[:13]}"
        return self

    def slot(self, name: str, default: Any = None) -> Any:
        """Return a slot's content, falling back to ``default``.

        A callable default is called with the component.
        """
        content = self.slots.get(name)
        if content is not None:
            return content
        if callable(default):
            return default(self)
        return default

    def children(self, default: Any = None) -> Any:
        return self.slot(DEFAULT_SLOT, default)

    def fill_slot(self, content: Any = None, name: str = DEFAULT_SLOT) -> Component:
        self.slots[name] = content
        return self

    def __call__(self, content: Any = None, name: str = DEFAULT_SLOT) -> Component:
        return self.fill_slot(content, name)

    def __html__(self) -> Markup:
        return Markup(str(self))

    def __str__(self) -> str:
        return str(self.render())

    @abstractmethod
    def render(self) -> HtmlNode | str:
        """Render the component."""


class SingleFileComponent(Component):
    """Component compiled from a ``.ice.py`` source.

    Attributes:
        state_fields: Names of the attributes making up the component state.
        component_name: Flattened identifier; set by the registry on load.
        identifier: Fully-qualified identifier; set by the registry on load.

    Example:
        >>> class Counter(SingleFileComponent):
        ...     state_fields = ("count",)
        ...
        ...     def __init__(self, count: int = 0) -> None:
        ...         super().__init__()
        ...         self.count = count
        ...
        ...     def render(self) -> HtmlNode:
        ...         return HtmlNode("span", children=[self.count])
    """

    state_fields: ClassVar[tuple[str, ...]] = ()
    component_name: ClassVar[str | None] = None
    identifier: ClassVar[str | None] = None

    @abstractmethod
    def render(self) -> HtmlNode:
        """Render the component's root element."""

    @classmethod
    def get_component_name(cls) -> str:
        if cls.component_name:
            return cls.component_name
        return flatten_identifier(f"{cls.__module__}.{cls.__qualname__}")

    def expose_state(self) -> dict[str, Any]:
        """Return the declared state as a name -> value mapping."""
        return {name: getattr(self, name) for name in self.state_fields}

    def on_render(self, root: HtmlNode) -> HtmlNode:
        """Stamp id, scope and serialized state on the root element."""
        if root.get_attribute("id") is None:
            root.set_attribute("id", self.id)
        root.set_attribute(SCOPE_ATTRIBUTE, self.get_component_name())
        root.set_attribute("data-props", json.dumps(self.expose_state()))
        return root

    def __str__(self) -> str:
        return str(self.on_render(self.render()))


class IceComponent(SingleFileComponent):
    """Single-file component that accepts remote method calls.

    The serialized state is signed with the process secret so that a remote
    call can only replay a snapshot the server rendered itself.
    """

    def on_render(self, root: HtmlNode) -> HtmlNode:
        from icecube_core.remote import get_secret_key, sign_snapshot

        root = super().on_render(root)

        snapshot = root.get_attribute("data-props")
        root.set_attribute("x-ice", sign_snapshot(get_secret_key(), snapshot))
        root.set_attribute("x-data", "IceComponent($el)")
        return root
