"""Minimal HTML node used by component render() methods.

Text children and attribute values are escaped with MarkupSafe; children that
implement ``__html__`` (Markup, nested HtmlNode, rendered components) are
inserted as-is.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from markupsafe import Markup, escape

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)


class HtmlNode:
    """An HTML element with attributes and children.

    Example:
        >>> node = HtmlNode("button", {"class": "btn"}, ["Save & close"])
        >>> str(node)
        '<button class="btn">Save &amp; close</button>'
    """

    def __init__(
        self,
        tag: str,
        attributes: dict[str, Any] | None = None,
        children: Iterable[Any] | None = None,
    ) -> None:
        self.tag = tag
        self.attributes: dict[str, Any] = dict(attributes or {})
        self.children: list[Any] = list(children or [])

    def get_attribute(self, name: str) -> Any:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> HtmlNode:
        self.attributes[name] = value
        return self

    def append(self, *children: Any) -> HtmlNode:
        self.children.extend(children)
        return self

    def __html__(self) -> Markup:
        return Markup(self.render())

    def __str__(self) -> str:
        return self.render()

    def render(self) -> str:
        """Serialize the node and its children to HTML."""
        parts = [f"<{self.tag}"]
        for name, value in self.attributes.items():
            # None and False drop the attribute, True renders it bare
            if value is None or value is False:
                continue
            if value is True:
                parts.append(f" {name}")
            else:
                parts.append(f' {name}="{escape(value)}"')
        parts.append(">")

        if self.tag in VOID_ELEMENTS:
            return "".join(parts)

        parts.extend(str(escape(child)) for child in self.children if child is not None)
        parts.append(f"</{self.tag}>")
        return "".join(parts)
