"""Component source parser for icecube.

A component source is a single ``<Name>.ice.py`` file holding server-side
Python code, an optional ``<script>`` block and any number of ``<style>``
blocks:

    from icecube_core import HtmlNode, SingleFileComponent

    class Counter(SingleFileComponent):
        state_fields = ("count",)

        def __init__(self, count: int = 0) -> None:
            super().__init__()
            self.count = count

        def render(self) -> HtmlNode:
            return HtmlNode("button", children=[str(self.count)])
    #</py>

    <script>
    export default ({ root }) => root.addEventListener("click", () => {});
    </script>

    <style>
    button { color: red; }
    </style>

Everything up to the last ``#</py>`` marker is the code section. parse() is
pure: it performs no I/O and keeps no state.
"""

from __future__ import annotations

import re

import xxhash

from icecube_core.compiler.models import ParsedComponent, StyleBlock

# Closes the code section of a component source
CODE_END_MARKER = "#</py>"

# Separator of namespace segments in identifiers
NAMESPACE_SEPARATOR = "."

# Number of hex characters kept from the source hash
DIGEST_LENGTH = 8

_SCRIPT_PATTERN = re.compile(r"<script[^>]*>(.*?)</script>", re.IGNORECASE | re.DOTALL)
_STYLE_PATTERN = re.compile(r"<style([^>]*)>(.*?)</style>", re.IGNORECASE | re.DOTALL)
_GLOBAL_TOKEN = re.compile(r"\bglobal\b")


def flatten_identifier(identifier: str) -> str:
    """Flatten a dotted identifier into a single-token component name.

    Example:
        >>> flatten_identifier("app.components.Counter")
        'app_components_Counter'
    """
    return identifier.replace(NAMESPACE_SEPARATOR, "_")


def compute_digest(source_text: str, colocated_script: str | None = None) -> str:
    """Compute the 8-character fingerprint of a component source.

    Args:
        source_text: Component source text.
        colocated_script: Colocated script text. Ignored when empty.

    Returns:
        First 8 hex characters of the xxh128 hash of the source
        (followed by the colocated script, when present).
    """
    content = source_text + colocated_script if colocated_script else source_text
    return xxhash.xxh128_hexdigest(content.encode("utf-8"))[:DIGEST_LENGTH]


def parse(
    identifier: str,
    source_text: str,
    colocated_script: str | None = None,
) -> ParsedComponent:
    """Split a component source into its code, script and style sections.

    Args:
        identifier: Fully-qualified component identifier.
        source_text: Component source text.
        colocated_script: Text of the colocated script file, if any. When
            non-empty it replaces any inline <script> block.

    Returns:
        ParsedComponent with all sections and the source digest.

    Example:
        >>> parsed = parse("app.components.Foo", "<style>color:red</style>")
        >>> parsed.style_blocks[0].content
        'color:red'
    """
    script_section = colocated_script or _extract_script(source_text)

    return ParsedComponent(
        identifier=identifier,
        component_name=flatten_identifier(identifier),
        code_section=_extract_code(source_text),
        script_section=script_section,
        style_blocks=_extract_style_blocks(source_text),
        digest=compute_digest(source_text, colocated_script),
    )


def _extract_code(source_text: str) -> str:
    """Return the code section, up to and including the last marker."""
    end = source_text.rfind(CODE_END_MARKER)
    if end == -1:
        return source_text

    return source_text[: end + len(CODE_END_MARKER)].strip()


def _extract_script(source_text: str) -> str | None:
    """Return the content of the first inline <script> block."""
    match = _SCRIPT_PATTERN.search(source_text)
    if match is None:
        return None

    return match.group(1).strip()


def _extract_style_blocks(source_text: str) -> list[StyleBlock]:
    """Return every inline <style> block in document order."""
    return [
        StyleBlock(
            content=match.group(2).strip(),
            is_global=_GLOBAL_TOKEN.search(match.group(1)) is not None,
        )
        for match in _STYLE_PATTERN.finditer(source_text)
    ]
