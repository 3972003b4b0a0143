"""Script compilation strategies for icecube.

A script strategy decides how a component's compiled CSS reaches the browser:
- EmbedStyleScriptCompiler: injects a <style> element from the script itself
- BundlerScriptCompiler: imports the sibling stylesheet and lets a bundler
  (e.g. Vite) extract it
"""

from __future__ import annotations

from abc import ABC, abstractmethod

# Prefix of the id given to injected/inlined <style> elements
STYLE_ELEMENT_ID_PREFIX = "icecube-style-"


def style_element_id(component_name: str) -> str:
    """Return the id of the <style> element holding a component's CSS."""
    return f"{STYLE_ELEMENT_ID_PREFIX}{component_name}"


class ScriptCompiler(ABC):
    """Strategy interface for producing a component's final script."""

    #: Name used in icecube.yaml to select the strategy
    name: str = ""

    #: Whether compiled CSS still has to be delivered by the registry
    delivers_styles: bool = True

    @abstractmethod
    def compile(self, component_name: str, script_text: str, compiled_style: str) -> str:
        """Compile a component script.

        Args:
            component_name: Flattened component name.
            script_text: Raw script text (empty when the component has none).
            compiled_style: Joined compiled CSS of the component.

        Returns:
            Final script text.
        """


class EmbedStyleScriptCompiler(ScriptCompiler):
    """Append a block that injects the component CSS once per page."""

    name = "embedded"

    def compile(self, component_name: str, script_text: str, compiled_style: str) -> str:
        return f"""{script_text}

// Embedded CSS
(() => {{
    const styleId = `{style_element_id(component_name)}`;
    if (document.getElementById(styleId)) return;
    const style = document.createElement('style');
    style.id = styleId;
    style.textContent = `{_escape_template_literal(compiled_style)}`;
    (document.head || document.body).appendChild(style);
}})();
"""


class BundlerScriptCompiler(ScriptCompiler):
    """Import the sibling stylesheet so the bundler owns style delivery."""

    name = "external-bundler"
    delivers_styles = False

    def compile(self, component_name: str, script_text: str, compiled_style: str) -> str:
        return f"""// Embedded CSS
import './{component_name}.css';

{script_text}
"""


def _escape_template_literal(text: str) -> str:
    """Escape text for use inside a JavaScript template literal."""
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")
