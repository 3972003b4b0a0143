"""icecube-cli: Command-line interface for icecube.

Commands:
- icecube compile: Compile components and store the registry cache
- icecube pack: Fold per-component stylesheets into the bundler manifest
- icecube schema export: Export JSON Schema for the cache file and icecube.yaml
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
