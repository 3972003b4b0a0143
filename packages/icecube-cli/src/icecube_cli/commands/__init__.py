"""CLI command modules.

This package contains the implementation of all CLI subcommands and the
icecube.yaml loading they share.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from icecube_cli.errors import (
    handle_file_not_found,
    handle_icecube_error,
    handle_permission_error,
    handle_validation_error,
    handle_yaml_error,
)

if TYPE_CHECKING:
    from icecube_core import CompilerConfig, IceCubeConfig

__all__ = ["load_config", "select_compilers"]


def load_config(config_path: str) -> IceCubeConfig:
    """Load icecube.yaml, turning every failure into a CLIError.

    Args:
        config_path: Path given with --config.

    Returns:
        Validated configuration.
    """
    path = Path(config_path)
    if not path.exists():
        handle_file_not_found(config_path)

    # Import here to avoid heavy imports at CLI startup
    import yaml
    from pydantic import ValidationError as PydanticValidationError

    from icecube_core import IceCubeConfig, IceCubeError

    try:
        return IceCubeConfig.from_yaml(path)
    except yaml.YAMLError as e:
        handle_yaml_error(e, config_path)
    except PydanticValidationError as e:
        handle_validation_error(e, config_path)
    except PermissionError:
        handle_permission_error(config_path, "read")
    except IceCubeError as e:
        handle_icecube_error(e)


def select_compilers(config: IceCubeConfig, name: str | None) -> dict[str, CompilerConfig]:
    """Return the configurations selected with --compiler (all by default)."""
    from icecube_core import CompilerConfigNotFoundError

    try:
        return config.select(name)
    except CompilerConfigNotFoundError as e:
        handle_icecube_error(e)
