"""Artifact persistence helpers for icecube.

Compiled artifacts are written only when their content changes, and always
as a whole file: content goes to a temporary sibling which is renamed over
the target, so readers never observe a partial artifact.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

# Permissions of compiled output directories
DIRECTORY_MODE = 0o750

# Permissions of written artifacts
FILE_MODE = 0o644


def ensure_directory(path: Path | str) -> Path:
    """Create a directory (and missing parents) if it does not exist.

    Args:
        path: Directory to create.

    Returns:
        The directory path.
    """
    path = Path(path)
    if not path.is_dir():
        path.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
        logger.debug("directory_created", path=str(path))
    return path


def write_if_changed(path: Path | str, content: str) -> bool:
    """Write content to path unless the file already holds the same bytes.

    Args:
        path: Target file.
        content: Text to write (UTF-8).

    Returns:
        True if the file was written, False if it was already up to date.

    Raises:
        OSError: If the file cannot be written. Not retried.
    """
    path = Path(path)
    data = content.encode("utf-8")

    try:
        if path.read_bytes() == data:
            return False
    except FileNotFoundError:
        pass

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp_name, FILE_MODE)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug("artifact_written", path=str(path), size=len(data))
    return True
