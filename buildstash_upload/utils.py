"""Small helpers shared by the upload modules."""

import os
from pathlib import Path
from typing import Union

from buildstash_upload.exceptions import ConfigurationError


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def inspect_file(file_path: Union[str, Path], label: str) -> tuple[str, int]:
    """
    Check that a local artifact exists and return its name and size.

    Args:
        file_path: Path to the artifact
        label: Human label used in error messages ("Primary", "Expansion")

    Returns:
        Tuple of (basename, size_in_bytes)

    Raises:
        ConfigurationError: If the path is missing or not a regular file
    """
    path = str(file_path)
    if not os.path.exists(path):
        raise ConfigurationError(f"{label} file not found at path: {path}")
    if not os.path.isfile(path):
        raise ConfigurationError(f"{label} path is not a file: {path}")
    return os.path.basename(path), os.path.getsize(path)
