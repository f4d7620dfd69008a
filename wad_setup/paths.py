"""Path utilities for locating application directories."""
from __future__ import annotations

import tempfile
from pathlib import Path


STATIC_DIRNAME = "wad_setup"


def get_static_temp_directory() -> Path:
    """
    Get the shared temporary directory used for downloaded installers.

    The directory lives under the system temp root and survives between runs;
    every artifact written there carries a unique name and is removed by its
    owner once the install attempt finishes.

    Returns:
        Path to the (created) static temp directory.
    """
    path = Path(tempfile.gettempdir()) / STATIC_DIRNAME
    path.mkdir(parents=True, exist_ok=True)
    return path
