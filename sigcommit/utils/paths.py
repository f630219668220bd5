"""Path utilities for directory and file operations."""

from __future__ import annotations

import shutil
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists, creating if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def reset_dir(path: Path) -> Path:
    """Remove ``path`` (if present) and recreate it empty."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
    return ensure_dir(path)


def expand_path(path: Path | str) -> Path:
    """Expand ``~`` and make ``path`` absolute without resolving symlinks."""
    return Path(path).expanduser().absolute()
