"""Utility modules for common operations."""

from sigcommit.utils.hashing import compute_digest, compute_object_id
from sigcommit.utils.paths import ensure_dir, expand_path, reset_dir

__all__ = [
    "compute_digest",
    "compute_object_id",
    "ensure_dir",
    "expand_path",
    "reset_dir",
]
