"""Hashing utilities for content-addressed objects and signed payloads."""

import hashlib


def compute_object_id(content: bytes, kind: str = "commit") -> str:
    """Compute the git object id of ``content``.

    The id is the SHA-1 of ``<kind> <length>\\0`` followed by the content,
    which is what both pygit2 and dulwich store objects under.

    Args:
        content: Raw object body (without the loose-object header)
        kind: Object type name (commit, tree, blob, tag)

    Returns:
        Hexadecimal object id
    """
    header = f"{kind} {len(content)}\0".encode("ascii")
    return hashlib.sha1(header + content).hexdigest()


def compute_digest(content: bytes, algorithm: str) -> bytes:
    """Return the raw digest of ``content`` using ``algorithm`` (e.g. ``sha256``)."""
    return hashlib.new(algorithm, content).digest()
