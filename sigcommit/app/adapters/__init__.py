"""Concrete adapters wiring application ports to git libraries and the terminal."""

from __future__ import annotations

from .direct_backend import DirectObjectBackend
from .index_backend import IndexBackend
from .prompt import StaticPasswordPrompt, TyperPasswordPrompt
from .signer import SshSigner

__all__ = [
    "DirectObjectBackend",
    "IndexBackend",
    "SshSigner",
    "StaticPasswordPrompt",
    "TyperPasswordPrompt",
]
