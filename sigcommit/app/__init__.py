"""Application layer for sigcommit.

This layer orchestrates signing and commit assembly without touching
repositories directly. All repository I/O is delegated to adapters via port
interfaces.
"""

__all__ = [
    "AssembledCommit",
    "BootstrapResult",
    "BootstrapService",
    "CommitAssembler",
]

from sigcommit.app.assembler import AssembledCommit, CommitAssembler
from sigcommit.app.bootstrap_service import BootstrapResult, BootstrapService
