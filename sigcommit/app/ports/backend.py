"""Commit backend port: an on-disk repository that can store a signed commit."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from sigcommit.app.ports.signer import SignerPort
    from sigcommit.objects.commit import Identity


class CommitBackendPort(Protocol):
    """Port interface for repository backends.

    Exactly two adapters exist (libgit2 via pygit2, pure Python via dulwich).
    They agree on what is signed but differ in how commit objects are built
    and in how the final reference is written.

    Side effects: Reads/writes the repository under ``path``.
    """

    name: str
    path: Path

    def init_repo(self) -> None:
        """Create an empty repository at ``path``, or open the one already there."""
        ...

    def write_empty_tree(self) -> str:
        """Write the empty tree object.

        Returns:
            Hex id of the tree
        """
        ...

    def persist_signed_commit(
        self,
        tree_id: str,
        author: Identity,
        committer: Identity,
        message: str,
        signer: SignerPort,
    ) -> str:
        """Build, sign and store a root commit.

        Returns:
            Hex id of the stored (signed) commit
        """
        ...

    def bind_reference(self, commit_id: str, message: str) -> str:
        """Point the backend's reference at ``commit_id``.

        Args:
            commit_id: Commit to reference
            message: Commit message, used for the reflog entry

        Returns:
            Full name of the updated reference

        Raises:
            RefConflictError: If the backend's precondition does not hold
        """
        ...

    def read_object(self, object_id: str) -> bytes:
        """Return the raw body of a stored object."""
        ...

    def close(self) -> None:
        """Release repository handles."""
        ...
