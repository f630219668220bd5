"""libgit2-backed commit backend (pygit2).

libgit2 builds the unsigned commit buffer itself; we only sign it and hand the
signature back, and libgit2 splices it into the object as a ``gpgsig`` header.
The branch is force-updated, so re-running against the same repository is
allowed.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pygit2

from sigcommit.app.ports.backend import CommitBackendPort
from sigcommit.app.ports.signer import SignerPort
from sigcommit.errors import ObjectWriteFailedError, RepositoryIOError
from sigcommit.objects.commit import SIGNATURE_HEADER, Identity
from sigcommit.utils.paths import ensure_dir

logger = logging.getLogger(__name__)


def _git_signature(identity: Identity) -> pygit2.Signature:
    return pygit2.Signature(
        identity.name,
        identity.email,
        identity.seconds,
        identity.offset_minutes,
    )


class IndexBackend(CommitBackendPort):
    """Repository written through libgit2's index and commit-buffer APIs."""

    name = "pygit2"

    def __init__(self, path: Path, *, branch: str = "main") -> None:
        self.path = Path(path)
        self.branch = branch
        self._repo: pygit2.Repository | None = None

    @property
    def repo(self) -> pygit2.Repository:
        if self._repo is None:
            raise RepositoryIOError(f"No repository opened at {self.path}; call init_repo() first")
        return self._repo

    def init_repo(self) -> None:
        ensure_dir(self.path)
        try:
            self._repo = pygit2.init_repository(
                str(self.path), bare=False, initial_head=self.branch
            )
        except (pygit2.GitError, OSError) as exc:
            raise RepositoryIOError(f"Cannot initialise repository at {self.path}: {exc}") from exc
        logger.debug("Initialised libgit2 repository at %s", self.path)

    def write_empty_tree(self) -> str:
        index = self.repo.index
        index.clear()
        try:
            index.write()
            tree_id = index.write_tree()
        except pygit2.GitError as exc:
            raise ObjectWriteFailedError(f"Cannot write empty tree: {exc}") from exc
        return str(tree_id)

    def persist_signed_commit(
        self,
        tree_id: str,
        author: Identity,
        committer: Identity,
        message: str,
        signer: SignerPort,
    ) -> str:
        try:
            buffer = self.repo.create_commit_string(
                _git_signature(author),
                _git_signature(committer),
                message,
                pygit2.Oid(hex=tree_id),
                [],
            )
        except (pygit2.GitError, ValueError) as exc:
            raise ObjectWriteFailedError(f"Cannot build commit buffer: {exc}") from exc

        signature = signer.sign(buffer.encode("utf-8"))

        try:
            commit_id = self.repo.create_commit_with_signature(
                buffer, signature.trimmed(), SIGNATURE_HEADER
            )
        except pygit2.GitError as exc:
            raise ObjectWriteFailedError(f"Cannot write signed commit: {exc}") from exc

        logger.debug("Stored signed commit %s via libgit2", commit_id)
        return str(commit_id)

    def bind_reference(self, commit_id: str, message: str) -> str:
        commit = self.repo.get(commit_id)
        if commit is None:
            raise ObjectWriteFailedError(f"Commit {commit_id} is not in the object database")
        # Written as a plain reference: libgit2 refuses to force-update a
        # branch that HEAD points at.
        try:
            reference = self.repo.references.create(
                f"refs/heads/{self.branch}", commit.id, force=True
            )
        except (pygit2.GitError, ValueError) as exc:
            raise RepositoryIOError(f"Cannot update branch '{self.branch}': {exc}") from exc
        logger.debug("Branch %s -> %s", reference.name, commit_id)
        return reference.name

    def read_object(self, object_id: str) -> bytes:
        obj = self.repo.get(object_id)
        if obj is None:
            raise RepositoryIOError(f"Object {object_id} not found in {self.path}")
        return obj.read_raw()

    def close(self) -> None:
        if self._repo is not None:
            self._repo.free()
            self._repo = None
