"""Pure-Python commit backend (dulwich).

The commit record is encoded and signed here, not by the git library: the
exact bytes from :class:`CommitAssembler` are stored unchanged, and ``HEAD``
is only ever created, never moved, so bootstrapping cannot clobber history.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dulwich.errors import NotGitRepository
from dulwich.objects import Commit as GitCommit
from dulwich.objects import Tree
from dulwich.repo import Repo

from sigcommit.app.assembler import AssembledCommit, CommitAssembler
from sigcommit.app.ports.backend import CommitBackendPort
from sigcommit.app.ports.signer import SignerPort
from sigcommit.errors import ObjectWriteFailedError, RefConflictError, RepositoryIOError
from sigcommit.objects.commit import Commit, Identity, decode_commit
from sigcommit.utils.paths import ensure_dir

logger = logging.getLogger(__name__)

HEAD_REF = b"HEAD"


def reflog_message(operation: str, message: str, parent_count: int) -> str:
    """Reflog line in git's ``commit (initial): <subject>`` style."""
    if parent_count == 0:
        operation = f"{operation} (initial)"
    elif parent_count > 1:
        operation = f"{operation} (merge)"
    subject = message.splitlines()[0] if message else ""
    return f"{operation}: {subject}"


class DirectObjectBackend(CommitBackendPort):
    """Repository written object-by-object through dulwich's object store."""

    name = "dulwich"

    def __init__(self, path: Path, *, branch: str = "main") -> None:
        self.path = Path(path)
        self.branch = branch
        self.last_assembled: AssembledCommit | None = None
        self._repo: Repo | None = None

    @property
    def repo(self) -> Repo:
        if self._repo is None:
            raise RepositoryIOError(f"No repository opened at {self.path}; call init_repo() first")
        return self._repo

    def init_repo(self) -> None:
        """Create the repository, or open it if one already exists at ``path``."""
        ensure_dir(self.path)
        try:
            if (self.path / ".git").exists():
                self._repo = Repo(str(self.path))
                logger.debug("Opened existing dulwich repository at %s", self.path)
                return
            self._repo = Repo.init(str(self.path), default_branch=self.branch.encode("utf-8"))
        except (OSError, NotGitRepository) as exc:
            raise RepositoryIOError(f"Cannot initialise repository at {self.path}: {exc}") from exc
        logger.debug("Initialised dulwich repository at %s", self.path)

    def write_empty_tree(self) -> str:
        tree = Tree()
        try:
            self.repo.object_store.add_object(tree)
        except OSError as exc:
            raise ObjectWriteFailedError(f"Cannot write empty tree: {exc}") from exc
        return tree.id.decode("ascii")

    def persist_signed_commit(
        self,
        tree_id: str,
        author: Identity,
        committer: Identity,
        message: str,
        signer: SignerPort,
    ) -> str:
        draft = Commit(tree=tree_id, author=author, committer=committer, message=message)
        assembled = CommitAssembler(signer).assemble(draft)

        obj = GitCommit.from_string(assembled.data)
        if obj.id.decode("ascii") != assembled.commit_id:
            raise ObjectWriteFailedError(
                f"Object store would re-encode commit {assembled.commit_id} as {obj.id.decode()}"
            )
        try:
            self.repo.object_store.add_object(obj)
        except OSError as exc:
            raise ObjectWriteFailedError(f"Cannot write commit {assembled.commit_id}: {exc}") from exc

        self.last_assembled = assembled
        logger.debug("Stored signed commit %s via dulwich", assembled.commit_id)
        return assembled.commit_id

    def bind_reference(self, commit_id: str, message: str) -> str:
        """Create ``HEAD`` (through its symbolic target) only if it does not exist.

        Raises:
            RefConflictError: If ``HEAD`` already resolves to a commit
        """
        commit = decode_commit(self.read_object(commit_id))
        committer = commit.committer
        log_message = reflog_message("commit", message, len(commit.parents))

        try:
            created = self.repo.refs.add_if_new(
                HEAD_REF,
                commit_id.encode("ascii"),
                committer=f"{committer.name} <{committer.email}>".encode("utf-8"),
                timestamp=committer.seconds,
                timezone=committer.offset_minutes * 60,
                message=log_message.encode("utf-8"),
            )
        except OSError as exc:
            raise RepositoryIOError(f"Cannot update HEAD in {self.path}: {exc}") from exc

        if not created:
            raise RefConflictError(
                "HEAD",
                f"HEAD already exists in {self.path}; refusing to overwrite existing history",
            )

        names, _ = self.repo.refs.follow(HEAD_REF)
        reference = names[-1].decode("utf-8")
        logger.debug("%s -> %s (%s)", reference, commit_id, log_message)
        return reference

    def read_object(self, object_id: str) -> bytes:
        try:
            return self.repo.object_store[object_id.encode("ascii")].as_raw_string()
        except KeyError as exc:
            raise RepositoryIOError(f"Object {object_id} not found in {self.path}") from exc

    def close(self) -> None:
        if self._repo is not None:
            self._repo.close()
            self._repo = None
