"""Bootstrap service: create a repository whose first commit is SSH-signed.

Drives any :class:`CommitBackendPort` through the same four steps. The only
reference mutation is the last step, so a failure while signing or writing
objects never leaves a reference pointing at a half-written commit.
"""

import logging
from pathlib import Path

from pydantic import BaseModel

from sigcommit.app.ports.backend import CommitBackendPort
from sigcommit.app.ports.signer import SignerPort
from sigcommit.objects.commit import Identity

logger = logging.getLogger(__name__)


class BootstrapResult(BaseModel):
    """Outcome of bootstrapping one backend."""

    backend: str
    path: Path
    tree_id: str
    commit_id: str
    reference: str


class BootstrapService:
    """Creates the initial signed commit in a fresh repository."""

    def __init__(self, signer: SignerPort):
        """Initialize bootstrap service.

        Args:
            signer: Signer holding the unlocked SSH key
        """
        self.signer = signer

    def bootstrap(
        self,
        backend: CommitBackendPort,
        *,
        author: Identity,
        message: str,
        committer: Identity | None = None,
    ) -> BootstrapResult:
        """Initialise ``backend`` and record a signed root commit.

        Args:
            backend: Repository backend to populate
            author: Commit author
            message: Commit message, stored verbatim
            committer: Committer (defaults to ``author``)

        Returns:
            BootstrapResult describing the new commit and reference
        """
        committer = committer or author

        logger.debug("Bootstrapping %s repository at %s", backend.name, backend.path)
        backend.init_repo()
        try:
            tree_id = backend.write_empty_tree()
            logger.debug("%s: empty tree %s", backend.name, tree_id)

            commit_id = backend.persist_signed_commit(
                tree_id, author, committer, message, self.signer
            )
            logger.debug("%s: signed commit %s", backend.name, commit_id)

            reference = backend.bind_reference(commit_id, message)
        finally:
            backend.close()

        logger.info("Created signed commit %s on %s with %s", commit_id, reference, backend.name)
        return BootstrapResult(
            backend=backend.name,
            path=backend.path,
            tree_id=tree_id,
            commit_id=commit_id,
            reference=reference,
        )
