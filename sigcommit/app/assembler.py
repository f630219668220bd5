"""Commit assembly: sign the canonical payload and embed the signature."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sigcommit.app.ports.signer import SignerPort
from sigcommit.crypto.sshsig import Signature
from sigcommit.errors import EncodingError
from sigcommit.objects.commit import SIGNATURE_HEADER, Commit, encode_commit, object_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AssembledCommit:
    """Both encodings of a signed commit.

    ``payload`` is what the signature covers; ``data`` is what gets stored.
    Their ids differ, and only ``commit_id`` names a stored object.
    """

    payload: bytes
    payload_id: str
    signature: Signature
    commit: Commit
    data: bytes
    commit_id: str


class CommitAssembler:
    """Encodes a draft, signs it, and re-encodes it with a ``gpgsig`` header."""

    def __init__(self, signer: SignerPort) -> None:
        self.signer = signer

    def assemble(self, draft: Commit) -> AssembledCommit:
        """Sign ``draft`` and return the storage form.

        Raises:
            EncodingError: If ``draft`` is malformed or already signed
            SigningFailedError: If the signer cannot sign
        """
        if draft.signature is not None:
            raise EncodingError("Commit draft already carries a signature header")

        payload = encode_commit(draft)
        signature = self.signer.sign(payload)
        signed = draft.with_header(SIGNATURE_HEADER, signature.trimmed())
        data = encode_commit(signed)

        assembled = AssembledCommit(
            payload=payload,
            payload_id=object_id(payload),
            signature=signature,
            commit=signed,
            data=data,
            commit_id=object_id(data),
        )
        logger.debug(
            "Assembled commit %s (unsigned payload %s)", assembled.commit_id, assembled.payload_id
        )
        return assembled
