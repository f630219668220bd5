"""SSH key signer adapter."""

from __future__ import annotations

from sigcommit.app.ports.signer import SignerPort
from sigcommit.crypto.keys import PrivateKey
from sigcommit.crypto.sshsig import DEFAULT_NAMESPACE, HashAlgorithm, Signature, SignatureEngine


class SshSigner(SignerPort):
    """Signs with an unlocked SSH key under a fixed namespace and digest."""

    def __init__(
        self,
        key: PrivateKey,
        *,
        engine: SignatureEngine | None = None,
        namespace: str = DEFAULT_NAMESPACE,
        hash_alg: HashAlgorithm = HashAlgorithm.SHA256,
    ) -> None:
        self.key = key
        self.engine = engine or SignatureEngine()
        self.namespace = namespace
        self.hash_alg = hash_alg

    def sign(self, data: bytes) -> Signature:
        return self.engine.sign(self.key, data, namespace=self.namespace, hash_alg=self.hash_alg)
