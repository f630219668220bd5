"""SSH key loading, unlocking and SSHSIG signing."""

from sigcommit.crypto.keys import DEFAULT_KEY_NAMES, KeyStore, PrivateKey
from sigcommit.crypto.sshsig import (
    DEFAULT_NAMESPACE,
    HashAlgorithm,
    Signature,
    SignatureEngine,
    SshSignature,
)

__all__ = [
    "DEFAULT_KEY_NAMES",
    "DEFAULT_NAMESPACE",
    "HashAlgorithm",
    "KeyStore",
    "PrivateKey",
    "Signature",
    "SignatureEngine",
    "SshSignature",
]
