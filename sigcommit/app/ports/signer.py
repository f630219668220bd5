"""Signer port interface for detached commit signatures."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from sigcommit.crypto.sshsig import Signature


class SignerPort(Protocol):
    """Port interface for cryptographic signing operations.

    Implementations hold an unlocked key and a fixed namespace/digest.

    Side effects: None (pure computation).
    """

    def sign(self, data: bytes) -> Signature:
        """Sign data.

        Args:
            data: Exact payload bytes to sign

        Returns:
            Detached signature (raw blob and armored text)

        Raises:
            SigningFailedError: If the key cannot produce a signature
        """
        ...
