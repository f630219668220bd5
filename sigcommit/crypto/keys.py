"""OpenSSH private key loading.

Keys are looked up at conventional per-user locations and parsed with
``cryptography``. A password-protected key loads in a locked state; its
algorithm and public key become available once it is decrypted.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PublicFormat,
    load_ssh_private_key,
)
from cryptography.hazmat.primitives.serialization.ssh import SSHPrivateKeyTypes

from sigcommit.crypto.sshsig import HashAlgorithm, Signature, SignatureEngine
from sigcommit.errors import (
    DecryptionFailedError,
    KeyNotFoundError,
    KeyParseError,
    SigningFailedError,
)

if TYPE_CHECKING:  # pragma: no cover
    from sigcommit.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_KEY_NAMES: tuple[str, ...] = ("id_ed25519", "id_ecdsa", "id_rsa")


def _load_material(data: bytes, password: bytes | None) -> SSHPrivateKeyTypes:
    try:
        return load_ssh_private_key(data, password=password)
    except UnsupportedAlgorithm as exc:
        raise KeyParseError(f"Unsupported OpenSSH key: {exc}") from exc


@dataclass(frozen=True, slots=True)
class PrivateKey:
    """An OpenSSH private key, possibly still locked by a passphrase."""

    data: bytes = field(repr=False)
    path: Path | None = None
    material: SSHPrivateKeyTypes | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_openssh(cls, data: bytes, *, path: Path | None = None) -> PrivateKey:
        """Parse an OpenSSH private key; encrypted keys stay locked.

        Raises:
            KeyParseError: If the data is not a supported OpenSSH private key
        """
        try:
            material = _load_material(data, None)
        except TypeError:
            # Password-protected: the outer key format is valid but locked.
            return cls(data=data, path=path)
        except ValueError as exc:
            raise KeyParseError(f"Cannot parse OpenSSH key: {exc}") from exc
        return cls(data=data, path=path, material=material)

    @property
    def is_encrypted(self) -> bool:
        """True while the key still needs a password before it can sign."""
        return self.material is None

    def public_key_openssh(self) -> str:
        """Public key in ``authorized_keys`` form, derived from the private key."""
        if self.material is None:
            raise SigningFailedError("SSH key is still encrypted; unlock it first")
        line = self.material.public_key().public_bytes(Encoding.OpenSSH, PublicFormat.OpenSSH)
        return line.decode("ascii")

    @property
    def algorithm(self) -> str | None:
        """SSH key type (``ssh-ed25519``, ``ssh-rsa``...), or None while locked."""
        if self.material is None:
            return None
        return self.public_key_openssh().split(" ", 1)[0]

    @property
    def public_blob(self) -> bytes:
        """Wire-format public key embedded in signatures."""
        return base64.b64decode(self.public_key_openssh().split(" ")[1])

    def decrypt(self, password: str | bytes) -> PrivateKey:
        """Return an unlocked copy of this key.

        Raises:
            DecryptionFailedError: If ``password`` is wrong
            KeyParseError: If the key uses an unsupported cipher or KDF
        """
        if not self.is_encrypted:
            return self
        if isinstance(password, str):
            password = password.encode("utf-8")
        if not password:
            raise DecryptionFailedError("Empty password")
        try:
            material = _load_material(self.data, password)
        except ValueError as exc:
            raise DecryptionFailedError("Incorrect password for SSH key") from exc
        return PrivateKey(data=self.data, path=self.path, material=material)

    def sign(
        self,
        namespace: str,
        hash_alg: HashAlgorithm,
        payload: bytes,
    ) -> Signature:
        """Produce a detached SSHSIG signature over ``payload``."""
        return SignatureEngine().sign(self, payload, namespace=namespace, hash_alg=hash_alg)


class KeyStore:
    """Finds the user's SSH signing key among well-known file names."""

    def __init__(
        self,
        search_dir: Path,
        key_names: Sequence[str] = DEFAULT_KEY_NAMES,
    ) -> None:
        self.search_dir = Path(search_dir)
        self.key_names = tuple(key_names)

    @classmethod
    def from_settings(cls, settings: Settings) -> KeyStore:
        return cls(settings.get_ssh_dir(), settings.key_names)

    def candidates(self) -> list[Path]:
        return [self.search_dir / name for name in self.key_names]

    def load(self) -> PrivateKey:
        """Return the first key that exists and parses.

        Raises:
            KeyNotFoundError: If none of the candidate files can be read
            KeyParseError: If candidates exist but none is a usable key
        """
        found: list[Path] = []
        last_error: KeyParseError | None = None

        for path in self.candidates():
            try:
                data = path.read_bytes()
            except OSError as exc:
                logger.debug("No key at %s (%s)", path, exc.__class__.__name__)
                continue

            found.append(path)
            try:
                key = PrivateKey.from_openssh(data, path=path)
            except KeyParseError as exc:
                logger.warning("Skipping unusable key %s: %s", path, exc)
                last_error = exc
                continue

            logger.debug(
                "Loaded key from %s (algorithm=%s, encrypted=%s)", path, key.algorithm, key.is_encrypted
            )
            return key

        if found:
            names = ", ".join(str(path) for path in found)
            raise KeyParseError(f"No usable OpenSSH private key among: {names}") from last_error

        raise KeyNotFoundError(
            f"No SSH key found in {self.search_dir} (tried {', '.join(self.key_names)})"
        )
