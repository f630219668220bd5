"""Detached SSH signatures in OpenSSH's SSHSIG format.

This is the format ``ssh-keygen -Y sign`` produces and git stores in the
``gpgsig`` header of SSH-signed commits: the message is hashed, the hash is
wrapped with the namespace in a fixed preamble, that structure is signed by
the key, and the result is armored as ``-----BEGIN SSH SIGNATURE-----``.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from sigcommit.errors import SigningFailedError
from sigcommit.utils.hashing import compute_digest
from sigcommit.utils.wire import WireReader, pack_mpint, pack_string, pack_uint32

if TYPE_CHECKING:  # pragma: no cover
    from sigcommit.crypto.keys import PrivateKey

SSHSIG_MAGIC = b"SSHSIG"
SSHSIG_VERSION = 1
DEFAULT_NAMESPACE = "git"
ARMOR_BEGIN = "-----BEGIN SSH SIGNATURE-----"
ARMOR_END = "-----END SSH SIGNATURE-----"
ARMOR_WIDTH = 70

_ECDSA_CURVES: dict[str, tuple[str, hashes.HashAlgorithm]] = {
    "secp256r1": ("ecdsa-sha2-nistp256", hashes.SHA256()),
    "secp384r1": ("ecdsa-sha2-nistp384", hashes.SHA384()),
    "secp521r1": ("ecdsa-sha2-nistp521", hashes.SHA512()),
}


class HashAlgorithm(str, Enum):
    """Message digests permitted by SSHSIG."""

    SHA256 = "sha256"
    SHA512 = "sha512"


@dataclass(frozen=True, slots=True)
class Signature:
    """A detached signature: raw SSHSIG blob plus its armored text."""

    raw: bytes
    armored: str

    def trimmed(self) -> str:
        """Armored text without trailing whitespace, ready for a header value."""
        return self.armored.rstrip()


@dataclass(frozen=True, slots=True)
class SshSignature:
    """Decoded fields of an SSHSIG blob."""

    version: int
    public_key: bytes
    namespace: str
    reserved: bytes
    hash_algorithm: str
    signature_type: str
    signature: bytes

    @classmethod
    def from_bytes(cls, raw: bytes) -> SshSignature:
        if not raw.startswith(SSHSIG_MAGIC):
            raise ValueError("Not an SSHSIG blob")
        reader = WireReader(raw[len(SSHSIG_MAGIC) :])
        version = reader.read_uint32()
        public_key = reader.read_string()
        namespace = reader.read_text()
        reserved = reader.read_string()
        hash_algorithm = reader.read_text()
        sig = WireReader(reader.read_string())
        signature_type = sig.read_text()
        signature = sig.read_string()
        if not reader.at_end():
            raise ValueError("Trailing data after SSHSIG blob")
        return cls(
            version=version,
            public_key=public_key,
            namespace=namespace,
            reserved=reserved,
            hash_algorithm=hash_algorithm,
            signature_type=signature_type,
            signature=signature,
        )

    @classmethod
    def from_armored(cls, text: str) -> SshSignature:
        return cls.from_bytes(dearmor(text))

    def signed_data(self, payload: bytes) -> bytes:
        """The structure the key actually signed for ``payload``."""
        return build_signed_data(self.namespace, HashAlgorithm(self.hash_algorithm), payload)


def build_signed_data(namespace: str, hash_alg: HashAlgorithm, payload: bytes) -> bytes:
    """Wrap the digest of ``payload`` in the SSHSIG to-be-signed structure."""
    return b"".join(
        [
            SSHSIG_MAGIC,
            pack_string(namespace),
            pack_string(b""),
            pack_string(hash_alg.value),
            pack_string(compute_digest(payload, hash_alg.value)),
        ]
    )


def armor(raw: bytes) -> str:
    """PEM-style armor with LF line endings and a trailing newline."""
    body = base64.b64encode(raw).decode("ascii")
    chunks = [body[i : i + ARMOR_WIDTH] for i in range(0, len(body), ARMOR_WIDTH)]
    lines = [ARMOR_BEGIN, *chunks, ARMOR_END]
    return "\n".join(lines) + "\n"


def dearmor(text: str) -> bytes:
    """Inverse of :func:`armor`; tolerates surrounding whitespace."""
    lines = [line.strip() for line in text.strip().splitlines()]
    if len(lines) < 2 or lines[0] != ARMOR_BEGIN or lines[-1] != ARMOR_END:
        raise ValueError("Missing SSH SIGNATURE armor")
    try:
        return base64.b64decode("".join(lines[1:-1]), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 in SSH signature: {exc}") from exc


class SignatureEngine:
    """Signs payloads with an unlocked :class:`PrivateKey`."""

    def sign(
        self,
        key: PrivateKey,
        payload: bytes,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        hash_alg: HashAlgorithm = HashAlgorithm.SHA256,
    ) -> Signature:
        """Produce an armored SSHSIG signature over ``payload``.

        Raises:
            SigningFailedError: If the key is locked, of an unsupported type,
                or the namespace is empty
        """
        if not namespace:
            raise SigningFailedError("SSH signatures require a non-empty namespace")
        if key.material is None:
            raise SigningFailedError("SSH key is still encrypted; unlock it before signing")

        hash_alg = HashAlgorithm(hash_alg)
        signed_data = build_signed_data(namespace, hash_alg, payload)
        try:
            sig_type, sig_blob = self._sign_raw(key, signed_data)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise SigningFailedError(f"{key.algorithm} key failed to sign: {exc}") from exc

        raw = b"".join(
            [
                SSHSIG_MAGIC,
                pack_uint32(SSHSIG_VERSION),
                pack_string(key.public_blob),
                pack_string(namespace),
                pack_string(b""),
                pack_string(hash_alg.value),
                pack_string(pack_string(sig_type) + pack_string(sig_blob)),
            ]
        )
        return Signature(raw=raw, armored=armor(raw))

    @staticmethod
    def _sign_raw(key: PrivateKey, data: bytes) -> tuple[str, bytes]:
        material = key.material
        if isinstance(material, ed25519.Ed25519PrivateKey):
            return "ssh-ed25519", material.sign(data)
        if isinstance(material, rsa.RSAPrivateKey):
            return "rsa-sha2-512", material.sign(data, padding.PKCS1v15(), hashes.SHA512())
        if isinstance(material, ec.EllipticCurvePrivateKey):
            try:
                sig_type, digest = _ECDSA_CURVES[material.curve.name]
            except KeyError:
                raise SigningFailedError(
                    f"Unsupported ECDSA curve: {material.curve.name}"
                ) from None
            r, s = decode_dss_signature(material.sign(data, ec.ECDSA(digest)))
            return sig_type, pack_mpint(r) + pack_mpint(s)
        raise SigningFailedError(f"Unsupported SSH key type for signing: {key.algorithm}")
