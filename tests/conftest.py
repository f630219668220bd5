"""Pytest configuration and fixtures."""

import base64
import gc
import shutil
import tempfile
import time
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    NoEncryption,
    PrivateFormat,
    load_ssh_public_key,
)

from sigcommit.config import Settings
from sigcommit.crypto.keys import PrivateKey
from sigcommit.crypto.sshsig import SshSignature
from sigcommit.objects.commit import Identity
from sigcommit.utils.wire import WireReader

KEY_PASSWORD = "correct horse"

FIXED_TIME = datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)

_ECDSA_HASHES = {
    "ecdsa-sha2-nistp256": hashes.SHA256(),
    "ecdsa-sha2-nistp384": hashes.SHA384(),
    "ecdsa-sha2-nistp521": hashes.SHA512(),
}


def openssh_private_bytes(key, password: str | None = None) -> bytes:
    """Serialize a cryptography private key in OpenSSH format."""
    encryption = (
        BestAvailableEncryption(password.encode("utf-8")) if password else NoEncryption()
    )
    return key.private_bytes(Encoding.PEM, PrivateFormat.OpenSSH, encryption)


def verify_sshsig(armored: str, payload: bytes, namespace: str = "git") -> bool:
    """Check an armored SSHSIG signature against ``payload``."""
    sig = SshSignature.from_armored(armored)
    if sig.version != 1 or sig.namespace != namespace:
        return False

    key_type = WireReader(sig.public_key).read_text()
    public_key = load_ssh_public_key(
        f"{key_type} {base64.b64encode(sig.public_key).decode('ascii')}".encode("ascii")
    )
    data = sig.signed_data(payload)

    try:
        if key_type == "ssh-ed25519":
            public_key.verify(sig.signature, data)
        elif key_type == "ssh-rsa":
            assert sig.signature_type == "rsa-sha2-512"
            public_key.verify(sig.signature, data, padding.PKCS1v15(), hashes.SHA512())
        else:
            reader = WireReader(sig.signature)
            r = reader.read_mpint()
            s = reader.read_mpint()
            public_key.verify(
                encode_dss_signature(r, s), data, ec.ECDSA(_ECDSA_HASHES[key_type])
            )
    except InvalidSignature:
        return False
    return True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    try:
        yield Path(tmpdir)
    finally:
        # Force garbage collection to release any file handles
        gc.collect()
        # Small delay to allow OS to release file locks
        time.sleep(0.1)
        shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture(scope="session")
def ed25519_material() -> ed25519.Ed25519PrivateKey:
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture(scope="session")
def ecdsa_material() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def rsa_material() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ed25519_key(ed25519_material) -> PrivateKey:
    """Unencrypted Ed25519 signing key."""
    return PrivateKey.from_openssh(openssh_private_bytes(ed25519_material))


@pytest.fixture(scope="session")
def encrypted_key_bytes(ed25519_material) -> bytes:
    """Ed25519 key protected with ``KEY_PASSWORD``."""
    return openssh_private_bytes(ed25519_material, KEY_PASSWORD)


@pytest.fixture
def encrypted_key(encrypted_key_bytes) -> PrivateKey:
    return PrivateKey.from_openssh(encrypted_key_bytes)


@pytest.fixture
def ssh_dir(temp_dir: Path, ed25519_material) -> Path:
    """SSH directory holding an unencrypted ``id_ed25519``."""
    path = temp_dir / "ssh"
    path.mkdir()
    (path / "id_ed25519").write_bytes(openssh_private_bytes(ed25519_material))
    return path


@pytest.fixture
def bob() -> Identity:
    """Author with a fixed timestamp so encodings are reproducible."""
    return Identity(name="Bob", email="bob@example.com", timestamp=FIXED_TIME)


@pytest.fixture
def signature_verifier() -> Callable[..., bool]:
    return verify_sshsig


@pytest.fixture
def key_serializer() -> Callable[..., bytes]:
    return openssh_private_bytes


@pytest.fixture
def key_password() -> str:
    return KEY_PASSWORD


@pytest.fixture
def override_settings(temp_dir: Path, ssh_dir: Path) -> Generator[Settings, None, None]:
    """Provide isolated sigcommit settings scoped to tests."""

    import sigcommit.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    work_dir = temp_dir / "work"
    work_dir.mkdir(parents=True, exist_ok=True)

    settings = config_module.Settings(
        ssh_dir=ssh_dir,
        work_dir=work_dir,
        key_password=None,
        max_password_attempts=None,
    )

    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings
