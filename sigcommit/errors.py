"""Error taxonomy for key loading, signing, encoding and repository writes.

Every failure the tool can report is one of the exceptions below. Each carries
an :class:`ErrorKind` tag so callers (the CLI in particular) can map failures
to exit codes without string matching.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    KEY_NOT_FOUND = "key_not_found"
    KEY_PARSE = "key_parse"
    DECRYPTION_FAILED = "decryption_failed"
    CANCELLED = "cancelled"
    SIGNING_FAILED = "signing_failed"
    ENCODING = "encoding"
    OBJECT_WRITE_FAILED = "object_write_failed"
    REF_CONFLICT = "ref_conflict"
    IO = "io"


class SigcommitError(Exception):
    """Base class for all sigcommit failures."""

    kind: ErrorKind = ErrorKind.IO
    retryable: bool = False


class KeyNotFoundError(SigcommitError):
    """No candidate private key file exists."""

    kind = ErrorKind.KEY_NOT_FOUND


class KeyParseError(SigcommitError):
    """Key material exists but is not a usable OpenSSH private key."""

    kind = ErrorKind.KEY_PARSE


class DecryptionFailedError(SigcommitError):
    """The supplied password did not decrypt the key."""

    kind = ErrorKind.DECRYPTION_FAILED
    retryable = True


class CancelledError(SigcommitError):
    """The user interrupted an interactive step."""

    kind = ErrorKind.CANCELLED


class SigningFailedError(SigcommitError):
    """The key could not produce a signature."""

    kind = ErrorKind.SIGNING_FAILED


class EncodingError(SigcommitError):
    """A commit record (or its bytes) violates the canonical format."""

    kind = ErrorKind.ENCODING


class ObjectWriteFailedError(SigcommitError):
    """The backend refused or mangled an object write."""

    kind = ErrorKind.OBJECT_WRITE_FAILED


class RefConflictError(SigcommitError):
    """A reference precondition did not hold; nothing was updated."""

    kind = ErrorKind.REF_CONFLICT

    def __init__(self, reference: str, message: str | None = None) -> None:
        self.reference = reference
        super().__init__(message or f"Reference '{reference}' already exists")


class RepositoryIOError(SigcommitError):
    """Filesystem or repository access failed."""

    kind = ErrorKind.IO


__all__ = [
    "ErrorKind",
    "SigcommitError",
    "KeyNotFoundError",
    "KeyParseError",
    "DecryptionFailedError",
    "CancelledError",
    "SigningFailedError",
    "EncodingError",
    "ObjectWriteFailedError",
    "RefConflictError",
    "RepositoryIOError",
]
