"""Port interfaces for the sigcommit application layer.

These protocol interfaces define contracts for adapters.
Application services depend on these ports, never on concrete implementations.
"""

__all__ = [
    "CommitBackendPort",
    "PasswordPromptPort",
    "SignerPort",
]

from sigcommit.app.ports.backend import CommitBackendPort
from sigcommit.app.ports.prompt import PasswordPromptPort
from sigcommit.app.ports.signer import SignerPort
