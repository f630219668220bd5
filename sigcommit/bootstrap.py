"""Application bootstrap wiring ports, adapters, and services."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from sigcommit.app import BootstrapService
from sigcommit.app.adapters import (
    DirectObjectBackend,
    IndexBackend,
    SshSigner,
    StaticPasswordPrompt,
    TyperPasswordPrompt,
)
from sigcommit.app.ports import CommitBackendPort, PasswordPromptPort
from sigcommit.config import Settings, get_settings
from sigcommit.crypto.keys import KeyStore
from sigcommit.crypto.unlock import PasswordUnlocker
from sigcommit.objects.commit import Identity

logger = logging.getLogger(__name__)

BackendName = Literal["index", "direct"]
BACKEND_ORDER: tuple[BackendName, ...] = ("index", "direct")


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services and adapters for the CLI layer."""

    settings: Settings
    key_store: KeyStore
    unlocker: PasswordUnlocker
    backends: dict[BackendName, CommitBackendPort]

    def load_signer(self) -> SshSigner:
        """Load the SSH key, prompting for its password if needed."""
        key = self.key_store.load()
        key = self.unlocker.unlock(key)
        logger.debug("Signing with %s key %s", key.algorithm, key.path)
        return SshSigner(key)

    def create_bootstrap_service(self, signer: SshSigner) -> BootstrapService:
        return BootstrapService(signer)

    def author(self) -> Identity:
        return Identity.now(self.settings.author_name, self.settings.author_email)


def bootstrap_application(
    settings: Settings | None = None,
    *,
    prompt: PasswordPromptPort | None = None,
    notify: Callable[[str], None] | None = None,
) -> ApplicationContainer:
    """Wire the application from ``settings`` (global settings by default)."""
    settings = settings or get_settings()

    max_attempts = settings.max_password_attempts
    if prompt is None:
        if settings.key_password is not None:
            # A fixed password cannot improve on retry.
            prompt = StaticPasswordPrompt(settings.key_password)
            max_attempts = 1
        else:
            prompt = TyperPasswordPrompt()

    backends: dict[BackendName, CommitBackendPort] = {
        "index": IndexBackend(settings.get_index_repo_path(), branch=settings.branch),
        "direct": DirectObjectBackend(settings.get_direct_repo_path(), branch=settings.branch),
    }

    return ApplicationContainer(
        settings=settings,
        key_store=KeyStore.from_settings(settings),
        unlocker=PasswordUnlocker(prompt, notify=notify, max_attempts=max_attempts),
        backends=backends,
    )
