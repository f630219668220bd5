"""Password retry loop for encrypted SSH keys, as an explicit state machine."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from sigcommit.app.ports.prompt import PasswordPromptPort
from sigcommit.crypto.keys import PrivateKey
from sigcommit.errors import CancelledError, DecryptionFailedError

logger = logging.getLogger(__name__)

WRONG_PASSWORD_MESSAGE = "wrong password"


class UnlockState(str, Enum):
    PROMPTING = "prompting"
    ATTEMPTING = "attempting"
    UNLOCKED = "unlocked"
    CANCELLED = "cancelled"
    EXHAUSTED = "exhausted"


class PasswordUnlocker:
    """Prompts for a password until the key decrypts or the user gives up.

    ``PROMPTING -> ATTEMPTING -> UNLOCKED`` on success; a wrong password goes
    back to ``PROMPTING`` after notifying the user. Cancelling the prompt ends
    in ``CANCELLED`` and re-raises :class:`CancelledError`. With
    ``max_attempts`` set, running out of attempts ends in ``EXHAUSTED`` and
    raises :class:`DecryptionFailedError`; by default attempts are unbounded.
    """

    def __init__(
        self,
        prompt: PasswordPromptPort,
        *,
        notify: Callable[[str], None] | None = None,
        max_attempts: int | None = None,
    ) -> None:
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._prompt = prompt
        self._notify = notify
        self.max_attempts = max_attempts
        self.attempts = 0
        self.state: UnlockState | None = None
        self.history: list[UnlockState] = []

    def _enter(self, state: UnlockState) -> None:
        self.state = state
        self.history.append(state)

    def unlock(self, key: PrivateKey) -> PrivateKey:
        """Return ``key`` decrypted, prompting as often as needed."""
        if not key.is_encrypted:
            self._enter(UnlockState.UNLOCKED)
            return key

        self._enter(UnlockState.PROMPTING)
        while True:
            try:
                password = self._prompt.prompt()
            except (CancelledError, KeyboardInterrupt) as exc:
                self._enter(UnlockState.CANCELLED)
                if isinstance(exc, CancelledError):
                    raise
                raise CancelledError("Password entry cancelled") from exc

            self._enter(UnlockState.ATTEMPTING)
            self.attempts += 1
            try:
                unlocked = key.decrypt(password)
            except DecryptionFailedError as exc:
                logger.warning("Failed to decrypt %s (attempt %d)", key.path, self.attempts)
                if self._notify is not None:
                    self._notify(WRONG_PASSWORD_MESSAGE)
                if self.max_attempts is not None and self.attempts >= self.max_attempts:
                    self._enter(UnlockState.EXHAUSTED)
                    raise DecryptionFailedError(
                        f"Could not decrypt SSH key after {self.attempts} attempts"
                    ) from exc
                self._enter(UnlockState.PROMPTING)
                continue

            self._enter(UnlockState.UNLOCKED)
            logger.debug("Unlocked %s after %d attempt(s)", key.path, self.attempts)
            return unlocked
