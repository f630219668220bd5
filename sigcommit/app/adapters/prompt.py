"""Password prompt adapters."""

from __future__ import annotations

import typer
from pydantic import SecretStr

from sigcommit.app.ports.prompt import PasswordPromptPort
from sigcommit.errors import CancelledError


class TyperPasswordPrompt(PasswordPromptPort):
    """Masked terminal prompt without a confirmation step."""

    def __init__(self, label: str = "SSH key password") -> None:
        self.label = label

    def prompt(self) -> str:
        try:
            return typer.prompt(self.label, hide_input=True, confirmation_prompt=False)
        except (typer.Abort, KeyboardInterrupt, EOFError) as exc:
            raise CancelledError("Password entry cancelled") from exc


class StaticPasswordPrompt(PasswordPromptPort):
    """Non-interactive prompt answering with a configured secret."""

    def __init__(self, password: SecretStr) -> None:
        self._password = password

    def prompt(self) -> str:
        return self._password.get_secret_value()
