"""Password prompt port interface."""

from typing import Protocol


class PasswordPromptPort(Protocol):
    """Port interface for interactive secret entry.

    Side effects: Blocks on user input.
    """

    def prompt(self) -> str:
        """Ask for a password.

        Returns:
            The entered password (no confirmation step)

        Raises:
            CancelledError: If the user aborts the prompt
        """
        ...
