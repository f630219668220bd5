"""Configuration management with Pydantic settings."""

from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from sigcommit.crypto.keys import DEFAULT_KEY_NAMES
from sigcommit.utils.paths import expand_path


class Settings(BaseSettings):
    """sigcommit configuration settings.

    Precedence: CLI flag > environment variable > .env file > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="SIGCOMMIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Key material
    ssh_dir: Path | None = Field(
        default=None,
        description="Directory holding SSH private keys (defaults to ~/.ssh)",
    )

    key_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_KEY_NAMES),
        min_length=1,
        description="Key file names to try, in order",
    )

    key_password: SecretStr | None = Field(
        default=None,
        description="Passphrase for an encrypted key (skips the interactive prompt)",
    )

    max_password_attempts: int | None = Field(
        default=None,
        ge=1,
        description="Give up after this many wrong passwords (unbounded if unset)",
    )

    # Target repositories
    work_dir: Path | None = Field(
        default=None,
        description="Directory in which the repositories are created (defaults to cwd)",
    )

    index_repo_dir: Path = Field(
        default=Path("tmp-pygit2"),
        description="Repository directory for the libgit2 backend, relative to work_dir",
    )

    direct_repo_dir: Path = Field(
        default=Path("tmp-dulwich"),
        description="Repository directory for the dulwich backend, relative to work_dir",
    )

    clean_targets: bool = Field(
        default=True,
        description="Remove and recreate repository directories before writing",
    )

    # Commit contents
    branch: str = Field(default="main", min_length=1, description="Branch name to create")
    author_name: str = Field(default="Bob", description="Author and committer name")
    author_email: str = Field(default="bob@example.com", description="Author and committer email")
    message: str = Field(default="Initial commit", description="Commit message")

    def get_ssh_dir(self) -> Path:
        """Get the SSH key directory."""
        if self.ssh_dir is not None:
            return expand_path(self.ssh_dir)
        return Path.home() / ".ssh"

    def get_work_dir(self) -> Path:
        """Get the directory repositories are created in."""
        if self.work_dir is not None:
            return expand_path(self.work_dir)
        return Path.cwd()

    def get_index_repo_path(self) -> Path:
        """Get path of the libgit2 backend repository."""
        return self.get_work_dir() / self.index_repo_dir

    def get_direct_repo_path(self) -> Path:
        """Get path of the dulwich backend repository."""
        return self.get_work_dir() / self.direct_repo_dir


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
