"""sigcommit CLI application with Typer."""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer

from sigcommit import __version__
from sigcommit.app import BootstrapResult
from sigcommit.bootstrap import BACKEND_ORDER, bootstrap_application
from sigcommit.config import get_settings
from sigcommit.errors import CancelledError, RefConflictError, SigcommitError
from sigcommit.utils.cli_output import json_response
from sigcommit.utils.paths import reset_dir

EXIT_FAILURE = 1
EXIT_REF_CONFLICT = 3
EXIT_CANCELLED = 130

app = typer.Typer(
    name="sigcommit",
    help="Create git repositories whose initial commit is signed with your SSH key",
    add_completion=False,
    no_args_is_help=True,
)


class BackendSelection(str, Enum):
    INDEX = "index"
    DIRECT = "direct"
    ALL = "all"


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"sigcommit version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _notify_wrong_password(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)


def _fail(exc: BaseException, code: int) -> typer.Exit:
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    return typer.Exit(code=code)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log each step to stderr"),
    ] = False,
) -> None:
    """sigcommit command group."""
    _configure_logging(verbose)


@app.command("init")
def init_command(
    backend: Annotated[
        BackendSelection,
        typer.Option("--backend", "-b", help="Which backend(s) to create a repository with"),
    ] = BackendSelection.ALL,
    work_dir: Annotated[
        Path | None,
        typer.Option("--work-dir", help="Directory in which repositories are created"),
    ] = None,
    ssh_dir: Annotated[
        Path | None,
        typer.Option("--ssh-dir", help="Directory holding SSH private keys"),
    ] = None,
    key_names: Annotated[
        list[str] | None,
        typer.Option("--key-name", help="Key file name to try (repeatable, in order)"),
    ] = None,
    name: Annotated[str | None, typer.Option("--name", help="Author name")] = None,
    email: Annotated[str | None, typer.Option("--email", help="Author email")] = None,
    message: Annotated[str | None, typer.Option("--message", "-m", help="Commit message")] = None,
    clean: Annotated[
        bool | None,
        typer.Option("--clean/--no-clean", help="Recreate target directories before writing"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Emit results as JSON"),
    ] = False,
) -> None:
    """Create repositories with an SSH-signed initial commit."""
    overrides: dict[str, Any] = {
        "work_dir": work_dir,
        "ssh_dir": ssh_dir,
        "key_names": key_names or None,
        "author_name": name,
        "author_email": email,
        "message": message,
        "clean_targets": clean,
    }
    settings = get_settings().model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )

    selected = BACKEND_ORDER if backend is BackendSelection.ALL else (backend.value,)
    results: list[BootstrapResult] = []

    try:
        container = bootstrap_application(settings, notify=_notify_wrong_password)
        signer = container.load_signer()
        service = container.create_bootstrap_service(signer)
        author = container.author()

        for backend_name in selected:
            target = container.backends[backend_name]
            if settings.clean_targets:
                reset_dir(target.path)
            result = service.bootstrap(target, author=author, message=settings.message)
            results.append(result)
            if not json_output:
                typer.echo(f"created with {result.backend} at: {result.path}")
    except CancelledError as exc:
        raise _fail(exc, EXIT_CANCELLED) from exc
    except RefConflictError as exc:
        raise _fail(exc, EXIT_REF_CONFLICT) from exc
    except SigcommitError as exc:
        raise _fail(exc, EXIT_FAILURE) from exc
    except OSError as exc:
        raise _fail(exc, EXIT_FAILURE) from exc

    if json_output:
        typer.echo(
            json_response(
                "bootstrap_results",
                1,
                results=[result.model_dump(mode="json") for result in results],
            )
        )


if __name__ == "__main__":
    app()
