"""CLI integration smoke tests."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pygit2
from dulwich.repo import Repo
from pydantic import SecretStr
from typer.testing import CliRunner

from sigcommit import __version__
from sigcommit.cli import EXIT_CANCELLED, EXIT_FAILURE, EXIT_REF_CONFLICT, app
from sigcommit.objects.commit import EMPTY_TREE_ID

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"sigcommit version {__version__}" in result.output


def test_init_creates_both_repositories(override_settings) -> None:
    work_dir = override_settings.get_work_dir()

    result = runner.invoke(app, ["init"])

    assert result.exit_code == 0, result.output
    assert f"created with pygit2 at: {work_dir / 'tmp-pygit2'}" in result.output
    assert f"created with dulwich at: {work_dir / 'tmp-dulwich'}" in result.output
    assert result.output.index("created with pygit2") < result.output.index("created with dulwich")

    commit = pygit2.Repository(str(work_dir / "tmp-pygit2")).head.peel(pygit2.Commit)
    assert commit.message == "Initial commit"
    assert commit.author.name == "Bob"
    assert str(commit.tree_id) == EMPTY_TREE_ID
    assert commit.gpg_signature[0].startswith(b"-----BEGIN SSH SIGNATURE-----")

    repo = Repo(str(work_dir / "tmp-dulwich"))
    try:
        head = repo[repo.head()]
        assert head.message == b"Initial commit"
        assert head.gpgsig.startswith(b"-----BEGIN SSH SIGNATURE-----")
    finally:
        repo.close()


def test_init_json_output(override_settings) -> None:
    result = runner.invoke(app, ["init", "--json", "--name", "Alice", "--email", "a@example.com"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["schema_id"] == "bootstrap_results"
    assert payload["schema_version"] == 1
    assert payload["producer"] == f"sigcommit-{__version__}"
    datetime.fromisoformat(payload["produced_at"])

    backends = [item["backend"] for item in payload["results"]]
    assert backends == ["pygit2", "dulwich"]
    for item in payload["results"]:
        assert item["tree_id"] == EMPTY_TREE_ID
        assert item["reference"] == "refs/heads/main"
        assert len(item["commit_id"]) == 40


def test_init_single_backend(override_settings) -> None:
    work_dir = override_settings.get_work_dir()

    result = runner.invoke(app, ["init", "--backend", "direct", "-m", "Hello"])

    assert result.exit_code == 0, result.output
    assert "created with dulwich" in result.output
    assert "created with pygit2" not in result.output
    assert not (work_dir / "tmp-pygit2").exists()


def test_clean_replaces_existing_target(override_settings) -> None:
    target = override_settings.get_direct_repo_path()
    target.mkdir(parents=True)
    (target / "stale.txt").write_text("leftover")

    result = runner.invoke(app, ["init", "--backend", "direct"])

    assert result.exit_code == 0, result.output
    assert not (target / "stale.txt").exists()


def test_rerun_without_clean_reports_ref_conflict(override_settings) -> None:
    first = runner.invoke(app, ["init", "--backend", "direct"])
    assert first.exit_code == 0, first.output

    repo_path = override_settings.get_direct_repo_path()
    repo = Repo(str(repo_path))
    try:
        original_head = repo.head()
    finally:
        repo.close()

    second = runner.invoke(app, ["init", "--backend", "direct", "--no-clean"])

    assert second.exit_code == EXIT_REF_CONFLICT
    assert "Error" in second.output
    repo = Repo(str(repo_path))
    try:
        assert repo.head() == original_head
    finally:
        repo.close()


def test_missing_key_fails(override_settings, temp_dir: Path) -> None:
    empty = temp_dir / "empty-ssh"
    empty.mkdir()

    result = runner.invoke(app, ["init", "--ssh-dir", str(empty)])

    assert result.exit_code == EXIT_FAILURE
    assert "No SSH key found" in result.output
    assert not override_settings.get_index_repo_path().exists()


def test_custom_key_name(override_settings, temp_dir: Path, key_serializer, ecdsa_material) -> None:
    (override_settings.get_ssh_dir() / "signing_key").write_bytes(key_serializer(ecdsa_material))

    result = runner.invoke(app, ["init", "--key-name", "missing", "--key-name", "signing_key"])

    assert result.exit_code == 0, result.output


def test_interactive_password_retry(override_settings, encrypted_key_bytes, key_password) -> None:
    (override_settings.get_ssh_dir() / "id_ed25519").write_bytes(encrypted_key_bytes)

    result = runner.invoke(app, ["init"], input=f"wrong\n{key_password}\n")

    assert result.exit_code == 0, result.output
    assert "wrong password" in result.output
    assert "created with dulwich" in result.output


def test_interactive_password_cancelled(override_settings, encrypted_key_bytes) -> None:
    (override_settings.get_ssh_dir() / "id_ed25519").write_bytes(encrypted_key_bytes)

    result = runner.invoke(app, ["init"], input="")

    assert result.exit_code == EXIT_CANCELLED
    assert "created with" not in result.output


def test_configured_password_is_used(override_settings, encrypted_key_bytes, key_password) -> None:
    (override_settings.get_ssh_dir() / "id_ed25519").write_bytes(encrypted_key_bytes)
    override_settings.key_password = SecretStr(key_password)

    result = runner.invoke(app, ["init", "--backend", "index"])

    assert result.exit_code == 0, result.output
    assert "created with pygit2" in result.output


def test_configured_wrong_password_fails_once(override_settings, encrypted_key_bytes) -> None:
    (override_settings.get_ssh_dir() / "id_ed25519").write_bytes(encrypted_key_bytes)
    override_settings.key_password = SecretStr("not it")

    result = runner.invoke(app, ["init"])

    assert result.exit_code == EXIT_FAILURE
    assert result.output.count("wrong password") == 1


def test_rerun_without_clean_moves_index_branch(override_settings) -> None:
    first = runner.invoke(app, ["init", "--backend", "index", "-m", "First"])
    assert first.exit_code == 0, first.output

    second = runner.invoke(app, ["init", "--backend", "index", "--no-clean", "-m", "Second"])

    assert second.exit_code == 0, second.output
    repo = pygit2.Repository(str(override_settings.get_index_repo_path()))
    assert repo.head.peel(pygit2.Commit).message == "Second"
