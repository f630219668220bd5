"""Tests for hashing, path and wire helpers."""

import hashlib
import json
from datetime import datetime

import pytest

from sigcommit.utils.cli_output import json_response
from sigcommit.utils.hashing import compute_digest, compute_object_id
from sigcommit.utils.paths import ensure_dir, reset_dir
from sigcommit.utils.wire import WireReader, pack_string, pack_uint32


def test_object_id_uses_git_header():
    assert compute_object_id(b"hello\n", "blob") == "ce013625030ba8dba906f756967f9e9ca394464a"
    assert compute_object_id(b"x") == hashlib.sha1(b"commit 1\0x").hexdigest()


@pytest.mark.parametrize("algorithm", ["sha256", "sha512"])
def test_compute_digest(algorithm):
    assert compute_digest(b"abc", algorithm) == hashlib.new(algorithm, b"abc").digest()


def test_ensure_dir_creates_parents(tmp_path):
    target = tmp_path / "a" / "b"
    assert ensure_dir(target) == target
    assert target.is_dir()
    ensure_dir(target)


def test_reset_dir_empties_directory(tmp_path):
    target = tmp_path / "repo"
    (target / "nested").mkdir(parents=True)
    (target / "nested" / "file.txt").write_text("x")

    reset_dir(target)

    assert target.is_dir()
    assert list(target.iterdir()) == []


def test_reset_dir_replaces_file(tmp_path):
    target = tmp_path / "repo"
    target.write_text("not a directory")

    reset_dir(target)

    assert target.is_dir()


def test_wire_reader_round_trip():
    data = pack_uint32(7) + pack_string("ssh-ed25519") + pack_string(b"\x00\x01")
    reader = WireReader(data)

    assert reader.read_uint32() == 7
    assert reader.read_text() == "ssh-ed25519"
    assert reader.read_string() == b"\x00\x01"
    assert reader.at_end()


def test_wire_reader_rejects_truncation():
    reader = WireReader(pack_uint32(10) + b"short")
    with pytest.raises(ValueError, match="truncated"):
        reader.read_string()


def test_json_response_wraps_payload():
    payload = json.loads(json_response("bootstrap_results", 1, results=[{"a": 1}]))

    assert payload["schema_id"] == "bootstrap_results"
    assert payload["schema_version"] == 1
    assert payload["producer"].startswith("sigcommit-")
    assert payload["results"] == [{"a": 1}]
    datetime.fromisoformat(payload["produced_at"])
