from __future__ import annotations

import json

import pytest

from eventgate.core.identity import DEFAULT_SERVER_NAME, read_server_name, resolve_server_name


DEFAULT_FILE_CONTENT = json.dumps({"server_name": "unnamed-server"}, indent=2)


def test_configured_name_wins(tmp_path):
    path = tmp_path / "server.name"
    assert resolve_server_name("edge-1", path) == "edge-1"
    assert not path.exists()


def test_missing_file_is_bootstrapped(tmp_path):
    path = tmp_path / "server.name"

    assert resolve_server_name("", path) == DEFAULT_SERVER_NAME == "unnamed-server"
    assert path.read_text() == DEFAULT_FILE_CONTENT
    assert json.loads(path.read_text()) == {"server_name": "unnamed-server"}


def test_existing_file_is_read_and_left_unchanged(tmp_path):
    path = tmp_path / "server.name"
    path.write_text('{"server_name":"alpha"}')

    assert read_server_name(path) == "alpha"
    assert path.read_text() == '{"server_name":"alpha"}'


def test_second_bootstrap_reads_persisted_default(tmp_path):
    path = tmp_path / "server.name"
    read_server_name(path)
    assert read_server_name(path) == DEFAULT_SERVER_NAME


@pytest.mark.parametrize(
    "content",
    [
        "",
        "   \n",
        "{not json",
        "[1, 2]",
        '{"other": "x"}',
        '{"server_name": ""}',
        '{"server_name": 42}',
    ],
)
def test_unusable_file_is_rewritten_with_default(tmp_path, content):
    path = tmp_path / "server.name"
    path.write_text(content)

    assert read_server_name(path) == DEFAULT_SERVER_NAME
    assert path.read_text() == DEFAULT_FILE_CONTENT


def test_unwritable_location_still_returns_default(tmp_path, caplog):
    path = tmp_path / "missing-dir" / "server.name"

    assert read_server_name(path) == DEFAULT_SERVER_NAME
    assert not path.exists()
    assert "Unable to persist server name file" in caplog.text
