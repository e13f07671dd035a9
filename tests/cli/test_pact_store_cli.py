from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pact_store.cli import app
from pact_store.codec import PactCodec
from pact_store.models import Message

from tests.utils import make_http_pact, make_interaction, make_message_pact, message_document

runner = CliRunner()


def _write(path: Path, document: dict) -> Path:
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture()
def http_pact_file(tmp_path: Path, codec: PactCodec) -> Path:
    path = tmp_path / "web-orders.json"
    path.write_bytes(codec.encode(make_http_pact(make_interaction("get orders"))))
    return path


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for name in ["show", "check", "path"]:
        assert name in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "pact-store" in result.stdout


def test_show_request_response_pact(http_pact_file: Path) -> None:
    result = runner.invoke(app, ["show", str(http_pact_file)])

    assert result.exit_code == 0
    assert "web" in result.stdout
    assert "orders" in result.stdout
    assert "get orders" in result.stdout
    assert "3.0.0" in result.stdout


def test_show_message_pact(tmp_path: Path, codec: PactCodec) -> None:
    path = tmp_path / "web-orders.json"
    path.write_bytes(codec.encode(make_message_pact(Message("order created"))))

    result = runner.invoke(app, ["show", str(path)])

    assert result.exit_code == 0
    assert "Messages" in result.stdout
    assert "order created" in result.stdout


def test_show_malformed_file(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{nope", encoding="utf-8")

    result = runner.invoke(app, ["show", str(path)])

    assert result.exit_code == 1
    assert "Malformed pact JSON" in result.stdout


def test_show_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["show", str(tmp_path / "missing.json")])
    assert result.exit_code == 1
    assert "cannot read" in result.stdout


def test_check_reports_merged_counts(tmp_path: Path) -> None:
    existing = _write(tmp_path / "existing.json", message_document("m1", "m2"))
    incoming = _write(tmp_path / "incoming.json", message_document("m2", "m3"))

    result = runner.invoke(app, ["check", str(existing), str(incoming)])

    assert result.exit_code == 0
    assert "Merge OK" in result.stdout
    assert "3 messages" in result.stdout


def test_check_reports_conflict_without_writing(tmp_path: Path) -> None:
    existing = _write(tmp_path / "existing.json", message_document("m1", version="2.0.0"))
    incoming = _write(tmp_path / "incoming.json", message_document("m2", version="3.0.0"))
    before = existing.read_text(encoding="utf-8")

    result = runner.invoke(app, ["check", str(existing), str(incoming)])

    assert result.exit_code == 1
    assert "Conflict" in result.stdout
    assert existing.read_text(encoding="utf-8") == before


def test_path_command(tmp_path: Path) -> None:
    result = runner.invoke(app, ["path", "web", "orders", "--dir", str(tmp_path)])

    assert result.exit_code == 0
    assert result.stdout.strip() == str(tmp_path / "web-orders.json")


def test_path_command_uses_configured_directory(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PACT_STORE_DIR", str(tmp_path / "configured"))

    result = runner.invoke(app, ["path", "web", "orders"])

    assert result.exit_code == 0
    assert result.stdout.strip() == str(tmp_path / "configured" / "web-orders.json")
