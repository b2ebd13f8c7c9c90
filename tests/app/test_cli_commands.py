from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest
from rich.console import Console
from typer.testing import CliRunner

from catalog_mirror.app import AppState, app
from catalog_mirror.config import MirrorConfig
from catalog_mirror.engine import MirrorStore
from catalog_mirror.resources import ResourceRegistry


@pytest.fixture(autouse=True)
def wide_console(monkeypatch) -> None:
    monkeypatch.setattr("catalog_mirror.app.console", Console(width=200))


def make_state(tmp_path: Path, client) -> AppState:
    config = MirrorConfig(
        export_path=tmp_path / "mirror",
        export_order=["channels", "families"],
        import_order=["channels"],
    )
    repository = SimpleNamespace(locator=SimpleNamespace(logs_dir=tmp_path / "logs"))
    return AppState(
        repository=repository,
        config=config,
        registry=ResourceRegistry(),
        store=MirrorStore(config.export_path),
        client_factory=lambda: client,
    )


def test_cli_lists_resources(monkeypatch, tmp_path, fake_client) -> None:
    state = make_state(tmp_path, fake_client())
    monkeypatch.setattr("catalog_mirror.app.build_state", lambda verbose, export_path: state)
    result = CliRunner().invoke(app, ["resources"])
    assert result.exit_code == 0, result.stdout
    assert "families" in result.stdout
    assert "channels" in result.stdout


def test_cli_export_uses_configured_order(monkeypatch, tmp_path, fake_client) -> None:
    client = fake_client(
        listings={
            "/api/rest/v1/channels": [{"code": "web"}],
            "/api/rest/v1/families": [{"code": "shoes"}],
        }
    )
    state = make_state(tmp_path, client)
    monkeypatch.setattr("catalog_mirror.app.build_state", lambda verbose, export_path: state)
    result = CliRunner().invoke(app, ["export"])
    assert result.exit_code == 0, result.stdout
    assert "Export results" in result.stdout
    assert client.list_calls == [
        "/api/rest/v1/channels",
        "/api/rest/v1/families",
        "/api/rest/v1/families/shoes/variants",
    ]
    assert client.closed
    assert state.store.read_all("channels.json") == [{"code": "web"}]


def test_cli_import_reports_failures(monkeypatch, tmp_path, fake_client) -> None:
    client = fake_client()
    state = make_state(tmp_path, client)
    monkeypatch.setattr("catalog_mirror.app.build_state", lambda verbose, export_path: state)
    # channels.json was never exported
    result = CliRunner().invoke(app, ["import", "channels"])
    assert result.exit_code == 1
    assert "Import results" in result.stdout
    assert "Failed: channels" in result.stdout
    assert client.updates == []


def test_cli_rejects_unknown_names(monkeypatch, tmp_path, fake_client) -> None:
    client = fake_client()
    state = make_state(tmp_path, client)
    monkeypatch.setattr("catalog_mirror.app.build_state", lambda verbose, export_path: state)
    result = CliRunner().invoke(app, ["export", "widgets"])
    assert result.exit_code == 2
    assert "widgets" in result.stdout
    assert client.list_calls == []


def test_cli_log_tail(monkeypatch, tmp_path, fake_client) -> None:
    state = make_state(tmp_path, fake_client())
    monkeypatch.setattr("catalog_mirror.app.build_state", lambda verbose, export_path: state)
    logs_dir = tmp_path / "logs"
    logs_dir.mkdir()
    (logs_dir / "catalog_mirror.log").write_text("one\ntwo\nthree\n", encoding="utf-8")
    result = CliRunner().invoke(app, ["log", "--lines", "2"])
    assert result.exit_code == 0, result.stdout
    assert "two" in result.stdout and "three" in result.stdout
    assert "one" not in result.stdout


def test_cli_verbose_flag_reaches_state(monkeypatch, tmp_path, fake_client) -> None:
    state = make_state(tmp_path, fake_client())
    seen: list[bool] = []

    def fake_build_state(verbose, export_path):
        seen.append(verbose)
        return state

    monkeypatch.setattr("catalog_mirror.app.build_state", fake_build_state)
    runner = CliRunner()
    assert runner.invoke(app, ["--verbose", "resources"]).exit_code == 0
    assert runner.invoke(app, ["resources"]).exit_code == 0
    assert seen == [True, False]
