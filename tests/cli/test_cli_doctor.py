"""Tests for the doctor commands."""

import json

import pytest
from rich.console import Console
from typer.testing import CliRunner

import cli.doctor as doctor

runner = CliRunner()


@pytest.fixture(autouse=True)
def _wide_console(monkeypatch):
    monkeypatch.setattr(doctor, "_console", Console(width=200))


def test_init_config_writes_appsettings(tmp_path):
    output = tmp_path / "appsettings.json"
    answers = "\n".join(
        [
            "https://api.example.com/",
            "https://auth.example.com/connect/token",
            "client-1",
            "secret-1",
            "alice",
            "pa55",
            "",
        ]
    )

    result = runner.invoke(doctor.app, ["init-config", "--output", str(output)], input=answers + "\n")

    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text(encoding="utf-8"))["ApiConfig"]
    assert data["ServerUrl"] == "https://api.example.com/"
    assert data["Credentials"]["ClientId"] == "client-1"
    assert data["Credentials"]["Username"] == "alice"
    assert data["Credentials"]["Scope"] == "api_read_all"


def test_run_reports_missing_config(tmp_path):
    result = runner.invoke(doctor.app, ["run", "--config", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "FAIL" in result.output


def test_run_checks_connectivity(tmp_path, monkeypatch):
    path = tmp_path / "appsettings.json"
    path.write_text(
        json.dumps(
            {
                "ApiConfig": {
                    "ServerUrl": "https://api.example.com/",
                    "AuthenticationUrl": "https://auth.example.com/connect/token",
                    "Credentials": {"ClientId": "client-1", "ClientSecret": "secret-1"},
                }
            }
        ),
        encoding="utf-8",
    )
    checked = []

    async def fake_check(url):
        checked.append(url)
        return True, "HTTP 200"

    monkeypatch.setattr(doctor, "_check_http", fake_check)

    result = runner.invoke(doctor.app, ["run", "--config", str(path)])

    assert result.exit_code == 0, result.output
    assert checked == ["https://api.example.com/", "https://auth.example.com/connect/token"]
    assert "OPTIONAL" in result.output
