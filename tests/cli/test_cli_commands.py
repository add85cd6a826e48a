from __future__ import annotations

import json
from pathlib import Path

import pytest

from stencil import settings as settings_module
from stencil.cli import main as cli_main
from stencil.domain.errors import ConfigError
from stencil.domain.template import TEMPLATE_CONFIG_FILE
from stencil.settings import RuntimeSettings


@pytest.fixture()
def cli_settings(runtime_settings: RuntimeSettings, monkeypatch, tmp_path: Path) -> RuntimeSettings:
    monkeypatch.setattr(cli_main, "SETTINGS", runtime_settings)
    monkeypatch.setattr(settings_module, "SETTINGS_ERROR", None)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return runtime_settings


def test_list_on_empty_storage(cli_settings: RuntimeSettings, capsys) -> None:
    exit_code = cli_main.main(["list"])
    captured = capsys.readouterr()
    assert exit_code == 0
    assert "No templates found." in captured.out
    assert cli_settings.template_dir.is_dir()


def test_author_then_list(cli_settings: RuntimeSettings, capsys) -> None:
    target = cli_settings.template_dir / "python" / "cli"
    assert cli_main.main(["author", str(target), "--language", "py", "-d", "Command line tool"]) == 0
    out = capsys.readouterr().out
    assert f"Template 'cli' created at {target}" in out
    assert (target / TEMPLATE_CONFIG_FILE).exists()

    assert cli_main.main(["list"]) == 0
    out = capsys.readouterr().out
    assert "Available templates:" in out
    assert "cli (python/cli) [Python] - Command line tool" in out

    assert cli_main.main(["list", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert [entry["identity"] for entry in payload] == ["python/cli"]

    assert cli_main.main(["list", "--language", "rust"]) == 0
    assert "No templates found for language 'rust'." in capsys.readouterr().out


def test_author_twice_fails(cli_settings: RuntimeSettings, capsys) -> None:
    assert cli_main.main(["author", "tpl"]) == 0
    capsys.readouterr()
    assert cli_main.main(["author", "tpl"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: ")
    assert "already exists" in err


def test_list_reports_malformed_descriptor(cli_settings: RuntimeSettings, template_root: Path, make_template, capsys) -> None:
    make_template(template_root, "ok", 'name = "ok"\n')
    make_template(template_root, "bad", "name = [\n")
    assert cli_main.main(["list"]) == 0
    captured = capsys.readouterr()
    assert "ok" in captured.out
    assert "Warning: Failed to parse" in captured.err


def test_new_and_init_flow(cli_settings: RuntimeSettings, template_root: Path, make_template, tmp_path: Path, capsys) -> None:
    make_template(template_root, "web", 'name = "site"\n', {"index.html": "<h1>hi</h1>\n"})

    assert cli_main.main(["new", "site", "proj", "--dry-run"]) == 0
    out = capsys.readouterr().out
    assert "[dry-run] Would create directory" in out
    assert not (tmp_path / "work" / "proj").exists()

    assert cli_main.main(["new", "web", "proj"]) == 0
    out = capsys.readouterr().out
    assert "Created directory" in out
    assert (tmp_path / "work" / "proj" / "index.html").exists()

    assert cli_main.main(["init", "web", "proj", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["command"] == "init"
    assert payload["changed"] is False


def test_init_into_missing_directory(cli_settings: RuntimeSettings, template_root: Path, make_template, capsys) -> None:
    make_template(template_root, "web")
    assert cli_main.main(["init", "web", "nowhere"]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_unknown_template(cli_settings: RuntimeSettings, capsys) -> None:
    assert cli_main.main(["init", "ghost"]) == 1
    assert "Template 'ghost' not found" in capsys.readouterr().err


def test_languages_command(cli_settings: RuntimeSettings, capsys) -> None:
    assert cli_main.main(["languages", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    names = {entry["name"] for entry in payload}
    assert {"Python", "Rust", "JavaScript"} <= names


def test_settings_error_is_reported(cli_settings: RuntimeSettings, monkeypatch, capsys) -> None:
    monkeypatch.setattr(settings_module, "SETTINGS_ERROR", ConfigError("bad config"))
    assert cli_main.main(["list"]) == 1
    assert capsys.readouterr().err.strip() == "Error: bad config"


def test_missing_command_exits_with_usage(cli_settings: RuntimeSettings) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main([])
    assert excinfo.value.code == 2


def test_unwritable_log_dir_does_not_fail_commands(
    cli_settings: RuntimeSettings, template_root: Path, make_template, tmp_path: Path, capsys
) -> None:
    cli_settings.log_dir.write_text("", encoding="utf-8")
    make_template(template_root, "web", "", {"index.html": "<h1>hi</h1>\n"})

    assert cli_main.main(["list"]) == 0
    captured = capsys.readouterr()
    assert "web" in captured.out
    assert "Warning: unable to write telemetry" in captured.err

    assert cli_main.main(["new", "web", "proj"]) == 0
    assert (tmp_path / "work" / "proj" / "index.html").exists()
