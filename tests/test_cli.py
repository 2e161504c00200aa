from __future__ import annotations

import io
import json
import runpy
import sys
from pathlib import Path

import pytest

from texcompiler import cli
from texcompiler.config import Mode
from texcompiler.dispatcher import BuildOutcome
from texcompiler.lifecycle import ExitCode
from tests.utils import FakeBackend, gradient_rgb, write_image


def test_exit_code_mapping() -> None:
    assert cli.exit_code_for(BuildOutcome.SUCCEEDED) is ExitCode.SUCCESS
    assert cli.exit_code_for(BuildOutcome.FAILED) is ExitCode.ERROR
    assert cli.exit_code_for(BuildOutcome.INPUT_NOT_FOUND) is ExitCode.FILE_NOT_FOUND


def test_missing_input_exits_with_file_not_found(tmp_path: Path, capsys) -> None:
    result = cli.main(["--input", str(tmp_path / "missing.png")])
    assert result == 2
    assert "input file not found" in capsys.readouterr().err


def test_no_input_exits_with_file_not_found() -> None:
    assert cli.main([]) == 2


def test_build_with_default_output(tmp_path: Path, monkeypatch) -> None:
    source = tmp_path / "src" / "photo.png"
    write_image(source, gradient_rgb())
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)

    assert cli.main(["-i", str(source)]) == 0
    assert (work / "photo.pixels").exists()
    assert (work / "photo.texture").exists()


def test_build_with_explicit_output(tmp_path: Path) -> None:
    source = tmp_path / "photo.png"
    write_image(source, gradient_rgb())
    output = tmp_path / "out" / "photo.bin"

    assert cli.main(["--input", str(source), "--output", str(output), "--target", "pc"]) == 0
    assert output.exists()
    assert (tmp_path / "out" / "photo.texture").exists()


def test_compile_failure_exits_with_error(tmp_path: Path, monkeypatch, capsys) -> None:
    source = tmp_path / "photo.png"
    source.write_bytes(b"stub")
    monkeypatch.setattr(cli, "get_backend", lambda _name: FakeBackend(fail=ValueError("bad")))

    assert cli.main(["--input", str(source), "--output", str(tmp_path / "photo")]) == 1
    err = capsys.readouterr().err
    assert "An error has occurred:" in err
    assert not (tmp_path / "photo.texture").exists()


def test_unknown_backend_is_unhandled_error(tmp_path: Path, capsys) -> None:
    source = tmp_path / "photo.png"
    source.write_bytes(b"stub")
    assert cli.main(["--input", str(source), "--backend", "nope"]) == 1
    assert "An unhandled exception has occurred" in capsys.readouterr().err


def test_backend_from_environment(tmp_path: Path, monkeypatch) -> None:
    captured = {}

    def fake_get_backend(name):
        captured["name"] = name
        return FakeBackend()

    source = tmp_path / "photo.png"
    source.write_bytes(b"stub")
    monkeypatch.setenv("TEXCOMPILER_BACKEND", "custom")
    monkeypatch.setattr(cli, "get_backend", fake_get_backend)

    assert cli.main(["--input", str(source), "--output", str(tmp_path / "photo")]) == 0
    assert captured["name"] == "custom"


def test_persistent_ignores_build_arguments(tmp_path: Path) -> None:
    args = cli.build_parser().parse_args(
        ["--persistent", "--input", "ignored.png", "--output", "ignored", "--target", "x"]
    )
    config = cli.config_from_args(args)
    assert config.mode is Mode.PERSISTENT
    assert config.source_path == ""
    assert config.target_path == ""
    assert config.platform == ""


def test_persistent_mode_serves_stdin(tmp_path: Path, monkeypatch) -> None:
    source = tmp_path / "photo.png"
    write_image(source, gradient_rgb())
    event = {
        "event": "build",
        "id": "1",
        "data": {"sourcePath": str(source), "targetPath": str(tmp_path / "photo")},
    }
    stdin = io.StringIO(json.dumps(event) + "\n")
    stdout = io.StringIO()
    monkeypatch.setattr(cli.sys, "stdin", stdin)
    monkeypatch.setattr(cli.sys, "stdout", stdout)

    assert cli.main(["-P"]) == 0
    (response,) = [json.loads(line) for line in stdout.getvalue().splitlines()]
    assert response["succeeded"] is True
    assert len(response["outputs"]) == 2


def test_cli_version(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert capsys.readouterr().out.strip()


def test_cli_module_entrypoint(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(sys, "argv", ["texcompiler", "--input", str(tmp_path / "missing.png")])
    monkeypatch.setattr("texcompiler.lifecycle.signal.signal", lambda *_args: None)
    sys.modules.pop("texcompiler.cli", None)
    with pytest.raises(SystemExit) as exc:
        runpy.run_module("texcompiler.cli", run_name="__main__")
    assert exc.value.code == 2


def test_usage_error_exits_with_generic_error(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["--bogus-flag"])
    assert exc.value.code == ExitCode.ERROR
    err = capsys.readouterr().err
    assert "usage:" in err
    assert "--bogus-flag" in err


def test_list_backends(capsys) -> None:
    assert cli.main(["--list-backends"]) == 0
    lines = capsys.readouterr().out.splitlines()
    name, version, formats = lines[0].split("\t")
    assert name == "raster"
    assert version == "1"
    assert "RGBA" in formats.split(", ")
