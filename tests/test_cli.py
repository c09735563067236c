"""CLI behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from samgen.cli import _build_parser, main
from tests._fixtures.project_builder import ProjectBuilder


def test_cli_takes_no_arguments() -> None:
    parser = _build_parser()
    parser.parse_args([])

    with pytest.raises(SystemExit) as excinfo:
        parser.parse_args(["--output", "x"])
    assert excinfo.value.code == 2


def test_cli_help_exits_cleanly(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])

    assert excinfo.value.code == 0
    assert "samgen.json" in capsys.readouterr().out


def test_cli_reports_missing_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main([])

    assert excinfo.value.code == 1
    assert 'samgen failed: No "samgen.json" file found!' in capsys.readouterr().err


def test_cli_runs_pipeline(
    project_builder: ProjectBuilder,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    project_builder.write(
        {
            "src/health.ts": """
            @LambdaFunction({
                Properties: { Events: { Ping: { Type: 'Api', Properties: { Path: '/health', Method: 'get' } } } },
            })
            export class HealthFunction {
                handle() {}
            }

            export const handler = new HealthFunction().handler;
            """
        }
    )
    project_builder.write_config(output="client")
    monkeypatch.chdir(project_builder.path())

    main([])

    assert "Generated 1 functions and 0 types into client" in capsys.readouterr().out
    assert "public health()" in project_builder.read("client/api.service.ts")
