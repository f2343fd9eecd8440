from __future__ import annotations

import io
import runpy
from pathlib import Path

import pytest

from ficdown import cli


def test_help_exits_zero_and_prints_usage(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as raised:
        cli.main(["--help"])
    assert raised.value.code == 0
    assert "Usage: ficdown" in capsys.readouterr().out


def test_lone_option_exits_one_with_usage(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as raised:
        cli.main(["--format"])
    assert raised.value.code == 1
    assert "--format (html|epub)" in capsys.readouterr().out


def test_main_reads_process_arguments(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.argv", ["ficdown", "/?"])
    with pytest.raises(SystemExit) as raised:
        cli.main()
    assert raised.value.code == 0
    assert "Usage" in capsys.readouterr().out


def test_lint_reads_stdin_and_exits_zero(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("# [S](/start)\n## Start\n[Go](/gone)\n"))
    with pytest.raises(SystemExit) as raised:
        cli.main(["--format", "lint"])
    assert raised.value.code == 0
    assert capsys.readouterr().out.splitlines() == [
        'Warning L3,1: Link to undefined scene "gone".'
    ]


def test_render_with_existing_output_exits_two(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FICDOWN_HOME", str(tmp_path))
    story = tmp_path / "story.md"
    story.write_text("# [S](/start)\n## Start\nHi.\n", encoding="utf-8")
    (tmp_path / "html").mkdir()
    with pytest.raises(SystemExit) as raised:
        cli.main(["--format", "html", "--in", str(story)])
    assert raised.value.code == 2


@pytest.mark.parametrize("module", ["ficdown.cli.__main__", "ficdown.__main__"])
def test_module_entrypoints_call_main(monkeypatch: pytest.MonkeyPatch, module: str) -> None:
    calls: list[str] = []
    monkeypatch.setattr("ficdown.cli.main", lambda: calls.append("called"))
    runpy.run_module(module, run_name="__main__")
    assert calls == ["called"]
