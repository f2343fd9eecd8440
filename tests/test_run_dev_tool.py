from __future__ import annotations

import importlib.util
import subprocess
import sys
from pathlib import Path
from types import ModuleType

import pytest

ROOT = Path(__file__).resolve().parents[1]


def _load_runner() -> ModuleType:
    module_path = ROOT / "tools" / "run_dev_tool.py"
    spec = importlib.util.spec_from_file_location("run_dev_tool", module_path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_python_tools_run_as_modules(monkeypatch: pytest.MonkeyPatch) -> None:
    runner = _load_runner()
    monkeypatch.setattr(runner, "_venv_python", lambda: None)
    assert runner.command_for("pre-commit", ["run"]) == [sys.executable, "-m", "pre_commit", "run"]


def test_unknown_executable_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    runner = _load_runner()
    monkeypatch.setattr(runner.shutil, "which", lambda tool: None)
    with pytest.raises(SystemExit, match="`clang-format` not found"):
        runner.command_for("clang-format", [])


def test_main_propagates_tool_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    runner = _load_runner()
    monkeypatch.setattr(
        runner.subprocess,
        "run",
        lambda command, check: subprocess.CompletedProcess(args=command, returncode=4),
    )
    with pytest.raises(SystemExit) as raised:
        runner.main(["ruff", "check", "."])
    assert raised.value.code == 4


def test_main_requires_a_tool_name() -> None:
    with pytest.raises(SystemExit, match="Usage"):
        _load_runner().main([])
