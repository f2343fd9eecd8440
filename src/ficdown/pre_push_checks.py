"""Local quality gate mirroring CI before code leaves the machine."""

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
TOOL_RUNNER = REPO_ROOT / "tools" / "run_dev_tool.py"


def run(command: list[str]) -> None:
    """Run one command and propagate its exit code on failure."""
    completed = subprocess.run(command, check=False)
    if completed.returncode != 0:
        raise SystemExit(completed.returncode)


def run_tool(tool: str, *args: str) -> None:
    """Run one development tool through the repository tool wrapper."""
    run([sys.executable, str(TOOL_RUNNER), tool, *args])


def main() -> None:
    if (REPO_ROOT / ".pre-commit-config.yaml").exists():
        run_tool("pre-commit", "run", "--all-files")
    uv_executable = shutil.which("uv")
    if uv_executable is not None and (REPO_ROOT / "uv.lock").exists():
        run([uv_executable, "lock", "--check"])
    run([sys.executable, str(REPO_ROOT / "tools" / "check_imports.py")])
    run_tool("ruff", "check", ".")
    run_tool("ruff", "format", "--check", ".")
    run_tool("mypy")
    run_tool("pytest")
    sample = REPO_ROOT / "content" / "sample_story.md"
    if sample.exists():
        with sample.open(encoding="utf-8") as story:
            completed = subprocess.run(
                [sys.executable, "-m", "ficdown", "--format", "lint"],
                stdin=story,
                check=False,
            )
        if completed.returncode != 0:
            raise SystemExit(completed.returncode)


if __name__ == "__main__":
    main()
