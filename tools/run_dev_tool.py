"""Run development tools from the repository virtual environment when available."""

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
MODULE_TOOLS = {
    "ruff": "ruff",
    "mypy": "mypy",
    "pytest": "pytest",
    "pre-commit": "pre_commit",
}


def _venv_python() -> Path | None:
    for candidate in (
        REPO_ROOT / ".venv" / "Scripts" / "python.exe",
        REPO_ROOT / ".venv" / "bin" / "python",
    ):
        if candidate.exists():
            return candidate
    return None


def command_for(tool: str, args: list[str]) -> list[str]:
    module = MODULE_TOOLS.get(tool)
    if module is not None:
        python = _venv_python() or Path(sys.executable)
        return [str(python), "-m", module, *args]
    resolved = shutil.which(tool)
    if resolved is None:
        raise SystemExit(f"Executable `{tool}` not found")
    return [resolved, *args]


def main(argv: list[str] | None = None) -> None:
    raw = list(sys.argv[1:] if argv is None else argv)
    if not raw:
        raise SystemExit("Usage: python tools/run_dev_tool.py <tool> [args...]")
    tool, *tool_args = raw
    completed = subprocess.run(command_for(tool, tool_args), check=False)
    if completed.returncode != 0:
        raise SystemExit(completed.returncode)


if __name__ == "__main__":
    main()
