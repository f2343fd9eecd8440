"""Environment-driven runtime settings."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from ficdown.core.traversal import DEFAULT_MAX_STATES


def _int_env(name: str, default: int, *, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _default_home() -> Path:
    script = sys.argv[0] if sys.argv and sys.argv[0] else ""
    if not script:
        return Path.cwd()
    return Path(script).resolve().parent


@dataclass(frozen=True)
class RuntimeSettings:
    """Settings that are not part of the command line."""

    home: Path
    log_level: str | None
    log_path: Path | None
    log_max_bytes: int
    log_backup_count: int
    max_states: int

    @property
    def default_html_output(self) -> Path:
        return self.home / "html"


def load_settings() -> RuntimeSettings:
    """Read `FICDOWN_*` variables once per run."""
    home = os.environ.get("FICDOWN_HOME", "").strip()
    log_level = os.environ.get("FICDOWN_LOG_LEVEL", "").strip().upper()
    log_path = os.environ.get("FICDOWN_LOG_PATH", "").strip()
    return RuntimeSettings(
        home=Path(home) if home else _default_home(),
        log_level=log_level or None,
        log_path=Path(log_path) if log_path else None,
        log_max_bytes=_int_env(
            "FICDOWN_LOG_MAX_BYTES",
            5 * 1024 * 1024,
            minimum=64 * 1024,
            maximum=100 * 1024 * 1024,
        ),
        log_backup_count=_int_env("FICDOWN_LOG_BACKUP_COUNT", 5, minimum=1, maximum=120),
        max_states=_int_env(
            "FICDOWN_MAX_STATES", DEFAULT_MAX_STATES, minimum=1, maximum=1_000_000
        ),
    )
