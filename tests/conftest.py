from __future__ import annotations

from pathlib import Path

import pytest

from ficdown.config import RuntimeSettings

ROOT = Path(__file__).resolve().parents[1]


class RecordingDiagnostics:
    """In-memory diagnostic sink for assertions on what a run reported."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.debug_messages: list[str] = []
        self.errors: list[str] = []
        self.raw_lines: list[str] = []

    def log(self, message: str) -> None:
        self.messages.append(message)

    def debug(self, message: str) -> None:
        self.debug_messages.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def exception(self, message: str) -> None:
        self.errors.append(message)

    def raw(self, line: str) -> None:
        self.raw_lines.append(line)


@pytest.fixture(autouse=True)
def _skip_runtime_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("ficdown.adapters.observability._CONFIGURED", True)


@pytest.fixture
def diagnostics() -> RecordingDiagnostics:
    return RecordingDiagnostics()


@pytest.fixture
def settings(tmp_path: Path) -> RuntimeSettings:
    return RuntimeSettings(
        home=tmp_path / "home",
        log_level=None,
        log_path=None,
        log_max_bytes=64 * 1024,
        log_backup_count=1,
        max_states=10_000,
    )


@pytest.fixture
def sample_story_text() -> str:
    return (ROOT / "content" / "sample_story.md").read_text(encoding="utf-8")
