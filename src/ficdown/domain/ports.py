"""Ports for diagnostics, parsing, and rendering."""

from __future__ import annotations

from typing import Protocol

from ficdown.domain.models import ParseResult, RenderJob


class DiagnosticSink(Protocol):
    """Receives progress, errors, and verbatim findings for one run."""

    def log(self, message: str) -> None:
        ...

    def debug(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def exception(self, message: str) -> None:
        ...

    def raw(self, line: str) -> None:
        ...


class StoryParser(Protocol):
    """Turns source text into a story model and its warnings."""

    def parse_story(self, text: str) -> ParseResult:
        ...


class StoryRenderer(Protocol):
    """Writes one publishable artifact for a validated story."""

    def render(self, job: RenderJob) -> None:
        ...
