"""Decide render eligibility from parser warnings and report orphans."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ficdown.application.run_config import RunConfig
from ficdown.domain.models import OrphanFinding, StoryWarning
from ficdown.domain.ports import DiagnosticSink


@dataclass(frozen=True)
class GateDecision:
    """Printed findings and whether rendering may go ahead."""

    warnings: tuple[str, ...]
    orphans: tuple[str, ...]
    may_render: bool


def dedupe_warnings(warnings: Iterable[StoryWarning]) -> list[str]:
    """Collapse warnings by their printed form, keeping first-seen order."""
    seen: set[str] = set()
    deduped: list[str] = []
    for warning in warnings:
        text = str(warning)
        if text in seen:
            continue
        seen.add(text)
        deduped.append(text)
    return deduped


def evaluate_gate(
    config: RunConfig,
    warnings: Iterable[StoryWarning],
    orphans: Iterable[OrphanFinding],
    diagnostics: DiagnosticSink,
) -> GateDecision:
    """Print every distinct warning and orphan; only warnings block rendering."""
    distinct = dedupe_warnings(warnings)
    for line in distinct:
        diagnostics.raw(line)

    orphan_lines = [str(orphan) for orphan in orphans]
    for line in orphan_lines:
        diagnostics.raw(line)

    return GateDecision(
        warnings=tuple(distinct),
        orphans=tuple(orphan_lines),
        may_render=not config.lint_mode and not distinct,
    )
