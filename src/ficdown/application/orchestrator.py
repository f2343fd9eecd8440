"""Sequence argument resolution, preflight, parsing, gating, and rendering."""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping, Sequence
from typing import TextIO

from ficdown.adapters.observability import ConsoleDiagnostics, configure_runtime_logging
from ficdown.application.outcomes import OutcomeKind, RunOutcome
from ficdown.application.preflight import run_preflight
from ficdown.application.renderer_selector import (
    RENDERER_FACTORIES,
    RendererFactory,
    prepare_render,
    run_render,
)
from ficdown.application.run_config import USAGE, RunConfig, resolve_run_config
from ficdown.application.validation_gate import evaluate_gate
from ficdown.config import RuntimeSettings, load_settings
from ficdown.core.story_parser import FicdownParser
from ficdown.domain.errors import PreconditionError, UsageError
from ficdown.domain.models import ParseResult
from ficdown.domain.ports import DiagnosticSink, StoryParser


class Orchestrator:
    """Runs one invocation end to end and returns its tagged outcome.

    Every stage reports through the injected diagnostic sink; the outcome's
    `exit_code` is the process exit status.
    """

    def __init__(
        self,
        *,
        settings: RuntimeSettings | None = None,
        parser: StoryParser | None = None,
        diagnostics: DiagnosticSink | None = None,
        stdin: TextIO | None = None,
        factories: Mapping[str, RendererFactory] = RENDERER_FACTORIES,
        configure_logging: Callable[..., None] = configure_runtime_logging,
    ) -> None:
        self.settings = settings or load_settings()
        self.parser = parser or FicdownParser()
        self.diagnostics = diagnostics or ConsoleDiagnostics()
        self.stdin = stdin
        self.factories = factories
        self.configure_logging = configure_logging

    def run(self, argv: Sequence[str]) -> RunOutcome:
        try:
            resolved = resolve_run_config(argv, self.settings)
        except UsageError as error:
            return self._show(RunOutcome(OutcomeKind.USAGE_ERROR, str(error), error.show_help))
        if isinstance(resolved, RunOutcome):
            return self._show(resolved)

        config = resolved
        self.configure_logging(self.settings, debug=config.debug)
        self.diagnostics.debug(f"Resolved configuration: {config!r}")

        if not config.lint_mode:
            try:
                run_preflight(config, self.diagnostics)
            except PreconditionError as error:
                self.diagnostics.error(str(error))
                return RunOutcome(OutcomeKind.PRECONDITION_FAILED, str(error))

        try:
            result = self._parse(config)
        except Exception as error:
            self.diagnostics.exception(f"Fatal error while parsing story: {error}")
            return RunOutcome(OutcomeKind.FATAL, str(error))

        decision = evaluate_gate(
            config, result.warnings, result.story.orphans, self.diagnostics
        )
        if config.lint_mode:
            return RunOutcome(OutcomeKind.LINTED)
        if not decision.may_render:
            return RunOutcome(
                OutcomeKind.BLOCKED,
                f"{len(decision.warnings)} warning(s) reported; nothing rendered.",
            )

        try:
            plan = prepare_render(
                config, result.story, self.settings, self.diagnostics, self.factories
            )
        except UsageError as error:
            if str(error):
                self.diagnostics.error(str(error))
            return self._show(RunOutcome(OutcomeKind.USAGE_ERROR, "", error.show_help))
        except Exception as error:
            self.diagnostics.exception(f"Fatal error while preparing renderer: {error}")
            return RunOutcome(OutcomeKind.FATAL, str(error))

        try:
            run_render(plan, self.diagnostics)
        except Exception as error:
            self.diagnostics.exception(f"Fatal error while rendering story: {error}")
            return RunOutcome(OutcomeKind.FATAL, str(error))
        return RunOutcome(OutcomeKind.RENDERED)

    def _parse(self, config: RunConfig) -> ParseResult:
        if config.lint_mode or config.input_path is None:
            stream = self.stdin if self.stdin is not None else sys.stdin
            text = stream.read()
        else:
            text = config.input_path.read_text(encoding="utf-8-sig")
            self.diagnostics.log("Parsing story...")
        return self.parser.parse_story(text)

    def _show(self, outcome: RunOutcome) -> RunOutcome:
        if outcome.message:
            self.diagnostics.raw(outcome.message)
        if outcome.show_help:
            self.diagnostics.raw(USAGE)
        return outcome

