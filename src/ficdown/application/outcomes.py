"""Tagged run outcomes and their process exit codes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class OutcomeKind(StrEnum):
    HELP = "help"
    USAGE_ERROR = "usage_error"
    PRECONDITION_FAILED = "precondition_failed"
    LINTED = "linted"
    BLOCKED = "blocked"
    RENDERED = "rendered"
    FATAL = "fatal"


EXIT_CODES: dict[OutcomeKind, int] = {
    OutcomeKind.HELP: 0,
    OutcomeKind.USAGE_ERROR: 1,
    OutcomeKind.PRECONDITION_FAILED: 2,
    OutcomeKind.LINTED: 0,
    OutcomeKind.BLOCKED: 0,
    OutcomeKind.RENDERED: 0,
    OutcomeKind.FATAL: 3,
}


@dataclass(frozen=True)
class RunOutcome:
    """Terminal result of one invocation."""

    kind: OutcomeKind
    message: str = ""
    show_help: bool = False

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.kind]
