"""Command-line entry point for ficdown."""

from __future__ import annotations

import sys

from ficdown.application.orchestrator import Orchestrator


def main(argv: list[str] | None = None) -> None:
    outcome = Orchestrator().run(sys.argv[1:] if argv is None else argv)
    raise SystemExit(outcome.exit_code)
