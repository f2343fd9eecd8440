from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from ficdown.application.outcomes import OutcomeKind, RunOutcome
from ficdown.application.run_config import (
    DEFAULT_EPUB_OUTPUT,
    RunConfig,
    resolve_run_config,
    scan_options,
)
from ficdown.config import RuntimeSettings
from ficdown.domain.errors import MissingRequiredArgument, UnknownOption, UsageError


def _config(argv: list[str], settings: RuntimeSettings) -> RunConfig:
    resolved = resolve_run_config(argv, settings)
    assert isinstance(resolved, RunConfig)
    return resolved


@pytest.mark.parametrize("argv", [[], ["/?"], ["/help"], ["-help"], ["--help"]])
def test_help_requests_resolve_to_help_outcome(
    argv: list[str], settings: RuntimeSettings
) -> None:
    resolved = resolve_run_config(argv, settings)
    assert resolved == RunOutcome(OutcomeKind.HELP, show_help=True)
    assert isinstance(resolved, RunOutcome)
    assert resolved.exit_code == 0


@pytest.mark.parametrize("argv", [["story.md"], ["--debug"], ["-h"]])
def test_single_non_help_argument_is_a_usage_error(
    argv: list[str], settings: RuntimeSettings
) -> None:
    with pytest.raises(UsageError) as raised:
        resolve_run_config(argv, settings)
    assert raised.value.show_help is True


def test_unknown_option_names_the_key(settings: RuntimeSettings) -> None:
    with pytest.raises(UnknownOption, match="Unknown option: --output") as raised:
        resolve_run_config(["--format", "html", "--output", "x"], settings)
    assert raised.value.key == "--output"


def test_option_without_value_is_rejected(settings: RuntimeSettings) -> None:
    with pytest.raises(MissingRequiredArgument, match="--in"):
        resolve_run_config(["--format", "html", "--in"], settings)


def test_debug_flag_consumes_a_single_slot() -> None:
    values, debug = scan_options(["--format", "html", "--debug", "--in", "story.md"])
    assert debug is True
    assert values == {"format": "html", "input": "story.md"}


def test_lint_format_reads_stdin_and_ignores_missing_input(settings: RuntimeSettings) -> None:
    config = _config(["--format", "lint", "--debug"], settings)
    assert config.mode == "lint"
    assert config.lint_mode is True
    assert config.input_path is None
    assert config.output is None
    assert config.debug is True


def test_lint_format_wins_even_with_input_given(settings: RuntimeSettings) -> None:
    config = _config(["--in", "story.md", "--format", "lint"], settings)
    assert config.mode == "lint"


@pytest.mark.parametrize(
    "argv",
    [
        ["--format", "html", "--debug"],
        ["--in", "story.md", "--debug"],
        ["--format", "  ", "--in", "story.md"],
    ],
)
def test_render_mode_requires_format_and_input(
    argv: list[str], settings: RuntimeSettings
) -> None:
    with pytest.raises(UsageError) as raised:
        resolve_run_config(argv, settings)
    assert raised.value.show_help is True


def test_html_output_defaults_under_home(settings: RuntimeSettings) -> None:
    config = _config(["--format", "html", "--in", "story.md"], settings)
    assert config.mode == "render"
    assert config.input_path == Path("story.md")
    assert config.output == settings.home / "html"


def test_epub_output_defaults_to_fixed_filename(settings: RuntimeSettings) -> None:
    config = _config(["--format", "epub", "--in", "story.md"], settings)
    assert config.output == DEFAULT_EPUB_OUTPUT


def test_explicit_out_and_optional_values_are_kept(settings: RuntimeSettings) -> None:
    config = _config(
        [
            "--format",
            "epub",
            "--in",
            "story.md",
            "--out",
            "book.epub",
            "--author",
            "Ada",
            "--bookid",
            "urn:isbn:1",
            "--language",
            "fr",
            "--template",
            "tpl",
            "--images",
            "img",
        ],
        settings,
    )
    assert config.output == Path("book.epub")
    assert config.author == "Ada"
    assert config.book_id == "urn:isbn:1"
    assert config.language == "fr"
    assert config.template_dir == Path("tpl")
    assert config.image_dir == Path("img")


def test_unrecognized_format_is_carried_without_default_output(
    settings: RuntimeSettings,
) -> None:
    config = _config(["--format", "pdf", "--in", "story.md"], settings)
    assert config.format == "pdf"
    assert config.output is None
    assert config.language == "en"


def test_run_config_enforces_mode_invariants() -> None:
    with pytest.raises(ValidationError):
        RunConfig(mode="lint", format="html")
    with pytest.raises(ValidationError):
        RunConfig(mode="render", format="lint", input_path=Path("a.md"))
    with pytest.raises(ValidationError):
        RunConfig(mode="render", format="html", input_path=Path("a.md"))


def test_run_config_is_immutable() -> None:
    config = RunConfig(mode="lint", format="lint")
    with pytest.raises(ValidationError):
        config.debug = True  # type: ignore[misc]
