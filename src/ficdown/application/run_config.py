"""Resolve raw invocation arguments into an immutable run configuration."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

from ficdown.application.outcomes import OutcomeKind, RunOutcome
from ficdown.config import RuntimeSettings
from ficdown.domain.errors import MissingRequiredArgument, UnknownOption, UsageError

LINT_FORMAT = "lint"
HTML_FORMAT = "html"
EPUB_FORMAT = "epub"
DEFAULT_EPUB_OUTPUT = Path("output.epub")
DEFAULT_LANGUAGE = "en"

HELP_FLAGS = frozenset({"/?", "/help", "-help", "--help"})
DEBUG_FLAG = "--debug"
VALUE_OPTIONS: dict[str, str] = {
    "--format": "format",
    "--in": "input",
    "--out": "output",
    "--template": "template",
    "--author": "author",
    "--bookid": "bookid",
    "--language": "language",
    "--images": "images",
}

USAGE = """Usage: ficdown
    --format (html|epub)
    --in "/path/to/source.md"
    [--out "/path/to/output"]
    [--template "/path/to/template/dir"]
    [--images "/path/to/images/dir"]
    [--author "Author Name"]
    [--bookid "ePub Book ID"]
    [--language "language"]
    [--debug]
or: ficdown --format lint
    (reads input from stdin)"""


class RunConfig(BaseModel):
    """Immutable configuration for a single run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: Literal["lint", "render"]
    format: str
    input_path: Path | None = None
    output: Path | None = None
    template_dir: Path | None = None
    image_dir: Path | None = None
    author: str | None = None
    book_id: str | None = None
    language: str = DEFAULT_LANGUAGE
    debug: bool = False

    @model_validator(mode="after")
    def _check_mode(self) -> RunConfig:
        if (self.mode == "lint") != (self.format == LINT_FORMAT):
            raise ValueError("mode must be `lint` exactly when format is `lint`.")
        if self.mode == "render":
            if self.input_path is None:
                raise ValueError("render mode requires an input path.")
            if self.format in {HTML_FORMAT, EPUB_FORMAT} and self.output is None:
                raise ValueError("render mode requires an output target.")
        return self

    @property
    def lint_mode(self) -> bool:
        return self.mode == "lint"


def _present(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def scan_options(argv: Sequence[str]) -> tuple[dict[str, str], bool]:
    """Consume `--key value` pairs; `--debug` stands alone."""
    values: dict[str, str] = {}
    debug = False
    index = 0
    while index < len(argv):
        key = argv[index]
        if key == DEBUG_FLAG:
            debug = True
            index += 1
            continue
        name = VALUE_OPTIONS.get(key)
        if name is None:
            raise UnknownOption(key)
        if index + 1 >= len(argv):
            raise MissingRequiredArgument(key, f"Missing value for option {key}")
        values[name] = argv[index + 1]
        index += 2
    return values, debug


def resolve_run_config(
    argv: Sequence[str], settings: RuntimeSettings
) -> RunConfig | RunOutcome:
    """Return a `RunConfig`, or a help outcome when nothing needs running.

    Raises `UsageError` (or a subclass) for arguments that cannot be used.
    """
    if not argv or (len(argv) == 1 and argv[0] in HELP_FLAGS):
        return RunOutcome(OutcomeKind.HELP, show_help=True)

    values: dict[str, str] = {}
    debug = False
    if len(argv) > 1:
        values, debug = scan_options(argv)

    fmt = _present(values.get("format"))
    template = _present(values.get("template"))
    images = _present(values.get("images"))
    template_dir = Path(template) if template else None
    image_dir = Path(images) if images else None
    author = _present(values.get("author"))
    book_id = _present(values.get("bookid"))
    language = _present(values.get("language")) or DEFAULT_LANGUAGE

    if fmt == LINT_FORMAT:
        return RunConfig(
            mode="lint",
            format=LINT_FORMAT,
            template_dir=template_dir,
            image_dir=image_dir,
            author=author,
            book_id=book_id,
            language=language,
            debug=debug,
        )

    infile = _present(values.get("input"))
    if fmt is None or infile is None:
        raise UsageError(show_help=True)

    out = _present(values.get("output"))
    output: Path | None
    if out is not None:
        output = Path(out)
    elif fmt == HTML_FORMAT:
        output = settings.default_html_output
    elif fmt == EPUB_FORMAT:
        output = DEFAULT_EPUB_OUTPUT
    else:
        output = None

    return RunConfig(
        mode="render",
        format=fmt,
        input_path=Path(infile),
        output=output,
        template_dir=template_dir,
        image_dir=image_dir,
        author=author,
        book_id=book_id,
        language=language,
        debug=debug,
    )
