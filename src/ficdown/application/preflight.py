"""Filesystem preconditions checked before any parsing in render mode."""

from __future__ import annotations

from ficdown.adapters.templating import TEMPLATE_FILES
from ficdown.application.run_config import RunConfig
from ficdown.domain.errors import PreconditionError
from ficdown.domain.ports import DiagnosticSink


def run_preflight(config: RunConfig, diagnostics: DiagnosticSink) -> None:
    """Raise `PreconditionError` on the first unusable path.

    An incomplete template directory is reported but does not stop the run;
    the renderer falls back to its packaged template for anything missing.
    """
    if config.input_path is None or not config.input_path.is_file():
        raise PreconditionError(f"Source file {config.input_path} not found.")

    output = config.output
    if output is not None and (output.is_dir() or output.is_file()):
        raise PreconditionError(f"Specified output {output} already exists.")

    if config.template_dir is not None:
        if not config.template_dir.is_dir():
            raise PreconditionError(f"Template directory {config.template_dir} does not exist.")
        missing = [name for name in TEMPLATE_FILES if not (config.template_dir / name).is_file()]
        if missing:
            diagnostics.error(
                'Template directory must contain "index.html", "scene.html", and "styles.css" '
                f"files (missing: {', '.join(missing)})."
            )

    if config.image_dir is not None and not config.image_dir.is_dir():
        raise PreconditionError(f"Images directory {config.image_dir} does not exist.")
