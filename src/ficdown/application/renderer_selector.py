"""Map an output format to a renderer and assemble its render job."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from ficdown.adapters.epub_renderer import EpubRenderer
from ficdown.adapters.html_renderer import HtmlRenderer
from ficdown.adapters.templating import load_template_dir
from ficdown.application.run_config import EPUB_FORMAT, HTML_FORMAT, RunConfig
from ficdown.config import RuntimeSettings
from ficdown.domain.errors import MissingRequiredArgument, UsageError
from ficdown.domain.models import RenderJob, StoryModel, TemplateSet
from ficdown.domain.ports import DiagnosticSink, StoryRenderer

RendererFactory = Callable[[RunConfig, RuntimeSettings], StoryRenderer]


def _html_renderer(config: RunConfig, settings: RuntimeSettings) -> StoryRenderer:
    return HtmlRenderer(config.language, max_states=settings.max_states)


def _epub_renderer(config: RunConfig, settings: RuntimeSettings) -> StoryRenderer:
    if config.author is None:
        raise MissingRequiredArgument("author", "Epub format requires the --author argument.")
    return EpubRenderer(
        config.author,
        config.book_id,
        config.language,
        max_states=settings.max_states,
    )


RENDERER_FACTORIES: dict[str, RendererFactory] = {
    HTML_FORMAT: _html_renderer,
    EPUB_FORMAT: _epub_renderer,
}
DIRECTORY_FORMATS = frozenset({HTML_FORMAT})


@dataclass(frozen=True)
class RenderPlan:
    """A constructed renderer paired with the job it will run."""

    renderer: StoryRenderer
    job: RenderJob


def prepare_render(
    config: RunConfig,
    story: StoryModel,
    settings: RuntimeSettings,
    diagnostics: DiagnosticSink,
    factories: Mapping[str, RendererFactory] = RENDERER_FACTORIES,
) -> RenderPlan:
    """Construct the renderer for `config.format` and build its job.

    Raises `UsageError` for unknown formats and missing format-specific
    arguments; nothing is created on disk in that case.
    """
    factory = factories.get(config.format)
    if factory is None or config.output is None:
        raise UsageError(show_help=True)
    renderer = factory(config, settings)

    if config.format in DIRECTORY_FORMATS:
        config.output.mkdir(parents=True)

    templates = TemplateSet()
    if config.template_dir is not None:
        diagnostics.debug(f"Loading templates from {config.template_dir}")
        templates = load_template_dir(config.template_dir)

    return RenderPlan(
        renderer=renderer,
        job=RenderJob(
            story=story,
            output=config.output,
            templates=templates,
            image_dir=config.image_dir,
            debug=config.debug,
        ),
    )


def run_render(plan: RenderPlan, diagnostics: DiagnosticSink) -> None:
    diagnostics.log("Rendering story...")
    plan.renderer.render(plan.job)
    diagnostics.log("Done.")
