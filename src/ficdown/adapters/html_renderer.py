"""Static HTML renderer: one page per reachable player state."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ficdown.adapters.templating import STYLES_TEMPLATE, PageTemplates
from ficdown.core.markup import markdown_to_html
from ficdown.core.traversal import DEFAULT_MAX_STATES, PlayerState, StateTraversal
from ficdown.domain.models import RenderJob

logger = logging.getLogger(__name__)

IMAGES_DIR_NAME = "images"


class HtmlRenderer:
    """Writes `index.html`, one page per state, the stylesheet, and images."""

    def __init__(self, language: str = "en", *, max_states: int = DEFAULT_MAX_STATES) -> None:
        self.language = language
        self.max_states = max_states

    def render(self, job: RenderJob) -> None:
        output_dir = job.output
        output_dir.mkdir(parents=True, exist_ok=True)
        templates = PageTemplates(job.templates)
        story = job.story
        traversal = StateTraversal(story, max_states=self.max_states)

        def href_for(state: PlayerState) -> str:
            return f"{state.page_id}.html"

        pages = traversal.pages(href_for)
        logger.debug("Expanded %d player states for %s", len(pages), story.name)

        index_html = templates.render_index(
            title=story.name,
            description_html=markdown_to_html(story.description),
            first_page=href_for(traversal.start_state()),
            language=self.language,
            stylesheet=STYLES_TEMPLATE,
        )
        (output_dir / "index.html").write_text(index_html, encoding="utf-8")
        (output_dir / STYLES_TEMPLATE).write_text(templates.styles, encoding="utf-8")

        for page in pages:
            page_html = templates.render_scene(
                title=story.name,
                scene_name=page.scene.name,
                content_html=page.body_html,
                language=self.language,
                stylesheet=STYLES_TEMPLATE,
                debug_toggles=sorted(page.state.toggles) if job.debug else None,
            )
            (output_dir / href_for(page.state)).write_text(page_html, encoding="utf-8")

        if job.image_dir is not None:
            copy_images(job.image_dir, output_dir / IMAGES_DIR_NAME)


def copy_images(source: Path, destination: Path) -> list[Path]:
    """Copy every file under `source` into `destination`, keeping relative paths."""
    copied: list[Path] = []
    for path in sorted(source.rglob("*")):
        if not path.is_file():
            continue
        target = destination / path.relative_to(source)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        copied.append(target)
    return copied
