"""Jinja2 page templates shared by the HTML and EPUB renderers."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, Template, select_autoescape
from markupsafe import Markup

from ficdown.domain.models import TemplateSet

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

INDEX_TEMPLATE = "index.html"
SCENE_TEMPLATE = "scene.html"
STYLES_TEMPLATE = "styles.css"
TEMPLATE_FILES = (INDEX_TEMPLATE, SCENE_TEMPLATE, STYLES_TEMPLATE)


def default_templates() -> TemplateSet:
    """Load the packaged template set."""
    return TemplateSet(
        index=(_TEMPLATES_DIR / INDEX_TEMPLATE).read_text(encoding="utf-8"),
        scene=(_TEMPLATES_DIR / SCENE_TEMPLATE).read_text(encoding="utf-8"),
        styles=(_TEMPLATES_DIR / STYLES_TEMPLATE).read_text(encoding="utf-8"),
    )


def load_template_dir(template_dir: Path) -> TemplateSet:
    """Read whichever of the three template files exist in `template_dir`."""

    def read(name: str) -> str | None:
        path = template_dir / name
        return path.read_text(encoding="utf-8") if path.is_file() else None

    return TemplateSet(
        index=read(INDEX_TEMPLATE),
        scene=read(SCENE_TEMPLATE),
        styles=read(STYLES_TEMPLATE),
    )


class PageTemplates:
    """Compiled index/scene templates plus the raw stylesheet."""

    def __init__(self, overrides: TemplateSet | None = None) -> None:
        defaults = default_templates()
        overrides = overrides or TemplateSet()
        env = Environment(
            autoescape=select_autoescape(["html", "xml"], default_for_string=True),
            keep_trailing_newline=True,
        )
        self._index: Template = env.from_string(overrides.index or defaults.index or "")
        self._scene: Template = env.from_string(overrides.scene or defaults.scene or "")
        self.styles: str = overrides.styles or defaults.styles or ""

    def render_index(
        self,
        *,
        title: str,
        description_html: str,
        first_page: str,
        language: str,
        stylesheet: str,
    ) -> str:
        return self._index.render(
            title=title,
            description=Markup(description_html),
            first_page=first_page,
            language=language,
            stylesheet=stylesheet,
        )

    def render_scene(
        self,
        *,
        title: str,
        scene_name: str,
        content_html: str,
        language: str,
        stylesheet: str,
        debug_toggles: list[str] | None = None,
    ) -> str:
        return self._scene.render(
            title=title,
            scene_name=scene_name,
            content=Markup(content_html),
            language=language,
            stylesheet=stylesheet,
            debug_toggles=debug_toggles,
        )
