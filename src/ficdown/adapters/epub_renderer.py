"""EPUB 3 renderer packaging every player state as one spine item."""

from __future__ import annotations

import logging
import mimetypes
import uuid
import zipfile
from datetime import UTC, datetime
from html import escape
from pathlib import Path

from ficdown.adapters.templating import STYLES_TEMPLATE, PageTemplates
from ficdown.core.markup import markdown_to_html
from ficdown.core.traversal import DEFAULT_MAX_STATES, PlayerState, StateTraversal
from ficdown.domain.models import RenderJob

logger = logging.getLogger(__name__)

CONTENT_DIR = "OEBPS"
TITLE_PAGE = "index.xhtml"
NAV_PAGE = "nav.xhtml"

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""


class EpubRenderer:
    """Writes a single `.epub` archive for a story."""

    def __init__(
        self,
        author: str,
        book_id: str | None = None,
        language: str = "en",
        *,
        max_states: int = DEFAULT_MAX_STATES,
    ) -> None:
        self.author = author
        self.book_id = book_id or f"urn:uuid:{uuid.uuid4()}"
        self.language = language
        self.max_states = max_states

    def render(self, job: RenderJob) -> None:
        templates = PageTemplates(job.templates)
        story = job.story
        traversal = StateTraversal(story, max_states=self.max_states)

        def href_for(state: PlayerState) -> str:
            return f"{state.page_id}.xhtml"

        pages = traversal.pages(href_for)
        logger.debug("Packaging %d player states for %s", len(pages), story.name)

        documents: list[tuple[str, str]] = [
            (
                TITLE_PAGE,
                templates.render_index(
                    title=story.name,
                    description_html=markdown_to_html(story.description),
                    first_page=href_for(traversal.start_state()),
                    language=self.language,
                    stylesheet=STYLES_TEMPLATE,
                ),
            )
        ]
        for page in pages:
            documents.append(
                (
                    href_for(page.state),
                    templates.render_scene(
                        title=story.name,
                        scene_name=page.scene.name,
                        content_html=page.body_html,
                        language=self.language,
                        stylesheet=STYLES_TEMPLATE,
                        debug_toggles=sorted(page.state.toggles) if job.debug else None,
                    ),
                )
            )

        images = _image_entries(job.image_dir) if job.image_dir is not None else []

        job.output.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(job.output, "w") as archive:
            archive.writestr(
                zipfile.ZipInfo("mimetype"),
                "application/epub+zip",
                compress_type=zipfile.ZIP_STORED,
            )
            archive.writestr("META-INF/container.xml", CONTAINER_XML, zipfile.ZIP_DEFLATED)
            archive.writestr(
                f"{CONTENT_DIR}/content.opf",
                self._package_document(story.name, [name for name, _ in documents], images),
                zipfile.ZIP_DEFLATED,
            )
            archive.writestr(
                f"{CONTENT_DIR}/{NAV_PAGE}", self._nav_document(story.name), zipfile.ZIP_DEFLATED
            )
            archive.writestr(
                f"{CONTENT_DIR}/{STYLES_TEMPLATE}", templates.styles, zipfile.ZIP_DEFLATED
            )
            for name, content in documents:
                archive.writestr(f"{CONTENT_DIR}/{name}", content, zipfile.ZIP_DEFLATED)
            for archive_name, source in images:
                archive.write(source, f"{CONTENT_DIR}/{archive_name}", zipfile.ZIP_DEFLATED)

    def _package_document(
        self,
        title: str,
        documents: list[str],
        images: list[tuple[str, Path]],
    ) -> str:
        modified = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        manifest = [
            f'    <item id="nav" href="{NAV_PAGE}" media-type="application/xhtml+xml" '
            'properties="nav"/>',
            f'    <item id="css" href="{STYLES_TEMPLATE}" media-type="text/css"/>',
        ]
        spine: list[str] = []
        for index, name in enumerate(documents):
            item_id = f"doc{index}"
            manifest.append(
                f'    <item id="{item_id}" href="{escape(name)}" '
                'media-type="application/xhtml+xml"/>'
            )
            spine.append(f'    <itemref idref="{item_id}"/>')
        for index, (name, source) in enumerate(images):
            media_type = mimetypes.guess_type(source.name)[0] or "application/octet-stream"
            manifest.append(
                f'    <item id="img{index}" href="{escape(name)}" media-type="{media_type}"/>'
            )

        manifest_xml = "\n".join(manifest)
        spine_xml = "\n".join(spine)
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="bookid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:identifier id="bookid">{escape(self.book_id)}</dc:identifier>
    <dc:title>{escape(title)}</dc:title>
    <dc:creator>{escape(self.author)}</dc:creator>
    <dc:language>{escape(self.language)}</dc:language>
    <meta property="dcterms:modified">{modified}</meta>
  </metadata>
  <manifest>
{manifest_xml}
  </manifest>
  <spine>
{spine_xml}
  </spine>
</package>
"""

    def _nav_document(self, title: str) -> str:
        language = escape(self.language)
        return f"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops"
      lang="{language}" xml:lang="{language}">
<head>
  <title>{escape(title)}</title>
</head>
<body>
  <nav epub:type="toc" id="toc">
    <ol>
      <li><a href="{TITLE_PAGE}">{escape(title)}</a></li>
    </ol>
  </nav>
</body>
</html>
"""


def _image_entries(image_dir: Path) -> list[tuple[str, Path]]:
    return [
        (f"images/{path.relative_to(image_dir).as_posix()}", path)
        for path in sorted(image_dir.rglob("*"))
        if path.is_file()
    ]
