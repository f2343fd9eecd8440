from __future__ import annotations

import zipfile
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from ficdown.adapters.epub_renderer import EpubRenderer
from ficdown.adapters.html_renderer import HtmlRenderer, copy_images
from ficdown.adapters.templating import PageTemplates, default_templates
from ficdown.core.story_parser import FicdownParser
from ficdown.domain.models import RenderJob, StoryModel, TemplateSet


@pytest.fixture
def story(sample_story_text: str) -> StoryModel:
    return FicdownParser().parse_story(sample_story_text).story


def test_html_pages_link_only_to_pages_that_exist(tmp_path: Path, story: StoryModel) -> None:
    output = tmp_path / "site"
    HtmlRenderer("en").render(RenderJob(story=story, output=output))

    index = BeautifulSoup((output / "index.html").read_text(encoding="utf-8"), "html.parser")
    assert index.title is not None
    assert index.title.get_text() == "The Cellar Door"
    assert index.html is not None
    assert index.html.get("lang") == "en"
    assert (output / "styles.css").is_file()

    pages = sorted(output.glob("scene-*.html"))
    assert len(pages) == 7
    for page in [output / "index.html", *pages]:
        soup = BeautifulSoup(page.read_text(encoding="utf-8"), "html.parser")
        for link in soup.find_all("a"):
            assert (output / str(link["href"])).is_file()


def test_html_debug_mode_lists_active_toggles(tmp_path: Path, story: StoryModel) -> None:
    output = tmp_path / "site"
    HtmlRenderer().render(RenderJob(story=story, output=output, debug=True))

    footers = []
    for page in output.glob("scene-*.html"):
        soup = BeautifulSoup(page.read_text(encoding="utf-8"), "html.parser")
        footer = soup.find("footer", class_="debug")
        assert footer is not None
        footers.append(footer.get_text())
    assert "Toggles: none" in footers
    assert "Toggles: brass-key" in footers


def test_html_without_debug_has_no_toggle_footer(tmp_path: Path, story: StoryModel) -> None:
    output = tmp_path / "site"
    HtmlRenderer().render(RenderJob(story=story, output=output))
    for page in output.glob("scene-*.html"):
        assert "debug" not in page.read_text(encoding="utf-8")


def test_html_template_overrides_replace_defaults(tmp_path: Path, story: StoryModel) -> None:
    output = tmp_path / "site"
    templates = TemplateSet(
        index="<h1>{{ title }}</h1><a href='{{ first_page }}'>go</a>",
        scene="<h2>{{ scene_name }}</h2>{{ content }}",
        styles="body { color: red; }",
    )
    HtmlRenderer().render(RenderJob(story=story, output=output, templates=templates))

    assert (output / "index.html").read_text(encoding="utf-8").startswith(
        "<h1>The Cellar Door</h1>"
    )
    assert (output / "styles.css").read_text(encoding="utf-8") == "body { color: red; }"
    first_page = next(output.glob("scene-*.html")).read_text(encoding="utf-8")
    assert first_page.startswith("<h2>")


def test_html_copies_images(tmp_path: Path, story: StoryModel) -> None:
    images = tmp_path / "pics"
    (images / "maps").mkdir(parents=True)
    (images / "cover.png").write_bytes(b"png")
    (images / "maps" / "house.jpg").write_bytes(b"jpg")
    output = tmp_path / "site"

    HtmlRenderer().render(RenderJob(story=story, output=output, image_dir=images))

    assert (output / "images" / "cover.png").read_bytes() == b"png"
    assert (output / "images" / "maps" / "house.jpg").read_bytes() == b"jpg"


def test_copy_images_skips_directories(tmp_path: Path) -> None:
    source = tmp_path / "src"
    (source / "empty").mkdir(parents=True)
    (source / "a.gif").write_bytes(b"gif")
    copied = copy_images(source, tmp_path / "dest")
    assert copied == [tmp_path / "dest" / "a.gif"]


def test_scene_template_escapes_story_text_but_keeps_body_html() -> None:
    templates = PageTemplates()
    html = templates.render_scene(
        title="Fish & Chips",
        scene_name="<Dock>",
        content_html="<p>ok</p>",
        language="en",
        stylesheet="styles.css",
    )
    assert "Fish &amp; Chips" in html
    assert "&lt;Dock&gt;" in html
    assert "<p>ok</p>" in html


def test_default_templates_are_complete() -> None:
    defaults = default_templates()
    assert defaults.index and "{{ first_page }}" in defaults.index
    assert defaults.scene and "{{ content }}" in defaults.scene
    assert defaults.styles


def test_epub_archive_layout(tmp_path: Path, story: StoryModel) -> None:
    output = tmp_path / "book.epub"
    EpubRenderer("Ada Writer", "urn:isbn:123", "fr").render(RenderJob(story=story, output=output))

    with zipfile.ZipFile(output) as archive:
        infos = archive.infolist()
        assert infos[0].filename == "mimetype"
        assert infos[0].compress_type == zipfile.ZIP_STORED
        assert archive.read("mimetype") == b"application/epub+zip"

        names = archive.namelist()
        assert "META-INF/container.xml" in names
        assert "OEBPS/nav.xhtml" in names
        assert "OEBPS/index.xhtml" in names
        assert len([name for name in names if name.startswith("OEBPS/scene-")]) == 7

        opf = archive.read("OEBPS/content.opf").decode("utf-8")
        assert "<dc:creator>Ada Writer</dc:creator>" in opf
        assert "<dc:identifier id=\"bookid\">urn:isbn:123</dc:identifier>" in opf
        assert "<dc:language>fr</dc:language>" in opf
        assert opf.count("<itemref ") == 8

        title_page = archive.read("OEBPS/index.xhtml").decode("utf-8")
        assert 'lang="fr"' in title_page


def test_epub_generates_book_id_and_packs_images(tmp_path: Path, story: StoryModel) -> None:
    images = tmp_path / "pics"
    images.mkdir()
    (images / "cover.png").write_bytes(b"png")
    output = tmp_path / "book.epub"

    renderer = EpubRenderer("Ada")
    renderer.render(RenderJob(story=story, output=output, image_dir=images))

    assert renderer.book_id.startswith("urn:uuid:")
    with zipfile.ZipFile(output) as archive:
        assert archive.read("OEBPS/images/cover.png") == b"png"
        opf = archive.read("OEBPS/content.opf").decode("utf-8")
        assert 'href="images/cover.png" media-type="image/png"' in opf
