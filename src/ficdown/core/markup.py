"""Narrow markdown-to-HTML conversion for scene and story text."""

from __future__ import annotations

import re
from collections.abc import Callable
from html import escape

_PLACEHOLDER = "\x00{index}\x00"
_PLACEHOLDER_PATTERN = re.compile(r"\x00(\d+)\x00")
_IMAGE_PATTERN = re.compile(r"!\[(?P<alt>[^\]]*)\]\((?P<src>[^)\s]+)\)")
_STRONG_PATTERN = re.compile(r"\*\*(.+?)\*\*")
_EMPHASIS_PATTERN = re.compile(r"(?<![*\w])\*(?!\s)(.+?)(?<!\s)\*(?![*\w])")


def render_inline(text: str) -> str:
    """Escape one line of text and apply images, strong, and emphasis."""
    images: list[str] = []

    def stash_image(match: re.Match[str]) -> str:
        images.append(
            f'<img src="{escape(match.group("src"))}" alt="{escape(match.group("alt"))}" />'
        )
        return _PLACEHOLDER.format(index=len(images) - 1)

    html = escape(_IMAGE_PATTERN.sub(stash_image, text), quote=False)
    html = _STRONG_PATTERN.sub(r"<strong>\1</strong>", html)
    html = _EMPHASIS_PATTERN.sub(r"<em>\1</em>", html)
    return _PLACEHOLDER_PATTERN.sub(lambda match: images[int(match.group(1))], html)


def markdown_to_html(
    markdown: str,
    *,
    substitute: Callable[[str], str] | None = None,
) -> str:
    """Convert a narrow markdown subset into escaped HTML blocks.

    `substitute` runs on every raw line before escaping; it may stash
    pre-rendered fragments in a `FragmentStash` so they pass through untouched.
    """
    lines = markdown.splitlines()
    html_lines: list[str] = []
    paragraph_buffer: list[str] = []

    def inline(raw: str) -> str:
        return render_inline(substitute(raw) if substitute else raw)

    def flush_paragraph() -> None:
        """Emit the current paragraph buffer as a single `<p>` block."""
        if paragraph_buffer:
            parts = [inline(part.strip()) for part in paragraph_buffer if part.strip()]
            text = " ".join(part for part in parts if part)
            if text:
                html_lines.append(f"<p>{text}</p>")
            paragraph_buffer.clear()

    for line in lines:
        stripped = line.strip()
        if not stripped:
            flush_paragraph()
            continue
        if stripped.startswith("#### "):
            flush_paragraph()
            html_lines.append(f"<h4>{inline(stripped[5:])}</h4>")
            continue
        if stripped in {"---", "***", "- - -"}:
            flush_paragraph()
            html_lines.append("<hr />")
            continue
        if stripped.startswith("- ") or stripped.startswith("* "):
            flush_paragraph()
            html_lines.append(f"<li>{inline(stripped[2:])}</li>")
            continue
        paragraph_buffer.append(line)

    flush_paragraph()

    normalized: list[str] = []
    in_list = False
    for line in html_lines:
        # Turn a stream of `<li>` tags into a proper `<ul>` section.
        if line.startswith("<li>"):
            if not in_list:
                normalized.append("<ul>")
                in_list = True
            normalized.append(line)
        else:
            if in_list:
                normalized.append("</ul>")
                in_list = False
            normalized.append(line)
    if in_list:
        normalized.append("</ul>")

    return "\n".join(normalized)


class FragmentStash:
    """Holds pre-rendered HTML fragments behind escape-proof placeholders."""

    def __init__(self) -> None:
        self._fragments: list[str] = []

    def stash(self, fragment: str) -> str:
        self._fragments.append(fragment)
        return f"\x01{len(self._fragments) - 1}\x01"

    def restore(self, html: str) -> str:
        return re.sub(r"\x01(\d+)\x01", lambda match: self._fragments[int(match.group(1))], html)
