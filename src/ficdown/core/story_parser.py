"""Ficdown markdown parser with structural linting and orphan detection."""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field

from ficdown.domain.errors import StoryParseError
from ficdown.domain.models import (
    Action,
    Anchor,
    OrphanFinding,
    ParseResult,
    Scene,
    StoryModel,
    StoryWarning,
)

_HEADING_PATTERN = re.compile(r"^(#{1,3})[ \t]+(.*?)[ \t]*$")
_ANCHOR_PATTERN = re.compile(
    r"(?<!!)\[(?P<text>[^\]|]*)(?:\|(?P<alt>[^\]]*))?\]\((?P<href>[^)]*)\)"
)
_HREF_PATTERN = re.compile(
    r"^(?:/(?P<target>[A-Za-z0-9-]+))?(?:\?(?P<conditions>[^#]+))?(?:#(?P<toggles>.+))?$"
)
_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]*$")


def normalize_key(name: str) -> str:
    """Lowercase a display name and collapse non-alphanumeric runs to `-`."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


@dataclass
class _RawBlock:
    level: int
    heading: str
    line_number: int
    lines: list[tuple[int, str]] = field(default_factory=list)

    @property
    def body(self) -> str:
        return "\n".join(text for _, text in self.lines).strip("\n")


@dataclass(frozen=True)
class _Href:
    target: str | None
    conditions: dict[str, bool]
    toggles: tuple[str, ...]


class FicdownParser:
    """Parses Ficdown source into a `StoryModel`.

    The parser is single-use per call: warnings accumulate on the instance
    while `parse_story` runs and are returned in the `ParseResult`.
    """

    def __init__(self) -> None:
        self._warnings: list[StoryWarning] = []

    def parse_story(self, text: str) -> ParseResult:
        self._warnings = []
        blocks = _split_blocks(text.lstrip("\ufeff"))

        story_blocks = [block for block in blocks if block.level == 1]
        if not story_blocks:
            raise StoryParseError("No story block found.")
        if len(story_blocks) > 1:
            raise StoryParseError("More than one story block found.", story_blocks[1].line_number)
        story_block = story_blocks[0]

        heading_anchor = _full_anchor(story_block.heading)
        if heading_anchor is None:
            raise StoryParseError(
                "Story block heading must be a link to the first scene.",
                story_block.line_number,
            )
        title, _, href_text = heading_anchor
        href = _parse_href(href_text)
        if href is None or href.target is None:
            raise StoryParseError(
                "Story block heading must link to a scene.", story_block.line_number
            )

        story = StoryModel(
            name=title.strip(),
            description=story_block.body,
            first_scene=href.target.lower(),
        )
        for block in blocks:
            if block.line_number < story_block.line_number:
                continue
            if block.level == 2:
                self._add_scene(story, block)
            elif block.level == 3:
                self._add_action(story, block)

        if story.first_scene not in story.scenes:
            raise StoryParseError(
                f'Story links to undefined first scene "{story.first_scene}".',
                story_block.line_number,
            )

        self._lint_references(story)
        story.orphans = find_orphans(story)
        return ParseResult(story=story, warnings=tuple(self._warnings))

    def _warn(self, line_number: int, column: int, message: str) -> None:
        self._warnings.append(StoryWarning(line_number, column, message))

    def _add_scene(self, story: StoryModel, block: _RawBlock) -> None:
        name = block.heading
        conditions: dict[str, bool] = {}
        heading_anchor = _full_anchor(block.heading)
        if heading_anchor is not None:
            name, _, href_text = heading_anchor
            href = _parse_href(href_text)
            if href is None:
                self._warn(block.line_number, 1, f'Invalid scene heading link "{href_text}".')
            else:
                if href.target is not None or href.toggles:
                    self._warn(
                        block.line_number, 1, "Scene headings may only carry conditions."
                    )
                conditions = href.conditions

        key = normalize_key(name)
        if not key:
            self._warn(block.line_number, 1, "Scene heading has no usable name.")
            return

        for existing in story.scene_variants(key):
            if existing.conditions == conditions:
                self._warn(
                    block.line_number,
                    1,
                    f'Scene "{name.strip()}" is already defined with the same conditions'
                    f" on line {existing.line_number}.",
                )
                return

        scene = Scene(
            key=key,
            name=name.strip(),
            description=block.body,
            line_number=block.line_number,
            conditions=conditions,
            anchors=self._anchors(block),
        )
        story.scenes.setdefault(key, []).append(scene)

    def _add_action(self, story: StoryModel, block: _RawBlock) -> None:
        name = block.heading
        heading_anchor = _full_anchor(block.heading)
        if heading_anchor is not None:
            self._warn(block.line_number, 1, "Action headings cannot be links.")
            name = heading_anchor[0]

        key = normalize_key(name)
        if not key:
            self._warn(block.line_number, 1, "Action heading has no usable name.")
            return
        existing = story.actions.get(key)
        if existing is not None:
            self._warn(
                block.line_number,
                1,
                f'Action "{name.strip()}" is already defined on line {existing.line_number}.',
            )
            return

        story.actions[key] = Action(
            key=key,
            name=name.strip(),
            description=block.body,
            line_number=block.line_number,
            anchors=self._anchors(block),
        )

    def _anchors(self, block: _RawBlock) -> tuple[Anchor, ...]:
        anchors: list[Anchor] = []
        for line_number, line in block.lines:
            for match in _ANCHOR_PATTERN.finditer(line):
                column = match.start() + 1
                href_text = match.group("href").strip()
                href = _parse_href(href_text)
                if href is None:
                    self._warn(line_number, column, f'Invalid link target "{href_text}".')
                    continue
                alt_text = match.group("alt")
                if alt_text is not None and not href.conditions:
                    self._warn(
                        line_number,
                        column,
                        "Alternate link text requires at least one condition.",
                    )
                if href.target is None and not href.conditions and not href.toggles:
                    self._warn(line_number, column, "Link has no target, conditions, or toggles.")
                anchors.append(
                    Anchor(
                        original=match.group(0),
                        text=match.group("text"),
                        alt_text=alt_text,
                        target=href.target,
                        conditions=href.conditions,
                        toggles=href.toggles,
                        line_number=line_number,
                        column=column,
                    )
                )
        return tuple(anchors)

    def _lint_references(self, story: StoryModel) -> None:
        all_anchors = _all_anchors(story)
        set_toggles = {toggle for anchor in all_anchors for toggle in anchor.toggles}

        for variants in story.scenes.values():
            if all(variant.conditions for variant in variants):
                first = variants[0]
                self._warn(
                    first.line_number,
                    1,
                    f'Scene "{first.name}" has no version without conditions.',
                )

        for scene in sorted(_all_scenes(story), key=lambda item: item.line_number):
            for name in scene.conditions:
                if name not in set_toggles:
                    self._warn(
                        scene.line_number,
                        1,
                        f'Condition "{name}" refers to a toggle that is never set.',
                    )

        for anchor in sorted(all_anchors, key=lambda item: (item.line_number, item.column)):
            if anchor.target is not None and anchor.target not in story.scenes:
                self._warn(
                    anchor.line_number,
                    anchor.column,
                    f'Link to undefined scene "{anchor.target}".',
                )
            for name in anchor.conditions:
                if name not in set_toggles:
                    self._warn(
                        anchor.line_number,
                        anchor.column,
                        f'Condition "{name}" refers to a toggle that is never set.',
                    )


def find_orphans(story: StoryModel) -> list[OrphanFinding]:
    """Report scene and action blocks unreachable from the first scene.

    Conditions are ignored, so a block counts as reachable whenever any link
    path could lead to it.
    """
    reached_scenes: set[str] = set()
    reached_actions: set[str] = set()
    pending: deque[tuple[Anchor, ...]] = deque()

    def reach_scene(key: str) -> None:
        if key in reached_scenes or key not in story.scenes:
            return
        reached_scenes.add(key)
        for scene in story.scenes[key]:
            pending.append(scene.anchors)

    reach_scene(story.first_scene)
    while pending:
        for anchor in pending.popleft():
            if anchor.target is not None:
                reach_scene(anchor.target)
            for toggle in anchor.toggles:
                action = story.actions.get(toggle)
                if action is not None and toggle not in reached_actions:
                    reached_actions.add(toggle)
                    pending.append(action.anchors)

    orphans = [
        OrphanFinding(name=scene.name, type="scene", line_number=scene.line_number)
        for scene in _all_scenes(story)
        if scene.key not in reached_scenes
    ]
    orphans.extend(
        OrphanFinding(name=action.name, type="action", line_number=action.line_number)
        for action in story.actions.values()
        if action.key not in reached_actions
    )
    orphans.sort(key=lambda orphan: orphan.line_number)
    return orphans


def _split_blocks(text: str) -> list[_RawBlock]:
    blocks: list[_RawBlock] = []
    current: _RawBlock | None = None
    for index, line in enumerate(text.splitlines(), start=1):
        heading = _HEADING_PATTERN.match(line)
        if heading:
            current = _RawBlock(
                level=len(heading.group(1)), heading=heading.group(2), line_number=index
            )
            blocks.append(current)
            continue
        if current is not None:
            current.lines.append((index, line))
    return blocks


def _full_anchor(text: str) -> tuple[str, str | None, str] | None:
    match = _ANCHOR_PATTERN.fullmatch(text.strip())
    if match is None:
        return None
    return (match.group("text"), match.group("alt"), match.group("href").strip())


def _parse_href(href: str) -> _Href | None:
    match = _HREF_PATTERN.match(href)
    if match is None:
        return None

    conditions: dict[str, bool] = {}
    raw_conditions = match.group("conditions")
    if raw_conditions:
        for item in raw_conditions.split("&"):
            negated = item.startswith("!")
            name = item[1:] if negated else item
            if not _NAME_PATTERN.match(name):
                return None
            conditions[name.lower()] = not negated

    toggles: list[str] = []
    raw_toggles = match.group("toggles")
    if raw_toggles:
        for item in raw_toggles.split("+"):
            if not _NAME_PATTERN.match(item):
                return None
            toggles.append(item.lower())

    target = match.group("target")
    return _Href(
        target=target.lower() if target else None,
        conditions=conditions,
        toggles=tuple(toggles),
    )


def _all_scenes(story: StoryModel) -> list[Scene]:
    return [scene for variants in story.scenes.values() for scene in variants]


def _all_anchors(story: StoryModel) -> list[Anchor]:
    anchors = [anchor for scene in _all_scenes(story) for anchor in scene.anchors]
    anchors.extend(anchor for action in story.actions.values() for anchor in action.anchors)
    return anchors
