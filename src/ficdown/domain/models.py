"""Core story domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class StoryWarning:
    """A structural finding reported by the parser."""

    line_number: int
    column: int
    message: str

    def __str__(self) -> str:
        return f"Warning L{self.line_number},{self.column}: {self.message}"


@dataclass(frozen=True)
class OrphanFinding:
    """A named block that no path from the first scene reaches."""

    name: str
    type: str
    line_number: int

    def __str__(self) -> str:
        return f'Warning L{self.line_number},1: "{self.name}": Unreachable {self.type}'


@dataclass(frozen=True)
class Anchor:
    """A markdown link carrying navigation, conditions, and toggles."""

    original: str
    text: str
    line_number: int
    column: int
    alt_text: str | None = None
    target: str | None = None
    conditions: dict[str, bool] = field(default_factory=dict)
    toggles: tuple[str, ...] = ()

    @property
    def navigates(self) -> bool:
        return self.target is not None or bool(self.toggles)


@dataclass(frozen=True)
class Scene:
    """One `##` block; several blocks may share a key under different conditions."""

    key: str
    name: str
    description: str
    line_number: int
    conditions: dict[str, bool] = field(default_factory=dict)
    anchors: tuple[Anchor, ...] = ()

    def matches(self, toggles: frozenset[str]) -> bool:
        return all((name in toggles) == wanted for name, wanted in self.conditions.items())


@dataclass(frozen=True)
class Action:
    """One `###` block shown when its toggle is first set."""

    key: str
    name: str
    description: str
    line_number: int
    anchors: tuple[Anchor, ...] = ()


@dataclass
class StoryModel:
    """Parsed story with scene variants, actions, and reachability findings."""

    name: str
    description: str
    first_scene: str
    scenes: dict[str, list[Scene]] = field(default_factory=dict)
    actions: dict[str, Action] = field(default_factory=dict)
    orphans: list[OrphanFinding] = field(default_factory=list)

    def scene_variants(self, key: str) -> list[Scene]:
        return self.scenes.get(key, [])


@dataclass(frozen=True)
class ParseResult:
    """Parser output: the story plus every warning in emission order."""

    story: StoryModel
    warnings: tuple[StoryWarning, ...] = ()


@dataclass(frozen=True)
class TemplateSet:
    """Template overrides; `None` fields fall back to packaged defaults."""

    index: str | None = None
    scene: str | None = None
    styles: str | None = None


@dataclass(frozen=True)
class RenderJob:
    """Everything a renderer needs for one invocation."""

    story: StoryModel
    output: Path
    templates: TemplateSet = field(default_factory=TemplateSet)
    image_dir: Path | None = None
    debug: bool = False
