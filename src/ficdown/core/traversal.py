"""Expand a story into the finite set of player states a reader can reach."""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from hashlib import sha256
from html import escape

from ficdown.core.markup import FragmentStash, markdown_to_html, render_inline
from ficdown.domain.errors import RenderError
from ficdown.domain.models import Action, Anchor, Scene, StoryModel

DEFAULT_MAX_STATES = 10_000
_ANCHOR_PATTERN = re.compile(r"(?<!!)\[[^\]]*\]\([^)]*\)")


@dataclass(frozen=True)
class PlayerState:
    """Current scene, toggles set so far, and toggles set by the last link."""

    scene: str
    toggles: frozenset[str] = frozenset()
    fresh: tuple[str, ...] = ()

    @property
    def page_id(self) -> str:
        payload = "|".join((self.scene, ",".join(sorted(self.toggles)), ",".join(self.fresh)))
        return f"scene-{sha256(payload.encode('utf-8')).hexdigest()[:12]}"

    def follow(self, anchor: Anchor) -> PlayerState:
        new_toggles = tuple(toggle for toggle in anchor.toggles if toggle not in self.toggles)
        return PlayerState(
            scene=anchor.target or self.scene,
            toggles=self.toggles | frozenset(new_toggles),
            fresh=new_toggles,
        )


@dataclass(frozen=True)
class StoryPage:
    """One rendered state: the resolved scene, fresh actions, and body HTML."""

    state: PlayerState
    scene: Scene
    actions: tuple[Action, ...]
    body_html: str


class StateTraversal:
    """Breadth-first walk over player states starting at the first scene."""

    def __init__(self, story: StoryModel, *, max_states: int = DEFAULT_MAX_STATES) -> None:
        self.story = story
        self.max_states = max_states

    def start_state(self) -> PlayerState:
        return PlayerState(scene=self.story.first_scene)

    def resolve_scene(self, state: PlayerState) -> Scene:
        """Pick the satisfied variant with the most conditions, earliest first."""
        variants = self.story.scene_variants(state.scene)
        candidates = [scene for scene in variants if scene.matches(state.toggles)]
        if not candidates:
            raise RenderError(
                f'No variant of scene "{state.scene}" matches toggles '
                f"{sorted(state.toggles) or '[]'}."
            )
        return max(candidates, key=lambda scene: (len(scene.conditions), -scene.line_number))

    def fresh_actions(self, state: PlayerState) -> tuple[Action, ...]:
        return tuple(
            self.story.actions[toggle] for toggle in state.fresh if toggle in self.story.actions
        )

    def successors(self, state: PlayerState) -> list[PlayerState]:
        anchors = [
            *(anchor for action in self.fresh_actions(state) for anchor in action.anchors),
            *self.resolve_scene(state).anchors,
        ]
        return [
            state.follow(anchor)
            for anchor in anchors
            if anchor.navigates and _conditions_met(anchor, state.toggles)
        ]

    def walk(self) -> list[PlayerState]:
        start = self.start_state()
        seen = {start.page_id}
        order = [start]
        pending = deque([start])
        while pending:
            state = pending.popleft()
            for successor in self.successors(state):
                if successor.page_id in seen:
                    continue
                if len(order) >= self.max_states:
                    raise RenderError(
                        f"Story expands to more than {self.max_states} states; "
                        "raise FICDOWN_MAX_STATES to render it."
                    )
                seen.add(successor.page_id)
                order.append(successor)
                pending.append(successor)
        return order

    def pages(self, href_for: Callable[[PlayerState], str]) -> list[StoryPage]:
        """Render every reachable state with links produced by `href_for`."""
        pages: list[StoryPage] = []
        for state in self.walk():
            scene = self.resolve_scene(state)
            actions = self.fresh_actions(state)
            sections = [
                self._block_html(action.description, action.anchors, state, href_for)
                for action in actions
            ]
            sections.append(self._block_html(scene.description, scene.anchors, state, href_for))
            pages.append(
                StoryPage(
                    state=state,
                    scene=scene,
                    actions=actions,
                    body_html="\n".join(section for section in sections if section),
                )
            )
        return pages

    def _block_html(
        self,
        markdown: str,
        anchors: tuple[Anchor, ...],
        state: PlayerState,
        href_for: Callable[[PlayerState], str],
    ) -> str:
        by_original: dict[str, list[Anchor]] = {}
        for anchor in anchors:
            by_original.setdefault(anchor.original, []).append(anchor)
        stash = FragmentStash()

        def replace(match: re.Match[str]) -> str:
            candidates = by_original.get(match.group(0))
            if not candidates:
                return match.group(0)
            return stash.stash(_anchor_html(candidates[0], state, href_for))

        def substitute(line: str) -> str:
            return _ANCHOR_PATTERN.sub(replace, line)

        return stash.restore(markdown_to_html(markdown, substitute=substitute))


def _conditions_met(anchor: Anchor, toggles: frozenset[str]) -> bool:
    return all((name in toggles) == wanted for name, wanted in anchor.conditions.items())


def _anchor_html(
    anchor: Anchor,
    state: PlayerState,
    href_for: Callable[[PlayerState], str],
) -> str:
    if not _conditions_met(anchor, state.toggles):
        return render_inline(anchor.alt_text) if anchor.alt_text else ""
    text = render_inline(anchor.text)
    if not anchor.navigates:
        return text
    href = escape(href_for(state.follow(anchor)))
    return f'<a href="{href}">{text}</a>'
