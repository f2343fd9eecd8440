"""Domain models, errors, and ports for story building."""

from ficdown.domain.errors import (
    FicdownError,
    MissingRequiredArgument,
    PreconditionError,
    RenderError,
    StoryParseError,
    UnknownOption,
    UsageError,
)
from ficdown.domain.models import (
    Action,
    Anchor,
    OrphanFinding,
    ParseResult,
    RenderJob,
    Scene,
    StoryModel,
    StoryWarning,
    TemplateSet,
)
from ficdown.domain.ports import DiagnosticSink, StoryParser, StoryRenderer

__all__ = [
    "Action",
    "Anchor",
    "DiagnosticSink",
    "FicdownError",
    "MissingRequiredArgument",
    "OrphanFinding",
    "ParseResult",
    "PreconditionError",
    "RenderError",
    "RenderJob",
    "Scene",
    "StoryModel",
    "StoryParseError",
    "StoryParser",
    "StoryRenderer",
    "StoryWarning",
    "TemplateSet",
    "UnknownOption",
    "UsageError",
]
