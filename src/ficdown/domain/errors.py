"""Typed failures raised by build stages."""

from __future__ import annotations


class FicdownError(Exception):
    """Base class for every failure the build knows how to classify."""


class UsageError(FicdownError):
    """Invocation arguments are missing or malformed."""

    def __init__(self, message: str = "", *, show_help: bool = False) -> None:
        super().__init__(message)
        self.show_help = show_help


class UnknownOption(UsageError):
    """An argument key outside the supported option set."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown option: {key}")
        self.key = key


class MissingRequiredArgument(UsageError):
    """A required option (or an option's value) was not supplied."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(message or f"Missing required argument: {name}")
        self.name = name


class PreconditionError(FicdownError):
    """Filesystem state makes the requested render unsafe or impossible."""


class StoryParseError(FicdownError):
    """Source text cannot be turned into a story model at all."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"L{line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class RenderError(FicdownError):
    """A renderer could not produce its output."""
