"""Exceptions raised while inspecting checkpoint archives."""

from __future__ import annotations

from pathlib import Path


class InspectError(Exception):
    """Base class for inspection failures.

    Attributes:
        message: Human-readable description
        path: The file or archive involved, if any
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def to_dict(self) -> dict:
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "path": str(self.path) if self.path is not None else None,
        }


class DecodeError(InspectError):
    """An archive member is missing or does not match its expected schema.

    Raised per task; callers treat it as a warning and move on.
    """


class MaterializationError(InspectError):
    """A checkpoint target could not be turned into a task directory."""


class UnsupportedFormat(InspectError):
    """The requested output format has no renderer."""

    def __init__(self, fmt: str) -> None:
        super().__init__(f"invalid output format: {fmt}")
        self.fmt = fmt


class RenderError(InspectError):
    """A renderer failed to present the materialized tasks."""
