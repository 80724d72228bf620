"""
Content Errors.

Every failure raised while parsing, validating or assembling course content.
All of them are local to one file or module and none are retryable: the
author has to fix the content.
"""

from __future__ import annotations

from pathlib import Path


class ContentError(Exception):
    """Base class for course content failures."""

    kind = "ContentError"

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        order: int | None = None,
    ):
        self.message = message
        self.path = Path(path) if path is not None else None
        self.order = order
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = []
        if self.path is not None:
            parts.append(str(self.path))
        if self.order is not None:
            parts.append(f"order {self.order}")
        location = ", ".join(parts)
        if location:
            return f"{self.kind} ({location}): {self.message}"
        return f"{self.kind}: {self.message}"


# =============================================================================
# Parser errors
# =============================================================================


class MalformedFrontMatter(ContentError):
    """Front-matter block opened but not closed, or not a valid mapping."""

    kind = "MalformedFrontMatter"


class EmptyBody(ContentError):
    """No content left after the front-matter header."""

    kind = "EmptyBody"


class UnreadableFile(ContentError):
    kind = "UnreadableFile"


# =============================================================================
# Lesson set errors
# =============================================================================


class MissingTitle(ContentError):
    kind = "MissingTitle"


class MissingOrder(ContentError):
    kind = "MissingOrder"


class InvalidOrder(ContentError):
    kind = "InvalidOrder"


class DuplicateOrder(ContentError):
    """Two lessons in one module declare the same order."""

    kind = "DuplicateOrder"

    def __init__(self, message: str, first: Path | str | None, second: Path | str | None, order: int):
        self.first = Path(first) if first is not None else None
        self.second = Path(second) if second is not None else None
        super().__init__(message, path=second, order=order)


class InvalidDuration(ContentError):
    kind = "InvalidDuration"


class UnknownField(ContentError):
    """Unrecognised front-matter key (strict mode only)."""

    kind = "UnknownField"


# =============================================================================
# Tree errors
# =============================================================================


class EmptyModule(ContentError):
    kind = "EmptyModule"


class EmptyCourse(ContentError):
    kind = "EmptyCourse"


class DanglingReference(ContentError):
    """A manifest lists a module or lesson that does not exist on disk."""

    kind = "DanglingReference"


class ManifestError(ContentError):
    """course.json / module.json could not be read."""

    kind = "ManifestError"


# =============================================================================
# Aggregates
# =============================================================================


class AggregateContentError(ContentError):
    """Several content errors reported together."""

    kind = "AggregateContentError"

    def __init__(self, errors: list[ContentError], path: Path | str | None = None):
        self.errors = list(errors)
        summary = f"{len(self.errors)} error(s)"
        super().__init__(summary, path=path)

    def __str__(self) -> str:
        lines = [super().__str__()]
        lines.extend(f"  - {error}" for error in self.errors)
        return "\n".join(lines)


class ModuleValidationError(AggregateContentError):
    """All violations found in one module."""

    kind = "ModuleValidationError"


class CourseValidationError(AggregateContentError):
    """All failures found while loading or assembling courses."""

    kind = "CourseValidationError"


def flatten_errors(errors: list[ContentError]) -> list[ContentError]:
    """Expand nested aggregates into a flat list of leaf errors."""
    flat: list[ContentError] = []
    for error in errors:
        if isinstance(error, AggregateContentError):
            flat.extend(flatten_errors(error.errors))
        else:
            flat.append(error)
    return flat
