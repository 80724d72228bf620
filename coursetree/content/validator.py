"""
Lesson Set Validator.

Checks the lessons of one module against the ordering and required-field
invariants, in this order:

1. every lesson has a non-empty title      (MissingTitle)
2. every lesson has an order               (MissingOrder)
3. every order is a positive integer       (InvalidOrder)
4. no two lessons share an order           (DuplicateOrder)
5. estimatedMinutes is a positive integer  (InvalidDuration)
6. strict mode: no unknown front-matter    (UnknownField)

Each check runs over every lesson before the next check starts.

Two strategies:
- fail-fast: `validate(lessons)` raises the first violation
- collect-all: `collect_violations(lessons)` returns all of them;
  `validate(lessons, collect_all=True)` raises one ModuleValidationError
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Any

from loguru import logger

from .errors import (
    ContentError,
    DuplicateOrder,
    InvalidDuration,
    InvalidOrder,
    MissingOrder,
    MissingTitle,
    ModuleValidationError,
    UnknownField,
)
from .models import LessonDocument


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class LessonSetValidator:
    """Validates the lessons belonging to one module."""

    def __init__(self, strict: bool = False, allowed_extra_keys: Iterable[str] = ()):
        """
        Args:
            strict: Report front-matter keys other than title, order and
                    estimatedMinutes
            allowed_extra_keys: Extra keys tolerated in strict mode
        """
        self.strict = strict
        self.allowed_extra_keys = frozenset(allowed_extra_keys)

    def iter_violations(self, lessons: Sequence[LessonDocument]) -> Iterator[ContentError]:
        """Yield violations lazily, in check order."""
        for lesson in lessons:
            if not (lesson.title or "").strip():
                yield MissingTitle(
                    f"{lesson.label} has no title (no front-matter title and no '# ' heading)",
                    path=lesson.source_path,
                    order=lesson.order,
                )

        for lesson in lessons:
            if lesson.order is None:
                yield MissingOrder(f"{lesson.label} does not declare an order", path=lesson.source_path)

        for lesson in lessons:
            if lesson.order is not None and not _is_positive_int(lesson.order):
                yield InvalidOrder(
                    f"order must be a positive integer, got {lesson.order!r}",
                    path=lesson.source_path,
                    order=lesson.order,
                )

        seen: dict[int, LessonDocument] = {}
        for lesson in lessons:
            if lesson.order is None:
                continue
            first = seen.get(lesson.order)
            if first is None:
                seen[lesson.order] = lesson
                continue
            yield DuplicateOrder(
                f"order {lesson.order} is declared by both {first.label} and {lesson.label}",
                first=first.source_path,
                second=lesson.source_path,
                order=lesson.order,
            )

        for lesson in lessons:
            value = lesson.estimated_minutes
            if value is not None and not _is_positive_int(value):
                yield InvalidDuration(
                    f"estimatedMinutes must be a positive integer, got {value!r}",
                    path=lesson.source_path,
                    order=lesson.order,
                )

        if self.strict:
            for lesson in lessons:
                for key in sorted(lesson.extra):
                    if key not in self.allowed_extra_keys:
                        yield UnknownField(
                            f"unknown front-matter key {key!r}",
                            path=lesson.source_path,
                            order=lesson.order,
                        )

    def collect_violations(self, lessons: Sequence[LessonDocument]) -> list[ContentError]:
        """Return every violation instead of stopping at the first."""
        return list(self.iter_violations(lessons))

    def validate(
        self,
        lessons: Sequence[LessonDocument],
        collect_all: bool = False,
        module_path: Path | str | None = None,
    ) -> tuple[LessonDocument, ...]:
        """
        Validate a module's lessons.

        Args:
            lessons: Parsed lessons of one module
            collect_all: Raise one ModuleValidationError with every violation
                         instead of the first violation
            module_path: Module directory, reported on the aggregate error

        Returns:
            Lessons sorted by order

        Raises:
            ContentError: first violation (fail-fast)
            ModuleValidationError: all violations (collect-all)
        """
        if collect_all:
            violations = self.collect_violations(lessons)
            if violations:
                logger.debug(f"{len(violations)} violation(s) in {module_path or 'module'}")
                raise ModuleValidationError(violations, path=module_path)
        else:
            first = next(self.iter_violations(lessons), None)
            if first is not None:
                raise first

        return tuple(sorted(lessons, key=lambda lesson: lesson.order))


def validate_module(
    lessons: Sequence[LessonDocument],
    strict: bool = False,
    collect_all: bool = False,
) -> tuple[LessonDocument, ...]:
    """Convenience function: validate lessons with a default validator."""
    return LessonSetValidator(strict=strict).validate(lessons, collect_all=collect_all)
