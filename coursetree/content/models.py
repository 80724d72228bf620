"""
Course Content Models.

Pydantic models for the Course -> Module -> Lesson hierarchy.

Two layers:
- Parsed models (LessonDocument, Module, Course) come out of the parser and
  loader and carry no navigation.
- Navigable models (NavigableLesson, NavigableModule, NavigableCourse,
  CourseTree) are produced by the assembler and carry the derived
  next/previous lesson references.

JSON output uses the camelCase keys of the lesson front-matter
(estimatedMinutes, nextLessonRef, previousLessonRef).
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


# =============================================================================
# Front-matter schema
# =============================================================================


class FrontMatter(BaseModel):
    """
    Recognised front-matter keys of a lesson document.

    Unknown keys are kept in `model_extra` so course-specific keys survive
    parsing; the validator reports them in strict mode.

    `estimatedMinutes` is kept as the raw value so the validator can report
    InvalidDuration instead of the parser failing on it.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    title: str | None = None
    order: StrictInt | None = None
    estimated_minutes: Any = Field(default=None, alias="estimatedMinutes")

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> Any:
        # YAML turns `title: 2048` into an int
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip() or None
        return value

    @property
    def extra_fields(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


# =============================================================================
# Parsed content
# =============================================================================


class LessonDocument(BaseModel):
    """One lesson file: metadata plus Markdown body."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str | None = None
    order: int | None = None
    estimated_minutes: Any = Field(default=None, alias="estimatedMinutes")
    body: str

    slug: str | None = Field(default=None, exclude=True)
    source_path: Path | None = Field(default=None, exclude=True)
    has_front_matter: bool = Field(default=False, exclude=True)
    extra: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @property
    def lesson_id(self) -> str:
        """Identifier used in navigation refs (file stem, else order)."""
        if self.slug:
            return self.slug
        if self.order is not None:
            return str(self.order)
        return "lesson"

    @property
    def label(self) -> str:
        """Human-readable name for error messages."""
        if self.source_path is not None:
            return str(self.source_path)
        if self.title:
            return repr(self.title)
        return self.lesson_id


class Module(BaseModel):
    """A named group of lessons within a course."""

    model_config = ConfigDict(frozen=True)

    name: str
    title: str = ""
    description: str = ""
    lessons: tuple[LessonDocument, ...] = ()
    source_path: Path | None = None

    @property
    def display_title(self) -> str:
        return self.title or self.name


class Course(BaseModel):
    """Top-level group of modules."""

    model_config = ConfigDict(frozen=True)

    name: str
    title: str = ""
    description: str = ""
    modules: tuple[Module, ...] = ()
    source_path: Path | None = None

    @property
    def display_title(self) -> str:
        return self.title or self.name


# =============================================================================
# Navigable tree
# =============================================================================


class LessonRef(BaseModel):
    """Lookup key pointing at a lesson in the tree (not an owning pointer)."""

    model_config = ConfigDict(frozen=True)

    course: str
    module: str
    lesson: str
    order: int
    title: str

    def __str__(self) -> str:
        return f"{self.course}/{self.module}/{self.lesson}"


class NavigableLesson(LessonDocument):
    """A lesson with its course-wide reading position and neighbours."""

    id: str
    course: str = Field(exclude=True)
    module: str = Field(exclude=True)
    position: int
    next_lesson_ref: LessonRef | None = Field(default=None, alias="nextLessonRef")
    previous_lesson_ref: LessonRef | None = Field(default=None, alias="previousLessonRef")

    @property
    def ref(self) -> LessonRef:
        return LessonRef(
            course=self.course,
            module=self.module,
            lesson=self.id,
            order=self.order,
            title=self.title,
        )


class NavigableModule(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    title: str = ""
    description: str = ""
    lessons: tuple[NavigableLesson, ...] = ()


class NavigableCourse(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    title: str = ""
    description: str = ""
    modules: tuple[NavigableModule, ...] = ()

    def iter_lessons(self) -> Iterator[NavigableLesson]:
        """Yield lessons in course-wide reading order."""
        for module in self.modules:
            yield from module.lessons

    @property
    def first_lesson(self) -> NavigableLesson | None:
        return next(self.iter_lessons(), None)

    @property
    def total_minutes(self) -> int:
        return sum(
            lesson.estimated_minutes
            for lesson in self.iter_lessons()
            if isinstance(lesson.estimated_minutes, int)
        )


class CourseTree(BaseModel):
    """All assembled courses."""

    model_config = ConfigDict(frozen=True)

    courses: tuple[NavigableCourse, ...] = ()

    def get_course(self, name: str) -> NavigableCourse | None:
        for course in self.courses:
            if course.name == name:
                return course
        return None

    def find(self, course: str, module: str, lesson: str) -> NavigableLesson | None:
        """Find a lesson by course name, module name and lesson id."""
        found = self.get_course(course)
        if found is None:
            return None
        for mod in found.modules:
            if mod.name != module:
                continue
            for item in mod.lessons:
                if item.id == lesson:
                    return item
        return None

    def resolve(self, ref: LessonRef | None) -> NavigableLesson | None:
        """Follow a LessonRef back to the lesson it names."""
        if ref is None:
            return None
        return self.find(ref.course, ref.module, ref.lesson)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)
