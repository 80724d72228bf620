"""
Content: lesson parsing, module validation and course tree assembly.

Core modules:
- parser: Lesson document parsing (front-matter + Markdown body)
- validator: Ordering and required-field checks for one module
- assembler: Course tree with next/previous lesson navigation
- loader: Directory walking and manifest handling
"""

from .assembler import CourseTreeAssembler, assemble_courses
from .errors import (
    ContentError,
    CourseValidationError,
    DanglingReference,
    DuplicateOrder,
    EmptyBody,
    EmptyCourse,
    EmptyModule,
    InvalidDuration,
    InvalidOrder,
    MalformedFrontMatter,
    ManifestError,
    MissingOrder,
    MissingTitle,
    ModuleValidationError,
    UnknownField,
    UnreadableFile,
)
from .loader import ContentLoader, load_course_tree
from .models import (
    Course,
    CourseTree,
    FrontMatter,
    LessonDocument,
    LessonRef,
    Module,
    NavigableCourse,
    NavigableLesson,
    NavigableModule,
)
from .parser import LessonParser, parse_lesson, parse_lesson_file, render_front_matter, render_lesson
from .validator import LessonSetValidator, validate_module

__all__ = [
    # Models
    "FrontMatter",
    "LessonDocument",
    "Module",
    "Course",
    "LessonRef",
    "NavigableLesson",
    "NavigableModule",
    "NavigableCourse",
    "CourseTree",
    # Components
    "LessonParser",
    "parse_lesson",
    "parse_lesson_file",
    "render_front_matter",
    "render_lesson",
    "LessonSetValidator",
    "validate_module",
    "CourseTreeAssembler",
    "assemble_courses",
    "ContentLoader",
    "load_course_tree",
    # Errors
    "ContentError",
    "MalformedFrontMatter",
    "EmptyBody",
    "UnreadableFile",
    "MissingTitle",
    "MissingOrder",
    "InvalidOrder",
    "DuplicateOrder",
    "InvalidDuration",
    "UnknownField",
    "EmptyModule",
    "EmptyCourse",
    "DanglingReference",
    "ManifestError",
    "ModuleValidationError",
    "CourseValidationError",
]
