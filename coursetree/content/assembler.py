"""
Course Tree Assembler.

Composes validated modules into navigable courses. The only cross-entity
logic is the reading order: each lesson links to the lesson with the next
greater order in its module, or to the first lesson of the next module.
Navigation never crosses course boundaries.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from .errors import ContentError, CourseValidationError, EmptyCourse, EmptyModule
from .models import (
    Course,
    CourseTree,
    LessonDocument,
    LessonRef,
    Module,
    NavigableCourse,
    NavigableLesson,
    NavigableModule,
)


class CourseTreeAssembler:
    """Builds a CourseTree from courses of validated modules."""

    def find_structural_errors(self, courses: Iterable[Course]) -> list[ContentError]:
        """Return every EmptyCourse / EmptyModule failure across all courses."""
        errors: list[ContentError] = []
        for course in courses:
            if not course.modules:
                errors.append(
                    EmptyCourse(f"course '{course.name}' has no modules", path=course.source_path)
                )
                continue
            for module in course.modules:
                if not module.lessons:
                    errors.append(
                        EmptyModule(
                            f"module '{module.name}' in course '{course.name}' has no lessons",
                            path=module.source_path,
                        )
                    )
        return errors

    def assemble(self, courses: Iterable[Course]) -> CourseTree:
        """
        Assemble courses into a navigable tree.

        Raises:
            CourseValidationError: every empty course and empty module found
        """
        courses = list(courses)
        errors = self.find_structural_errors(courses)
        if errors:
            raise CourseValidationError(errors)

        assembled = tuple(self.assemble_course(course) for course in courses)
        logger.info(
            f"Assembled {len(assembled)} course(s), "
            f"{sum(len(c.modules) for c in assembled)} module(s)"
        )
        return CourseTree(courses=assembled)

    def assemble_course(self, course: Course) -> NavigableCourse:
        """Link one course's lessons in reading order."""
        errors = self.find_structural_errors([course])
        if errors:
            raise CourseValidationError(errors, path=course.source_path)

        # Reading order: modules in sequence, lessons by order within each
        sequence: list[tuple[int, Module, LessonDocument]] = [
            (index, module, lesson)
            for index, module in enumerate(course.modules)
            for lesson in sorted(module.lessons, key=lambda item: item.order)
        ]
        refs = [_make_ref(course, module, lesson) for _, module, lesson in sequence]

        by_module: list[list[NavigableLesson]] = [[] for _ in course.modules]
        for position, (index, module, lesson) in enumerate(sequence):
            navigable = NavigableLesson(
                title=lesson.title,
                order=lesson.order,
                estimated_minutes=lesson.estimated_minutes,
                body=lesson.body,
                slug=lesson.slug,
                source_path=lesson.source_path,
                has_front_matter=lesson.has_front_matter,
                extra=lesson.extra,
                id=lesson.lesson_id,
                course=course.name,
                module=module.name,
                position=position,
                next_lesson_ref=refs[position + 1] if position + 1 < len(refs) else None,
                previous_lesson_ref=refs[position - 1] if position > 0 else None,
            )
            by_module[index].append(navigable)

        modules = tuple(
            NavigableModule(
                name=module.name,
                title=module.display_title,
                description=module.description,
                lessons=tuple(by_module[index]),
            )
            for index, module in enumerate(course.modules)
        )

        logger.debug(f"Linked {len(refs)} lesson(s) in course '{course.name}'")
        return NavigableCourse(
            name=course.name,
            title=course.display_title,
            description=course.description,
            modules=modules,
        )


def _make_ref(course: Course, module: Module, lesson: LessonDocument) -> LessonRef:
    return LessonRef(
        course=course.name,
        module=module.name,
        lesson=lesson.lesson_id,
        order=lesson.order,
        title=lesson.title,
    )


def assemble_courses(courses: Iterable[Course]) -> CourseTree:
    """Convenience function to assemble courses."""
    return CourseTreeAssembler().assemble(courses)
