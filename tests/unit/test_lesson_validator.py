"""
Unit tests for LessonSetValidator.

Run: pytest tests/unit/test_lesson_validator.py -v
"""
from pathlib import Path

import pytest

from coursetree.content import (
    DuplicateOrder,
    InvalidDuration,
    InvalidOrder,
    LessonDocument,
    LessonSetValidator,
    MissingOrder,
    MissingTitle,
    ModuleValidationError,
    UnknownField,
    validate_module,
)


def make_lesson(name, title="Lesson", order=1, minutes=None, **extra):
    return LessonDocument(
        title=title,
        order=order,
        estimated_minutes=minutes,
        body="Body",
        slug=name,
        source_path=Path("course/module") / f"{name}.md",
        has_front_matter=True,
        extra=extra,
    )


@pytest.fixture
def validator():
    return LessonSetValidator()


class TestValidModules:
    def test_returns_lessons_sorted_by_order(self, validator):
        lessons = [make_lesson("c", order=30), make_lesson("a", order=1), make_lesson("b", order=7)]

        result = validator.validate(lessons)

        assert [lesson.slug for lesson in result] == ["a", "b", "c"]
        orders = [lesson.order for lesson in result]
        assert all(left < right for left, right in zip(orders, orders[1:]))

    def test_orders_need_not_be_contiguous(self, validator):
        result = validator.validate([make_lesson("a", order=10), make_lesson("b", order=20)])
        assert len(result) == 2

    def test_duration_optional(self, validator):
        assert validator.validate([make_lesson("a", minutes=None)])

    def test_empty_list_is_valid_here(self, validator):
        """Empty modules are the assembler's concern."""
        assert validator.validate([]) == ()

    def test_input_is_not_modified(self, validator):
        lessons = [make_lesson("b", order=2), make_lesson("a", order=1)]
        validator.validate(lessons)
        assert [lesson.slug for lesson in lessons] == ["b", "a"]


class TestFailFast:
    def test_missing_title(self, validator):
        with pytest.raises(MissingTitle) as exc_info:
            validator.validate([make_lesson("untitled", title=None)])
        assert exc_info.value.path == Path("course/module/untitled.md")

    def test_blank_title(self, validator):
        with pytest.raises(MissingTitle):
            validator.validate([make_lesson("blank", title="   ")])

    def test_missing_order(self, validator):
        with pytest.raises(MissingOrder):
            validator.validate([make_lesson("a", order=1), make_lesson("b", order=None)])

    @pytest.mark.parametrize("order", [0, -3])
    def test_non_positive_order(self, validator, order):
        with pytest.raises(InvalidOrder):
            validator.validate([make_lesson("a", order=order)])

    def test_duplicate_order_names_both_files(self, validator):
        lessons = [make_lesson("first", order=2), make_lesson("second", order=2)]

        with pytest.raises(DuplicateOrder) as exc_info:
            validator.validate(lessons)

        error = exc_info.value
        assert error.order == 2
        assert error.first == Path("course/module/first.md")
        assert error.second == Path("course/module/second.md")
        assert "first.md" in error.message and "second.md" in error.message

    @pytest.mark.parametrize("minutes", [0, -5, 2.5, "ten", True])
    def test_invalid_duration(self, validator, minutes):
        with pytest.raises(InvalidDuration):
            validator.validate([make_lesson("a", minutes=minutes)])

    def test_checks_run_in_order(self, validator):
        """A missing title is reported before a duplicate order, whatever the lesson order."""
        lessons = [
            make_lesson("a", order=1),
            make_lesson("b", order=1),
            make_lesson("c", title=None, order=2),
        ]
        with pytest.raises(MissingTitle):
            validator.validate(lessons)

    def test_missing_order_before_duration(self, validator):
        lessons = [make_lesson("a", minutes=-1), make_lesson("b", order=None)]
        with pytest.raises(MissingOrder):
            validator.validate(lessons)


class TestCollectAll:
    def test_collects_every_violation_in_check_order(self, validator):
        lessons = [
            make_lesson("a", title=None, order=1),
            make_lesson("b", order=None),
            make_lesson("c", order=1, minutes=0),
        ]

        violations = validator.collect_violations(lessons)

        assert [type(v) for v in violations] == [MissingTitle, MissingOrder, DuplicateOrder, InvalidDuration]

    def test_raises_module_validation_error(self, validator):
        lessons = [make_lesson("a", order=None), make_lesson("b", order=None)]

        with pytest.raises(ModuleValidationError) as exc_info:
            validator.validate(lessons, collect_all=True, module_path="course/module")

        assert len(exc_info.value.errors) == 2
        assert exc_info.value.path == Path("course/module")

    def test_three_way_duplicate_reports_against_first(self, validator):
        lessons = [make_lesson(name, order=4) for name in ("x", "y", "z")]
        violations = validator.collect_violations(lessons)

        assert len(violations) == 2
        assert all(v.first == Path("course/module/x.md") for v in violations)

    def test_valid_module_has_no_violations(self, validator):
        assert validator.collect_violations([make_lesson("a"), make_lesson("b", order=2)]) == []


class TestStrictMode:
    def test_unknown_keys_ignored_by_default(self, validator):
        assert validator.validate([make_lesson("a", difficulty="easy")])

    def test_unknown_keys_reported_in_strict_mode(self):
        strict = LessonSetValidator(strict=True)
        with pytest.raises(UnknownField) as exc_info:
            strict.validate([make_lesson("a", estimatedMinute=5)])
        assert "estimatedMinute" in exc_info.value.message

    def test_allowed_extra_keys(self):
        strict = LessonSetValidator(strict=True, allowed_extra_keys=["difficulty"])
        assert strict.validate([make_lesson("a", difficulty="easy")])


def test_validate_module_function():
    with pytest.raises(ModuleValidationError):
        validate_module([make_lesson("a", order=None)], collect_all=True)
