"""
Content loader for course directory trees.

Walks a content root laid out as:

    <root>/
      <course>/
        course.json            (optional manifest)
        <module>/              (or modules/<module>/)
          module.json          (optional manifest)
          <lesson>.md          (or lessons/<lesson>.md)

parses every lesson, validates every module and hands the result to the
assembler. Failures are aggregated across the whole tree and raised as one
CourseValidationError.

Ordering: when a manifest lists its children (`modules` in course.json,
`lessons` in module.json) every listed id must exist. Modules follow the
manifest list, then the module.json `order` field, then a natural sort of
directory names (numeric prefix first, so `2-loops` precedes `10-closures`).
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from coursetree.config import Settings, get_settings

from .assembler import CourseTreeAssembler
from .errors import ContentError, CourseValidationError, DanglingReference, ManifestError
from .models import Course, CourseTree, LessonDocument, Module
from .parser import LessonParser
from .validator import LessonSetValidator

COURSE_MANIFEST = "course.json"
MODULE_MANIFEST = "module.json"
MODULES_DIR = "modules"
LESSONS_DIR = "lessons"

_NUMERIC_PREFIX = re.compile(r"^(\d+)[\s._-]*(.*)$")


class CourseManifest(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    title: str | None = None
    description: str = ""
    modules: list[str] | None = None


class ModuleManifest(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    title: str | None = None
    description: str = ""
    order: int | None = None
    lessons: list[str] | None = None


def natural_key(name: str) -> tuple[int, int, str]:
    """Sort key: numeric prefixes first, by value, then lexical."""
    match = _NUMERIC_PREFIX.match(name)
    if match:
        return (0, int(match.group(1)), name.lower())
    return (1, 0, name.lower())


def display_name(name: str) -> str:
    """Human title from a directory name: '02-async_await' -> 'Async Await'."""
    match = _NUMERIC_PREFIX.match(name)
    stem = match.group(2) if match and match.group(2) else name
    words = re.split(r"[\s_-]+", stem)
    return " ".join(word.capitalize() for word in words if word)


class ContentLoader:
    """Load and assemble courses from a content directory."""

    def __init__(self, base_path: Path | str | None = None, settings: Settings | None = None):
        """
        Initialize loader.

        Args:
            base_path: Directory holding one sub-directory per course.
                       Defaults to the configured content_root.
            settings: Settings override (defaults to get_settings())
        """
        self.settings = settings or get_settings()
        self.base_path = Path(base_path) if base_path is not None else self.settings.content_root
        self.parser = LessonParser()
        self.validator = LessonSetValidator(
            strict=self.settings.strict_front_matter,
            allowed_extra_keys=self.settings.allowed_extra_keys,
        )
        self.assembler = CourseTreeAssembler()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def load(self) -> CourseTree:
        """
        Load, validate and assemble every course under the base path.

        Raises:
            FileNotFoundError: base path does not exist
            CourseValidationError: every failure found in the tree
        """
        courses, errors = self.load_courses()
        errors.extend(self.assembler.find_structural_errors(courses))
        if errors:
            logger.warning(f"Content under {self.base_path} has {len(errors)} problem(s)")
            raise CourseValidationError(errors, path=self.base_path)
        return self.assembler.assemble(courses)

    def load_courses(self) -> tuple[list[Course], list[ContentError]]:
        """
        Parse and validate every course without assembling navigation.

        Returns:
            (courses, errors). Modules whose files all failed to parse are
            left out of the courses so they are not reported as empty.
        """
        if not self.base_path.is_dir():
            raise FileNotFoundError(f"Content directory not found: {self.base_path}")

        courses: list[Course] = []
        errors: list[ContentError] = []
        for course_dir in self.list_course_dirs():
            course = self._load_course(course_dir, errors)
            if course is not None:
                courses.append(course)
        return courses, errors

    def list_course_dirs(self) -> list[Path]:
        """List course directories in natural order."""
        return sorted(_visible_dirs(self.base_path), key=lambda d: natural_key(d.name))

    def load_module(self, module_dir: Path | str) -> Module:
        """
        Load and validate a single module directory.

        Raises:
            ContentError: the only failure, or a CourseValidationError
                          holding several
        """
        errors: list[ContentError] = []
        module = self._load_module(Path(module_dir), errors)
        if module is not None and not errors:
            return module

        # _load_module only drops a module after recording why
        if len(errors) == 1:
            raise errors[0]
        raise CourseValidationError(errors, path=module_dir)

    # -------------------------------------------------------------------------
    # Courses
    # -------------------------------------------------------------------------

    def _load_course(self, course_dir: Path, errors: list[ContentError]) -> Course | None:
        logger.info(f"Loading course: {course_dir.name}")
        error_count = len(errors)

        try:
            manifest = _read_manifest(course_dir / COURSE_MANIFEST, CourseManifest)
        except ManifestError as e:
            errors.append(e)
            manifest = CourseManifest()

        container = course_dir / MODULES_DIR
        if not container.is_dir():
            container = course_dir

        module_dirs = self._order_module_dirs(course_dir, container, manifest, errors)

        modules: list[Module] = []
        for module_dir in module_dirs:
            module = self._load_module(module_dir, errors)
            if module is not None:
                modules.append(module)

        if not modules and len(errors) > error_count:
            # Every module failed; the failures already explain the course
            return None

        return Course(
            name=course_dir.name,
            title=manifest.title or display_name(course_dir.name),
            description=manifest.description,
            modules=tuple(modules),
            source_path=course_dir,
        )

    def _order_module_dirs(
        self,
        course_dir: Path,
        container: Path,
        manifest: CourseManifest,
        errors: list[ContentError],
    ) -> list[Path]:
        on_disk = {d.name: d for d in _visible_dirs(container) if d.name not in (MODULES_DIR, LESSONS_DIR)}

        if manifest.modules is not None:
            ordered = []
            for module_id in manifest.modules:
                if module_id in on_disk:
                    ordered.append(on_disk[module_id])
                else:
                    errors.append(
                        DanglingReference(
                            f"course manifest lists module '{module_id}' but no such directory exists",
                            path=course_dir / COURSE_MANIFEST,
                        )
                    )
            for name in sorted(set(on_disk) - set(manifest.modules), key=natural_key):
                logger.warning(f"Module directory {on_disk[name]} is not listed in {COURSE_MANIFEST}; skipped")
            return ordered

        def sort_key(module_dir: Path) -> tuple:
            order = _peek_module_order(module_dir)
            return (order is None, order or 0, natural_key(module_dir.name))

        return sorted(on_disk.values(), key=sort_key)

    # -------------------------------------------------------------------------
    # Modules
    # -------------------------------------------------------------------------

    def _load_module(self, module_dir: Path, errors: list[ContentError]) -> Module | None:
        try:
            manifest = _read_manifest(module_dir / MODULE_MANIFEST, ModuleManifest)
        except ManifestError as e:
            errors.append(e)
            manifest = ModuleManifest()

        files = self._lesson_files(module_dir, manifest, errors)

        lessons: list[LessonDocument] = []
        for file_path in files:
            try:
                lessons.append(self.parser.parse_file(file_path))
            except ContentError as e:
                logger.debug(f"Failed to parse {file_path}: {e}")
                errors.append(e)

        if files and not lessons:
            return None

        try:
            validated = self.validator.validate(
                lessons,
                collect_all=self.settings.collect_all,
                module_path=module_dir,
            )
        except ContentError as e:
            errors.append(e)
            validated = tuple(lessons)

        logger.debug(f"Module {module_dir.name}: {len(validated)} lesson(s)")
        return Module(
            name=module_dir.name,
            title=manifest.title or display_name(module_dir.name),
            description=manifest.description,
            lessons=validated,
            source_path=module_dir,
        )

    def _lesson_files(
        self,
        module_dir: Path,
        manifest: ModuleManifest,
        errors: list[ContentError],
    ) -> list[Path]:
        container = module_dir / LESSONS_DIR
        if not container.is_dir():
            container = module_dir

        extensions = set(self.settings.lesson_extensions)
        ignored = set(self.settings.ignored_files)
        files = sorted(
            (
                path
                for path in container.iterdir()
                if path.is_file()
                and not path.name.startswith(".")
                and path.name not in ignored
                and path.suffix.lower() in extensions
            ),
            key=lambda path: natural_key(path.name),
        )

        if manifest.lessons is not None:
            stems = {path.stem for path in files}
            for lesson_id in manifest.lessons:
                if lesson_id not in stems:
                    errors.append(
                        DanglingReference(
                            f"module manifest lists lesson '{lesson_id}' but no such file exists",
                            path=module_dir / MODULE_MANIFEST,
                        )
                    )
            for path in files:
                if path.stem not in manifest.lessons:
                    logger.warning(f"Lesson file {path} is not listed in {MODULE_MANIFEST}")

        return files


# =============================================================================
# Helpers
# =============================================================================


def _visible_dirs(path: Path) -> list[Path]:
    return [d for d in path.iterdir() if d.is_dir() and not d.name.startswith(".")]


def _read_manifest(path: Path, schema: type[BaseModel]):
    """Read an optional JSON manifest; absent files yield an empty manifest."""
    if not path.exists():
        return schema()
    try:
        raw = json.loads(path.read_text(encoding="utf-8-sig"))
        return schema.model_validate(raw)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestError(f"cannot read manifest: {e}", path=path) from e
    except ValidationError as e:
        raise ManifestError(f"invalid manifest: {e.error_count()} field error(s)", path=path) from e


def _peek_module_order(module_dir: Path) -> int | None:
    try:
        return _read_manifest(module_dir / MODULE_MANIFEST, ModuleManifest).order
    except ManifestError:
        # Reported when the module itself is loaded
        return None


def load_course_tree(base_path: Path | str | None = None, settings: Settings | None = None) -> CourseTree:
    """Convenience function to load a content directory."""
    return ContentLoader(base_path, settings=settings).load()
