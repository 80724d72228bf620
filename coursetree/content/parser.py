"""
Lesson document parser.

Splits a lesson file into its front-matter header and Markdown body:

    ---
    title: Intro
    order: 1
    estimatedMinutes: 10
    ---
    # Intro

    Text...

The header is YAML checked against the FrontMatter schema. A header that is
not valid YAML is read as flat `key: value` lines split at the first colon,
so `title: Rust: Ownership` is accepted. Without a header
(or without a `title` key) the title falls back to the first `# ` heading of
the body outside fenced code blocks.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from .errors import EmptyBody, MalformedFrontMatter, UnreadableFile
from .models import FrontMatter, LessonDocument

FRONT_MATTER_DELIMITER = "---"


class LessonParser:
    """Parser for single lesson documents."""

    HEADING_PATTERN = re.compile(r"^#\s+(.+?)(?:\s+#+)?\s*$")
    FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")
    KEY_VALUE_PATTERN = re.compile(r"^([A-Za-z_][\w-]*)\s*:(.*)$")
    YAML_LITERAL_STARTS = "[{\"'"

    def parse(self, text: str, source_path: Path | str | None = None) -> LessonDocument:
        """
        Parse raw document text into a LessonDocument.

        Args:
            text: Full document text
            source_path: File the text came from, used for the slug and
                         in error messages

        Returns:
            LessonDocument with front-matter fields populated when present

        Raises:
            MalformedFrontMatter: header opened but not closed, or invalid
            EmptyBody: nothing left after the header
        """
        path = Path(source_path) if source_path is not None else None
        header, body = self._split(text, path)

        body = body.strip()
        if not body:
            raise EmptyBody("no content after front-matter", path=path)

        front_matter = self._load_front_matter(header, path) if header is not None else FrontMatter()
        title = front_matter.title or self.first_heading(body)

        logger.debug(
            f"Parsed {path or '<text>'}: title={title!r} order={front_matter.order} "
            f"front_matter={header is not None}"
        )

        return LessonDocument(
            title=title,
            order=front_matter.order,
            estimated_minutes=front_matter.estimated_minutes,
            body=body,
            slug=path.stem if path is not None else None,
            source_path=path,
            has_front_matter=header is not None,
            extra=front_matter.extra_fields,
        )

    def parse_file(self, path: Path | str) -> LessonDocument:
        """Parse a lesson file from disk (UTF-8, BOM tolerated)."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Lesson file not found: {path}")

        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise UnreadableFile(f"cannot read lesson file: {e}", path=path) from e

        return self.parse(text, path)

    def first_heading(self, body: str) -> str | None:
        """Return the text of the first level-1 heading outside code fences."""
        in_fence = False
        for line in body.split("\n"):
            if self.FENCE_PATTERN.match(line):
                in_fence = not in_fence
                continue
            if in_fence:
                continue
            match = self.HEADING_PATTERN.match(line)
            if match:
                return match.group(1).strip()
        return None

    def _split(self, text: str, path: Path | None) -> tuple[str | None, str]:
        """Separate the front-matter block from the body."""
        text = text.lstrip("\ufeff").replace("\r\n", "\n")
        lines = text.split("\n")

        if not lines or lines[0].rstrip() != FRONT_MATTER_DELIMITER:
            return None, text

        for index in range(1, len(lines)):
            if lines[index].rstrip() == FRONT_MATTER_DELIMITER:
                header = "\n".join(lines[1:index])
                body = "\n".join(lines[index + 1 :])
                return header, body

        raise MalformedFrontMatter("front-matter block opened but never closed", path=path)

    def _load_front_matter(self, header: str, path: Path | None) -> FrontMatter:
        try:
            data = yaml.safe_load(header)
        except yaml.YAMLError as e:
            data = self._load_key_value_lines(header, path, e)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise MalformedFrontMatter(
                f"front-matter must be a key/value mapping, got {type(data).__name__}",
                path=path,
            )

        non_string_keys = [key for key in data if not isinstance(key, str)]
        if non_string_keys:
            raise MalformedFrontMatter(f"front-matter keys must be strings: {non_string_keys!r}", path=path)

        try:
            return FrontMatter.model_validate(data)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise MalformedFrontMatter(f"invalid front-matter field(s): {details}", path=path) from e

    def _load_key_value_lines(self, header: str, path: Path | None, error: yaml.YAMLError) -> dict[str, Any]:
        """
        Read a header that is not valid YAML as flat `key: value` lines.

        Each line is split at its first colon, so unquoted values such as
        `title: Rust: Ownership` are kept whole. Values are still read as
        YAML scalars where possible (`order: 1` stays an int).

        Raises:
            MalformedFrontMatter: a line is not `key: value`, or a value is
                an unterminated quoted or bracketed YAML literal
        """
        data: dict[str, Any] = {}
        for line in header.split("\n"):
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            match = self.KEY_VALUE_PATTERN.match(line)
            if not match:
                raise MalformedFrontMatter(f"invalid YAML in front-matter: {_yaml_error(error)}", path=path) from error
            key, raw = match.group(1), match.group(2).strip()
            try:
                value = yaml.safe_load(raw) if raw else None
            except yaml.YAMLError:
                if raw[0] in self.YAML_LITERAL_STARTS:
                    raise MalformedFrontMatter(
                        f"invalid YAML in front-matter: {_yaml_error(error)}", path=path
                    ) from error
                value = raw
            if isinstance(value, (dict, list)) and raw[0] not in self.YAML_LITERAL_STARTS:
                # "Rust: Ownership" reads as a one-key mapping
                value = raw
            data[key] = value

        logger.debug(f"Read front-matter of {path or '<text>'} as key/value lines")
        return data


def _yaml_error(exc: yaml.YAMLError) -> str:
    mark = getattr(exc, "problem_mark", None)
    problem = getattr(exc, "problem", None) or str(exc)
    if mark is not None:
        # +2: the opening delimiter line plus 1-based numbering
        return f"line {mark.line + 2}: {problem}"
    return problem


def render_front_matter(lesson: LessonDocument) -> str:
    """
    Serialise a lesson's metadata back into a front-matter block.

    Parsing the rendered block yields the same title, order and
    estimatedMinutes.
    """
    data: dict[str, Any] = {}
    if lesson.title is not None:
        data["title"] = lesson.title
    if lesson.order is not None:
        data["order"] = lesson.order
    if lesson.estimated_minutes is not None:
        data["estimatedMinutes"] = lesson.estimated_minutes
    data.update(lesson.extra)

    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False) if data else ""
    return f"{FRONT_MATTER_DELIMITER}\n{dumped}{FRONT_MATTER_DELIMITER}\n"


def render_lesson(lesson: LessonDocument) -> str:
    """Serialise a lesson back into document text (front-matter + body)."""
    return f"{render_front_matter(lesson)}{lesson.body}\n"


def parse_lesson(text: str, source_path: Path | str | None = None) -> LessonDocument:
    """Convenience function to parse document text."""
    return LessonParser().parse(text, source_path)


def parse_lesson_file(path: Path | str) -> LessonDocument:
    """Convenience function to parse a lesson file."""
    return LessonParser().parse_file(path)
