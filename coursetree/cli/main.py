"""
coursetree CLI - validate and assemble Markdown course content.

Usage:
    coursetree validate content/courses          # Check every course
    coursetree validate content/courses --strict # Also flag unknown front-matter keys
    coursetree build content/courses -o tree.json
    coursetree show content/courses

Exit codes:
    0 - All content valid
    1 - Validation errors found
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from coursetree import __version__
from coursetree.config import Settings, get_settings
from coursetree.content import ContentError, ContentLoader, CourseTree
from coursetree.content.errors import flatten_errors

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="coursetree",
    help="Validate and assemble Markdown course content",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def configure_logging(level: str, log_file: str | None = None) -> None:
    """Route loguru output to stderr (and optionally a file)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<level>{level: <8}</level> | <level>{message}</level>",
    )
    if log_file:
        logger.add(log_file, level="DEBUG", rotation="5 MB")


def _settings_for(strict: bool | None = None, fail_fast: bool | None = None) -> Settings:
    settings = get_settings()
    updates = {}
    if strict is not None:
        updates["strict_front_matter"] = strict
    if fail_fast is not None:
        updates["validation_mode"] = "fail_fast" if fail_fast else "collect_all"
    return settings.model_copy(update=updates) if updates else settings


def _load(path: Path, settings: Settings) -> CourseTree:
    """Load a content tree, printing the report and exiting on failure."""
    try:
        return ContentLoader(path, settings=settings).load()
    except FileNotFoundError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except ContentError as e:
        _print_validation_report(flatten_errors([e]), console=err_console)
        raise typer.Exit(1)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def validate(
    path: Annotated[
        Path, typer.Argument(help="Content directory (one sub-directory per course)")
    ],
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--no-strict", "-s/-S", help="Report unknown front-matter keys (default from settings)"),
    ] = None,
    fail_fast: Annotated[
        bool | None,
        typer.Option(
            "--fail-fast/--collect-all",
            help="Stop at the first violation in each module (default from settings)",
        ),
    ] = None,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write a JSON report")
    ] = None,
) -> None:
    """
    Validate course content.

    Checks front-matter syntax, lesson titles, unique lesson order per
    module, estimated durations, empty modules and courses, and manifest
    references.
    """
    settings = _settings_for(strict=strict, fail_fast=fail_fast)
    console.print(f"[cyan]Validating content in {path}...[/]")

    errors: list[ContentError] = []
    tree: CourseTree | None = None
    try:
        tree = ContentLoader(path, settings=settings).load()
    except FileNotFoundError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except ContentError as e:
        errors = flatten_errors([e])

    _print_validation_report(errors, console=console)
    if tree is not None:
        lesson_count = sum(1 for course in tree.courses for _ in course.iter_lessons())
        console.print(f"[dim]Courses: {len(tree.courses)} | Lessons: {lesson_count}[/]")

    if output:
        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "errors": [_error_to_dict(error) for error in errors],
            "summary": {
                "error_count": len(errors),
                "status": "pass" if not errors else "fail",
            },
        }
        output.write_text(json.dumps(report, indent=2), encoding="utf-8")
        console.print(f"[dim]Report written to {output}[/]")

    if errors:
        raise typer.Exit(1)


@app.command()
def build(
    path: Annotated[
        Path, typer.Argument(help="Content directory (one sub-directory per course)")
    ],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the JSON tree here instead of stdout")
    ] = None,
    strict: Annotated[
        bool | None,
        typer.Option("--strict/--no-strict", "-s/-S", help="Report unknown front-matter keys (default from settings)"),
    ] = None,
) -> None:
    """Validate content and serialize the navigable course tree as JSON."""
    settings = _settings_for(strict=strict)
    tree = _load(path, settings)
    payload = tree.to_json(indent=settings.json_indent)

    if output is None:
        typer.echo(payload)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload, encoding="utf-8")
    console.print(f"[green]Wrote {len(tree.courses)} course(s) to {output}[/green]")


@app.command()
def show(
    path: Annotated[
        Path, typer.Argument(help="Content directory (one sub-directory per course)")
    ],
    course: Annotated[
        str | None, typer.Option("--course", "-c", help="Only show this course")
    ] = None,
) -> None:
    """Print the course / module / lesson tree in reading order."""
    tree = _load(path, _settings_for())

    courses = tree.courses
    if course is not None:
        courses = tuple(item for item in courses if item.name == course)
        if not courses:
            err_console.print(f"[red]Error: course '{course}' not found[/red]")
            raise typer.Exit(1)

    for item in courses:
        minutes = item.total_minutes
        root = Tree(f"[bold cyan]{escape(item.title)}[/] [dim]({item.name}, ~{minutes} min)[/]")
        for module in item.modules:
            branch = root.add(f"[bold]{escape(module.title)}[/] [dim]({module.name})[/]")
            for lesson in module.lessons:
                duration = f", {lesson.estimated_minutes} min" if lesson.estimated_minutes else ""
                following = lesson.next_lesson_ref
                arrow = f" [dim]-> {following.module}/{following.lesson}[/]" if following else " [dim](end)[/]"
                branch.add(f"{lesson.order}. {escape(lesson.title)} [dim]({lesson.id}{duration})[/]{arrow}")
        console.print(root)


# =============================================================================
# Reporting
# =============================================================================


def _error_to_dict(error: ContentError) -> dict:
    return {
        "kind": error.kind,
        "path": str(error.path) if error.path is not None else None,
        "order": error.order,
        "message": error.message,
    }


def _print_validation_report(errors: list[ContentError], console: Console) -> None:
    """Print validation results."""
    if not errors:
        console.print("\n[green]✓ All content valid![/]")
        return

    table = Table(title=f"{len(errors)} validation error(s)")
    table.add_column("File", style="cyan", overflow="fold")
    table.add_column("Order", justify="right")
    table.add_column("Error", style="red")
    table.add_column("Message")

    for error in errors:
        table.add_row(
            escape(str(error.path)) if error.path is not None else "-",
            str(error.order) if error.order is not None else "-",
            error.kind,
            escape(error.message),
        )

    console.print(table)
    console.print(f"\n[dim]Errors: {len(errors)}[/]")


# =============================================================================
# Entry Point
# =============================================================================


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"coursetree {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: Annotated[
        LogLevel | None, typer.Option("--log-level", case_sensitive=False, help="Logging level")
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """
    coursetree - validate and assemble Markdown course content.

    \b
    Layout:
      <root>/<course>/<module>/<lesson>.md
      <root>/<course>/modules/<module>/lessons/<lesson>.md
    """
    settings = get_settings()
    level = log_level.value if log_level is not None else settings.log_level
    configure_logging(level, settings.log_file)


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
