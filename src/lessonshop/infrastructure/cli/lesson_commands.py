"""CLI commands for the lesson catalog."""

from __future__ import annotations

from pathlib import Path

import click

from lessonshop.application.dto import LessonDTO
from lessonshop.application.list_lessons import ListLessonsHandler
from lessonshop.application.search_lessons import SearchLessonsHandler
from lessonshop.application.seed_catalog import SeedCatalogHandler
from lessonshop.application.update_lesson_spaces import UpdateLessonSpacesHandler
from lessonshop.domain.exceptions import DomainException
from lessonshop.infrastructure.cli.context import open_container, pass_settings
from lessonshop.infrastructure.config import PROJECT_ROOT, Settings


def _display_lessons(lessons: list[LessonDTO]) -> None:
    if not lessons:
        click.echo("No lessons found.")
        return

    click.echo(f"{'ID':<5} {'Subject':<16} {'Location':<16} {'Price':>9} {'Spaces':>7}")
    click.echo("-" * 57)
    for lesson in lessons:
        click.echo(
            f"{lesson.id:<5} {lesson.subject:<16} {lesson.location:<16} "
            f"{lesson.price_label:>9} {lesson.spaces:>7}"
        )


@click.command("list")
@pass_settings
def lesson_list(settings: Settings) -> None:
    """List every lesson in the catalog."""
    container = open_container(settings)
    try:
        lessons = ListLessonsHandler(container.lesson_repo).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        container.close()

    _display_lessons(lessons)


@click.command("search")
@click.argument("term")
@pass_settings
def lesson_search(settings: Settings, term: str) -> None:
    """Find lessons whose subject or location contains TERM."""
    container = open_container(settings)
    try:
        lessons = SearchLessonsHandler(container.lesson_repo).handle(term)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        container.close()

    _display_lessons(lessons)


@click.command("set-spaces")
@click.option("--id", "lesson_id", required=True, type=int, help="Lesson ID.")
@click.option("--spaces", required=True, type=int, help="Remaining spaces.")
@pass_settings
def lesson_set_spaces(settings: Settings, lesson_id: int, spaces: int) -> None:
    """Overwrite the remaining spaces of a lesson."""
    container = open_container(settings)
    try:
        UpdateLessonSpacesHandler(container.lesson_repo).handle(lesson_id, spaces)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        container.close()

    click.echo(f"Lesson #{lesson_id} now has {spaces} spaces")


@click.command("seed")
@click.option(
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=PROJECT_ROOT / "data" / "seed_lessons.json",
    show_default=True,
    help="JSON list of lessons to load.",
)
@pass_settings
def seed(settings: Settings, file_path: Path) -> None:
    """Load lessons into the catalog (existing ids are replaced)."""
    container = open_container(settings)
    try:
        count = SeedCatalogHandler(container.lesson_repo).handle(file_path)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        container.close()

    click.echo(f"Loaded {count} lessons from {file_path}")
