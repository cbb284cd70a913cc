import click
import uvicorn

from lessonshop.infrastructure.api.app import create_app
from lessonshop.infrastructure.cli.context import open_container, pass_settings
from lessonshop.infrastructure.cli.lesson_commands import (
    lesson_list,
    lesson_search,
    lesson_set_spaces,
    seed,
)
from lessonshop.infrastructure.cli.order_commands import order_show, order_submit
from lessonshop.infrastructure.config import Settings, configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Lesson Shop — coursework storefront backend"""
    ctx.obj = Settings.from_env()


@cli.group()
def lesson() -> None:
    """Browse and manage lessons."""


@cli.group()
def order() -> None:
    """Place and inspect orders."""


@cli.command("serve")
@click.option("--host", default=None, help="Bind address (default from LESSONSHOP_HOST).")
@click.option("--port", default=None, type=int, help="Port (default from LESSONSHOP_PORT).")
@pass_settings
def serve(settings: Settings, host: str | None, port: int | None) -> None:
    """Run the HTTP API."""
    configure_logging(settings.log_level)
    container = open_container(settings)
    try:
        uvicorn.run(
            create_app(container=container, settings=settings),
            host=host or settings.host,
            port=port or settings.port,
            log_config=None,
        )
    finally:
        container.close()


# Register subcommands
lesson.add_command(lesson_list)
lesson.add_command(lesson_search)
lesson.add_command(lesson_set_spaces)
order.add_command(order_submit)
order.add_command(order_show)
cli.add_command(seed)
