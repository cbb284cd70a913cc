"""Shared plumbing for CLI commands: settings and the store container."""

from __future__ import annotations

import click

from lessonshop.domain.exceptions import StoreError
from lessonshop.infrastructure.bootstrap import Container, build_container
from lessonshop.infrastructure.config import Settings


def open_container(settings: Settings) -> Container:
    """Open the configured store or abort the command."""
    try:
        return build_container(settings)
    except StoreError as exc:
        raise click.ClickException(f"Cannot open the lesson store: {exc}")


pass_settings = click.make_pass_decorator(Settings)
