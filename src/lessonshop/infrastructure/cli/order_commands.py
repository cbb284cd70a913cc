"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from lessonshop.application.dto import OrderDTO, OrderItemSpec
from lessonshop.application.show_order import ShowOrderHandler
from lessonshop.application.submit_order import SubmitOrderHandler
from lessonshop.domain.exceptions import DomainException
from lessonshop.infrastructure.cli.context import open_container, pass_settings
from lessonshop.infrastructure.config import Settings


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:2,3:1' (lesson id : spaces) into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'LessonId:Quantity'."
            )
        id_str, qty_str = pair.split(":", 1)
        try:
            lesson_id = int(id_str)
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid lesson id or quantity in '{pair}'."
            )
        specs.append(OrderItemSpec(lesson_id=lesson_id, quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    click.echo(f"Order {dto.id}")
    click.echo(f"Customer: {dto.customer_name} ({dto.customer_phone})")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Lesson':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.subject:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")


@click.command("submit")
@click.option("--name", required=True, help="Customer name.")
@click.option("--phone", required=True, help="Customer phone number.")
@click.option("--items", required=True, help="Items as 'LessonId:Qty,LessonId:Qty'.")
@click.option("--key", default=None, help="Idempotency key; resubmitting it books nothing twice.")
@pass_settings
def order_submit(settings: Settings, name: str, phone: str, items: str, key: str | None) -> None:
    """Book lessons and store the order."""
    specs = _parse_items(items)

    container = open_container(settings)
    try:
        handler = SubmitOrderHandler(
            order_repo=container.order_repo,
            lesson_repo=container.lesson_repo,
        )
        receipt = handler.handle(
            customer_name=name,
            customer_phone=phone,
            item_specs=specs,
            idempotency_key=key,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        container.close()

    if receipt.replayed:
        click.echo(f"Order {receipt.order_id} was already saved — nothing booked.")
    else:
        click.echo(f"Order {receipt.order_id} saved — spaces reserved.")


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@pass_settings
def order_show(settings: Settings, order_id: str) -> None:
    """Show details of an existing order."""
    container = open_container(settings)
    try:
        dto = ShowOrderHandler(order_repo=container.order_repo).handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))
    finally:
        container.close()

    _display_order(dto)
