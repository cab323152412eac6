from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click

from natalorders.data import order_repository, settings_repository
from natalorders.models.order_models import DATE_SELECTORS, PICKUP_LOCATIONS, Order, Product, ReportDocument
from natalorders.services import analytics_service, report_service

APP_VERSION = "1.0.0"

_date_option = click.option(
    "--date",
    "date_selector",
    type=click.Choice(DATE_SELECTORS),
    default="all",
    show_default=True,
    help="Pickup day in December to report on.",
)
_output_option = click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="File or directory to write the PDF to.",
)
_snapshot_argument = click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
_query_option = click.option(
    "--query",
    "-q",
    default="",
    help="Only orders whose client name or number contains this text.",
)
_location_option = click.option(
    "--location",
    type=click.Choice(sorted(PICKUP_LOCATIONS)),
    default=None,
    help="Only orders collected at this pickup location.",
)


def _load(
    snapshot: Path,
    date_selector: str = "all",
    query: str = "",
    location: Optional[str] = None,
) -> Tuple[List[Order], List[Product]]:
    try:
        orders, products = order_repository.load_snapshot(snapshot)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    if query or location:
        orders = analytics_service.filter_orders(orders, query, location or "")
    return analytics_service.filter_orders_by_date(orders, date_selector), products


def _save(document: ReportDocument, output: Optional[Path]) -> None:
    try:
        path = report_service.save_report(document, output)
    except OSError as exc:
        raise click.ClickException(f"Could not write {document.filename}: {exc}") from exc
    click.echo(str(path))


@click.group()
@click.version_option(version=APP_VERSION, prog_name="natalorders")
def main() -> None:
    """Christmas order reports."""
    settings = settings_repository.get_report_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@_snapshot_argument
@_date_option
@_output_option
def totals(snapshot: Path, date_selector: str, output: Optional[Path]) -> None:
    """Total quantity per product, turkeys excluded."""
    orders, products = _load(snapshot, date_selector)
    rows = analytics_service.get_total_quantity_per_product(orders)
    _save(report_service.build_total_quantity_report(rows, date_selector, products), output)


@main.command("all-products")
@_snapshot_argument
@_date_option
@_output_option
def all_products(snapshot: Path, date_selector: str, output: Optional[Path]) -> None:
    """All products and their quantities."""
    orders, products = _load(snapshot, date_selector)
    rows = analytics_service.get_total_quantity_per_product(orders)
    _save(report_service.build_all_products_report(rows, date_selector, products), output)


@main.command("product-customers")
@_snapshot_argument
@click.argument("product_name")
@_date_option
@_output_option
def product_customers(snapshot: Path, product_name: str, date_selector: str, output: Optional[Path]) -> None:
    """Quantity of one product per customer."""
    orders, products = _load(snapshot, date_selector)
    rows = analytics_service.get_quantity_per_product_per_customer(orders, product_name)
    _save(report_service.build_product_customers_report(rows, product_name, date_selector, products), output)


@main.command("customer-sheets")
@_snapshot_argument
@_date_option
@_query_option
@_location_option
@_output_option
def customer_sheets(
    snapshot: Path,
    date_selector: str,
    query: str,
    location: Optional[str],
    output: Optional[Path],
) -> None:
    """Order sheets for every customer, one customer per page."""
    orders, products = _load(snapshot, date_selector, query, location)
    _save(report_service.build_all_customer_sheets(orders, date_selector, products), output)


@main.command("products-customers")
@_snapshot_argument
@_date_option
@_query_option
@_location_option
@_output_option
def products_customers(
    snapshot: Path,
    date_selector: str,
    query: str,
    location: Optional[str],
    output: Optional[Path],
) -> None:
    """Every product with the customers who ordered it."""
    orders, products = _load(snapshot, date_selector, query, location)
    _save(report_service.build_products_with_customers_report(orders, date_selector, products), output)


@main.command()
@_snapshot_argument
@_date_option
@_output_option
def turkeys(snapshot: Path, date_selector: str, output: Optional[Path]) -> None:
    """Stuffed and plain turkeys with weight totals."""
    orders, _products = _load(snapshot, date_selector)
    rows = analytics_service.get_reserved_products_by_customer(orders)
    _save(report_service.build_reserved_products_report(rows, date_selector), output)


@main.command()
@_snapshot_argument
@click.argument("client_number")
@_output_option
def customer(snapshot: Path, client_number: str, output: Optional[Path]) -> None:
    """All orders of one customer."""
    orders, products = _load(snapshot)
    customer_orders = analytics_service.get_customer_orders(orders, client_number)
    if not customer_orders:
        raise click.ClickException(f"No orders found for customer {client_number}.")
    _save(report_service.build_customer_report(customer_orders, products), output)


if __name__ == "__main__":
    sys.exit(main())
