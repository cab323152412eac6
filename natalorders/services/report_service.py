from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence
from uuid import uuid4

from ..data import settings_repository
from ..models.order_models import (
    UNIT_TYPE_KG,
    Order,
    Product,
    ProductCustomerQuantity,
    ProductTotal,
    ReportDocument,
)
from .analytics_service import (
    get_products_with_customers,
    group_orders_by_customer,
    summarize_reserved_products,
)
from .formatting import (
    UnitLookup,
    build_unit_lookup,
    day_label,
    format_amount,
    format_currency,
    format_date,
    format_quantity,
    format_timestamp,
    pickup_location_label,
    safe_filename_part,
)
from .pdf_canvas import PdfCanvas

logger = logging.getLogger(__name__)

_TITLE_Y = 22.0
_SUBTITLE_Y = 30.0
_SUBTITLE_STEP = 7.0
_TABLE_START = 35.0
_SECTIONS_START = 45.0
_ORDER_TABLE_HEAD = ["Produto", "Quantidade", "Preço Unit.", "Total"]
_CUSTOMER_TABLE_HEAD = ["Cliente", "Número", "Quantidade"]


def build_total_quantity_report(
    totals: Sequence[ProductTotal],
    date_selector: str = "all",
    products: Optional[Iterable[Product]] = None,
    *,
    filename: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> ReportDocument:
    return _build_product_totals(
        "Quantidade Total por Produto",
        "quantidade-total-por-produto",
        totals,
        date_selector,
        products,
        filename=filename,
        generated_at=generated_at,
    )


def build_all_products_report(
    totals: Sequence[ProductTotal],
    date_selector: str = "all",
    products: Optional[Iterable[Product]] = None,
    *,
    filename: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> ReportDocument:
    return _build_product_totals(
        "Todos os Produtos e Quantidades",
        "todos-produtos-quantidades",
        totals,
        date_selector,
        products,
        filename=filename,
        generated_at=generated_at,
    )


def build_product_customers_report(
    rows: Sequence[ProductCustomerQuantity],
    product_name: str,
    date_selector: str = "all",
    products: Optional[Iterable[Product]] = None,
    *,
    filename: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> ReportDocument:
    day = day_label(date_selector)
    title = f"Quantidade por Cliente - {product_name}"
    if day:
        title += f" ({day} de Dezembro)"
    lookup = build_unit_lookup(products)

    def draw(canvas: PdfCanvas) -> None:
        canvas.cursor.y = _TABLE_START
        bottom = canvas.table(
            _CUSTOMER_TABLE_HEAD,
            [
                [row.customer_name, row.client_number, format_quantity(product_name, row.quantity, lookup)]
                for row in rows
            ],
        )
        canvas.cursor.move_below(bottom)

    stem = f"{safe_filename_part(product_name)}-por-cliente"
    return _render(
        title,
        filename or _default_filename(stem, date_selector),
        draw,
        generated_at=generated_at,
        row_count=len(rows),
    )


def build_all_customer_sheets(
    orders: Sequence[Order],
    date_selector: str = "all",
    products: Optional[Iterable[Product]] = None,
    *,
    filename: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> ReportDocument:
    """One page per customer, one section per order of that customer."""
    lookup = build_unit_lookup(products)
    groups = group_orders_by_customer(orders)

    def draw(canvas: PdfCanvas) -> None:
        canvas.cursor.y = _SECTIONS_START
        for index, group in enumerate(groups):
            if index > 0:
                canvas.new_page()
            else:
                canvas.ensure_room()

            canvas.write_line(f"Cliente: {group.client_name}", size=14, advance=7)
            canvas.write_line(f"Número: {group.client_number}", size=12, advance=10)

            for order_index, order in enumerate(group.orders):
                canvas.ensure_room()
                canvas.write_line(f"Encomenda {order_index + 1}", size=11, advance=6)
                if order.pickup_date is not None:
                    canvas.write_line(f"Data de Recolha: {format_date(order.pickup_date)}")
                _write_order_body(canvas, order, lookup)

    return _render(
        _title_with_day("Todas as Fichas de Cliente", date_selector),
        filename or _default_filename("todas-fichas-cliente", date_selector),
        draw,
        generated_at=generated_at,
        row_count=len(orders),
    )


def build_customer_report(
    orders: Sequence[Order],
    products: Optional[Iterable[Product]] = None,
    *,
    filename: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> ReportDocument:
    if not orders:
        raise ValueError("No orders to export for this customer.")

    customer_name = orders[0].client_name
    client_number = orders[0].client_number
    lookup = build_unit_lookup(products)

    def draw(canvas: PdfCanvas) -> None:
        canvas.cursor.y = _SECTIONS_START
        for index, order in enumerate(orders):
            canvas.ensure_room()
            canvas.write_line(f"Encomenda {index + 1} - {order.client_number}", size=14, advance=8)
            created = order.created_at.date() if order.created_at is not None else None
            canvas.write_line(f"Data: {format_date(created)}")
            _write_order_body(canvas, order, lookup)

    stem = f"{safe_filename_part(customer_name)}_{safe_filename_part(client_number)}-encomendas"
    return _render(
        f"Encomendas - {customer_name}",
        filename or f"{stem}.pdf",
        draw,
        subtitles=[f"Número: {client_number}"],
        generated_at=generated_at,
        row_count=len(orders),
    )


def build_products_with_customers_report(
    orders: Sequence[Order],
    date_selector: str = "all",
    products: Optional[Iterable[Product]] = None,
    *,
    filename: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> ReportDocument:
    lookup = build_unit_lookup(products)
    sections = get_products_with_customers(orders)

    def draw(canvas: PdfCanvas) -> None:
        canvas.cursor.y = _SECTIONS_START
        for index, section in enumerate(sections):
            canvas.ensure_room()
            canvas.write_line(section.product_name, size=14, advance=8)

            name = section.product_name
            bottom = canvas.table(
                _CUSTOMER_TABLE_HEAD,
                [
                    [customer.customer_name, customer.client_number, format_quantity(name, customer.quantity, lookup)]
                    for customer in section.customers
                ],
                foot=["", "Total:", format_quantity(name, section.total_quantity, lookup)],
                font_size=9,
            )
            canvas.cursor.move_below(bottom)

            if index < len(sections) - 1:
                canvas.cursor.advance(5)
                if not canvas.ensure_room():
                    canvas.rule()
                    canvas.cursor.advance(10)

    return _render(
        _title_with_day("Produtos e Clientes", date_selector),
        filename or _default_filename("produtos-e-clientes", date_selector),
        draw,
        generated_at=generated_at,
        row_count=len(sections),
    )


def build_reserved_products_report(
    rows: Sequence[ProductCustomerQuantity],
    date_selector: str = "all",
    *,
    filename: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> ReportDocument:
    summary = summarize_reserved_products(rows)

    def draw(canvas: PdfCanvas) -> None:
        canvas.cursor.y = _TABLE_START
        bottom = canvas.table(
            ["Produto", "Cliente", "Número", "Peso (kg)"],
            [
                [row.product_name, row.customer_name, row.client_number, format_amount(row.quantity, UNIT_TYPE_KG)]
                for row in rows
            ],
        )
        canvas.cursor.move_below(bottom, spacing=10)

        canvas.ensure_room()
        canvas.write_line("Totais:", size=12, advance=7)
        for total in summary.totals:
            weight = format_amount(total.total_quantity, UNIT_TYPE_KG)
            canvas.write_line(f"{total.product_name}: {weight} ({_units(total.count)})")
        grand_weight = format_amount(summary.total_quantity, UNIT_TYPE_KG)
        canvas.write_line(f"Total Geral: {grand_weight} ({_units(summary.count)})", size=11)

    return _render(
        _title_with_day("Perus (Recheado e Sem Recheio)", date_selector),
        filename or _default_filename("perus", date_selector),
        draw,
        generated_at=generated_at,
        row_count=len(rows),
    )


def save_report(document: ReportDocument, destination: Optional[str | Path] = None) -> Path:
    """Write a rendered report, replacing any existing file only on success."""
    if destination is None:
        path = settings_repository.get_output_directory() / document.filename
    else:
        path = Path(destination).expanduser()
        if path.is_dir():
            path = path / document.filename
        elif path.suffix.lower() != ".pdf":
            path = path.with_suffix(".pdf")

    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    temporary = path.with_name(f".{path.name}.{uuid4().hex}.part")
    try:
        temporary.write_bytes(document.content)
        temporary.replace(path)
    except OSError:
        _safe_unlink(temporary)
        raise

    logger.info("Saved %s (%d bytes)", path, len(document.content))
    return path


def _build_product_totals(
    title: str,
    stem: str,
    totals: Sequence[ProductTotal],
    date_selector: str,
    products: Optional[Iterable[Product]],
    *,
    filename: Optional[str],
    generated_at: Optional[datetime],
) -> ReportDocument:
    lookup = build_unit_lookup(products)

    def draw(canvas: PdfCanvas) -> None:
        canvas.cursor.y = _TABLE_START
        bottom = canvas.table(
            ["Produto", "Quantidade Total"],
            [[row.product_name, format_quantity(row.product_name, row.total_quantity, lookup)] for row in totals],
        )
        canvas.cursor.move_below(bottom)

    return _render(
        _title_with_day(title, date_selector),
        filename or _default_filename(stem, date_selector),
        draw,
        generated_at=generated_at,
        row_count=len(totals),
    )


def _write_order_body(canvas: PdfCanvas, order: Order, lookup: UnitLookup) -> None:
    canvas.write_line(f"Local de Recolha: {pickup_location_label(order.pickup_location)}")
    if order.pickup_time:
        canvas.write_line(f"Hora: {order.pickup_time}")
    if order.address:
        canvas.write_line(f"Morada: {order.address}")
    canvas.cursor.advance(5)

    bottom = canvas.table(
        _ORDER_TABLE_HEAD,
        [
            [
                item.product_name,
                format_quantity(item.product_name, item.quantity, lookup),
                format_currency(item.item_price),
                format_currency(item.line_total),
            ]
            for item in order.line_items
        ],
        foot=["", "", "Total:", format_currency(order.total_amount)],
        font_size=9,
    )
    canvas.cursor.move_below(bottom)


def _render(
    title: str,
    filename: str,
    draw: Callable[[PdfCanvas], None],
    *,
    subtitles: Sequence[str] = (),
    generated_at: Optional[datetime] = None,
    row_count: int = 0,
) -> ReportDocument:
    settings = settings_repository.get_report_settings()
    timestamp = generated_at or datetime.now()

    with PdfCanvas(title, resolution=settings.pdf_resolution, platform=settings.qt_platform) as canvas:
        canvas.text_at(title, _TITLE_Y, size=18)
        y = _SUBTITLE_Y
        for line in [*subtitles, f"Gerado em: {format_timestamp(timestamp)}"]:
            canvas.text_at(line, y, size=12)
            y += _SUBTITLE_STEP
        draw(canvas)
        content = canvas.finish()
        page_count = canvas.page_count

    logger.info("Built %s: %d rows on %d page(s)", filename, row_count, page_count)
    return ReportDocument(filename=filename, content=content, page_count=page_count)


def _title_with_day(title: str, date_selector: Optional[str]) -> str:
    day = day_label(date_selector)
    if day:
        return f"{title} - {day} de Dezembro"
    return title


def _default_filename(stem: str, date_selector: Optional[str]) -> str:
    day = day_label(date_selector)
    if day:
        return f"{stem}-{day}-dezembro.pdf"
    return f"{stem}.pdf"


def _units(count: int) -> str:
    return f"{count} unidade{'s' if count != 1 else ''}"


def _safe_unlink(path: Path) -> None:
    try:
        path.unlink()
    except OSError:
        pass
