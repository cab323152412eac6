from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..models.order_models import PICKUP_LOCATIONS, UNIT_TYPE_UNIT, UNIT_TYPES, LineItem, Order, Product

logger = logging.getLogger(__name__)

_DATE_FORMAT = "%Y-%m-%d"


def load_snapshot(path: str | Path) -> Tuple[List[Order], List[Product]]:
    """Read an exported ``{"orders": [...], "products": [...]}`` JSON file."""
    source = Path(path).expanduser()
    with source.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, dict):
        raise ValueError(f"{source}: expected a JSON object with 'orders' and 'products'.")

    orders = parse_orders(payload.get("orders") or [])
    products = parse_products(payload.get("products") or [])
    logger.info("Loaded %d orders and %d products from %s", len(orders), len(products), source)
    return orders, products


def parse_products(records: Iterable[Dict[str, Any]]) -> List[Product]:
    products: List[Product] = []
    for index, record in enumerate(records):
        name = _require(record, "name", "product", index)
        unit_type = str(record.get("unit_type") or UNIT_TYPE_UNIT)
        if unit_type not in UNIT_TYPES:
            logger.warning("Product %r has unknown unit type %r; treating as units", name, unit_type)
            unit_type = UNIT_TYPE_UNIT
        products.append(
            Product(
                id=_optional_str(record.get("id")),
                name=str(name),
                price=float(record.get("price") or 0.0),
                unit_type=unit_type,
            )
        )
    return products


def parse_orders(records: Iterable[Dict[str, Any]]) -> List[Order]:
    orders: List[Order] = []
    for index, record in enumerate(records):
        location = str(_require(record, "pickup_location", "order", index))
        if location not in PICKUP_LOCATIONS:
            logger.warning("Order %d has unknown pickup location %r", index, location)

        raw_items = record.get("line_items")
        if raw_items is None:
            raw_items = record.get("products") or []

        orders.append(
            Order(
                id=_optional_str(record.get("id")),
                client_name=str(_require(record, "client_name", "order", index)),
                client_number=str(_require(record, "client_number", "order", index)),
                phone_number=_optional_str(record.get("phone_number")),
                pickup_location=location,
                pickup_date=_parse_date(record["pickup_date"]) if record.get("pickup_date") else None,
                pickup_time=_optional_str(record.get("pickup_time")),
                address=_optional_str(record.get("address")),
                created_at=_parse_timestamp(record["created_at"]) if record.get("created_at") else None,
                line_items=[_parse_line_item(item, index) for item in raw_items],
            )
        )
    return orders


def _parse_line_item(record: Dict[str, Any], order_index: int) -> LineItem:
    return LineItem(
        id=_optional_str(record.get("id")),
        product_name=str(_require(record, "product_name", "line item of order", order_index)),
        quantity=_parse_quantity(record.get("quantity")),
        item_price=float(record.get("item_price") or 0.0),
    )


def _parse_quantity(raw: Any) -> float:
    value = float(raw or 0)
    return int(value) if value.is_integer() else value


def _require(record: Dict[str, Any], key: str, kind: str, index: int) -> Any:
    value = record.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Missing '{key}' in {kind} #{index}.")
    return value


def _optional_str(value: Optional[object]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_date(raw: str) -> date:
    return datetime.strptime(str(raw)[:10], _DATE_FORMAT).date()


def _parse_timestamp(raw: str) -> Optional[datetime]:
    text = str(raw).strip().replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        try:
            return datetime.strptime(text, "%Y-%m-%d %H:%M:%S")
        except ValueError:
            logger.warning("Ignoring unparseable created_at value %r", raw)
            return None
