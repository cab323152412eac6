from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..models.order_models import (
    PICKUP_LOCATIONS,
    UNIT_TYPE_KG,
    UNIT_TYPE_LITERS,
    UNIT_TYPE_UNIT,
    Product,
)


UnitLookup = Mapping[str, str]

_UNIT_SUFFIXES: Dict[str, str] = {
    UNIT_TYPE_UNIT: "un",
    UNIT_TYPE_KG: "kg",
    UNIT_TYPE_LITERS: "L",
}
_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]+")


def build_unit_lookup(products: Optional[Iterable[Product]]) -> Dict[str, str]:
    """Map product names to unit types.

    Products are joined to line items by name only, so a repeated name keeps
    the unit type of the last product seen.
    """
    lookup: Dict[str, str] = {}
    for product in products or []:
        lookup[product.name] = product.unit_type
    return lookup


def format_quantity(product_name: str, quantity: float, unit_lookup: Optional[UnitLookup] = None) -> str:
    unit_type = (unit_lookup or {}).get(product_name) or UNIT_TYPE_UNIT
    return format_amount(quantity, unit_type)


def format_amount(quantity: float, unit_type: str) -> str:
    if unit_type not in _UNIT_SUFFIXES:
        unit_type = UNIT_TYPE_UNIT
    if unit_type == UNIT_TYPE_UNIT:
        value = float(quantity)
        number = str(int(value)) if value.is_integer() else _trim_decimals(value)
    else:
        number = _trim_decimals(float(quantity))
    return f"{number} {_UNIT_SUFFIXES[unit_type]}"


def _trim_decimals(value: float) -> str:
    text = f"{value:.3f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text


def format_currency(value: float) -> str:
    return f"€{value:.2f}"


def format_date(value: Optional[date]) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%d/%m/%Y")


def format_timestamp(value: datetime) -> str:
    return value.strftime("%d/%m/%Y, %H:%M:%S")


def pickup_location_label(location: str) -> str:
    return PICKUP_LOCATIONS.get(location, location)


def day_label(date_selector: Optional[str]) -> Optional[str]:
    """Return the day of a specific-day selector, or None for "all"."""
    if not date_selector or date_selector == "all":
        return None
    return date_selector


def collation_key(text: str) -> Tuple[str, str]:
    """Sort key comparing accent- and case-insensitively first, then exactly."""
    return (_strip_accents(text).casefold(), text)


def safe_filename_part(text: str) -> str:
    ascii_text = _strip_accents(text).encode("ascii", "ignore").decode("ascii")
    return _NON_ALPHANUMERIC.sub("_", ascii_text).strip("_")


def _strip_accents(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))
