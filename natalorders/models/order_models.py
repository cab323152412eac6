from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple


UNIT_TYPE_UNIT = "unit"
UNIT_TYPE_KG = "kg"
UNIT_TYPE_LITERS = "liters"

UNIT_TYPES: Tuple[str, ...] = (UNIT_TYPE_UNIT, UNIT_TYPE_KG, UNIT_TYPE_LITERS)

HOME_LOCATION = "casa"

PICKUP_LOCATIONS: Dict[str, str] = {
    "amoreira": "Amoreira",
    "lisboa": "Lisboa",
    HOME_LOCATION: "Casa",
    "cascais": "Cascais",
}

# Whole turkeys are reported on their own and kept out of the product totals.
RESERVED_PRODUCT_NAMES: Tuple[str, ...] = ("PERU RECHEADO", "PERU SEM RECHEIO")

ALL_DATES = "all"
DATE_SELECTORS: Tuple[str, ...] = (ALL_DATES, "23", "24")


@dataclass
class Product:
    id: Optional[str]
    name: str
    price: float
    unit_type: str = UNIT_TYPE_UNIT


@dataclass
class LineItem:
    product_name: str
    quantity: float
    item_price: float
    id: Optional[str] = None

    @property
    def line_total(self) -> float:
        return self.quantity * self.item_price


@dataclass
class Order:
    client_name: str
    client_number: str
    pickup_location: str
    id: Optional[str] = None
    phone_number: Optional[str] = None
    pickup_date: Optional[date] = None
    pickup_time: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    line_items: List[LineItem] = field(default_factory=list)

    @property
    def total_amount(self) -> float:
        return sum(item.line_total for item in self.line_items)

    @property
    def is_home_delivery(self) -> bool:
        return self.pickup_location == HOME_LOCATION


@dataclass
class ProductTotal:
    product_name: str
    total_quantity: float


@dataclass
class ProductCustomerQuantity:
    product_name: str
    customer_name: str
    client_number: str
    quantity: float


@dataclass
class CustomerOrders:
    client_number: str
    client_name: str
    orders: List[Order] = field(default_factory=list)


@dataclass
class ProductCustomers:
    product_name: str
    customers: List[ProductCustomerQuantity] = field(default_factory=list)

    @property
    def total_quantity(self) -> float:
        return sum(customer.quantity for customer in self.customers)


@dataclass
class ReservedProductTotal:
    product_name: str
    total_quantity: float
    count: int


@dataclass
class ReservedProductSummary:
    totals: List[ReservedProductTotal]

    @property
    def total_quantity(self) -> float:
        return sum(total.total_quantity for total in self.totals)

    @property
    def count(self) -> int:
        return sum(total.count for total in self.totals)


@dataclass
class ReportDocument:
    filename: str
    content: bytes
    page_count: int = 0


@dataclass
class ReportSettings:
    output_dir: str = ""
    log_level: str = "INFO"
    qt_platform: str = "offscreen"
    pdf_resolution: int = 144
