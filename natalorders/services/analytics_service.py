from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from ..models.order_models import (
    ALL_DATES,
    DATE_SELECTORS,
    RESERVED_PRODUCT_NAMES,
    CustomerOrders,
    Order,
    ProductCustomerQuantity,
    ProductCustomers,
    ProductTotal,
    ReservedProductSummary,
    ReservedProductTotal,
)
from .formatting import collation_key


_DECEMBER = 12


@dataclass
class _CustomerAccumulator:
    customer_name: str
    client_number: str
    quantity: float = 0.0


def filter_orders_by_date(orders: Iterable[Order], date_selector: str) -> List[Order]:
    """Keep the orders picked up on the selected December day.

    The year is not checked. Orders without a pickup date only survive the
    "all" selector.
    """
    if date_selector not in DATE_SELECTORS:
        raise ValueError(f"Unknown date selector: {date_selector!r}")

    if date_selector == ALL_DATES:
        return list(orders)

    day = int(date_selector)
    return [
        order
        for order in orders
        if order.pickup_date is not None
        and order.pickup_date.day == day
        and order.pickup_date.month == _DECEMBER
    ]


def filter_orders(
    orders: Iterable[Order],
    query: str = "",
    location: str = "",
    pickup_date: Optional[date] = None,
) -> List[Order]:
    needle = (query or "").strip().lower()
    results: List[Order] = []
    for order in orders:
        if needle and needle not in order.client_name.lower() and needle not in order.client_number.lower():
            continue
        if location and order.pickup_location != location:
            continue
        if pickup_date is not None and order.pickup_date != pickup_date:
            continue
        results.append(order)
    return results


def get_customer_orders(orders: Iterable[Order], client_number: str) -> List[Order]:
    return [order for order in orders if order.client_number == client_number]


def get_total_quantity_per_product(orders: Iterable[Order]) -> List[ProductTotal]:
    totals: Dict[str, float] = {}
    for order in orders:
        for item in order.line_items:
            if item.product_name in RESERVED_PRODUCT_NAMES:
                continue
            totals[item.product_name] = totals.get(item.product_name, 0) + item.quantity

    rows = [ProductTotal(product_name=name, total_quantity=quantity) for name, quantity in totals.items()]
    return sorted(rows, key=lambda row: collation_key(row.product_name))


def get_quantity_per_product_per_customer(
    orders: Iterable[Order],
    product_name: str,
) -> List[ProductCustomerQuantity]:
    """Sum one product's quantities per client number.

    When a number appears with different names the last name seen is kept.
    """
    customers: Dict[str, _CustomerAccumulator] = {}
    for order in orders:
        for item in order.line_items:
            if item.product_name != product_name:
                continue
            _accumulate(customers, order, item.quantity)

    return _sorted_customer_rows(product_name, customers.values())


def group_orders_by_customer(orders: Iterable[Order]) -> List[CustomerOrders]:
    groups: Dict[str, CustomerOrders] = {}
    for order in orders:
        group = groups.get(order.client_number)
        if group is None:
            group = CustomerOrders(client_number=order.client_number, client_name=order.client_name)
            groups[order.client_number] = group
        group.orders.append(order)

    return sorted(groups.values(), key=lambda group: collation_key(group.client_number))


def get_products_with_customers(orders: Iterable[Order]) -> List[ProductCustomers]:
    products: Dict[str, Dict[str, _CustomerAccumulator]] = {}
    for order in orders:
        for item in order.line_items:
            customers = products.setdefault(item.product_name, {})
            _accumulate(customers, order, item.quantity)

    sections = [
        ProductCustomers(product_name=name, customers=_sorted_customer_rows(name, customers.values()))
        for name, customers in products.items()
    ]
    return sorted(sections, key=lambda section: collation_key(section.product_name))


def get_reserved_products_by_customer(orders: Iterable[Order]) -> List[ProductCustomerQuantity]:
    rows: List[ProductCustomerQuantity] = []
    for order in orders:
        for item in order.line_items:
            if item.product_name not in RESERVED_PRODUCT_NAMES:
                continue
            rows.append(
                ProductCustomerQuantity(
                    product_name=item.product_name,
                    customer_name=order.client_name,
                    client_number=order.client_number,
                    quantity=item.quantity,
                )
            )

    return sorted(
        rows,
        key=lambda row: (
            collation_key(row.product_name),
            collation_key(row.customer_name),
            collation_key(row.client_number),
        ),
    )


def summarize_reserved_products(rows: Iterable[ProductCustomerQuantity]) -> ReservedProductSummary:
    quantities: Dict[str, float] = {name: 0.0 for name in RESERVED_PRODUCT_NAMES}
    counts: Dict[str, int] = {name: 0 for name in RESERVED_PRODUCT_NAMES}
    for row in rows:
        if row.product_name not in quantities:
            continue
        quantities[row.product_name] += row.quantity
        counts[row.product_name] += 1

    return ReservedProductSummary(
        totals=[
            ReservedProductTotal(product_name=name, total_quantity=quantities[name], count=counts[name])
            for name in RESERVED_PRODUCT_NAMES
        ]
    )


def _accumulate(customers: Dict[str, _CustomerAccumulator], order: Order, quantity: float) -> None:
    entry = customers.get(order.client_number)
    if entry is None:
        entry = _CustomerAccumulator(customer_name=order.client_name, client_number=order.client_number)
        customers[order.client_number] = entry
    else:
        entry.customer_name = order.client_name
    entry.quantity += quantity


def _sorted_customer_rows(
    product_name: str,
    customers: Iterable[_CustomerAccumulator],
) -> List[ProductCustomerQuantity]:
    rows = [
        ProductCustomerQuantity(
            product_name=product_name,
            customer_name=entry.customer_name,
            client_number=entry.client_number,
            quantity=entry.quantity,
        )
        for entry in customers
    ]
    return sorted(rows, key=lambda row: (collation_key(row.customer_name), collation_key(row.client_number)))
