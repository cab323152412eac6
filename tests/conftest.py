"""Shared test fixtures for natalorders."""

import json
import os
from datetime import date, datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from natalorders.models.order_models import LineItem, Order, Product  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep generated reports and storage inside the test's tmp directory."""
    output_dir = tmp_path / "reports"
    monkeypatch.setenv("NATALORDERS_OUTPUT_DIR", str(output_dir))
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "appdata"))
    return output_dir


@pytest.fixture
def cli_runner():
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def generated_at() -> datetime:
    return datetime(2025, 12, 20, 9, 30, 0)


@pytest.fixture
def products() -> list[Product]:
    return [
        Product(id="p1", name="BACALHAU", price=18.5, unit_type="kg"),
        Product(id="p2", name="BOLO REI", price=14.0, unit_type="unit"),
        Product(id="p3", name="SOPA DE PEIXE", price=6.0, unit_type="liters"),
        Product(id="p4", name="PERU RECHEADO", price=21.0, unit_type="kg"),
        Product(id="p5", name="PERU SEM RECHEIO", price=16.0, unit_type="kg"),
    ]


@pytest.fixture
def orders() -> list[Order]:
    return [
        Order(
            id="o1",
            client_name="Maria Silva",
            client_number="007",
            pickup_location="amoreira",
            pickup_date=date(2025, 12, 23),
            pickup_time="10:00",
            created_at=datetime(2025, 12, 1, 12, 0, 0),
            line_items=[
                LineItem("BACALHAU", 2.5, 18.5),
                LineItem("BOLO REI", 1, 14.0),
                LineItem("PERU RECHEADO", 6.2, 21.0),
            ],
        ),
        Order(
            id="o2",
            client_name="Ana Costa",
            client_number="012",
            pickup_location="casa",
            pickup_date=date(2025, 12, 24),
            address="Rua das Flores 10, Lisboa",
            created_at=datetime(2025, 12, 2, 9, 15, 0),
            line_items=[
                LineItem("SOPA DE PEIXE", 1.5, 6.0),
                LineItem("BOLO REI", 2, 14.0),
                LineItem("PERU SEM RECHEIO", 4.8, 16.0),
            ],
        ),
        Order(
            id="o3",
            client_name="Maria S.",
            client_number="007",
            pickup_location="lisboa",
            pickup_date=date(2025, 12, 24),
            created_at=datetime(2025, 12, 3, 18, 45, 0),
            line_items=[
                LineItem("BACALHAU", 1.25, 18.5),
                LineItem("PERU RECHEADO", 5.5, 21.0),
            ],
        ),
        Order(
            id="o4",
            client_name="Zé Pereira",
            client_number="101",
            pickup_location="cascais",
            pickup_date=None,
            line_items=[],
        ),
    ]


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    """A JSON export shaped like the hosted store's tables."""
    payload = {
        "products": [
            {"id": "p1", "name": "BACALHAU", "price": 18.5, "unit_type": "kg"},
            {"id": "p2", "name": "BOLO REI", "price": 14, "unit_type": "unit"},
            {"id": "p4", "name": "PERU RECHEADO", "price": 21, "unit_type": "kg"},
        ],
        "orders": [
            {
                "id": "o1",
                "client_name": "Maria Silva",
                "client_number": "007",
                "phone_number": "912345678",
                "pickup_location": "amoreira",
                "pickup_date": "2025-12-23",
                "pickup_time": "10:00",
                "address": None,
                "created_at": "2025-12-01T12:00:00.000000+00:00",
                "products": [
                    {"id": "i1", "product_name": "BACALHAU", "quantity": 2.5, "item_price": 18.5},
                    {"id": "i2", "product_name": "BOLO REI", "quantity": 1, "item_price": 14},
                    {"id": "i3", "product_name": "PERU RECHEADO", "quantity": 6.2, "item_price": 21},
                ],
            },
            {
                "id": "o2",
                "client_name": "Ana Costa",
                "client_number": "012",
                "pickup_location": "casa",
                "pickup_date": "2025-12-24",
                "address": "Rua das Flores 10, Lisboa",
                "created_at": "2025-12-02T09:15:00Z",
                "products": [
                    {"product_name": "BOLO REI", "quantity": 2, "item_price": 14},
                ],
            },
        ],
    }
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path
