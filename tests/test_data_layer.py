"""Tests for snapshot loading and environment settings."""

import json
import logging
from datetime import date

import pytest

from natalorders.data import order_repository, settings_repository
from natalorders.models.order_models import ReportSettings


class TestLoadSnapshot:
    def test_loads_orders_and_products(self, snapshot_file):
        orders, products = order_repository.load_snapshot(snapshot_file)

        assert [product.name for product in products] == ["BACALHAU", "BOLO REI", "PERU RECHEADO"]
        assert products[0].unit_type == "kg"

        first = orders[0]
        assert first.client_number == "007"
        assert first.pickup_date == date(2025, 12, 23)
        assert first.created_at is not None and first.created_at.day == 1
        assert first.address is None
        assert [item.product_name for item in first.line_items] == ["BACALHAU", "BOLO REI", "PERU RECHEADO"]

    def test_integral_quantities_become_ints(self, snapshot_file):
        orders, _ = order_repository.load_snapshot(snapshot_file)
        assert orders[1].line_items[0].quantity == 2
        assert isinstance(orders[1].line_items[0].quantity, int)

    def test_zulu_timestamps_parse(self, snapshot_file):
        orders, _ = order_repository.load_snapshot(snapshot_file)
        assert orders[1].created_at.hour == 9

    def test_rejects_non_object_payload(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
        with pytest.raises(ValueError, match="expected a JSON object"):
            order_repository.load_snapshot(path)


class TestParseRecords:
    def test_line_items_key_is_accepted(self):
        orders = order_repository.parse_orders(
            [
                {
                    "client_name": "Rui",
                    "client_number": 15,
                    "pickup_location": "lisboa",
                    "line_items": [{"product_name": "BROA", "quantity": "3", "item_price": "2.5"}],
                }
            ]
        )
        assert orders[0].client_number == "15"
        assert orders[0].line_items[0].quantity == 3
        assert orders[0].line_items[0].item_price == 2.5
        assert orders[0].pickup_date is None

    def test_missing_client_number_raises(self):
        with pytest.raises(ValueError, match="client_number"):
            order_repository.parse_orders([{"client_name": "Rui", "pickup_location": "lisboa"}])

    def test_unknown_unit_type_falls_back_to_units(self, caplog):
        with caplog.at_level(logging.WARNING):
            products = order_repository.parse_products([{"name": "VINHO", "price": 9, "unit_type": "bottle"}])
        assert products[0].unit_type == "unit"
        assert "unknown unit type" in caplog.text

    def test_unknown_location_is_kept(self, caplog):
        with caplog.at_level(logging.WARNING):
            orders = order_repository.parse_orders(
                [{"client_name": "Rui", "client_number": "1", "pickup_location": "porto"}]
            )
        assert orders[0].pickup_location == "porto"
        assert "unknown pickup location" in caplog.text


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("NATALORDERS_OUTPUT_DIR", raising=False)
        settings = settings_repository.get_report_settings()
        assert settings.log_level == "INFO"
        assert settings.qt_platform == "offscreen"
        assert settings.pdf_resolution == 144
        assert settings.output_dir == ""

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("NATALORDERS_LOG_LEVEL", "debug")
        monkeypatch.setenv("NATALORDERS_PDF_RESOLUTION", "300")
        settings = settings_repository.get_report_settings()
        assert settings.log_level == "DEBUG"
        assert settings.pdf_resolution == 300

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("NATALORDERS_LOG_LEVEL", "chatty")
        monkeypatch.setenv("NATALORDERS_PDF_RESOLUTION", "sharp")
        settings = settings_repository.get_report_settings()
        assert settings.log_level == "INFO"
        assert settings.pdf_resolution == 144

    def test_output_directory_is_created(self, isolated_settings):
        path = settings_repository.get_output_directory()
        assert path == isolated_settings
        assert path.is_dir()

    def test_default_output_directory_under_storage_root(self, monkeypatch, tmp_path):
        monkeypatch.delenv("NATALORDERS_OUTPUT_DIR", raising=False)
        path = settings_repository.get_output_directory()
        assert path == tmp_path / "appdata" / "NatalOrders" / "reports"
        assert path.is_dir()

    def test_output_directory_follows_report_settings(self, monkeypatch, tmp_path):
        target = tmp_path / "impressao"
        monkeypatch.setattr(
            settings_repository,
            "get_report_settings",
            lambda: ReportSettings(output_dir=str(target)),
        )
        assert settings_repository.get_output_directory() == target
        assert target.is_dir()

    def test_output_dir_setting_is_read(self, isolated_settings):
        assert settings_repository.get_report_settings().output_dir == str(isolated_settings)
