"""Tests for the natalorders command line."""

from natalorders.main import main
from natalorders.services import report_service


class TestCLIEntry:
    def test_version_flag(self, cli_runner):
        result = cli_runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "natalorders" in result.output
        assert "1.0.0" in result.output

    def test_help_lists_reports(self, cli_runner):
        result = cli_runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("totals", "product-customers", "customer-sheets", "products-customers", "turkeys"):
            assert command in result.output


class TestReportCommands:
    def test_totals_writes_default_name(self, cli_runner, snapshot_file, isolated_settings):
        result = cli_runner.invoke(main, ["totals", str(snapshot_file), "--date", "23"])
        assert result.exit_code == 0, result.output
        written = isolated_settings / "quantidade-total-por-produto-23-dezembro.pdf"
        assert written.exists()
        assert str(written) in result.output

    def test_output_option(self, cli_runner, snapshot_file, tmp_path):
        target = tmp_path / "perus-natal.pdf"
        result = cli_runner.invoke(main, ["turkeys", str(snapshot_file), "-o", str(target)])
        assert result.exit_code == 0, result.output
        assert target.read_bytes().startswith(b"%PDF")

    def test_product_customers(self, cli_runner, snapshot_file, isolated_settings):
        result = cli_runner.invoke(main, ["product-customers", str(snapshot_file), "BOLO REI"])
        assert result.exit_code == 0, result.output
        assert (isolated_settings / "BOLO_REI-por-cliente.pdf").exists()

    def test_customer_sheets_and_products(self, cli_runner, snapshot_file, isolated_settings):
        for command, filename in (
            ("customer-sheets", "todas-fichas-cliente-24-dezembro.pdf"),
            ("products-customers", "produtos-e-clientes-24-dezembro.pdf"),
            ("all-products", "todos-produtos-quantidades-24-dezembro.pdf"),
        ):
            result = cli_runner.invoke(main, [command, str(snapshot_file), "--date", "24"])
            assert result.exit_code == 0, result.output
            assert (isolated_settings / filename).exists()

    def test_customer_report(self, cli_runner, snapshot_file, isolated_settings):
        result = cli_runner.invoke(main, ["customer", str(snapshot_file), "007"])
        assert result.exit_code == 0, result.output
        assert (isolated_settings / "Maria_Silva_007-encomendas.pdf").exists()

    def test_unknown_customer_fails(self, cli_runner, snapshot_file):
        result = cli_runner.invoke(main, ["customer", str(snapshot_file), "999"])
        assert result.exit_code != 0
        assert "No orders found" in result.output

    def test_invalid_date_is_rejected(self, cli_runner, snapshot_file):
        result = cli_runner.invoke(main, ["totals", str(snapshot_file), "--date", "25"])
        assert result.exit_code != 0

    def test_sheets_filtered_by_location(self, cli_runner, snapshot_file, monkeypatch):
        seen = []
        build = report_service.build_all_customer_sheets

        def recording_build(orders, date_selector, products):
            seen.extend(order.client_number for order in orders)
            return build(orders, date_selector, products)

        monkeypatch.setattr(report_service, "build_all_customer_sheets", recording_build)
        result = cli_runner.invoke(main, ["customer-sheets", str(snapshot_file), "--location", "casa"])
        assert result.exit_code == 0, result.output
        assert seen == ["012"]

    def test_products_filtered_by_query(self, cli_runner, snapshot_file, monkeypatch):
        seen = []
        build = report_service.build_products_with_customers_report

        def recording_build(orders, date_selector, products):
            seen.extend(order.client_name for order in orders)
            return build(orders, date_selector, products)

        monkeypatch.setattr(report_service, "build_products_with_customers_report", recording_build)
        result = cli_runner.invoke(main, ["products-customers", str(snapshot_file), "-q", "maria"])
        assert result.exit_code == 0, result.output
        assert seen == ["Maria Silva"]

    def test_unknown_location_is_rejected(self, cli_runner, snapshot_file):
        result = cli_runner.invoke(main, ["customer-sheets", str(snapshot_file), "--location", "porto"])
        assert result.exit_code != 0
