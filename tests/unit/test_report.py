"""
Unit Tests - Report Assembly
"""
import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from src.aggregation import LineItem, Order, build_report, empty_report, load_report, save_report


class TestBuildReport:
    """Tests for build_report"""

    def test_calibration_metadata(self, calibration_report, report_now):
        meta = calibration_report.metadata

        assert meta.total_revenue == Decimal("650.00")
        assert meta.total_orders == 5
        assert meta.order_count == 5
        assert meta.total_items_sold == 18
        assert meta.store_identified_count == 5
        assert meta.store_unidentified_count == 0
        assert meta.currency == "EUR"
        assert meta.generated_at == report_now

    def test_top_lists(self, calibration_report):
        assert [p.product_id for p in calibration_report.top_products] == [101, 103, 102, 104]
        assert [s.store_name for s in calibration_report.top_stores] == [
            "Lyon Store", "Marseille Store", "Paris Store",
        ]
        assert calibration_report.top_combinations[0].key == (103, "Lyon Store")

    def test_top_limits(self, calibration_orders, report_now):
        report = build_report(
            calibration_orders,
            now=report_now,
            top_products_limit=1,
            top_stores_limit=0,
            top_combinations_limit=3,
        )
        assert len(report.top_products) == 1
        assert report.top_stores == ()
        assert len(report.top_combinations) == 3

    def test_storeless_counts(self, calibration_orders, storeless_order, report_now):
        report = build_report(calibration_orders + [storeless_order], now=report_now)

        assert report.metadata.order_count == 6
        assert report.metadata.store_unidentified_count == 1
        assert report.metadata.total_revenue == Decimal("680.00")
        assert sum(s.total.revenue for s in report.stores) == Decimal("650.00")

    def test_empty_input(self, report_now):
        report = build_report([], now=report_now)

        assert report.metadata.total_revenue == Decimal("0")
        assert report.metadata.order_count == 0
        assert report.products == ()
        assert report.top_combinations == ()
        assert report.overview.today.orders == 0

    def test_now_converted_to_report_timezone(self, calibration_orders):
        now = datetime(2026, 1, 17, 23, 30, tzinfo=timezone.utc)
        report = build_report(calibration_orders, now=now, timezone="Europe/Paris")

        assert report.overview.today.label == "2026-01-18"

    def test_idempotent(self, calibration_orders, report_now):
        first = build_report(calibration_orders, now=report_now).to_json()
        second = build_report(calibration_orders, now=report_now).to_json()
        assert first == second

    def test_immutable(self, calibration_report):
        with pytest.raises(AttributeError):
            calibration_report.products = ()

    def test_top_lists_share_records(self, calibration_report):
        assert calibration_report.top_products[0] is calibration_report.products[0]

    def test_wire_copy_is_independent(self, calibration_report):
        data = calibration_report.to_dict()
        data["sales_by_product"]["all"][0]["total"]["revenue"] = Decimal("0")
        data["sales_by_store"]["all"][0]["daily"].clear()

        assert calibration_report.products[0].total.revenue == Decimal("270.00")
        assert calibration_report.stores[0].daily


class TestReportWireFormat:
    """Tests for the serialized report"""

    def test_top_level_sections(self, calibration_report_dict):
        assert set(calibration_report_dict) == {
            "metadata",
            "sales_by_product",
            "sales_by_store",
            "product_store_matrix",
            "sales_by_time",
            "overview",
        }

    def test_collections(self, calibration_report_dict):
        assert set(calibration_report_dict["sales_by_product"]) == {
            "all", "top_products", "daily", "weekly", "monthly",
        }
        assert set(calibration_report_dict["sales_by_store"]) == {
            "all", "top_stores", "daily", "weekly", "monthly",
        }
        assert set(calibration_report_dict["product_store_matrix"]) == {"all", "top_combinations"}
        assert set(calibration_report_dict["sales_by_time"]) == {"daily", "weekly", "monthly", "total"}

    def test_money_as_numbers(self, calibration_report_dict):
        meta = calibration_report_dict["metadata"]
        assert meta["total_revenue"] == 650.0
        assert meta["generated_at"] == "2026-01-17T18:00:00+00:00"

        paris = next(
            s for s in calibration_report_dict["sales_by_store"]["all"] if s["store_name"] == "Paris Store"
        )
        assert paris["total"]["revenue"] == 175.0
        breakdown = {p["product_id"]: p for p in paris["total"]["products"]}
        assert breakdown[101] == {"product_id": 101, "name": "Product A", "quantity": 2, "revenue": 60.0}

    def test_overview_sections(self, calibration_report_dict):
        overview = calibration_report_dict["overview"]
        assert overview["today"]["revenue"] == 125.0
        assert overview["this_week"]["week"] == "2026-W03"

    def test_empty_report_shape(self, report_now):
        report = empty_report(now=report_now)

        assert report["metadata"]["total_revenue"] == 0
        assert report["sales_by_product"]["all"] == []
        assert report["sales_by_time"]["total"] == {"revenue": 0.0, "orders": 0, "items_sold": 0}


class TestReportPersistence:
    """Tests for save_report / load_report"""

    def test_save_and_load(self, calibration_report, tmp_path):
        path = save_report(calibration_report, tmp_path / "processed" / "sales_reports.json")

        assert path.exists()
        loaded = load_report(path)
        assert loaded == json.loads(calibration_report.to_json())

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_report(tmp_path / "missing.json")

    def test_int_and_str_product_ids_survive_in_store_breakdown(self, tmp_path, report_now):
        order = Order(
            id=1,
            created_at=datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc),
            total_amount=Decimal("30.00"),
            store_label="Paris Store",
            line_items=(
                LineItem(product_id=101, product_name="Int", quantity=1, line_revenue=Decimal("10.00")),
                LineItem(product_id="101", product_name="Str", quantity=1, line_revenue=Decimal("20.00")),
            ),
        )
        path = save_report(build_report([order], now=report_now), tmp_path / "sales_reports.json")

        store = load_report(path)["sales_by_store"]["all"][0]
        breakdown = store["total"]["products"]

        assert len(breakdown) == 2
        assert [(p["product_id"], p["name"], p["revenue"]) for p in breakdown] == [
            (101, "Int", 10.0),
            ("101", "Str", 20.0),
        ]
