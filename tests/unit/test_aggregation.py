"""
Unit Tests - Aggregation Passes
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from src.aggregation import (
    Granularity,
    LineItem,
    Order,
    group_by_product,
    group_by_store,
    group_by_time,
    product_store_matrix,
)


def _by_id(records):
    return {r.product_id: r for r in records}


def _order(order_id, product_id, name, store="Paris Store", revenue="10.00", quantity=1):
    return Order(
        id=order_id,
        created_at=datetime(2026, 3, 2, 9, tzinfo=timezone.utc),
        total_amount=Decimal(revenue),
        store_label=store,
        line_items=(LineItem(product_id, name, quantity, Decimal(revenue)),),
    )


class TestGroupByProduct:
    """Tests for sales by product"""

    def test_calibration_totals(self, calibration_orders):
        products = _by_id(group_by_product(calibration_orders))

        assert products[101].total.revenue == Decimal("270.00")
        assert products[101].total.quantity == 9
        assert products[101].total.orders == 3
        assert products[102].total.revenue == Decimal("160.00")
        assert products[103].total.revenue == Decimal("165.00")
        assert products[104].total.revenue == Decimal("55.00")

    def test_first_seen_order(self, calibration_orders):
        assert [p.product_id for p in group_by_product(calibration_orders)] == [101, 102, 103, 104]

    def test_daily_buckets(self, calibration_orders):
        product = _by_id(group_by_product(calibration_orders))[101]

        assert set(product.daily) == {"2026-01-15", "2026-01-16"}
        assert product.daily["2026-01-15"].quantity == 5
        assert product.daily["2026-01-15"].revenue == Decimal("150.00")
        assert product.daily["2026-01-15"].orders == 2
        assert product.weekly["2026-W03"].revenue == Decimal("270.00")
        assert product.monthly["2026-01"].revenue == Decimal("270.00")

    def test_orders_counts_line_item_occurrences(self):
        order = Order(
            id=1,
            created_at=datetime(2026, 3, 2, tzinfo=timezone.utc),
            total_amount=Decimal("20"),
            line_items=(
                LineItem(7, "Mug", 1, Decimal("10")),
                LineItem(7, "Mug", 1, Decimal("10")),
            ),
        )
        product = group_by_product([order])[0]

        assert product.total.orders == 2
        assert product.total.quantity == 2

    def test_first_seen_name_wins(self):
        products = group_by_product([
            _order(1, 101, "Espresso Cup"),
            _order(2, 101, "Espresso Cup (new)"),
        ])

        assert len(products) == 1
        assert products[0].name == "Espresso Cup"
        assert products[0].total.orders == 2

    def test_int_and_str_ids_stay_distinct(self):
        products = group_by_product([_order(1, 101, "A"), _order(2, "101", "A")])
        assert len(products) == 2

    def test_storeless_orders_still_count(self, calibration_orders, storeless_order):
        products = _by_id(group_by_product(calibration_orders + [storeless_order]))
        assert products[101].total.revenue == Decimal("300.00")

    def test_empty_input(self):
        assert group_by_product([]) == []

    def test_granularity_view(self, calibration_orders):
        view = _by_id(group_by_product(calibration_orders))[104].granularity_view(Granularity.DAILY)
        assert view == {
            "product_id": 104,
            "name": "Product D",
            "2026-01-17": {"quantity": 1, "revenue": Decimal("55.00"), "orders": 1},
        }


class TestGroupByStore:
    """Tests for sales by store"""

    def test_calibration_totals(self, calibration_orders):
        stores = {s.store_name: s for s in group_by_store(calibration_orders)}

        assert stores["Paris Store"].total.revenue == Decimal("175.00")
        assert stores["Paris Store"].total.orders == 2
        assert stores["Lyon Store"].total.revenue == Decimal("275.00")
        assert stores["Marseille Store"].total.revenue == Decimal("200.00")
        assert list(stores) == ["Paris Store", "Lyon Store", "Marseille Store"]

    def test_product_breakdown(self, calibration_orders):
        paris = {s.store_name: s for s in group_by_store(calibration_orders)}["Paris Store"]
        breakdown = paris.total.products

        assert breakdown[101].quantity == 2
        assert breakdown[101].revenue == Decimal("60.00")
        assert breakdown[102].quantity == 2
        assert breakdown[102].revenue == Decimal("80.00")
        assert breakdown[103].name == "Product C"

    def test_one_order_per_bucket_regardless_of_items(self, calibration_orders):
        lyon = {s.store_name: s for s in group_by_store(calibration_orders)}["Lyon Store"]
        assert lyon.daily["2026-01-15"].orders == 1
        assert lyon.weekly["2026-W03"].orders == 2

    def test_storeless_orders_skipped(self, calibration_orders, storeless_order):
        stores = group_by_store(calibration_orders + [storeless_order])

        assert len(stores) == 3
        assert sum(s.total.revenue for s in stores) == Decimal("650.00")

    def test_labels_match_exactly(self):
        stores = group_by_store([
            _order(1, 1, "A", store="Paris Store"),
            _order(2, 1, "A", store="paris store"),
        ])
        assert len(stores) == 2

    def test_blank_label_is_absent(self):
        assert group_by_store([_order(1, 1, "A", store="")]) == []


class TestProductStoreMatrix:
    """Tests for the product x store matrix"""

    def test_calibration_pairs(self, calibration_orders):
        matrix = {m.key: m for m in product_store_matrix(calibration_orders)}

        assert len(matrix) == 8
        assert matrix[(101, "Paris Store")].revenue == Decimal("60.00")
        assert matrix[(101, "Paris Store")].quantity == 2
        assert matrix[(103, "Lyon Store")].revenue == Decimal("130.00")
        assert matrix[(103, "Lyon Store")].orders == 2

    def test_tuple_keys_do_not_collide(self):
        """Ids and labels containing separators never merge"""
        matrix = product_store_matrix([
            _order(1, "a-b", "X", store="c"),
            _order(2, "a", "Y", store="b-c"),
        ])
        assert len(matrix) == 2

    def test_storeless_orders_skipped(self, calibration_orders, storeless_order):
        with_storeless = product_store_matrix(calibration_orders + [storeless_order])
        assert len(with_storeless) == len(product_store_matrix(calibration_orders))

    def test_to_dict_is_flat(self, calibration_orders):
        entry = product_store_matrix(calibration_orders)[0]
        assert entry.to_dict() == {
            "product_id": 101,
            "product_name": "Product A",
            "store_name": "Paris Store",
            "quantity": 2,
            "revenue": Decimal("60.00"),
            "orders": 1,
        }


class TestGroupByTime:
    """Tests for the time series"""

    def test_calibration_series(self, calibration_orders):
        series = group_by_time(calibration_orders)

        assert series.total.revenue == Decimal("650.00")
        assert series.total.orders == 5
        assert series.total.items_sold == 18
        assert series.daily["2026-01-15"].revenue == Decimal("250.00")
        assert series.daily["2026-01-16"].items_sold == 8
        assert series.weekly["2026-W03"].orders == 5

    def test_storeless_orders_included(self, calibration_orders, storeless_order):
        series = group_by_time(calibration_orders + [storeless_order])
        assert series.total.revenue == Decimal("680.00")
        assert series.total.orders == 6

    def test_points_sorted_by_key(self, calibration_orders):
        points = group_by_time(list(reversed(calibration_orders))).points(Granularity.DAILY)
        assert [p["date"] for p in points] == ["2026-01-15", "2026-01-16", "2026-01-17"]

    def test_empty_input(self):
        series = group_by_time([])
        assert series.total.revenue == Decimal("0")
        assert series.daily == {}


class TestReconciliation:
    """Every granularity sums to the same total"""

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_products(self, calibration_orders, storeless_order, granularity):
        for product in group_by_product(calibration_orders + [storeless_order]):
            bucket_sum = sum((t.revenue for t in product.buckets(granularity).values()), Decimal("0"))
            assert bucket_sum == product.total.revenue

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_stores(self, calibration_orders, granularity):
        for store in group_by_store(calibration_orders):
            bucket_sum = sum((t.revenue for t in store.buckets(granularity).values()), Decimal("0"))
            assert bucket_sum == store.total.revenue

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_time(self, calibration_orders, granularity):
        series = group_by_time(calibration_orders)
        bucket_sum = sum((t.revenue for t in series.buckets(granularity).values()), Decimal("0"))
        assert bucket_sum == series.total.revenue


class TestReconciliationAcrossPeriods:
    """Buckets reconcile when orders span years, weeks and months"""

    def test_bucket_keys_spread(self, multi_period_orders):
        series = group_by_time(multi_period_orders)

        assert list(series.weekly) == ["2025-W53", "2026-W01", "2026-W02", "2026-W04", "2026-W07"]
        assert list(series.monthly) == ["2025-12", "2026-01", "2026-02"]
        assert series.total.revenue == Decimal("329.50")

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_products(self, multi_period_orders, granularity):
        products = group_by_product(multi_period_orders)
        for product in products:
            bucket_sum = sum((t.revenue for t in product.buckets(granularity).values()), Decimal("0"))
            assert bucket_sum == product.total.revenue
        assert sum((p.total.revenue for p in products), Decimal("0")) == Decimal("329.50")
        assert _by_id(products)[101].total.revenue == Decimal("139.51")

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_stores(self, multi_period_orders, granularity):
        stores = group_by_store(multi_period_orders)
        for store in stores:
            bucket_sum = sum((t.revenue for t in store.buckets(granularity).values()), Decimal("0"))
            assert bucket_sum == store.total.revenue
        # The storeless order stays out of every store bucket
        assert {s.store_name: s.total.revenue for s in stores} == {
            "Paris Store": Decimal("200.00"),
            "Lyon Store": Decimal("109.51"),
        }

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_time(self, multi_period_orders, granularity):
        series = group_by_time(multi_period_orders)
        buckets = series.buckets(granularity)

        assert len(buckets) > 1
        assert sum((t.revenue for t in buckets.values()), Decimal("0")) == Decimal("329.50")
        assert sum(t.orders for t in buckets.values()) == 5


class TestOrderIndependence:
    """Totals do not depend on input order and passes are repeatable"""

    def test_reversed_input_same_totals(self, calibration_orders):
        forward = {p.product_id: p.to_dict() for p in group_by_product(calibration_orders)}
        backward = {p.product_id: p.to_dict() for p in group_by_product(list(reversed(calibration_orders)))}
        assert forward == backward

        forward_stores = {s.store_name: s.total.revenue for s in group_by_store(calibration_orders)}
        backward_stores = {s.store_name: s.total.revenue for s in group_by_store(calibration_orders[::-1])}
        assert forward_stores == backward_stores

    def test_repeatable(self, calibration_orders):
        first = [p.to_dict() for p in group_by_product(calibration_orders)]
        second = [p.to_dict() for p in group_by_product(calibration_orders)]
        assert first == second
