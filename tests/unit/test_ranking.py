"""
Unit Tests - Rankings
"""
from decimal import Decimal

import pytest

from src.aggregation import RankField, group_by_product, product_store_matrix, top_n
from src.aggregation.ranking import sort_value


class TestSortValue:
    """Tests for reading ranking values"""

    def test_reads_nested_total(self):
        assert sort_value({"total": {"revenue": 12.5}}, "revenue") == 12.5

    def test_reads_flat_field(self):
        assert sort_value({"quantity": 3}, RankField.QUANTITY) == 3

    def test_missing_field_is_zero(self):
        assert sort_value({"name": "x"}, "revenue") == 0
        assert sort_value({"total": {"revenue": None}}, "revenue") == 0

    def test_order_count_alias(self):
        assert RankField("order_count") is RankField.ORDERS
        assert sort_value({"orders": 4}, "order_count") == 4

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            RankField("margin")

    def test_reads_record_objects(self, calibration_orders):
        product = group_by_product(calibration_orders)[0]
        assert sort_value(product, RankField.REVENUE) == Decimal("270.00")


class TestTopN:
    """Tests for top_n"""

    def test_descending_by_revenue(self, calibration_orders):
        ranked = top_n(group_by_product(calibration_orders), RankField.REVENUE, 10)
        assert [p.product_id for p in ranked] == [101, 103, 102, 104]

    def test_limit(self, calibration_orders):
        assert len(top_n(group_by_product(calibration_orders), "revenue", 2)) == 2
        assert top_n(group_by_product(calibration_orders), "revenue", 0) == []

    def test_limit_larger_than_input(self):
        assert len(top_n([{"revenue": 1}], "revenue", 10)) == 1

    def test_ties_keep_input_order(self, calibration_orders):
        ranked = top_n(product_store_matrix(calibration_orders), RankField.REVENUE, 20)
        tied = [(m.product_id, m.store_name) for m in ranked if m.revenue == Decimal("80.00")]
        assert tied == [(102, "Paris Store"), (102, "Marseille Store")]

    def test_by_quantity(self):
        records = [{"name": "a", "quantity": 1}, {"name": "b", "quantity": 5}, {"name": "c"}]
        assert [r["name"] for r in top_n(records, "quantity", 3)] == ["b", "a", "c"]

    def test_does_not_mutate_input(self):
        records = [{"revenue": 1}, {"revenue": 2}]
        top_n(records, "revenue", 2)
        assert records == [{"revenue": 1}, {"revenue": 2}]
