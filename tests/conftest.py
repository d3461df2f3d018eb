"""
Test Suite Configuration
"""
import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

import pytest

from src.aggregation import LineItem, Order, build_report
from src.config import Settings, StoreMappingEntry

# Reference instant for reports built in tests: Saturday 2026-01-17, 18:00 UTC
REPORT_NOW = datetime(2026, 1, 17, 18, 0, tzinfo=timezone.utc)


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def _item(product_id, name, quantity, revenue) -> LineItem:
    return LineItem(
        product_id=product_id,
        product_name=name,
        quantity=quantity,
        line_revenue=Decimal(revenue),
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def report_now() -> datetime:
    return REPORT_NOW


@pytest.fixture
def calibration_orders() -> List[Order]:
    """Five orders over three days in three stores"""
    return [
        Order(
            id=1,
            created_at=_ts("2026-01-15T10:00:00"),
            total_amount=Decimal("100.00"),
            store_label="Paris Store",
            line_items=(
                _item(101, "Product A", 2, "60.00"),
                _item(102, "Product B", 1, "40.00"),
            ),
        ),
        Order(
            id=2,
            created_at=_ts("2026-01-15T11:00:00"),
            total_amount=Decimal("150.00"),
            store_label="Lyon Store",
            line_items=(
                _item(101, "Product A", 3, "90.00"),
                _item(103, "Product C", 1, "60.00"),
            ),
        ),
        Order(
            id=3,
            created_at=_ts("2026-01-16T09:00:00"),
            total_amount=Decimal("75.00"),
            store_label="Paris Store",
            line_items=(
                _item(102, "Product B", 1, "40.00"),
                _item(103, "Product C", 1, "35.00"),
            ),
        ),
        Order(
            id=4,
            created_at=_ts("2026-01-16T14:00:00"),
            total_amount=Decimal("200.00"),
            store_label="Marseille Store",
            line_items=(
                _item(101, "Product A", 4, "120.00"),
                _item(102, "Product B", 2, "80.00"),
            ),
        ),
        Order(
            id=5,
            created_at=_ts("2026-01-17T10:00:00"),
            total_amount=Decimal("125.00"),
            store_label="Lyon Store",
            line_items=(
                _item(103, "Product C", 2, "70.00"),
                _item(104, "Product D", 1, "55.00"),
            ),
        ),
    ]


@pytest.fixture
def multi_period_orders() -> List[Order]:
    """Orders across the year boundary, five weeks and three months, one storeless"""
    return [
        Order(
            id=11,
            created_at=_ts("2025-12-31T20:00:00"),
            total_amount=Decimal("80.00"),
            store_label="Paris Store",
            line_items=(
                _item(101, "Product A", 2, "50.00"),
                _item(102, "Product B", 1, "30.00"),
            ),
        ),
        Order(
            id=12,
            created_at=_ts("2026-01-01T09:30:00"),
            total_amount=Decimal("45.50"),
            store_label="Lyon Store",
            line_items=(_item(101, "Product A", 1, "45.50"),),
        ),
        Order(
            id=13,
            created_at=_ts("2026-01-10T16:00:00"),
            total_amount=Decimal("19.99"),
            store_label=None,
            line_items=(_item(103, "Product C", 1, "19.99"),),
        ),
        Order(
            id=14,
            created_at=_ts("2026-01-20T11:15:00"),
            total_amount=Decimal("120.00"),
            store_label="Paris Store",
            line_items=(
                _item(102, "Product B", 2, "60.00"),
                _item(103, "Product C", 2, "60.00"),
            ),
        ),
        Order(
            id=15,
            created_at=_ts("2026-02-14T13:00:00"),
            total_amount=Decimal("64.01"),
            store_label="Lyon Store",
            line_items=(
                _item(101, "Product A", 1, "44.01"),
                _item(104, "Product D", 1, "20.00"),
            ),
        ),
    ]


@pytest.fixture
def storeless_order() -> Order:
    """An order whose store could not be identified"""
    return Order(
        id=6,
        created_at=_ts("2026-01-17T12:00:00"),
        total_amount=Decimal("30.00"),
        store_label=None,
        line_items=(_item(101, "Product A", 1, "30.00"),),
    )


@pytest.fixture
def calibration_report(calibration_orders):
    return build_report(calibration_orders, now=REPORT_NOW, currency="EUR", timezone="UTC")


@pytest.fixture
def calibration_report_dict(calibration_report) -> Dict[str, Any]:
    """Report as the dashboard reads it back from disk"""
    return json.loads(calibration_report.to_json())


@pytest.fixture
def raw_orders() -> List[Dict[str, Any]]:
    """Raw order payloads as written by the extraction step"""
    return [
        {
            "id": 1,
            "status": "completed",
            "currency": "EUR",
            "total": 100.0,
            "date_created": "2026-01-15T10:00:00",
            "store": "Paris Store",
            "line_items": [
                {"product_id": 101, "name": "Product A", "quantity": 2, "total": 60.0},
                {"product_id": 102, "name": "Product B", "quantity": 1, "total": 40.0},
            ],
        },
        {
            "id": 2,
            "status": "completed",
            "currency": "EUR",
            "total": "150.00",
            "date_created": "2026-01-15T11:00:00Z",
            "store": "",
            "line_items": [
                {"product_id": 103, "name": None, "quantity": 1, "total": "150.00"},
            ],
        },
        {
            "id": 3,
            "total": 10.0,
            "date_created": "not a date",
            "store": "Lyon Store",
            "line_items": [],
        },
    ]


@pytest.fixture
def store_mapping() -> List[StoreMappingEntry]:
    return [
        StoreMappingEntry(store="Paris Store", city_pattern="Paris*", state_pattern="IDF"),
        StoreMappingEntry(store="Lyon Store", city_pattern="lyon", state_pattern="ARA"),
    ]
