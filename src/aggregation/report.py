"""
Sales Report Assembly

Runs every aggregation pass once over the same order list and wraps the
results, rankings, current-period snapshots and summary metadata into a
single immutable SalesReport. The report serializes to the JSON document
the dashboard reads (sales_reports.json).
"""

import json
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union
from zoneinfo import ZoneInfo

import structlog

from src.config import get_settings
from .buckets import Granularity
from .matrix import ProductStoreSales, product_store_matrix
from .models import Order
from .products import ProductSales, group_by_product
from .ranking import RankField, top_n
from .snapshots import Overview, build_overview
from .stores import StoreSales, group_by_store
from .timeline import TimeSeries, group_by_time

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReportMetadata:
    """Summary stamped on every report"""
    generated_at: datetime
    currency: str
    order_count: int
    total_revenue: Decimal
    total_orders: int
    total_items_sold: int
    store_identified_count: int
    store_unidentified_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "currency": self.currency,
            "order_count": self.order_count,
            "total_revenue": self.total_revenue,
            "total_orders": self.total_orders,
            "total_items_sold": self.total_items_sold,
            "store_identified_count": self.store_identified_count,
            "store_unidentified_count": self.store_unidentified_count,
        }


@dataclass(frozen=True)
class SalesReport:
    """
    One processing run's sales report.

    Built once from a full order list and never mutated afterwards. The
    record collections are tuples, but the records inside them are the
    aggregation accumulators themselves (top lists share them with the full
    collections) and stay mutable through their ``add`` methods. Callers
    treat them as read-only; ``to_dict`` and ``to_json`` return independent
    copies for anything that needs to change the data.
    """
    metadata: ReportMetadata
    products: Tuple[ProductSales, ...]
    top_products: Tuple[ProductSales, ...]
    stores: Tuple[StoreSales, ...]
    top_stores: Tuple[StoreSales, ...]
    matrix: Tuple[ProductStoreSales, ...]
    top_combinations: Tuple[ProductStoreSales, ...]
    time_series: TimeSeries
    overview: Overview

    def to_dict(self) -> Dict[str, Any]:
        """Report in its wire layout; money stays Decimal until serialized"""
        return {
            "metadata": self.metadata.to_dict(),
            "sales_by_product": {
                "all": [p.to_dict() for p in self.products],
                "top_products": [p.to_dict() for p in self.top_products],
                **{
                    g.value: [p.granularity_view(g) for p in self.products]
                    for g in Granularity
                },
            },
            "sales_by_store": {
                "all": [s.to_dict() for s in self.stores],
                "top_stores": [s.to_dict() for s in self.top_stores],
                **{
                    g.value: [s.granularity_view(g) for s in self.stores]
                    for g in Granularity
                },
            },
            "product_store_matrix": {
                "all": [m.to_dict() for m in self.matrix],
                "top_combinations": [m.to_dict() for m in self.top_combinations],
            },
            "sales_by_time": self.time_series.to_dict(),
            "overview": self.overview.to_dict(),
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return dumps_report(self.to_dict(), indent=indent)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        # Dashboard charts need numbers, not strings
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _limit(value: Optional[int], default: int) -> int:
    return default if value is None else value


def dumps_report(report: Dict[str, Any], indent: Optional[int] = 2) -> str:
    return json.dumps(report, default=_json_default, indent=indent, ensure_ascii=False)


def build_report(
    orders: Sequence[Order],
    now: Optional[datetime] = None,
    currency: Optional[str] = None,
    timezone: Optional[str] = None,
    top_products_limit: Optional[int] = None,
    top_stores_limit: Optional[int] = None,
    top_combinations_limit: Optional[int] = None,
) -> SalesReport:
    """
    Build the sales report for a full, already-normalized order list.

    Args:
        orders: Every order to report on, materialized up front
        now: Reference instant for the overview snapshots and generated_at
        currency: Currency code stamped on the metadata
        timezone: Reporting timezone ``now`` is expressed in
        top_*_limit: Ranking sizes (defaults 10 / 10 / 20 from settings)

    Returns:
        SalesReport; an empty order list yields empty aggregates and zero totals
    """
    report_settings = get_settings().report
    tz = ZoneInfo(timezone or report_settings.timezone)
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is not None:
        now = now.astimezone(tz)
    currency = currency or report_settings.currency

    orders = list(orders)
    logger.info("Building sales report", orders=len(orders), reference_time=now.isoformat())

    products = group_by_product(orders)
    stores = group_by_store(orders)
    matrix = product_store_matrix(orders)
    time_series = group_by_time(orders)

    identified = sum(1 for order in orders if order.has_store)

    metadata = ReportMetadata(
        generated_at=now,
        currency=currency,
        order_count=len(orders),
        total_revenue=time_series.total.revenue,
        total_orders=time_series.total.orders,
        total_items_sold=time_series.total.items_sold,
        store_identified_count=identified,
        store_unidentified_count=len(orders) - identified,
    )

    report = SalesReport(
        metadata=metadata,
        products=tuple(products),
        top_products=tuple(top_n(
            products, RankField.REVENUE, _limit(top_products_limit, report_settings.top_products_limit)
        )),
        stores=tuple(stores),
        top_stores=tuple(top_n(
            stores, RankField.REVENUE, _limit(top_stores_limit, report_settings.top_stores_limit)
        )),
        matrix=tuple(matrix),
        top_combinations=tuple(top_n(
            matrix, RankField.REVENUE, _limit(top_combinations_limit, report_settings.top_combinations_limit)
        )),
        time_series=time_series,
        overview=build_overview(orders, now),
    )

    logger.info(
        "Sales report built",
        currency=currency,
        total_revenue=str(metadata.total_revenue),
        total_orders=metadata.total_orders,
        products=len(products),
        stores=len(stores),
        store_unidentified=metadata.store_unidentified_count,
    )

    return report


def empty_report(now: Optional[datetime] = None) -> Dict[str, Any]:
    """All-zero report in wire layout, served when no report has been generated yet"""
    return json.loads(build_report([], now=now).to_json(indent=None))


def save_report(report: SalesReport, path: Optional[Union[str, Path]] = None) -> Path:
    """Write the report JSON, creating the processed directory if needed"""
    output_path = Path(path or get_settings().data_lake.report_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report.to_json(), encoding="utf-8")

    logger.info("Report saved", path=str(output_path))
    return output_path


def load_report(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Read a previously saved report in its wire layout"""
    report_path = Path(path or get_settings().data_lake.report_path)
    with open(report_path, "r", encoding="utf-8") as fh:
        return json.load(fh)
