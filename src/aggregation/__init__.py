"""
Sales Aggregation Engine
"""
from .buckets import Granularity, bucket_keys, day_key, month_key, week_key
from .matrix import ProductStoreSales, product_store_matrix
from .models import InvalidOrderData, InvalidTimestamp, LineItem, Order
from .products import ProductSales, group_by_product
from .ranking import RankField, top_n
from .report import SalesReport, build_report, empty_report, load_report, save_report
from .snapshots import Overview, PeriodSnapshot, build_overview
from .stores import StoreSales, group_by_store
from .timeline import TimeSeries, group_by_time

__all__ = [
    "Granularity",
    "bucket_keys",
    "day_key",
    "week_key",
    "month_key",
    "InvalidOrderData",
    "InvalidTimestamp",
    "LineItem",
    "Order",
    "ProductSales",
    "group_by_product",
    "StoreSales",
    "group_by_store",
    "ProductStoreSales",
    "product_store_matrix",
    "TimeSeries",
    "group_by_time",
    "RankField",
    "top_n",
    "Overview",
    "PeriodSnapshot",
    "build_overview",
    "SalesReport",
    "build_report",
    "empty_report",
    "save_report",
    "load_report",
]
