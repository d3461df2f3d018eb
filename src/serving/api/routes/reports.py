"""
Sales Report Endpoints

Read-only views over the published sales report plus CSV downloads.
Every read goes through the process-wide ReportCache.
"""

from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import Response
import structlog

from src.aggregation import Granularity, RankField, empty_report, load_report, top_n
from src.config import get_settings
from src.export import ExportType, export_csv
from src.serving.cache import ReportCache

router = APIRouter()
logger = structlog.get_logger(__name__)


class OverviewPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


class TopKind(str, Enum):
    PRODUCTS = "products"
    STORES = "stores"
    COMBINATIONS = "combinations"


_OVERVIEW_KEYS = {
    OverviewPeriod.TODAY: "today",
    OverviewPeriod.WEEK: "this_week",
    OverviewPeriod.MONTH: "this_month",
}


def load_published_report() -> Dict[str, Any]:
    """Saved report, or an all-zero report when none has been generated yet"""
    path = get_settings().data_lake.report_path
    try:
        return load_report(path)
    except FileNotFoundError:
        logger.warning("Report file not found, serving empty report", path=str(path))
        return empty_report()


@lru_cache()
def get_report_cache() -> ReportCache:
    return ReportCache(load_published_report)


def get_report(cache: ReportCache = Depends(get_report_cache)) -> Dict[str, Any]:
    return cache.get_or_load()


def _top_source(report: Dict[str, Any], kind: TopKind) -> List[Dict[str, Any]]:
    if kind == TopKind.PRODUCTS:
        return report["sales_by_product"]["all"]
    if kind == TopKind.STORES:
        return report["sales_by_store"]["all"]
    return report["product_store_matrix"]["all"]


def _default_limit(kind: TopKind) -> int:
    limits = get_settings().report
    return {
        TopKind.PRODUCTS: limits.top_products_limit,
        TopKind.STORES: limits.top_stores_limit,
        TopKind.COMBINATIONS: limits.top_combinations_limit,
    }[kind]


@router.get("")
async def get_full_report(report: Dict[str, Any] = Depends(get_report)) -> Dict[str, Any]:
    """Complete report document"""
    return report


@router.get("/metadata")
async def get_metadata(report: Dict[str, Any] = Depends(get_report)) -> Dict[str, Any]:
    return report["metadata"]


@router.get("/overview")
async def get_overview(
    period: OverviewPeriod = Query(OverviewPeriod.ALL, description="today, week, month or all"),
    report: Dict[str, Any] = Depends(get_report),
) -> Dict[str, Any]:
    """Current-period snapshot(s)"""
    overview = report["overview"]
    if period == OverviewPeriod.ALL:
        return overview
    return overview[_OVERVIEW_KEYS[period]]


@router.get("/products")
async def get_products(
    granularity: Optional[Granularity] = Query(None, description="daily, weekly or monthly"),
    report: Dict[str, Any] = Depends(get_report),
) -> List[Dict[str, Any]]:
    """Product records with totals, or one granularity's bucket rows"""
    sales = report["sales_by_product"]
    return sales[granularity.value] if granularity else sales["all"]


@router.get("/stores")
async def get_stores(
    granularity: Optional[Granularity] = Query(None, description="daily, weekly or monthly"),
    report: Dict[str, Any] = Depends(get_report),
) -> List[Dict[str, Any]]:
    """Store records with totals, or one granularity's bucket rows"""
    sales = report["sales_by_store"]
    return sales[granularity.value] if granularity else sales["all"]


@router.get("/matrix")
async def get_matrix(report: Dict[str, Any] = Depends(get_report)) -> List[Dict[str, Any]]:
    return report["product_store_matrix"]["all"]


@router.get("/top/{kind}")
async def get_top(
    kind: TopKind = Path(..., description="products, stores or combinations"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    field: RankField = Query(RankField.REVENUE, description="revenue, quantity or orders"),
    report: Dict[str, Any] = Depends(get_report),
) -> List[Dict[str, Any]]:
    """
    Top-N ranking.

    Re-ranks the full collection so callers can ask for a different size
    or sort field than the precomputed top lists.
    """
    n = limit if limit is not None else _default_limit(kind)
    return top_n(_top_source(report, kind), field, n)


@router.get("/timeseries/{granularity}")
async def get_timeseries(
    granularity: Granularity,
    report: Dict[str, Any] = Depends(get_report),
) -> List[Dict[str, Any]]:
    """Time buckets sorted by key, ready for charting"""
    buckets = report["sales_by_time"][granularity.value]
    return [{"date": key, **buckets[key]} for key in sorted(buckets)]


@router.get("/export/{export_type}")
async def export_report(
    export_type: ExportType,
    report: Dict[str, Any] = Depends(get_report),
) -> Response:
    """CSV download of one report collection"""
    return Response(
        content=export_csv(report, export_type),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_type.filename}"'},
    )


@router.post("/refresh")
async def refresh_report(cache: ReportCache = Depends(get_report_cache)) -> Dict[str, Any]:
    """Drop the cached report and reload it from disk"""
    cache.invalidate()
    report = cache.get_or_load()
    logger.info("Report cache refreshed", generated_at=report["metadata"].get("generated_at"))
    return {"status": "refreshed", "metadata": report["metadata"]}
