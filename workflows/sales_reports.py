"""
Prefect Workflow Orchestration - Sales Reports

Scheduled pipeline that refreshes the dashboard report:
- Extraction with retries (WooCommerce API or CSV export)
- Normalization with rejected-order accounting
- Report build and consistency checks
- Report persistence
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from prefect import flow, get_run_logger, task
from prefect.runtime import flow_run

from src.aggregation import save_report
from src.config.logging import bind_run_context
from src.ingestion import BatchLoader
from src.pipeline import (
    ReportValidationError,
    extract_from_api,
    extract_from_csv,
    process_raw_orders,
    save_extracted,
)
from src.quality import ValidationStatus


# =============================================================================
# TASKS
# =============================================================================

@task(
    name="extract_orders",
    description="Extract raw orders from WooCommerce or a CSV export",
    retries=3,
    retry_delay_seconds=60,
)
async def extract_orders(csv_path: Optional[str] = None) -> List[Dict[str, Any]]:
    """Extract raw orders and persist them to the raw orders file"""
    logger = get_run_logger()

    if csv_path:
        orders = extract_from_csv(csv_path)
        method = "CSV"
    else:
        orders = await extract_from_api()
        method = "API"

    path = save_extracted(orders, method=method)
    logger.info(f"Extracted {len(orders)} orders via {method} to {path}")
    return orders


@task(
    name="load_raw_orders",
    description="Load the previously extracted raw orders file",
)
def load_raw_orders() -> List[Dict[str, Any]]:
    return BatchLoader().load()


@task(
    name="build_and_validate_report",
    description="Normalize orders, build the sales report and run consistency checks",
)
def build_and_validate_report(
    raw_orders: List[Dict[str, Any]],
    now: Optional[datetime] = None,
):
    logger = get_run_logger()

    result = process_raw_orders(raw_orders, now=now)
    validation = result.validation

    logger.info(
        f"Validation {validation.status.value}: "
        f"{validation.passed_checks}/{validation.total_checks} checks passed, "
        f"{result.normalization.rejected_count} orders rejected"
    )

    if validation.status == ValidationStatus.FAILED:
        raise ReportValidationError(validation)

    return result


@task(
    name="publish_report",
    description="Write the report JSON read by the dashboard",
)
def publish_report(result) -> str:
    path = save_report(result.report)
    return str(path)


# =============================================================================
# FLOWS
# =============================================================================

@flow(
    name="sales_report_pipeline",
    description="Extract orders and rebuild the sales dashboard report",
)
async def sales_report_pipeline(
    extract: bool = True,
    csv_path: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Sales report pipeline.

    Steps:
    1. Extract raw orders (skipped when ``extract`` is False)
    2. Normalize, build and validate the report
    3. Save the report
    """
    logger = get_run_logger()
    logger.info(f"Starting sales report pipeline (extract={extract}, csv={csv_path})")

    run_id = str(flow_run.id) if flow_run.id else None
    with bind_run_context("sales_report_pipeline", run_id=run_id, extract=extract):
        if extract:
            raw_orders = await extract_orders(csv_path)
        else:
            raw_orders = load_raw_orders()

        result = build_and_validate_report(raw_orders, now=now)
        report_path = publish_report(result)

    metadata = result.report.metadata
    return {
        "status": "success",
        "report_path": report_path,
        "order_count": metadata.order_count,
        "rejected_orders": result.normalization.rejected_count,
        "total_revenue": float(metadata.total_revenue),
        "currency": metadata.currency,
        "validation": result.validation.status.value,
    }


# =============================================================================
# DEPLOYMENT CONFIGURATION
# =============================================================================

if __name__ == "__main__":
    import asyncio

    asyncio.run(sales_report_pipeline())
