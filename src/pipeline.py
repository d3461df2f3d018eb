"""
Report Pipeline Steps

Plain functions behind both the command line and the Prefect flow:
extract raw orders, turn them into a validated report, save it.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx
import structlog

from src.aggregation import SalesReport, build_report, save_report
from src.config import get_settings
from src.config.settings import WooCommerceSettings
from src.ingestion import (
    BatchLoader,
    FileFormat,
    NormalizationResult,
    WooCommerceClient,
    normalize_orders,
    save_raw_orders,
)
from src.quality import ValidationResult, ValidationStatus, create_report_validator

logger = structlog.get_logger(__name__)


class ReportValidationError(RuntimeError):
    """A built report failed an error-level consistency check"""

    def __init__(self, validation: ValidationResult):
        self.validation = validation
        names = ", ".join(c.name for c in validation.failures)
        super().__init__(f"Report failed validation: {names}")


@dataclass
class ProcessingResult:
    report: SalesReport
    normalization: NormalizationResult
    validation: ValidationResult


async def extract_from_api(
    config: Optional[WooCommerceSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[Dict[str, Any]]:
    async with WooCommerceClient(config=config, transport=transport) as client:
        return await client.fetch_orders()


def extract_from_csv(path: Union[str, Path]) -> List[Dict[str, Any]]:
    return BatchLoader().load(path, file_format=FileFormat.CSV)


def save_extracted(orders: List[Dict[str, Any]], method: str, path: Optional[Union[str, Path]] = None) -> Path:
    return save_raw_orders(orders, path=path, method=method)


def process_raw_orders(
    raw_orders: List[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> ProcessingResult:
    """
    Normalize, aggregate and validate one batch of raw orders.

    Invalid orders are excluded (see NormalizationResult.rejected);
    the report is built from the rest.
    """
    report_settings = get_settings().report
    normalization = normalize_orders(raw_orders, timezone=report_settings.timezone)
    report = build_report(normalization.orders, now=now)

    validator = create_report_validator(
        top_products_limit=report_settings.top_products_limit,
        top_stores_limit=report_settings.top_stores_limit,
        top_combinations_limit=report_settings.top_combinations_limit,
    )
    validation = validator.validate(report)

    return ProcessingResult(report=report, normalization=normalization, validation=validation)


def run_processing(
    raw_path: Optional[Union[str, Path]] = None,
    report_path: Optional[Union[str, Path]] = None,
    now: Optional[datetime] = None,
) -> ProcessingResult:
    """
    Load the raw orders file, build the report and save it.

    Raises:
        RawOrdersNotFound: The raw orders file does not exist
        ReportValidationError: The report failed an error-level check
    """
    raw_orders = BatchLoader().load(raw_path)
    result = process_raw_orders(raw_orders, now=now)

    if result.validation.status == ValidationStatus.FAILED:
        raise ReportValidationError(result.validation)

    save_report(result.report, report_path)
    return result
