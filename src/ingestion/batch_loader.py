"""
Raw Orders Loader

Reads and writes the raw orders file that sits between extraction and
processing. Supports:
- The JSON envelope written by extraction ({"metadata": ..., "orders": [...]})
- A bare JSON list of orders
- WooCommerce admin CSV exports (parsed with Polars)
"""

import json
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import polars as pl
import structlog
from pydantic import BaseModel

from src.config import get_settings
from .store_identifier import StoreIdentifier

logger = structlog.get_logger(__name__)


class FileFormat(str, Enum):
    """Supported raw order file formats"""
    JSON = "json"
    CSV = "csv"


class RawOrdersNotFound(FileNotFoundError):
    """The raw orders file does not exist"""


class ExtractionSummary(BaseModel):
    """Statistics stored alongside extracted orders"""
    total_orders: int
    total_revenue: float
    stores_identified: int
    stores_unidentified: int
    extraction_date: datetime
    extraction_method: str


ADDRESS_COLUMNS = {
    "first_name": "First Name",
    "last_name": "Last Name",
    "company": "Company",
    "address_1": "Address 1",
    "address_2": "Address 2",
    "city": "City",
    "state": "State",
    "postcode": "Postcode",
    "country": "Country",
}


def _cell(row: Dict[str, Any], *columns: str, default: str = "") -> str:
    for column in columns:
        value = row.get(column)
        if value:
            return value
    return default


class BatchLoader:
    """
    Loads raw orders from JSON or WooCommerce CSV exports.

    Example:
        loader = BatchLoader()
        orders = loader.load("data/raw/orders.csv")
    """

    def __init__(self, identifier: Optional[StoreIdentifier] = None):
        self._identifier = identifier

    @property
    def identifier(self) -> StoreIdentifier:
        # Built lazily: JSON loads never need store mapping settings
        if self._identifier is None:
            self._identifier = StoreIdentifier()
        return self._identifier

    @staticmethod
    def detect_format(path: Path) -> FileFormat:
        return FileFormat.CSV if path.suffix.lower() == ".csv" else FileFormat.JSON

    def _read_json(self, path: Path) -> List[Dict[str, Any]]:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)

        if isinstance(data, list):
            return data
        return data.get("orders") or []

    def _csv_row_to_order(self, row: Dict[str, Any], default_currency: str) -> Dict[str, Any]:
        order: Dict[str, Any] = {
            "id": int(_cell(row, "Order ID", "ID")),
            "number": _cell(row, "Order Number"),
            "status": _cell(row, "Status"),
            "currency": _cell(row, "Currency", default=default_currency),
            "total": float(_cell(row, "Total", "Order Total", default="0")),
            "total_tax": float(_cell(row, "Tax Total", default="0")),
            "total_shipping": float(_cell(row, "Shipping Total", default="0")),
            "date_created": _cell(row, "Date Created", "Date"),
            "date_paid": _cell(row, "Date Paid"),
            "line_items": [],
            "shipping": {k: _cell(row, f"Shipping {c}") for k, c in ADDRESS_COLUMNS.items()},
            "billing": {k: _cell(row, f"Billing {c}") for k, c in ADDRESS_COLUMNS.items()},
            "meta_data": [],
        }

        line_items = _cell(row, "Line Items")
        if line_items:
            try:
                order["line_items"] = json.loads(line_items)
            except json.JSONDecodeError:
                logger.debug("Could not parse line items", order_id=order["id"])

        order["store"] = self.identifier.identify(order)
        return order

    def _read_csv(self, path: Path) -> List[Dict[str, Any]]:
        # Every column as text; conversion happens per row so one bad row
        # does not fail the whole file
        df = pl.read_csv(path, infer_schema_length=0)
        logger.debug("CSV headers", columns=df.columns)

        currency = get_settings().report.currency
        orders = []
        for row in df.iter_rows(named=True):
            try:
                orders.append(self._csv_row_to_order(row, currency))
            except (TypeError, ValueError) as e:
                logger.warning("Error parsing CSV row", error=str(e))

        logger.info("Parsed orders from CSV", path=str(path), orders=len(orders))
        return orders

    def load(
        self,
        path: Optional[Union[str, Path]] = None,
        file_format: Optional[FileFormat] = None,
    ) -> List[Dict[str, Any]]:
        """
        Load raw orders.

        Args:
            path: File to read (defaults to the configured raw orders file)
            file_format: Override format detection from the file extension

        Returns:
            Raw order dicts, in file order
        """
        file_path = Path(path or get_settings().data_lake.raw_orders_path)
        if not file_path.exists():
            raise RawOrdersNotFound(f"Raw orders file not found: {file_path}")

        file_format = file_format or self.detect_format(file_path)
        if file_format == FileFormat.CSV:
            orders = self._read_csv(file_path)
        else:
            orders = self._read_json(file_path)

        logger.info("Loaded raw orders", path=str(file_path), orders=len(orders))
        return orders


def summarize_orders(orders: List[Dict[str, Any]], method: str) -> ExtractionSummary:
    identified = sum(1 for o in orders if o.get("store"))
    return ExtractionSummary(
        total_orders=len(orders),
        total_revenue=sum(float(o.get("total") or 0) for o in orders),
        stores_identified=identified,
        stores_unidentified=len(orders) - identified,
        extraction_date=datetime.now(timezone.utc),
        extraction_method=method,
    )


def save_raw_orders(
    orders: List[Dict[str, Any]],
    path: Optional[Union[str, Path]] = None,
    method: str = "API",
) -> Path:
    """Write extracted orders with their summary envelope"""
    output_path = Path(path or get_settings().data_lake.raw_orders_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    summary = summarize_orders(orders, method)
    payload = {"metadata": summary.model_dump(mode="json"), "orders": orders}
    output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    logger.info("Saved raw orders", path=str(output_path), **summary.model_dump(mode="json"))
    return output_path
