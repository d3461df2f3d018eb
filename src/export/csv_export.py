"""
CSV Export

Flattens the ``all`` collections of a report (wire layout) into CSV with a
fixed header per export type. Polars takes care of quoting fields that
contain commas, quotes or newlines.
"""

from enum import Enum
from typing import Any, Dict, List, Tuple

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


class ExportType(str, Enum):
    PRODUCTS = "products"
    STORES = "stores"
    MATRIX = "matrix"

    @property
    def filename(self) -> str:
        return f"{self.value}-export.csv"


def _money(value: Any) -> str:
    # Reports loaded from JSON carry floats, freshly built ones carry Decimals
    return str(value if value is not None else 0)


def _product_rows(report: Dict[str, Any]) -> Tuple[Dict[str, Any], List[Tuple]]:
    schema = {"Product ID": pl.Utf8, "Product Name": pl.Utf8, "Quantity": pl.Int64, "Revenue": pl.Utf8}
    rows = [
        (str(p["product_id"]), p["name"], p["total"]["quantity"], _money(p["total"]["revenue"]))
        for p in report["sales_by_product"]["all"]
    ]
    return schema, rows


def _store_rows(report: Dict[str, Any]) -> Tuple[Dict[str, Any], List[Tuple]]:
    schema = {"Store Name": pl.Utf8, "Orders": pl.Int64, "Revenue": pl.Utf8}
    rows = [
        (s["store_name"], s["total"]["orders"], _money(s["total"]["revenue"]))
        for s in report["sales_by_store"]["all"]
    ]
    return schema, rows


def _matrix_rows(report: Dict[str, Any]) -> Tuple[Dict[str, Any], List[Tuple]]:
    schema = {"Product Name": pl.Utf8, "Store Name": pl.Utf8, "Quantity": pl.Int64, "Revenue": pl.Utf8}
    rows = [
        (m["product_name"], m["store_name"], m["quantity"], _money(m["revenue"]))
        for m in report["product_store_matrix"]["all"]
    ]
    return schema, rows


_BUILDERS = {
    ExportType.PRODUCTS: _product_rows,
    ExportType.STORES: _store_rows,
    ExportType.MATRIX: _matrix_rows,
}


def export_dataframe(report: Dict[str, Any], export_type: ExportType) -> pl.DataFrame:
    """One row per record of the chosen collection"""
    schema, rows = _BUILDERS[ExportType(export_type)](report)
    return pl.DataFrame(rows, schema=schema, orient="row")


def export_csv(report: Dict[str, Any], export_type: ExportType) -> str:
    """
    Render one report collection as CSV text.

    Args:
        report: Report in wire layout (SalesReport.to_dict() or a loaded JSON report)
        export_type: products, stores or matrix

    Returns:
        CSV with header row
    """
    export_type = ExportType(export_type)
    df = export_dataframe(report, export_type)
    logger.info("Exporting CSV", export_type=export_type.value, rows=df.height)
    return df.write_csv()
