"""
Order Normalizer

Turns raw order payloads (the WooCommerce-shaped records written by the
extraction step) into immutable Order objects for the aggregation engine.

Raw records are validated with Pydantic. Money becomes Decimal, creation
dates are moved into the reporting timezone, and a record that fails
validation is reported as InvalidOrderData and left out without stopping
the rest of the batch.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Union
from zoneinfo import ZoneInfo

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.aggregation.models import InvalidOrderData, InvalidTimestamp, LineItem, Order
from src.config import get_settings

logger = structlog.get_logger(__name__)


class RawLineItem(BaseModel):
    """Line item as found in the raw orders file"""

    model_config = ConfigDict(extra="ignore")

    product_id: Union[int, str]
    name: Optional[str] = None
    quantity: int = Field(ge=0)
    total: Decimal


class RawOrder(BaseModel):
    """Order as found in the raw orders file"""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    total: Decimal
    date_created: datetime
    store: Optional[str] = None
    status: Optional[str] = None
    currency: Optional[str] = None
    line_items: List[RawLineItem] = Field(default_factory=list)

    @field_validator("line_items", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


@dataclass
class NormalizationResult:
    """Accepted orders plus the errors for every rejected record"""
    orders: List[Order] = field(default_factory=list)
    rejected: List[InvalidOrderData] = field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return len(self.orders)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in error.errors()
    )


def normalize_order(raw: Mapping[str, Any], timezone: Optional[str] = None) -> Order:
    """
    Validate one raw order and convert it to an Order.

    Naive creation dates are read as reporting-timezone local time; aware
    ones are converted to it.

    Raises:
        InvalidTimestamp: if the creation date is missing or unparseable
        InvalidOrderData: for any other invalid field
    """
    order_id = raw.get("id") if isinstance(raw, Mapping) else None

    try:
        parsed = RawOrder.model_validate(raw)
    except ValidationError as e:
        if any(err["loc"] and err["loc"][0] == "date_created" for err in e.errors()):
            raise InvalidTimestamp(order_id, _describe(e)) from e
        raise InvalidOrderData(order_id, _describe(e)) from e

    tz = ZoneInfo(timezone or get_settings().report.timezone)
    created_at = parsed.date_created
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=tz)
    else:
        created_at = created_at.astimezone(tz)

    return Order(
        id=parsed.id,
        created_at=created_at,
        total_amount=parsed.total,
        store_label=parsed.store or None,
        line_items=tuple(
            LineItem(
                product_id=item.product_id,
                product_name=item.name or f"Product {item.product_id}",
                quantity=item.quantity,
                line_revenue=item.total,
            )
            for item in parsed.line_items
        ),
        status=parsed.status,
        currency=parsed.currency,
    )


def normalize_orders(
    raw_orders: Iterable[Mapping[str, Any]],
    timezone: Optional[str] = None,
) -> NormalizationResult:
    """
    Normalize a batch of raw orders, excluding the invalid ones.

    Every rejected record is logged as a warning and returned in
    ``NormalizationResult.rejected``; input order is preserved for the rest.
    """
    result = NormalizationResult()

    for raw in raw_orders:
        try:
            result.orders.append(normalize_order(raw, timezone=timezone))
        except InvalidOrderData as e:
            logger.warning(
                "Excluding invalid order",
                order_id=e.order_id,
                error_type=type(e).__name__,
                reason=e.reason,
            )
            result.rejected.append(e)

    logger.info(
        "Orders normalized",
        accepted=result.accepted_count,
        rejected=result.rejected_count,
    )
    return result
