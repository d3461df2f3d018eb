"""
Sales Domain Models

Immutable order records consumed by the aggregation engine, the running
totals each aggregation pass accumulates, and the data errors raised while
building orders from raw payloads.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple, Union

# WooCommerce ids are integers; CSV exports and custom sources may use strings.
# Both are kept as-is so 101 and "101" never collapse into one key.
ProductId = Union[int, str]
OrderId = Union[int, str]

ZERO = Decimal("0")


class InvalidOrderData(ValueError):
    """A raw order that cannot be turned into an Order"""

    def __init__(self, order_id: Optional[OrderId], reason: str):
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"Invalid order {order_id!r}: {reason}")


class InvalidTimestamp(InvalidOrderData):
    """An order whose creation date cannot be parsed or bucketed"""


@dataclass(frozen=True)
class LineItem:
    """One product entry within an order"""
    product_id: ProductId
    product_name: str
    quantity: int
    line_revenue: Decimal


@dataclass(frozen=True)
class Order:
    """Normalized order, as handed to the aggregation engine"""
    id: OrderId
    created_at: datetime
    total_amount: Decimal
    store_label: Optional[str] = None
    line_items: Tuple[LineItem, ...] = ()
    status: Optional[str] = None
    currency: Optional[str] = None

    @property
    def items_sold(self) -> int:
        """Sum of quantities across all line items"""
        return sum(item.quantity for item in self.line_items)

    @property
    def has_store(self) -> bool:
        return bool(self.store_label)


@dataclass
class SalesTotals:
    """Quantity/revenue/orders counter used by product and pair aggregates"""
    quantity: int = 0
    revenue: Decimal = ZERO
    orders: int = 0

    def add(self, quantity: int, revenue: Decimal, orders: int = 1) -> None:
        self.quantity += quantity
        self.revenue += revenue
        self.orders += orders

    def to_dict(self) -> Dict[str, Any]:
        return {"quantity": self.quantity, "revenue": self.revenue, "orders": self.orders}


@dataclass
class StoreTotals:
    """Order-level revenue and distinct order count for a store bucket"""
    revenue: Decimal = ZERO
    orders: int = 0

    def add(self, revenue: Decimal) -> None:
        self.revenue += revenue
        self.orders += 1

    def to_dict(self) -> Dict[str, Any]:
        return {"revenue": self.revenue, "orders": self.orders}


@dataclass
class ProductBreakdown:
    """What a single store sold of one product"""
    name: str
    quantity: int = 0
    revenue: Decimal = ZERO

    def add(self, quantity: int, revenue: Decimal) -> None:
        self.quantity += quantity
        self.revenue += revenue

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "quantity": self.quantity, "revenue": self.revenue}


@dataclass
class StoreSummary(StoreTotals):
    """All-time store totals plus the per-product break-down"""
    products: Dict[ProductId, ProductBreakdown] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        # Records, not an id-keyed object: 101 and "101" are distinct products
        data = super().to_dict()
        data["products"] = [
            {"product_id": pid, **p.to_dict()} for pid, p in self.products.items()
        ]
        return data


@dataclass
class TimeTotals:
    """Revenue, order count and items sold for one time bucket"""
    revenue: Decimal = ZERO
    orders: int = 0
    items_sold: int = 0

    def add_order(self, order: Order) -> None:
        self.revenue += order.total_amount
        self.orders += 1
        self.items_sold += order.items_sold

    def to_dict(self) -> Dict[str, Any]:
        return {"revenue": self.revenue, "orders": self.orders, "items_sold": self.items_sold}
