"""
Sales by Product

One record per distinct product id, accumulated from every line item of
every order at daily, weekly and monthly granularity plus a running total.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import structlog

from .buckets import BucketKeys, Granularity, bucket_keys
from .models import LineItem, Order, ProductId, SalesTotals

logger = structlog.get_logger(__name__)


@dataclass
class ProductSales:
    """Aggregated sales of one product"""
    product_id: ProductId
    name: str
    daily: Dict[str, SalesTotals] = field(default_factory=dict)
    weekly: Dict[str, SalesTotals] = field(default_factory=dict)
    monthly: Dict[str, SalesTotals] = field(default_factory=dict)
    total: SalesTotals = field(default_factory=SalesTotals)

    def buckets(self, granularity: Granularity) -> Dict[str, SalesTotals]:
        return getattr(self, Granularity(granularity).value)

    def add_line_item(self, keys: BucketKeys, item: LineItem) -> None:
        """Count one line item occurrence in every bucket and the total"""
        for granularity, key in keys.items():
            totals = self.buckets(granularity).setdefault(key, SalesTotals())
            totals.add(item.quantity, item.line_revenue)
        self.total.add(item.quantity, item.line_revenue)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "daily": {k: v.to_dict() for k, v in self.daily.items()},
            "weekly": {k: v.to_dict() for k, v in self.weekly.items()},
            "monthly": {k: v.to_dict() for k, v in self.monthly.items()},
            "total": self.total.to_dict(),
        }

    def granularity_view(self, granularity: Granularity) -> Dict[str, Any]:
        """Flat {product_id, name, <bucket>: totals...} row for chart series"""
        view: Dict[str, Any] = {"product_id": self.product_id, "name": self.name}
        view.update({k: v.to_dict() for k, v in self.buckets(granularity).items()})
        return view


def group_by_product(orders: Sequence[Order]) -> List[ProductSales]:
    """
    Group line items by product id.

    The ``orders`` counter counts line-item occurrences, not distinct orders.
    The first name seen for a product id is kept even if later line items
    carry a different one. Records come back in first-seen order.
    """
    products: Dict[ProductId, ProductSales] = {}

    for order in orders:
        keys = bucket_keys(order.created_at)

        for item in order.line_items:
            record = products.get(item.product_id)
            if record is None:
                record = ProductSales(product_id=item.product_id, name=item.product_name)
                products[item.product_id] = record
            elif item.product_name != record.name:
                logger.debug(
                    "Product name differs from first seen",
                    product_id=item.product_id,
                    kept=record.name,
                    ignored=item.product_name,
                    order_id=order.id,
                )

            record.add_line_item(keys, item)

    return list(products.values())
