"""
Sales by Store

Order-level revenue and order counts per store label, plus what each store
sold of every product. Orders without an identified store are skipped.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .buckets import BucketKeys, Granularity, bucket_keys
from .models import Order, ProductBreakdown, StoreSummary, StoreTotals


@dataclass
class StoreSales:
    """Aggregated sales of one store"""
    store_name: str
    daily: Dict[str, StoreTotals] = field(default_factory=dict)
    weekly: Dict[str, StoreTotals] = field(default_factory=dict)
    monthly: Dict[str, StoreTotals] = field(default_factory=dict)
    total: StoreSummary = field(default_factory=StoreSummary)

    def buckets(self, granularity: Granularity) -> Dict[str, StoreTotals]:
        return getattr(self, Granularity(granularity).value)

    def add_order(self, keys: BucketKeys, order: Order) -> None:
        for granularity, key in keys.items():
            self.buckets(granularity).setdefault(key, StoreTotals()).add(order.total_amount)
        self.total.add(order.total_amount)

        for item in order.line_items:
            breakdown = self.total.products.get(item.product_id)
            if breakdown is None:
                breakdown = ProductBreakdown(name=item.product_name)
                self.total.products[item.product_id] = breakdown
            breakdown.add(item.quantity, item.line_revenue)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "store_name": self.store_name,
            "daily": {k: v.to_dict() for k, v in self.daily.items()},
            "weekly": {k: v.to_dict() for k, v in self.weekly.items()},
            "monthly": {k: v.to_dict() for k, v in self.monthly.items()},
            "total": self.total.to_dict(),
        }

    def granularity_view(self, granularity: Granularity) -> Dict[str, Any]:
        view: Dict[str, Any] = {"store_name": self.store_name}
        view.update({k: v.to_dict() for k, v in self.buckets(granularity).items()})
        return view


def group_by_store(orders: Sequence[Order]) -> List[StoreSales]:
    """
    Group orders by store label.

    Labels are matched exactly (case-sensitive, no trimming). Each order
    counts once per bucket regardless of how many line items it has.
    """
    stores: Dict[str, StoreSales] = {}

    for order in orders:
        if not order.has_store:
            continue

        record = stores.get(order.store_label)
        if record is None:
            record = StoreSales(store_name=order.store_label)
            stores[order.store_label] = record

        record.add_order(bucket_keys(order.created_at), order)

    return list(stores.values())
