"""
Sales by Time

Store-independent time series: every order contributes its revenue, one
order and its item count to its day, week and month buckets and to the
grand total.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .buckets import Granularity, bucket_keys
from .models import Order, TimeTotals


@dataclass
class TimeSeries:
    daily: Dict[str, TimeTotals] = field(default_factory=dict)
    weekly: Dict[str, TimeTotals] = field(default_factory=dict)
    monthly: Dict[str, TimeTotals] = field(default_factory=dict)
    total: TimeTotals = field(default_factory=TimeTotals)

    def buckets(self, granularity: Granularity) -> Dict[str, TimeTotals]:
        return getattr(self, Granularity(granularity).value)

    def add_order(self, order: Order) -> None:
        for granularity, key in bucket_keys(order.created_at).items():
            self.buckets(granularity).setdefault(key, TimeTotals()).add_order(order)
        self.total.add_order(order)

    def points(self, granularity: Granularity) -> List[Dict[str, Any]]:
        """Chronologically sorted series for charting"""
        return [
            {"date": key, **totals.to_dict()}
            for key, totals in sorted(self.buckets(granularity).items())
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "daily": {k: v.to_dict() for k, v in self.daily.items()},
            "weekly": {k: v.to_dict() for k, v in self.weekly.items()},
            "monthly": {k: v.to_dict() for k, v in self.monthly.items()},
            "total": self.total.to_dict(),
        }


def group_by_time(orders: Sequence[Order]) -> TimeSeries:
    series = TimeSeries()
    for order in orders:
        series.add_order(order)
    return series
