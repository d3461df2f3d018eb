"""
Current-Period Snapshots

Today / this week / this month summaries relative to a reference instant.
The instant is always passed in, so a report can be rebuilt reproducibly
for any point in time.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Sequence

from .buckets import day_key, month_key, week_key
from .models import ZERO, Order


class Period(str, Enum):
    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"


# Wire name of the bucket key field for each period
_LABEL_FIELDS = {
    Period.TODAY: "date",
    Period.THIS_WEEK: "week",
    Period.THIS_MONTH: "month",
}


@dataclass(frozen=True)
class PeriodSnapshot:
    """Orders, revenue and items sold within one current period"""
    period: Period
    label: str
    start_date: str
    orders: int = 0
    revenue: Decimal = ZERO
    items_sold: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            _LABEL_FIELDS[self.period]: self.label,
            "start_date": self.start_date,
            "orders": self.orders,
            "revenue": self.revenue,
            "items_sold": self.items_sold,
        }


@dataclass(frozen=True)
class Overview:
    today: PeriodSnapshot
    this_week: PeriodSnapshot
    this_month: PeriodSnapshot

    def to_dict(self) -> Dict[str, Any]:
        return {
            "today": self.today.to_dict(),
            "this_week": self.this_week.to_dict(),
            "this_month": self.this_month.to_dict(),
        }


def week_start(now: datetime) -> date:
    """First day of the week bucket containing ``now`` (Sunday, or Jan 1 for week 01)"""
    start = now.date() - timedelta(days=now.isoweekday() % 7)
    if start.year < now.year:
        return date(now.year, 1, 1)
    return start


def _snapshot(
    orders: Sequence[Order],
    period: Period,
    key_of: Callable[[datetime], str],
    now: datetime,
    start: date,
) -> PeriodSnapshot:
    current = key_of(now)
    revenue = ZERO
    count = 0
    items = 0

    for order in orders:
        if key_of(order.created_at) != current:
            continue
        revenue += order.total_amount
        count += 1
        items += order.items_sold

    return PeriodSnapshot(
        period=period,
        label=current,
        start_date=start.isoformat(),
        orders=count,
        revenue=revenue,
        items_sold=items,
    )


def today_snapshot(orders: Sequence[Order], now: datetime) -> PeriodSnapshot:
    return _snapshot(orders, Period.TODAY, day_key, now, now.date())


def this_week_snapshot(orders: Sequence[Order], now: datetime) -> PeriodSnapshot:
    return _snapshot(orders, Period.THIS_WEEK, week_key, now, week_start(now))


def this_month_snapshot(orders: Sequence[Order], now: datetime) -> PeriodSnapshot:
    return _snapshot(orders, Period.THIS_MONTH, month_key, now, now.date().replace(day=1))


def build_overview(orders: Sequence[Order], now: datetime) -> Overview:
    """All three current-period snapshots for the same reference instant"""
    return Overview(
        today=today_snapshot(orders, now),
        this_week=this_week_snapshot(orders, now),
        this_month=this_month_snapshot(orders, now),
    )
