"""
Date Bucketing

Derives the day, week and month group keys used by every aggregation pass.
Keys are computed from the calendar fields of the timestamp as given; the
normalizer is responsible for converting timestamps into the reporting
timezone before they get here.

Week keys follow the legacy dashboard numbering rather than ISO-8601: weeks
start on Sunday, week 1 is the (possibly partial) week containing January 1,
and the year is always the timestamp's calendar year. December 31 can
therefore land in week 53 and January 1 is always week 01.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterator, Tuple, Union

DateLike = Union[date, datetime]


class Granularity(str, Enum):
    """Time bucket granularities, named as the report exposes them"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def _sunday_based_weekday(d: DateLike) -> int:
    # Sunday=0 ... Saturday=6
    return d.isoweekday() % 7


def day_key(ts: DateLike) -> str:
    """YYYY-MM-DD"""
    return f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"


def week_number(ts: DateLike) -> int:
    """Legacy week number: ceil((weekday(Jan 1) + 1 + days since Jan 1) / 7)"""
    jan1 = date(ts.year, 1, 1)
    days_since_jan1 = (date(ts.year, ts.month, ts.day) - jan1).days
    return math.ceil((_sunday_based_weekday(jan1) + 1 + days_since_jan1) / 7)


def week_key(ts: DateLike) -> str:
    """YYYY-Www"""
    return f"{ts.year:04d}-W{week_number(ts):02d}"


def month_key(ts: DateLike) -> str:
    """YYYY-MM"""
    return f"{ts.year:04d}-{ts.month:02d}"


@dataclass(frozen=True)
class BucketKeys:
    """The three bucket keys of a single timestamp"""
    daily: str
    weekly: str
    monthly: str

    def items(self) -> Iterator[Tuple[Granularity, str]]:
        yield Granularity.DAILY, self.daily
        yield Granularity.WEEKLY, self.weekly
        yield Granularity.MONTHLY, self.monthly

    def for_granularity(self, granularity: Granularity) -> str:
        return getattr(self, Granularity(granularity).value)


def bucket_keys(ts: DateLike) -> BucketKeys:
    """Compute day, week and month keys in one go"""
    return BucketKeys(daily=day_key(ts), weekly=week_key(ts), monthly=month_key(ts))
