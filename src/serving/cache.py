"""
Report Cache Module

In-process cache for the published sales report:
- Single cached document per process
- TTL-based staleness (default 5 minutes)
- Explicit invalidation after a refresh

The entry is an explicit {value, fetched_at} pair and staleness is a pure
function of (now, ttl).
There is no shared cache backend: each API worker holds its own copy of one
small JSON document and reloads it from the processed data lake on expiry.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import structlog

from src.config import get_settings

logger = structlog.get_logger(__name__)

ReportLoader = Callable[[], Dict[str, Any]]


@dataclass(frozen=True)
class CachedReport:
    """A loaded report and the instant it was loaded"""
    value: Dict[str, Any]
    fetched_at: datetime

    def is_stale(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.fetched_at >= ttl


class ReportCache:
    """
    Cache a report loader's result for a fixed time-to-live.

    Example:
        cache = ReportCache(load_report, ttl=timedelta(minutes=5))
        report = cache.get_or_load()
        cache.invalidate()
    """

    def __init__(self, loader: ReportLoader, ttl: Optional[timedelta] = None):
        self.loader = loader
        if ttl is None:
            ttl = timedelta(seconds=get_settings().report.cache_ttl_seconds)
        self.ttl = ttl
        self._entry: Optional[CachedReport] = None
        self._lock = threading.Lock()

    @property
    def entry(self) -> Optional[CachedReport]:
        return self._entry

    def get_or_load(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Return the cached report, reloading it when missing or stale.

        Args:
            now: Reference instant for the staleness check

        Returns:
            Report in wire layout
        """
        now = now or datetime.now(timezone.utc)
        with self._lock:
            entry = self._entry
            if entry is not None and not entry.is_stale(now, self.ttl):
                return entry.value

            logger.debug("Report cache miss", stale=entry is not None)
            value = self.loader()
            self._entry = CachedReport(value=value, fetched_at=now)
            return value

    def invalidate(self) -> None:
        with self._lock:
            self._entry = None
        logger.info("Report cache invalidated")
