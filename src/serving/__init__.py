"""
Serving Module
"""
from .cache import CachedReport, ReportCache

__all__ = [
    "CachedReport",
    "ReportCache",
]
