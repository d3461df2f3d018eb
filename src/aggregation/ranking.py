"""
Top-N Rankings

Ranks aggregate records by revenue, quantity or order count. Works on the
engine's record objects as well as on their serialized dict form, reading
the value from a nested ``total`` when the record has one.
"""

from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, List, Sequence, TypeVar, Union

T = TypeVar("T")


class RankField(str, Enum):
    """Numeric fields a ranking can sort on"""
    REVENUE = "revenue"
    QUANTITY = "quantity"
    ORDERS = "orders"

    @classmethod
    def _missing_(cls, value):
        if value == "order_count":
            return cls.ORDERS
        return None


def _read(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def sort_value(record: Any, field: Union[RankField, str]) -> Union[int, float, Decimal]:
    """Value of ``field`` for ``record``; missing or null reads as zero"""
    name = RankField(field).value
    total = _read(record, "total")
    value = _read(total, name) if total is not None else _read(record, name)
    return value if value is not None else 0


def top_n(
    records: Sequence[T],
    field: Union[RankField, str] = RankField.REVENUE,
    n: int = 10,
) -> List[T]:
    """
    Highest ``n`` records by ``field``, descending.

    The sort is stable, so records with equal values keep their input order.
    """
    field = RankField(field)
    ranked = sorted(records, key=lambda r: sort_value(r, field), reverse=True)
    return ranked[:max(n, 0)]
