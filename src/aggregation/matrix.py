"""
Product x Store Matrix

Totals for every (product id, store label) pair seen in orders with an
identified store. No time breakdown at this level.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from .models import Order, ProductId, SalesTotals

PairKey = Tuple[ProductId, str]


@dataclass
class ProductStoreSales:
    """Sales of one product at one store"""
    product_id: ProductId
    product_name: str
    store_name: str
    totals: SalesTotals = field(default_factory=SalesTotals)

    @property
    def key(self) -> PairKey:
        return (self.product_id, self.store_name)

    @property
    def quantity(self) -> int:
        return self.totals.quantity

    @property
    def revenue(self):
        return self.totals.revenue

    @property
    def orders(self) -> int:
        return self.totals.orders

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "store_name": self.store_name,
            **self.totals.to_dict(),
        }


def product_store_matrix(orders: Sequence[Order]) -> List[ProductStoreSales]:
    """Accumulate line items per (product, store) pair, in first-seen order"""
    matrix: Dict[PairKey, ProductStoreSales] = {}

    for order in orders:
        if not order.has_store:
            continue

        for item in order.line_items:
            key = (item.product_id, order.store_label)
            entry = matrix.get(key)
            if entry is None:
                entry = ProductStoreSales(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    store_name=order.store_label,
                )
                matrix[key] = entry
            entry.totals.add(item.quantity, item.line_revenue)

    return list(matrix.values())
