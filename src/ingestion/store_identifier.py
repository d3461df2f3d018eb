"""
Store Identification

Classifies raw WooCommerce orders to a store label using the configured
method:

- city: shipping city (falling back to billing city) against city patterns
- metadata: value of a custom order meta_data key
- billing: billing state against state patterns

Patterns compare case-insensitively; a trailing ``*`` turns a pattern into a
prefix match. Orders that cannot be classified get ``None``, which the
aggregation engine tracks as "store unidentified".
"""

from enum import Enum
from typing import Any, List, Mapping, Optional

import structlog

from src.config import StoreMappingEntry, get_settings

logger = structlog.get_logger(__name__)


class IdentificationMethod(str, Enum):
    CITY = "city"
    METADATA = "metadata"
    BILLING = "billing"


def matches_pattern(value: str, pattern: str) -> bool:
    """Case-insensitive exact match, or prefix match when pattern ends with *"""
    if pattern.endswith("*"):
        return value.lower().startswith(pattern[:-1].lower())
    return value.lower() == pattern.lower()


def _address_field(order: Mapping[str, Any], section: str, name: str) -> Optional[str]:
    address = order.get(section) or {}
    return address.get(name) or None


class StoreIdentifier:
    """
    Assigns store labels to raw orders.

    Example:
        identifier = StoreIdentifier(
            method="city",
            mapping=[StoreMappingEntry(store="Paris Store", city_pattern="Paris*")],
        )
        store = identifier.identify(order)
    """

    def __init__(
        self,
        method: Optional[str] = None,
        mapping: Optional[List[StoreMappingEntry]] = None,
        metadata_field: Optional[str] = None,
    ):
        store_settings = get_settings().stores
        self.method = IdentificationMethod(method or store_settings.identification_method)
        self.mapping = list(mapping if mapping is not None else store_settings.mapping)
        self.metadata_field = metadata_field or store_settings.metadata_field

    def identify(self, order: Mapping[str, Any]) -> Optional[str]:
        """Store label for ``order``, or None if it cannot be identified"""
        if self.method == IdentificationMethod.CITY:
            return self._by_city(order)
        if self.method == IdentificationMethod.METADATA:
            return self._by_metadata(order)
        return self._by_billing_state(order)

    def _by_city(self, order: Mapping[str, Any]) -> Optional[str]:
        city = _address_field(order, "shipping", "city") or _address_field(order, "billing", "city")
        if not city:
            logger.warning("No city found for order", order_id=order.get("id"))
            return None

        for entry in self.mapping:
            if entry.city_pattern and matches_pattern(city, entry.city_pattern):
                return entry.store

        logger.warning("No store mapping found for city", city=city, order_id=order.get("id"))
        return None

    def _by_metadata(self, order: Mapping[str, Any]) -> Optional[str]:
        for meta in order.get("meta_data") or []:
            if meta.get("key") == self.metadata_field and meta.get("value"):
                return str(meta["value"])

        logger.warning(
            "Store metadata field not found",
            field=self.metadata_field,
            order_id=order.get("id"),
        )
        return None

    def _by_billing_state(self, order: Mapping[str, Any]) -> Optional[str]:
        state = _address_field(order, "billing", "state")
        if not state:
            logger.warning("No state found for order", order_id=order.get("id"))
            return None

        for entry in self.mapping:
            if entry.state_pattern and matches_pattern(state, entry.state_pattern):
                return entry.store

        logger.warning("No store mapping found for state", state=state, order_id=order.get("id"))
        return None
