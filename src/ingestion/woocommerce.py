"""
WooCommerce Order Extraction

Pages through the WooCommerce REST API (``/wp-json/wc/v3/orders``) and
reduces each order to the raw order shape stored in orders_raw.json, with
its store label already attached.

Retries are left to the caller (the Prefect extraction task retries).
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog

from src.config import get_settings
from src.config.settings import WooCommerceSettings
from .store_identifier import StoreIdentifier

logger = structlog.get_logger(__name__)

ORDERS_ENDPOINT = "/wp-json/wc/v3/orders"

ADDRESS_FIELDS = [
    "first_name", "last_name", "company", "address_1", "address_2",
    "city", "state", "postcode", "country",
]


class WooCommerceError(RuntimeError):
    """The WooCommerce API could not be queried"""


class WooCommerceAuthError(WooCommerceError):
    """Credentials were rejected or lack orders:read permission"""


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _address(data: Optional[Dict[str, Any]]) -> Dict[str, str]:
    data = data or {}
    return {name: data.get(name) or "" for name in ADDRESS_FIELDS}


def to_raw_order(order: Dict[str, Any], identifier: StoreIdentifier) -> Dict[str, Any]:
    """Reduce an API order to the fields the processing step needs"""
    return {
        "id": order.get("id"),
        "number": order.get("number"),
        "status": order.get("status"),
        "currency": order.get("currency"),
        "total": _to_float(order.get("total")),
        "total_tax": _to_float(order.get("total_tax")),
        "total_shipping": _to_float(order.get("shipping_total")),
        "date_created": order.get("date_created"),
        "date_paid": order.get("date_paid"),
        "payment_method": order.get("payment_method"),
        "payment_method_title": order.get("payment_method_title"),
        "store": identifier.identify(order),
        "line_items": [
            {
                "product_id": item.get("product_id"),
                "variation_id": item.get("variation_id") or None,
                "name": item.get("name"),
                "quantity": item.get("quantity"),
                "subtotal": _to_float(item.get("subtotal")),
                "subtotal_tax": _to_float(item.get("subtotal_tax")),
                "total": _to_float(item.get("total")),
                "total_tax": _to_float(item.get("total_tax")),
                "price": _to_float(item.get("price")),
            }
            for item in order.get("line_items") or []
        ],
        "shipping": _address(order.get("shipping")),
        "billing": _address(order.get("billing")),
        "meta_data": order.get("meta_data") or [],
    }


class WooCommerceClient:
    """
    Async WooCommerce orders client.

    Example:
        async with WooCommerceClient() as client:
            orders = await client.fetch_orders()
    """

    def __init__(
        self,
        config: Optional[WooCommerceSettings] = None,
        identifier: Optional[StoreIdentifier] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or get_settings().woocommerce
        self.identifier = identifier or StoreIdentifier()

        if not self.config.has_credentials:
            raise WooCommerceAuthError(
                "Missing API credentials. Set WOOCOMMERCE_CONSUMER_KEY and WOOCOMMERCE_CONSUMER_SECRET"
            )

        self._client = httpx.AsyncClient(
            base_url=self.config.url.rstrip("/"),
            auth=(
                self.config.consumer_key.get_secret_value(),
                self.config.consumer_secret.get_secret_value(),
            ),
            headers={"Content-Type": "application/json"},
            timeout=self.config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "WooCommerceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _params(self, page: int) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "page": page,
            "per_page": self.config.per_page,
            "status": ",".join(self.config.statuses),
        }
        if self.config.start_date:
            params["after"] = self.config.start_date
        if self.config.end_date:
            params["before"] = self.config.end_date
        return params

    async def fetch_page(self, page: int) -> List[Dict[str, Any]]:
        """Fetch one page of raw API orders"""
        try:
            response = await self._client.get(ORDERS_ENDPOINT, params=self._params(page))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                raise WooCommerceAuthError(
                    "Authentication failed. Your API key may not have 'orders:read' permission."
                ) from e
            raise WooCommerceError(f"API request failed: {e}") from e
        except httpx.HTTPError as e:
            raise WooCommerceError(f"API request failed: {e}") from e

        return response.json()

    async def fetch_orders(self) -> List[Dict[str, Any]]:
        """Fetch every matching order as raw order records"""
        orders: List[Dict[str, Any]] = []
        page = 1

        while True:
            logger.info("Fetching orders page", page=page)
            batch = await self.fetch_page(page)
            logger.info("Received orders", page=page, count=len(batch))

            if not batch:
                break

            orders.extend(to_raw_order(order, self.identifier) for order in batch)

            if len(batch) < self.config.per_page:
                break
            page += 1

        logger.info("Fetched orders from API", total=len(orders))
        return orders
