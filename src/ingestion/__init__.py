"""
Order Ingestion Module
"""
from .batch_loader import BatchLoader, FileFormat, RawOrdersNotFound, save_raw_orders
from .normalizer import NormalizationResult, normalize_order, normalize_orders
from .store_identifier import IdentificationMethod, StoreIdentifier
from .woocommerce import WooCommerceAuthError, WooCommerceClient, WooCommerceError

__all__ = [
    "BatchLoader",
    "FileFormat",
    "RawOrdersNotFound",
    "save_raw_orders",
    "NormalizationResult",
    "normalize_order",
    "normalize_orders",
    "IdentificationMethod",
    "StoreIdentifier",
    "WooCommerceClient",
    "WooCommerceError",
    "WooCommerceAuthError",
]
