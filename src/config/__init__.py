"""
Sales Reports Platform
Configuration Module
"""
from .settings import Settings, StoreMappingEntry, get_settings

__all__ = ["Settings", "StoreMappingEntry", "get_settings"]
