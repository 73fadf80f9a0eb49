"""
Ordering Module for Barista Bot.

Handles:
- Catalog loading
- Order slot validation and completeness
- Delivery of completed orders
"""

from .catalog import CatalogLoader, DEFAULT_CATALOG
from .slot_validator import SlotValidator, SLOT_NAMES

__all__ = [
    "CatalogLoader",
    "DEFAULT_CATALOG",
    "SlotValidator",
    "SLOT_NAMES",
]
