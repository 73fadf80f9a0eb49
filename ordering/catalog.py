"""
Coffee catalog loader for Barista Bot.

The catalog is loaded once at startup and shared read-only by every
pipeline invocation.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_CATALOG: Dict[str, Dict[str, Any]] = {
    "Espresso": {"description": "Strong coffee", "price": 30},
    "Cappuccino": {"description": "Coffee with milk foam", "price": 40},
}


class CatalogLoader:
    """Loads the product catalog from a JSON file."""

    def __init__(self, fallback: Optional[Dict[str, Any]] = None):
        self.fallback = fallback if fallback is not None else DEFAULT_CATALOG

    def load(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load the catalog from JSON.

        Args:
            file_path: Path to the catalog file

        Returns:
            Catalog mapping; the built-in fallback if the file is missing
            or unreadable
        """
        path = Path(file_path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Error loading catalog from {path}: {e}; using fallback catalog")
            return dict(self.fallback)

        if not isinstance(data, dict):
            logger.warning(f"Catalog at {path} is not a JSON object; using fallback catalog")
            return dict(self.fallback)

        logger.info(f"Catalog loaded: {len(data)} items from {path}")
        return data
