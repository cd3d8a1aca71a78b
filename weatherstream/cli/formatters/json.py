"""
JSON formatter for machine-readable output
"""

import json
import math
from datetime import datetime
from typing import Any

from weatherstream.cli.formatters.base import BaseFormatter


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JSONFormatter(BaseFormatter):
    """Format results as JSON"""

    def format(self, results: list[dict[str, Any]], **kwargs) -> str:
        """
        Format results as JSON

        Args:
            results: List of result dictionaries
            **kwargs: Options like 'compact', 'indent'

        Returns:
            JSON string; timestamps are ISO 8601 strings
        """

        # Handle NaN and infinity values (convert to null)
        def clean_value(val):
            if isinstance(val, float):
                if math.isnan(val) or math.isinf(val):
                    return None
            return val

        cleaned_results = [{k: clean_value(v) for k, v in row.items()} for row in results]

        if kwargs.get("compact", False):
            return json.dumps(cleaned_results, separators=(",", ":"), default=_default)

        indent = kwargs.get("indent", 2)
        return json.dumps(cleaned_results, indent=indent, default=_default)
