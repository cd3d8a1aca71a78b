"""
Base formatter interface for CLI output
"""

from datetime import datetime
from typing import Any, Dict, List, Optional


class BaseFormatter:
    """Base class for all output formatters"""

    def format(self, results: List[Dict[str, Any]], **kwargs) -> str:
        """
        Format query results for output

        Args:
            results: List of result dictionaries
            **kwargs: Formatter-specific options; 'columns' gives the column
                order when results may be empty

        Returns:
            Formatted string ready for output
        """
        raise NotImplementedError("Formatters must implement format() method")

    def get_name(self) -> str:
        """Get formatter name"""
        return self.__class__.__name__.replace("Formatter", "").lower()

    @staticmethod
    def get_columns(results: List[Dict[str, Any]], columns: Optional[List[str]] = None) -> List[str]:
        if columns:
            return list(columns)
        if results:
            return list(results[0].keys())
        return []

    @staticmethod
    def render_value(value: Any) -> str:
        """Text form of a cell; timestamps in ISO 8601"""
        if isinstance(value, datetime):
            return value.isoformat()
        return str(value)
