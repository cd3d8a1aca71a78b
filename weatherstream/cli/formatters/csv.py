"""
CSV formatter for Unix-friendly output
"""

import csv
import io
from typing import Any, Dict, List

from weatherstream.cli.formatters.base import BaseFormatter


class CSVFormatter(BaseFormatter):
    """Format results as CSV"""

    def format(self, results: List[Dict[str, Any]], **kwargs) -> str:
        """
        Format results as CSV

        NULL is written as an empty field.

        Args:
            results: List of result dictionaries
            **kwargs: Options like 'columns', 'delimiter', 'quote_all'

        Returns:
            CSV string
        """
        columns = self.get_columns(results, kwargs.get("columns"))
        if not columns:
            return ""

        output = io.StringIO()
        writer = csv.writer(
            output,
            delimiter=kwargs.get("delimiter", ","),
            quoting=csv.QUOTE_MINIMAL if not kwargs.get("quote_all") else csv.QUOTE_ALL,
        )

        writer.writerow(columns)
        for row in results:
            writer.writerow(
                ["" if row.get(col) is None else self.render_value(row.get(col)) for col in columns]
            )

        return output.getvalue()
