"""
Base reader interface

Readers feed rows to the query engine. A reader that supports pushdown
receives the WHERE conditions before it reads, so it can turn them into
request parameters instead of filtering afterwards.
"""

from typing import Any, Dict, Iterator, List, Optional

from weatherstream.core.types import Schema
from weatherstream.sql.ast_nodes import Condition


class BaseReader:
    """
    Base class for row sources

    Readers are responsible for:
    1. Yielding rows as dictionaries (lazy evaluation)
    2. Optionally accepting pushed-down WHERE conditions
    3. Describing their columns without reading
    """

    def read_lazy(self) -> Iterator[Dict[str, Any]]:
        """
        Yield rows as dictionaries

        Yields:
            Dictionary representing one row of data

        Example:
            {'forecast_time': datetime(...), 'temperature_temp': 21.4}
        """
        raise NotImplementedError("Subclasses must implement read_lazy()")

    def supports_pushdown(self) -> bool:
        """
        Does this reader support predicate pushdown?

        If True, the executor calls set_filter() with the WHERE conditions
        before reading.
        """
        return False

    def set_filter(self, conditions: List[Condition]) -> None:
        """
        Set filter conditions for predicate pushdown

        Args:
            conditions: WHERE conditions (AND'd together)

        Note:
            Only called if supports_pushdown() returns True
        """
        pass

    def residual_conditions(self, conditions: List[Condition]) -> List[Condition]:
        """
        Conditions the reader does not apply itself

        The executor re-applies these with a Filter operator. By default
        the reader applies none of them.
        """
        return list(conditions)

    def get_schema(self) -> Optional[Schema]:
        """
        Get schema information (column names and types)

        Returns:
            Schema object, or None if the reader cannot describe its columns
        """
        return None

    def __iter__(self):
        """Allow readers to be used directly in for loops"""
        return self.read_lazy()

    def to_dataframe(self):
        """
        Convert reader content to a pandas DataFrame

        Returns:
            pandas.DataFrame containing all rows
        """
        try:
            import pandas as pd
        except ImportError:
            raise ImportError("Pandas is required for to_dataframe(). Install `weatherstream[pandas]`")

        return pd.DataFrame(list(self.read_lazy()))
