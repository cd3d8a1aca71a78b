"""
Base operator class for Volcano-style query execution

Each operator pulls rows from its child on demand.
"""

from collections.abc import Iterator
from typing import Any, Optional


class Operator:
    """
    Base class for all query operators

    Operators form a chain where:
    - The leaf (Scan) reads from a weather reader
    - Filter, OrderBy, Project and Limit transform rows
    - The root is pulled by the executor to get results
    """

    def __init__(self, child: Optional["Operator"] = None):
        """
        Initialize operator

        Args:
            child: Child operator to pull data from (None for leaf operators)
        """
        self.child = child

    def __iter__(self) -> Iterator[dict[str, Any]]:
        """
        Execute operator and yield results

        Yields:
            Rows as dictionaries
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement __iter__()")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
