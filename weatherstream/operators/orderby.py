"""
OrderBy Operator

Sorts rows by specified columns with ASC/DESC directions.
"""

from functools import cmp_to_key
from typing import Any, Dict, Iterator, List

from weatherstream.operators.base import Operator
from weatherstream.sql.ast_nodes import OrderByColumn


class OrderByOperator(Operator):
    """
    ORDER BY operator

    Materializes all input rows, then sorts them. NULLs sort last in both
    directions.
    """

    def __init__(self, source: Operator, order_by: List[OrderByColumn]):
        """
        Initialize OrderBy operator

        Args:
            source: Source operator
            order_by: List of OrderByColumn specifications
        """
        super().__init__(source)
        self.order_by = order_by

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        rows = list(self.child)
        yield from sorted(rows, key=cmp_to_key(self._compare))

    def _compare(self, left: Dict[str, Any], right: Dict[str, Any]) -> int:
        for order_col in self.order_by:
            a = left.get(order_col.column)
            b = right.get(order_col.column)

            if a is None and b is None:
                continue
            if a is None:
                return 1
            if b is None:
                return -1

            if a == b:
                continue

            result = -1 if a < b else 1
            return -result if order_col.direction == "DESC" else result

        return 0

    def __repr__(self) -> str:
        order_spec = ", ".join(f"{col.column} {col.direction}" for col in self.order_by)
        return f"OrderBy({order_spec})"
