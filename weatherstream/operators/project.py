"""
Project operator - implements SELECT column list
"""

from typing import Any, Dict, Iterator, List

from weatherstream.operators.base import Operator


class Project(Operator):
    """
    Project operator - selects columns (SELECT clause)

    Columns are validated against the resource schema before the plan is
    built, so every requested column is present in each row.
    """

    def __init__(self, child: Operator, columns: List[str]):
        """
        Initialize project operator

        Args:
            child: Child operator to pull rows from
            columns: Column names to select (or ['*'] for all)
        """
        super().__init__(child)
        self.columns = columns

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        if self.columns == ["*"]:
            yield from self.child
            return

        for row in self.child:
            yield {col: row.get(col) for col in self.columns}

    def __repr__(self) -> str:
        return f"Project({', '.join(self.columns)})"
