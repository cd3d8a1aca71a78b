"""
Limit operator - implements LIMIT clause

Yields only the first N rows, then stops.
"""

from collections.abc import Iterator
from typing import Any

from weatherstream.operators.base import Operator


class Limit(Operator):
    """
    Limit operator - restricts number of rows (LIMIT clause)

    Stops pulling from the child once enough rows were yielded; the reader
    then closes its scan early.
    """

    def __init__(self, child: Operator, limit: int):
        super().__init__(child)
        self.limit = limit

    def __iter__(self) -> Iterator[dict[str, Any]]:
        if self.limit <= 0:
            return

        count = 0
        for row in self.child:
            yield row
            count += 1
            if count >= self.limit:
                break

    def __repr__(self) -> str:
        return f"Limit({self.limit})"
