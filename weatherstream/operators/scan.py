"""
Scan operator - leaf of the operator tree

Wraps a reader; for a weather reader each iteration is exactly one API call.
"""

from collections.abc import Iterator
from typing import Any

from weatherstream.operators.base import Operator
from weatherstream.readers.base import BaseReader


class Scan(Operator):
    """Scan operator - yields the rows of a reader"""

    def __init__(self, reader: BaseReader):
        super().__init__(child=None)
        self.reader = reader

    def __iter__(self) -> Iterator[dict[str, Any]]:
        yield from self.reader.read_lazy()

    def __repr__(self) -> str:
        return f"Scan({self.reader!r})"
