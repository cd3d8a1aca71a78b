"""
Filter operator - implements WHERE clause

Re-applies the conditions a reader could not turn into request
parameters. Literals compared with timestamp columns are parsed as
timestamps; the right-hand side may also name another column or now().
"""

from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any

from weatherstream.core.types import parse_timestamp
from weatherstream.operators.base import Operator
from weatherstream.sql.ast_nodes import Condition

NOW_EXPRESSIONS = ("now()", "current_timestamp")


class Filter(Operator):
    """
    Filter operator - evaluates WHERE conditions

    Pulls rows from child and only yields those that satisfy
    all conditions (AND logic).
    """

    def __init__(self, child: Operator, conditions: list[Condition]):
        """
        Initialize filter operator

        Args:
            child: Child operator to pull rows from
            conditions: List of conditions (AND'd together)
        """
        super().__init__(child)
        self.conditions = conditions

    def __iter__(self) -> Iterator[dict[str, Any]]:
        for row in self.child:
            if self._matches(row):
                yield row

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(self._evaluate_condition(row, c) for c in self.conditions)

    def _resolve_operand(self, row: dict[str, Any], condition: Condition) -> Any:
        """Value of the right-hand side for this row"""
        if condition.is_literal:
            return condition.value

        expression = str(condition.value)
        if expression.lower() in NOW_EXPRESSIONS:
            return datetime.now(timezone.utc)
        if expression in row:
            return row[expression]

        raise ValueError(f"Unsupported expression in WHERE clause: {expression}")

    def _evaluate_condition(self, row: dict[str, Any], condition: Condition) -> bool:
        """
        Evaluate a single condition against a row

        NULL on either side never matches.
        """
        if condition.column not in row:
            raise ValueError(f"Column '{condition.column}' not found in WHERE clause")

        value = row[condition.column]
        expected = self._resolve_operand(row, condition)

        if value is None or expected is None:
            return False

        if isinstance(value, datetime) and not isinstance(expected, datetime):
            parsed = parse_timestamp(expected)
            if parsed is None:
                return False
            expected = parsed

        op = condition.operator

        try:
            if op == "=":
                return value == expected
            elif op == ">":
                return value > expected
            elif op == "<":
                return value < expected
            elif op == ">=":
                return value >= expected
            elif op == "<=":
                return value <= expected
            elif op == "!=":
                return value != expected
            else:
                raise ValueError(f"Unsupported operator: {op}")

        except TypeError:
            # Type mismatch (e.g., comparing string to number)
            return False

    def __repr__(self) -> str:
        cond_str = " AND ".join(str(c) for c in self.conditions)
        return f"Filter({cond_str})"
