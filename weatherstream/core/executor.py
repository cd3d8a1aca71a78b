"""
Query Executor - builds and executes operator trees from AST

Operator tree is built bottom-up:
    Limit (root)
      ↓
    Project
      ↓
    OrderBy
      ↓
    Filter (conditions not sent to the API)
      ↓
    Scan (leaf)
      ↓
    WeatherReader (one API call)
"""

from typing import Any, Dict, Iterator, List

from weatherstream.operators.base import Operator
from weatherstream.operators.filter import Filter
from weatherstream.operators.limit import Limit
from weatherstream.operators.orderby import OrderByOperator
from weatherstream.operators.project import Project
from weatherstream.operators.scan import Scan
from weatherstream.readers.base import BaseReader
from weatherstream.sql.ast_nodes import Condition, SelectStatement


class Executor:
    """
    Query executor - builds operator tree from AST

    The executor is responsible for:
    1. Pushing WHERE conditions down to the reader
    2. Building an operator tree (Volcano model) for the rest
    3. Executing the tree by pulling from the root
    """

    def __init__(self):
        self.pushed: List[Condition] = []
        self.residual: List[Condition] = []

    def execute(self, ast: SelectStatement, reader: BaseReader) -> Iterator[Dict[str, Any]]:
        """
        Execute query and return iterator over results

        Args:
            ast: Parsed SELECT statement
            reader: Reader for the resource in the FROM clause

        Returns:
            Iterator over result rows
        """
        plan = self._build_plan(ast, reader)
        yield from plan

    def _push_down(self, ast: SelectStatement, reader: BaseReader) -> None:
        conditions = ast.where.conditions if ast.where else []

        if conditions and reader.supports_pushdown():
            reader.set_filter(conditions)
            self.residual = reader.residual_conditions(conditions)
        else:
            self.residual = list(conditions)

        residual_ids = {id(c) for c in self.residual}
        self.pushed = [c for c in conditions if id(c) not in residual_ids]

    def _validate_columns(self, ast: SelectStatement, reader: BaseReader) -> None:
        """
        Check every referenced column exists in the reader's schema

        Raises:
            ValueError: If a column is unknown
        """
        schema = reader.get_schema()
        if schema is None:
            return

        referenced = [c for c in ast.columns if c != "*"]
        referenced += [c.column for c in self.residual]
        referenced += [c.column for c in ast.order_by or []]

        for column in referenced:
            schema.validate_column(column)

    def _build_plan(self, ast: SelectStatement, reader: BaseReader) -> Operator:
        """
        Build operator tree from AST

        Args:
            ast: Parsed SELECT statement
            reader: Reader for the resource

        Returns:
            Root operator of the tree
        """
        self._push_down(ast, reader)
        self._validate_columns(ast, reader)

        plan: Operator = Scan(reader)

        if self.residual:
            plan = Filter(plan, self.residual)

        if ast.order_by:
            plan = OrderByOperator(plan, ast.order_by)

        plan = Project(plan, ast.columns)

        if ast.limit is not None:
            plan = Limit(plan, ast.limit)

        return plan

    def explain(self, ast: SelectStatement, reader: BaseReader) -> str:
        """
        Explain query execution plan without calling the API

        Example output:
            Query Plan:
            ========================================
            Limit(5)
              Project(forecast_time, temperature_temp)
                Scan(WeatherReader(hourly_forecast))

            Pushed to request: latitude = 52.52, longitude = 13.405
        """
        plan = self._build_plan(ast, reader)

        output = ["Query Plan:", "=" * 40]
        output.append(self._format_plan(plan))
        output.append("")

        if self.pushed:
            output.append("Pushed to request: " + ", ".join(str(c) for c in self.pushed))
        else:
            output.append("Pushed to request: (none)")

        return "\n".join(output)

    def _format_plan(self, operator: Operator, indent: int = 0) -> str:
        lines = [f"{'  ' * indent}{operator}"]

        if operator.child is not None:
            lines.append(self._format_plan(operator.child, indent + 1))

        return "\n".join(lines)
