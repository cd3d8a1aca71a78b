"""
AST (Abstract Syntax Tree) node definitions for SQL queries

These dataclasses represent the parsed structure of a query against one
weather resource: SELECT, FROM, WHERE (AND only), ORDER BY and LIMIT.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class Condition:
    """
    A single WHERE condition: column operator value

    is_literal is False when the right-hand side is a column reference or
    an expression such as now(); such conditions can never become request
    parameters.
    """

    column: str
    operator: str  # '=', '>', '<', '>=', '<=', '!='
    value: Any
    is_literal: bool = True

    def __repr__(self) -> str:
        value = repr(self.value) if self.is_literal else str(self.value)
        return f"{self.column} {self.operator} {value}"


@dataclass
class WhereClause:
    """WHERE clause containing multiple conditions"""

    conditions: list[Condition]

    def __repr__(self) -> str:
        return " AND ".join(str(c) for c in self.conditions)


@dataclass
class OrderByColumn:
    """
    Represents a column in ORDER BY clause

    Examples:
        forecast_time ASC, temperature_temp DESC
    """

    column: str
    direction: str = "ASC"  # 'ASC' or 'DESC', default ASC

    def __repr__(self) -> str:
        return f"{self.column} {self.direction}"


@dataclass
class SelectStatement:
    """
    Represents a complete SELECT statement

    Examples:
        SELECT * FROM current_weather WHERE latitude = 52.52 AND longitude = 13.405
        SELECT forecast_time, temperature_temp FROM hourly_forecast
            WHERE latitude = 52.52 AND longitude = 13.405 ORDER BY forecast_time LIMIT 5
    """

    columns: list[str]  # ['*'] for all columns, or specific column names
    source: str  # Resource name (FROM clause)
    where: WhereClause | None = None
    order_by: list[OrderByColumn] | None = None
    limit: int | None = None

    def __repr__(self) -> str:
        parts = [f"SELECT {', '.join(self.columns)}"]
        parts.append(f"FROM {self.source}")
        if self.where:
            parts.append(f"WHERE {self.where}")
        if self.order_by:
            parts.append(f"ORDER BY {', '.join(str(col) for col in self.order_by)}")
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        return " ".join(parts)
