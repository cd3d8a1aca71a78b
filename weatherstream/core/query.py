"""
Main Query API - SQL front end for weather resources

Example:
    >>> from weatherstream import query
    >>> result = query(
    ...     "SELECT forecast_time, temperature_temp FROM hourly_forecast "
    ...     "WHERE latitude = 52.52 AND longitude = 13.405 LIMIT 5"
    ... )
    >>> for row in result:
    ...     print(row)
"""

from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from weatherstream.config import WeatherSettings
from weatherstream.core.executor import Executor
from weatherstream.core.registry import Registry
from weatherstream.core.transport import Transport
from weatherstream.core.types import Schema
from weatherstream.readers.weather_reader import WeatherReader
from weatherstream.sql.ast_nodes import SelectStatement
from weatherstream.sql.parser import parse


class QueryResult:
    """
    Query result - lazy iterator over query results

    Nothing is fetched until the result is iterated; each iteration runs
    the query again with one API call.
    """

    def __init__(self, ast: SelectStatement, reader: WeatherReader):
        """
        Initialize query result

        Args:
            ast: Parsed SQL AST
            reader: Reader for the resource in the FROM clause
        """
        self.ast = ast
        self.reader = reader
        self.executor = Executor()

    @property
    def schema(self) -> Schema:
        return self.reader.get_schema()

    @property
    def columns(self) -> List[str]:
        """Output column names in order"""
        if self.ast.columns == ["*"]:
            return self.reader.resource.column_names
        return list(self.ast.columns)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        yield from self.executor.execute(self.ast, self.reader)

    def to_list(self) -> List[Dict[str, Any]]:
        """
        Materialize all results into a list

        Example:
            >>> rows = query("SELECT * FROM daily_forecast WHERE latitude = 1 AND longitude = 2").to_list()
            >>> len(rows)
            8
        """
        return list(self)

    def explain(self) -> str:
        """Get query execution plan (no API call is made)"""
        return self.executor.explain(self.ast, self.reader)


def query(
    sql: str,
    settings: Optional[WeatherSettings] = None,
    transport: Optional[Transport] = None,
    registry: Optional[Registry] = None,
    now: Optional[datetime] = None,
) -> QueryResult:
    """
    Parse a query against one weather resource

    Args:
        sql: SELECT statement; the FROM clause names the resource
        settings: Configuration (default: loaded from the environment)
        transport: Transport to call (default: HttpxTransport)
        registry: Registry to resolve the resource against
        now: Reference time for timestamp validation

    Returns:
        QueryResult to iterate

    Raises:
        ParseError: If the SQL is invalid
        UnknownResource: If the FROM clause names an unknown resource
    """
    ast = parse(sql)
    reader = WeatherReader(
        ast.source,
        settings=settings,
        transport=transport,
        registry=registry,
        now=now,
    )
    return QueryResult(ast, reader)
