"""
SQL Parser - Hand-written recursive descent parser

Parses the SQL subset used to query weather resources:
- SELECT column1, column2 FROM resource
- WHERE column = value (with AND)
- ORDER BY column1 ASC, column2 DESC
- LIMIT n

Right-hand sides that are quoted strings, numbers or TRUE/FALSE are literals.
Bare identifiers, double-quoted identifiers and function calls are parsed as
non-literal expressions.
"""

import re
from typing import List, Optional, Tuple

from weatherstream.sql.ast_nodes import (
    Condition,
    OrderByColumn,
    SelectStatement,
    WhereClause,
)

_TOKEN_RE = re.compile(
    r"""
    '(?:[^']|'')*'              # single-quoted string literal
    | "(?:[^"]|"")*"            # double-quoted identifier
    | >= | <= | != | <> | [=<>]  # comparison operators
    | [,()]                     # punctuation
    | [^\s,()=<>!'"]+           # words, numbers, *
    """,
    re.VERBOSE,
)

_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

CLAUSE_KEYWORDS = ("WHERE", "ORDER", "LIMIT")


class ParseError(Exception):
    """Raised when SQL parsing fails"""

    pass


class SQLParser:
    """
    Simple recursive descent parser for SQL

    Grammar (simplified):
        SELECT_STMT := SELECT columns FROM source [WHERE conditions]
                       [ORDER BY order_items] [LIMIT n]
        columns     := * | column_name [, column_name]*
        conditions  := condition [AND condition]*
        condition   := column_name operator value
        operator    := = | > | < | >= | <= | != | <>
    """

    def __init__(self, sql: str):
        self.sql = sql.strip().rstrip(";").strip()
        self.tokens = self._tokenize(self.sql)
        self.pos = 0

    def _tokenize(self, sql: str) -> List[str]:
        """
        Split SQL into tokens, keeping quoted strings intact

        Raises:
            ParseError: On an unterminated quote or stray character
        """
        tokens = []
        pos = 0

        while pos < len(sql):
            if sql[pos].isspace():
                pos += 1
                continue

            match = _TOKEN_RE.match(sql, pos)
            if not match:
                raise ParseError(f"Unexpected character {sql[pos]!r} at offset {pos}")

            tokens.append(match.group(0))
            pos = match.end()

        return tokens

    def current(self) -> Optional[str]:
        """Get current token without advancing"""
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def peek(self, offset: int = 1) -> Optional[str]:
        """Look ahead at token"""
        pos = self.pos + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return None

    def consume(self, expected: Optional[str] = None) -> str:
        """
        Consume and return current token, optionally checking it matches expected

        Args:
            expected: If provided, raises ParseError if current token doesn't match

        Returns:
            The consumed token

        Raises:
            ParseError: If expected token doesn't match or no more tokens
        """
        if self.pos >= len(self.tokens):
            raise ParseError(f"Unexpected end of query. Expected: {expected}")

        token = self.tokens[self.pos]

        if expected and token.upper() != expected.upper():
            raise ParseError(
                f"Expected '{expected}' but got '{token}' at position {self.pos}"
            )

        self.pos += 1
        return token

    def _at_keyword(self, *keywords: str) -> bool:
        current = self.current()
        return current is not None and current.upper() in keywords

    def parse(self) -> SelectStatement:
        """Parse SQL query into AST"""
        statement = self._parse_select()

        if self.current() is not None:
            raise ParseError(f"Unexpected token '{self.current()}' at position {self.pos}")

        return statement

    def _parse_select(self) -> SelectStatement:
        """Parse SELECT statement"""
        self.consume("SELECT")

        columns = self._parse_columns()

        self.consume("FROM")
        source = self._parse_table_name()

        # Skip optional table alias (e.g., FROM hourly_forecast AS h or FROM hourly_forecast h)
        if self._at_keyword("AS"):
            self.consume("AS")
            self.consume()
        elif self.current() and not self._at_keyword(*CLAUSE_KEYWORDS):
            self.consume()

        where = None
        if self._at_keyword("WHERE"):
            where = self._parse_where()

        order_by = None
        if self._at_keyword("ORDER"):
            order_by = self._parse_order_by()

        limit = None
        if self._at_keyword("LIMIT"):
            limit = self._parse_limit()

        return SelectStatement(
            columns=columns,
            source=source,
            where=where,
            order_by=order_by,
            limit=limit,
        )

    def _parse_columns(self) -> List[str]:
        """
        Parse column list

        Examples:
            *
            forecast_time, temperature_temp
        """
        if self.current() == "*":
            self.consume()
            return ["*"]

        columns = []
        while True:
            columns.append(self._parse_identifier(self.consume()))

            if self.current() == ",":
                self.consume(",")
            else:
                break

        return columns

    def _parse_identifier(self, token: str) -> str:
        """Strip double quotes and an optional table qualifier"""
        if token.startswith('"') and token.endswith('"') and len(token) >= 2:
            return token[1:-1].replace('""', '"')
        if "." in token:
            return token.rsplit(".", 1)[1]
        return token

    def _parse_where(self) -> WhereClause:
        """
        Parse WHERE clause

        Example: WHERE latitude = 52.52 AND longitude = 13.405
        """
        self.consume("WHERE")

        conditions = [self._parse_condition()]

        while self._at_keyword("AND"):
            self.consume("AND")
            conditions.append(self._parse_condition())

        if self._at_keyword("OR"):
            raise ParseError("OR is not supported; combine conditions with AND")

        return WhereClause(conditions=conditions)

    def _parse_condition(self) -> Condition:
        """
        Parse a single condition: column operator value

        Examples:
            latitude = 52.52
            summary_date = '2024-01-15'
            observation_time = now()
        """
        column = self._parse_identifier(self.consume())
        operator = self.consume()

        valid_operators = {"=", ">", "<", ">=", "<=", "!=", "<>"}
        if operator not in valid_operators:
            raise ParseError(f"Invalid operator: {operator}")

        # Normalize <> to !=
        if operator == "<>":
            operator = "!="

        value, is_literal = self._parse_value()

        return Condition(column=column, operator=operator, value=value, is_literal=is_literal)

    def _parse_value(self) -> Tuple[object, bool]:
        """
        Parse the right-hand side of a condition

        Returns:
            (value, is_literal). For non-literals value is the expression text.

        Examples:
            '2024-01-15' -> ('2024-01-15', True)
            52.52        -> (52.52, True)
            -13          -> (-13, True)
            TRUE         -> (True, True)
            longitude    -> ('longitude', False)
            now()        -> ('now()', False)
        """
        token = self.consume()

        if token.startswith("'") and token.endswith("'") and len(token) >= 2:
            return token[1:-1].replace("''", "'"), True

        if _NUMBER_RE.match(token):
            if re.match(r"^[+-]?\d+$", token):
                return int(token), True
            return float(token), True

        if token.upper() in ("TRUE", "FALSE"):
            return token.upper() == "TRUE", True

        # Function call: name(args...)
        if self.current() == "(":
            return self._parse_call(token), False

        return self._parse_identifier(token), False

    def _parse_call(self, name: str) -> str:
        """Consume a parenthesised argument list and return the call text"""
        parts = [name]
        depth = 0

        while True:
            token = self.consume(None)
            parts.append(token)
            if token == "(":
                depth += 1
            elif token == ")":
                depth -= 1
                if depth == 0:
                    break

        text = "".join(parts)
        return text.replace(",", ", ")

    def _parse_table_name(self) -> str:
        """
        Parse a resource name, dropping any schema qualifier

        Examples:
            hourly_forecast -> hourly_forecast
            fdw_open_weather.hourly_forecast -> hourly_forecast
            "hourly_forecast" -> hourly_forecast
        """
        token = self.consume()

        if (token.startswith("'") and token.endswith("'")) or (
            token.startswith('"') and token.endswith('"')
        ):
            token = token[1:-1]

        return token.rsplit(".", 1)[-1]

    def _parse_order_by(self) -> List[OrderByColumn]:
        """
        Parse ORDER BY clause

        Examples:
            ORDER BY forecast_time
            ORDER BY temperature_temp DESC
        """
        self.consume("ORDER")
        self.consume("BY")

        order_columns = []

        while True:
            column = self._parse_identifier(self.consume())

            direction = "ASC"
            if self._at_keyword("ASC", "DESC"):
                direction = self.consume().upper()

            order_columns.append(OrderByColumn(column=column, direction=direction))

            if self.current() == ",":
                self.consume(",")
            else:
                break

        return order_columns

    def _parse_limit(self) -> int:
        """Parse LIMIT clause"""
        self.consume("LIMIT")
        limit_str = self.consume()

        try:
            limit = int(limit_str)
        except ValueError:
            raise ParseError(f"LIMIT must be an integer, got '{limit_str}'")

        if limit < 0:
            raise ParseError(f"LIMIT must be non-negative, got {limit}")
        return limit


def parse(sql: str) -> SelectStatement:
    """
    Convenience function to parse SQL query

    Args:
        sql: SQL query string

    Returns:
        Parsed SelectStatement AST

    Raises:
        ParseError: If query is invalid

    Examples:
        >>> ast = parse("SELECT * FROM current_weather WHERE latitude = 52.52 AND longitude = 13.405")
        >>> ast = parse("SELECT forecast_time FROM hourly_forecast WHERE latitude = 1 AND longitude = 2 LIMIT 5")
    """
    parser = SQLParser(sql)
    return parser.parse()
