"""Type system for weatherstream.

This module provides the output value types, coercion of raw JSON values into
them, parsing of temporal literals, and the Schema description of a resource.
"""

import math
import re
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from weatherstream.errors import TypeMismatch

# Integer fields accept floats this close to a whole number
INTEGER_TOLERANCE = 1e-9

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# '+00', '+0530', '+05:30' at the end of a timestamp
_SHORT_OFFSET_RE = re.compile(r"([+-])(\d{2})(?::?(\d{2}))?$")


class DataType(Enum):
    """Output column types."""

    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    TEXT = "TEXT"
    BOOLEAN = "BOOLEAN"
    TIMESTAMP = "TIMESTAMP"

    def __str__(self) -> str:
        return self.value

    def is_numeric(self) -> bool:
        """Check if type is numeric (INTEGER or FLOAT)."""
        return self in (DataType.INTEGER, DataType.FLOAT)

    @property
    def sql_type(self) -> str:
        """PostgreSQL column type used in foreign table DDL."""
        return {
            DataType.INTEGER: "bigint",
            DataType.FLOAT: "numeric",
            DataType.TEXT: "text",
            DataType.BOOLEAN: "boolean",
            DataType.TIMESTAMP: "timestamp with time zone",
        }[self]


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a JSON number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_value(
    field: str, dtype: DataType, value: Any, join_with: Optional[str] = None
) -> Any:
    """Coerce a raw JSON value to its declared type.

    Args:
        field: Output column name, used in error messages
        dtype: Declared type
        value: Raw value from the parsed document (never None)
        join_with: Separator for TEXT fields whose raw value is a list of strings

    Returns:
        The typed value

    Raises:
        TypeMismatch: If the value cannot be represented as dtype

    Examples:
        >>> coerce_value("pressure_hpa", DataType.INTEGER, 1013.0)
        1013
        >>> coerce_value("temperature_temp", DataType.FLOAT, 21)
        21.0
    """
    if dtype == DataType.INTEGER:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and math.isfinite(value):
            rounded = round(value)
            if abs(value - rounded) <= INTEGER_TOLERANCE:
                return int(rounded)
            raise TypeMismatch(field, f"expected an integer, got fractional value {value!r}")
        raise TypeMismatch(field, f"expected an integer, got {type(value).__name__}")

    if dtype == DataType.FLOAT:
        if _is_number(value):
            return float(value)
        raise TypeMismatch(field, f"expected a number, got {type(value).__name__}")

    if dtype == DataType.TEXT:
        if isinstance(value, str):
            return value
        if join_with is not None and isinstance(value, list):
            if all(isinstance(item, str) for item in value):
                return join_with.join(value)
            raise TypeMismatch(field, "expected a list of strings")
        raise TypeMismatch(field, f"expected a string, got {type(value).__name__}")

    if dtype == DataType.BOOLEAN:
        if isinstance(value, bool):
            return value
        raise TypeMismatch(field, f"expected a boolean, got {type(value).__name__}")

    if dtype == DataType.TIMESTAMP:
        if not _is_number(value):
            raise TypeMismatch(
                field, f"expected a Unix timestamp, got {type(value).__name__}"
            )
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise TypeMismatch(field, f"timestamp {value!r} out of range: {e}") from e

    raise TypeMismatch(field, f"unsupported type {dtype}")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a timestamp literal into an aware UTC datetime.

    Accepts Unix seconds (int/float), datetime objects and civil timestamp
    strings such as '2024-01-01 00:00:00+00', '2024-01-01T00:00:00Z' or
    '2024-01-01 00:00'. Naive values are taken as UTC.

    Args:
        value: Literal to parse

    Returns:
        datetime in UTC if successful, None otherwise
    """
    if _is_number(value):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None

        # Digits only: Unix seconds sent as text
        if text.isdigit():
            return parse_timestamp(int(text))

        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"

        # Expand short offsets ('+00', '+0530') that fromisoformat rejects
        # on older interpreters; only when a time part is present
        if len(text) > 10:
            match = _SHORT_OFFSET_RE.search(text)
            if match and match.start() > 10:
                sign, hours, minutes = match.groups()
                text = f"{text[:match.start()]}{sign}{hours}:{minutes or '00'}"

        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: Any) -> Optional[date]:
    """Parse an unambiguous calendar date (YYYY-MM-DD).

    Args:
        value: String or date to parse

    Returns:
        date object if successful, None otherwise
    """
    if isinstance(value, datetime):
        return None
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not _DATE_RE.match(text):
        return None

    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


class Schema:
    """Schema definition for a resource.

    Holds column names, their data types and nullability, in output order.
    """

    def __init__(self, columns: dict[str, DataType], nullable: Optional[dict[str, bool]] = None):
        """Initialize schema.

        Args:
            columns: Dictionary mapping column names to data types (ordered)
            nullable: Dictionary mapping column names to nullability
        """
        self.columns = columns
        self.nullable = nullable or {name: True for name in columns}

    def __getitem__(self, column: str) -> DataType:
        """Get type of a column."""
        return self.columns[column]

    def __contains__(self, column: str) -> bool:
        """Check if column exists in schema."""
        return column in self.columns

    def __len__(self) -> int:
        """Get number of columns."""
        return len(self.columns)

    def __repr__(self) -> str:
        cols = ", ".join(f"{name}: {dtype}" for name, dtype in self.columns.items())
        return f"Schema({cols})"

    def get_column_names(self) -> list[str]:
        """Get list of column names."""
        return list(self.columns.keys())

    def get_column_type(self, column: str) -> Optional[DataType]:
        """Get type of a column, or None if column doesn't exist."""
        return self.columns.get(column)

    def validate_column(self, column: str) -> None:
        """Validate that a column exists in the schema.

        Args:
            column: Column name to validate

        Raises:
            ValueError: If column doesn't exist
        """
        if column not in self.columns:
            available = ", ".join(self.columns.keys())
            raise ValueError(
                f"Column '{column}' not found in schema. Available columns: {available}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert schema to dictionary."""
        return {name: dtype.value for name, dtype in self.columns.items()}
