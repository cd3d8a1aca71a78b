"""
Schema registry types

Static, immutable descriptions of each queryable resource: the predicates it
accepts, the API path it calls, the shape of the response and the ordered
output fields.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Iterator, Mapping, Optional, Union

from weatherstream.core.paths import JsonPath
from weatherstream.core.types import DataType, Schema
from weatherstream.errors import UnknownResource


# ---------------------------------------------------------------------------
# Cardinality
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Single:
    """Exactly one row: the document root, or one object within it"""

    records_path: Optional[str] = None

    def __str__(self) -> str:
        return "1 row"


@dataclass(frozen=True)
class FixedCount:
    """An array with a nominal length n; shorter or longer arrays are emitted as-is"""

    n: int
    records_path: str

    def __str__(self) -> str:
        return f"{self.n} rows"


@dataclass(frozen=True)
class Variable:
    """An array of 0..N rows"""

    records_path: str

    def __str__(self) -> str:
        return "0-N rows"


Cardinality = Union[Single, FixedCount, Variable]


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class ParamType(Enum):
    """Semantic type of a request parameter"""

    LATITUDE = "latitude"
    LONGITUDE = "longitude"
    TIMESTAMP = "timestamp"
    DATE = "date"
    ENUM = "enum"
    TZ_OFFSET = "tz_offset"


@dataclass(frozen=True)
class Range:
    """Numeric value within [lo, hi]"""

    lo: float
    hi: float

    def describe(self) -> str:
        return f"between {self.lo:g} and {self.hi:g}"


@dataclass(frozen=True)
class PastTimestamp:
    """Timestamp no earlier than epoch_floor and strictly before now - recency_floor"""

    epoch_floor: datetime
    recency_floor: timedelta = timedelta(0)

    def describe(self) -> str:
        bound = "now"
        if self.recency_floor:
            bound = f"now - {self.recency_floor}"
        return f"in the past: from {self.epoch_floor.isoformat()} to before {bound}"


@dataclass(frozen=True)
class DateFormat:
    """Calendar date in YYYY-MM-DD form"""

    def describe(self) -> str:
        return "a date in YYYY-MM-DD format"


@dataclass(frozen=True)
class OneOf:
    """Value from a fixed set of strings"""

    choices: frozenset

    def describe(self) -> str:
        return "one of " + ", ".join(sorted(self.choices))


@dataclass(frozen=True)
class OffsetFormat:
    """UTC offset in +HH:MM / -HH:MM form"""

    def describe(self) -> str:
        return "a UTC offset like +02:00"


ValidationRule = Union[Range, PastTimestamp, DateFormat, OneOf, OffsetFormat]


@dataclass(frozen=True)
class ParamSpec:
    """
    A predicate a resource accepts

    Attributes:
        name: Column name the caller filters on
        semantic_type: How the literal is interpreted
        rule: Domain check applied to the literal
        required: Whether the scan fails without it
        default: Value used when an optional parameter is absent
        api_name: Query-string key sent to the provider (defaults to name)
        example: Example predicate shown in MissingParameter messages
    """

    name: str
    semantic_type: ParamType
    rule: ValidationRule
    required: bool = True
    default: Any = None
    api_name: Optional[str] = None
    example: Optional[str] = None

    @property
    def query_key(self) -> str:
        return self.api_name or self.name


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldSpec:
    """
    One output column

    Attributes:
        output_name: Column name
        value_type: Declared type of the column
        nullable: Whether absence in the document maps to NULL
        json_path: Where the value lives (see weatherstream.core.paths)
        join_with: Separator for text columns built from a list of strings
    """

    output_name: str
    value_type: DataType
    nullable: bool
    json_path: JsonPath
    join_with: Optional[str] = None


def column(
    name: str,
    value_type: DataType,
    path: str,
    nullable: bool = False,
    join_with: Optional[str] = None,
) -> FieldSpec:
    """Shorthand used by the resource table; compiles the path once"""
    return FieldSpec(
        output_name=name,
        value_type=value_type,
        nullable=nullable,
        json_path=JsonPath.parse(path),
        join_with=join_with,
    )


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResourceDefinition:
    """
    A queryable tabular resource backed by one API endpoint

    Constructed once at startup and never mutated.
    """

    name: str
    api_path: str
    cardinality: Cardinality
    params: tuple[ParamSpec, ...]
    fields: tuple[FieldSpec, ...]
    fixed_params: tuple[tuple[str, str], ...] = ()
    description: str = ""

    def __post_init__(self):
        names = [f.output_name for f in self.fields]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate column names in resource '{self.name}'")
        param_names = [p.name for p in self.params]
        if len(set(param_names)) != len(param_names):
            raise ValueError(f"Duplicate parameter names in resource '{self.name}'")

    @property
    def required_params(self) -> tuple[ParamSpec, ...]:
        return tuple(p for p in self.params if p.required)

    @property
    def optional_params(self) -> tuple[ParamSpec, ...]:
        return tuple(p for p in self.params if not p.required)

    @property
    def column_names(self) -> list[str]:
        return [f.output_name for f in self.fields]

    @property
    def schema(self) -> Schema:
        """Column names, types and nullability in output order"""
        return Schema(
            {f.output_name: f.value_type for f in self.fields},
            {f.output_name: f.nullable for f in self.fields},
        )

    def get_param(self, name: str) -> Optional[ParamSpec]:
        for param in self.params:
            if param.name == name:
                return param
        return None

    def to_ddl(self, server_name: str, schema: Optional[str] = None) -> str:
        """
        Render a PostgreSQL foreign table definition for this resource

        Args:
            server_name: Foreign server the table belongs to
            schema: Optional schema to qualify the table name with

        Returns:
            A "create foreign table if not exists" statement
        """
        table = f"{schema}.{self.name}" if schema else self.name
        columns = ",\n".join(
            f"  {f.output_name} {f.value_type.sql_type}" for f in self.fields
        )
        return (
            f"create foreign table if not exists {table} (\n"
            f"{columns}\n"
            f")\n"
            f"server {server_name} options (\n"
            f"  object '{self.name}'\n"
            f")"
        )


@dataclass(frozen=True)
class Registry:
    """Immutable name -> ResourceDefinition mapping, in declaration order"""

    resources: tuple[ResourceDefinition, ...] = field(default_factory=tuple)

    def __post_init__(self):
        names = [r.name for r in self.resources]
        if len(set(names)) != len(names):
            raise ValueError("Duplicate resource names in registry")

    @property
    def _by_name(self) -> Mapping[str, ResourceDefinition]:
        return {r.name: r for r in self.resources}

    def get(self, name: str) -> ResourceDefinition:
        """
        Look up a resource by name

        Raises:
            UnknownResource: If no resource has that name
        """
        resource = self._by_name.get(name)
        if resource is None:
            raise UnknownResource(name, self.names())
        return resource

    def names(self) -> list[str]:
        return [r.name for r in self.resources]

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[ResourceDefinition]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)

    def to_ddl(self, server_name: str, schema: Optional[str] = None) -> list[str]:
        """Foreign table definitions for every resource"""
        return [r.to_ddl(server_name, schema) for r in self.resources]
