"""
Predicate extraction and validation

Turns the WHERE conditions offered by the host engine into the typed request
parameters of one resource. Only equality against a literal can become a
parameter: the provider cannot evaluate expressions, so anything else is left
to the host engine as a residual condition.

Validation is fail-fast: the first violation found is raised.
"""

import math
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Optional

from weatherstream.core.registry import (
    OffsetFormat,
    OneOf,
    ParamSpec,
    ParamType,
    PastTimestamp,
    Range,
    ResourceDefinition,
)
from weatherstream.core.types import parse_date, parse_timestamp
from weatherstream.errors import InvalidFormat, MissingParameter, OutOfRange
from weatherstream.sql.ast_nodes import Condition

_OFFSET_RE = re.compile(r"^([+-])([01]\d|2[0-3]):?([0-5]\d)$")


class ValidatedParameterSet(Mapping):
    """
    Typed request parameters for one scan, in declaration order

    Values are floats for coordinates, int Unix seconds for timestamps and
    'YYYY-MM-DD' strings for dates. Conditions that were not used as
    parameters are kept in residual for the host engine to evaluate.
    """

    def __init__(self, values: dict[str, Any], residual: Iterable[Condition] = ()):
        self._values = MappingProxyType(dict(values))
        self.residual = tuple(residual)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"ValidatedParameterSet({items})"


def is_pushable(condition: Condition, resource: ResourceDefinition) -> bool:
    """
    Check if a condition can become a request parameter

    Pushable conditions:
    - compare a recognized parameter of the resource
    - use the equality operator
    - have a literal right-hand side (not a column or expression)
    """
    return (
        condition.operator == "="
        and condition.is_literal
        and resource.get_param(condition.column) is not None
    )


def split_conditions(
    conditions: Iterable[Condition],
    resource: ResourceDefinition,
) -> tuple[dict[str, Any], list[Condition]]:
    """
    Separate parameter literals from residual conditions

    The first literal equality per parameter wins; repeats and everything
    else are residual.

    Returns:
        (literals by parameter name, residual conditions)
    """
    literals: dict[str, Any] = {}
    residual: list[Condition] = []

    for condition in conditions:
        if is_pushable(condition, resource) and condition.column not in literals:
            literals[condition.column] = condition.value
        else:
            residual.append(condition)

    return literals, residual


def extract_parameters(
    conditions: Iterable[Condition],
    resource: ResourceDefinition,
    now: Optional[datetime] = None,
) -> ValidatedParameterSet:
    """
    Isolate and validate the literal equality predicates for a resource

    Args:
        conditions: WHERE conditions offered by the host engine
        resource: Resource being scanned
        now: Reference time for past-timestamp checks (default: current UTC time)

    Returns:
        ValidatedParameterSet with typed values and residual conditions

    Raises:
        MissingParameter: A required parameter has no literal equality
        OutOfRange: A literal failed its domain check
        InvalidFormat: A literal did not parse under its expected grammar
    """
    literals, residual = split_conditions(conditions, resource)

    values: dict[str, Any] = {}
    for param in resource.params:
        if param.name in literals:
            values[param.name] = validate_literal(param, literals[param.name], now)
        elif param.required:
            raise MissingParameter(param.name, param.example)
        elif param.default is not None:
            values[param.name] = param.default

    return ValidatedParameterSet(values, residual)


def validate_literal(param: ParamSpec, value: Any, now: Optional[datetime] = None) -> Any:
    """
    Check one literal against its parameter's semantic type and rule

    Returns:
        The typed value sent to the provider
    """
    kind = param.semantic_type

    if kind in (ParamType.LATITUDE, ParamType.LONGITUDE):
        return _validate_coordinate(param, value)
    if kind == ParamType.TIMESTAMP:
        return _validate_timestamp(param, value, now)
    if kind == ParamType.DATE:
        return _validate_date(param, value)
    if kind == ParamType.ENUM:
        return _validate_choice(param, value)
    if kind == ParamType.TZ_OFFSET:
        return _validate_offset(param, value)

    raise InvalidFormat(param.name, value, f"unsupported parameter type {kind}")


def _check_rule(param: ParamSpec, expected: type) -> None:
    if not isinstance(param.rule, expected):
        raise TypeError(
            f"parameter '{param.name}' needs a {expected.__name__} rule, "
            f"got {type(param.rule).__name__}"
        )


def _validate_coordinate(param: ParamSpec, value: Any) -> float:
    _check_rule(param, Range)
    rule = param.rule

    if isinstance(value, bool):
        raise InvalidFormat(param.name, value, "a number")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise InvalidFormat(param.name, value, "a number")
    else:
        raise InvalidFormat(param.name, value, "a number")

    if not math.isfinite(number):
        raise InvalidFormat(param.name, value, "a finite number")

    if not rule.lo <= number <= rule.hi:
        raise OutOfRange(
            param.name,
            value,
            f"{param.name} must be {rule.describe()}. Example: {param.example or param.name}",
        )

    return number


def _validate_timestamp(param: ParamSpec, value: Any, now: Optional[datetime]) -> int:
    rule = param.rule
    parsed = parse_timestamp(value)
    if parsed is None:
        raise InvalidFormat(
            param.name, value, "a timestamp like '2024-01-01 00:00:00+00' or Unix seconds"
        )

    if isinstance(rule, PastTimestamp):
        reference = now or datetime.now(timezone.utc)
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)

        if parsed < rule.epoch_floor:
            raise OutOfRange(
                param.name, value, f"must not be earlier than {rule.epoch_floor.isoformat()}"
            )
        if parsed >= reference - rule.recency_floor:
            raise OutOfRange(param.name, value, f"must be {rule.describe()}")

    return int(parsed.timestamp())


def _validate_date(param: ParamSpec, value: Any) -> str:
    parsed = parse_date(value)
    if parsed is None:
        raise InvalidFormat(param.name, value, "a date in YYYY-MM-DD format")
    return parsed.isoformat()


def _validate_choice(param: ParamSpec, value: Any) -> str:
    _check_rule(param, OneOf)
    rule = param.rule

    if not isinstance(value, str) or value.strip().lower() not in rule.choices:
        raise InvalidFormat(param.name, value, rule.describe())
    return value.strip().lower()


def _validate_offset(param: ParamSpec, value: Any) -> str:
    _check_rule(param, OffsetFormat)

    match = _OFFSET_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidFormat(param.name, value, param.rule.describe())

    sign, hours, minutes = match.groups()
    return f"{sign}{hours}:{minutes}"
