"""
Response flattener

Converts one parsed response document into the ordered rows of a resource,
driven entirely by the resource's cardinality and field paths.
"""

import logging
from typing import Any, Mapping, Optional

from weatherstream.core.paths import MISSING, JsonPath
from weatherstream.core.registry import FixedCount, ResourceDefinition, Single, Variable
from weatherstream.core.types import coerce_value
from weatherstream.errors import MalformedResponse

logger = logging.getLogger(__name__)

Row = tuple


def flatten(
    resource: ResourceDefinition,
    document: Any,
    params: Optional[Mapping[str, Any]] = None,
) -> list[Row]:
    """
    Flatten a response document into rows

    Args:
        resource: Resource the document was fetched for
        document: Parsed JSON document
        params: Validated request parameters (read by "@name" paths)

    Returns:
        Rows as tuples aligned with resource.fields, in provider order

    Raises:
        MalformedResponse: If the document does not have the expected shape
        TypeMismatch: If a value cannot be coerced to its declared type
    """
    records = _locate_records(resource, document)
    rows = [
        _build_row(resource, record, index, document, params)
        for index, record in enumerate(records)
    ]
    logger.debug("Flattened %d row(s) for %s", len(rows), resource.name)
    return rows


def _locate_records(resource: ResourceDefinition, document: Any) -> list:
    cardinality = resource.cardinality

    if isinstance(cardinality, Single):
        if cardinality.records_path is None:
            record = document
        else:
            record = JsonPath.parse(cardinality.records_path).resolve(document, document)
        if record is MISSING:
            raise MalformedResponse(
                f"'{cardinality.records_path}' is missing from the {resource.name} response"
            )
        if not isinstance(record, dict):
            raise MalformedResponse(
                f"expected an object for {resource.name}, got {type(record).__name__}"
            )
        return [record]

    if isinstance(cardinality, (FixedCount, Variable)):
        records = JsonPath.parse(cardinality.records_path).resolve(document, document)
        if records is MISSING:
            raise MalformedResponse(
                f"'{cardinality.records_path}' array is missing from the {resource.name} response"
            )
        if not isinstance(records, list):
            raise MalformedResponse(
                f"expected '{cardinality.records_path}' to be an array, "
                f"got {type(records).__name__}"
            )
        if isinstance(cardinality, FixedCount) and len(records) != cardinality.n:
            logger.debug(
                "%s returned %d of %d nominal rows",
                resource.name,
                len(records),
                cardinality.n,
            )
        return records

    raise MalformedResponse(f"unsupported cardinality {cardinality!r}")


def _build_row(
    resource: ResourceDefinition,
    record: Any,
    index: int,
    document: Any,
    params: Optional[Mapping[str, Any]],
) -> Row:
    if not isinstance(record, dict):
        raise MalformedResponse(
            f"row {index} of {resource.name} is {type(record).__name__}, expected an object"
        )

    values = []
    for field in resource.fields:
        raw = field.json_path.resolve(record, document, params)

        if raw is MISSING:
            if not field.nullable:
                raise MalformedResponse(
                    f"required field '{field.output_name}' ({field.json_path}) "
                    f"is missing in row {index} of {resource.name}"
                )
            values.append(None)
            continue

        values.append(
            coerce_value(field.output_name, field.value_type, raw, field.join_with)
        )

    return tuple(values)
