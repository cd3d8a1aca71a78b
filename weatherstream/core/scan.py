"""
Scan coordinator

One scan is one request/response/row-streaming cycle for one resource:

    CREATED -> OPENED -> FETCHING -> STREAMING -> CLOSED
                  \\          \\          \\
                   +----------+----------+--> FAILED -> CLOSED

open() validates the predicates, builds the request, issues exactly one
transport call and flattens the whole response before the first row is
handed out, so a scan either yields every row or fails without yielding any.
"""

import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Union

from pydantic import ValidationError

from weatherstream.config import WeatherSettings, load_settings
from weatherstream.core.flattener import flatten
from weatherstream.core.predicates import ValidatedParameterSet, extract_parameters
from weatherstream.core.registry import Registry, ResourceDefinition
from weatherstream.core.request import RequestDescriptor, build_request
from weatherstream.core.resources import default_registry
from weatherstream.core.transport import HttpxTransport, Transport, TransportResponse
from weatherstream.errors import (
    MalformedResponse,
    Misconfigured,
    NotFound,
    RateLimited,
    ScanStateError,
    TransportFailure,
    Unauthorized,
)
from weatherstream.sql.ast_nodes import Condition

logger = logging.getLogger(__name__)

_STATUS_ERRORS = {
    401: Unauthorized,
    404: NotFound,
    429: RateLimited,
}


class ScanState(Enum):
    CREATED = "created"
    OPENED = "opened"
    FETCHING = "fetching"
    STREAMING = "streaming"
    CLOSED = "closed"
    FAILED = "failed"


def classify_status(response: TransportResponse) -> TransportFailure:
    """
    Map a non-success response to its error, keeping the provider's message

    The provider reports errors as {"cod": 401, "message": "..."}; when the
    body is not in that form it is kept as text.
    """
    text = response.body.decode("utf-8", errors="replace").strip()
    message = text or f"status {response.status_code}"

    try:
        payload = json.loads(text)
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        message = payload["message"]

    error_class = _STATUS_ERRORS.get(response.status_code, TransportFailure)
    return error_class(message, status_code=response.status_code)


class WeatherScan:
    """
    State machine for one scan

    Example:
        with WeatherScan("current_weather", conditions) as scan:
            scan.open()
            while (row := scan.next_row()) is not None:
                print(row)
    """

    def __init__(
        self,
        resource: Union[str, ResourceDefinition],
        conditions: Iterable[Condition] = (),
        settings: Optional[WeatherSettings] = None,
        transport: Optional[Transport] = None,
        registry: Optional[Registry] = None,
        now: Optional[datetime] = None,
    ):
        """
        Initialize scan

        Args:
            resource: Resource name or definition
            conditions: WHERE conditions offered by the host engine
            settings: Configuration (default: loaded from the environment)
            transport: Transport to call (default: HttpxTransport)
            registry: Registry to resolve names against (default: all eight resources)
            now: Reference time for timestamp validation (default: current time)
        """
        self._resource_ref = resource
        self.conditions = list(conditions)
        self.settings = settings
        self.transport = transport
        self.registry = registry or default_registry()
        self.now = now

        self.state = ScanState.CREATED
        self.resource: Optional[ResourceDefinition] = (
            resource if isinstance(resource, ResourceDefinition) else None
        )
        self.params: Optional[ValidatedParameterSet] = None
        self.request: Optional[RequestDescriptor] = None
        self.error: Optional[BaseException] = None

        self._document: Any = None
        self._rows: list[tuple] = []
        self._cursor = 0

        # Counters
        self.bytes_in = 0
        self.rows_fetched = 0
        self.rows_out = 0

    @property
    def resource_name(self) -> str:
        if self.resource is not None:
            return self.resource.name
        return str(self._resource_ref)

    @property
    def residual(self) -> tuple[Condition, ...]:
        """Conditions the host engine must still evaluate on the rows"""
        return self.params.residual if self.params is not None else ()

    def open(self) -> "WeatherScan":
        """
        Validate, fetch once and flatten

        Returns:
            self, positioned before the first row

        Raises:
            ScanStateError: If the scan was already opened or closed
            WeatherStreamError: Any validation, configuration, transport or
                response error; the scan is left FAILED
        """
        if self.state != ScanState.CREATED:
            raise ScanStateError(
                f"cannot open scan of {self.resource_name} in state {self.state.name}"
            )

        try:
            self._validate()
            self._fetch()
        except Exception as e:
            self.error = e
            self.state = ScanState.FAILED
            logger.debug("Scan of %s failed: %s", self.resource_name, e)
            raise

        return self

    def _validate(self) -> None:
        if self.resource is None:
            self.resource = self.registry.get(str(self._resource_ref))

        self.params = extract_parameters(self.conditions, self.resource, now=self.now)
        self.state = ScanState.OPENED

    def _fetch(self) -> None:
        settings = self.settings
        if settings is None:
            try:
                settings = load_settings()
            except ValidationError as e:
                raise Misconfigured(str(e)) from e

        self.request = build_request(self.resource, self.params, settings)

        transport = self.transport or HttpxTransport(timeout=settings.http_timeout_seconds)

        self.state = ScanState.FETCHING
        logger.info("Fetching %s: %s", self.resource.name, self.request.redacted_url())

        response = transport.execute(
            self.request.method,
            self.request.url,
            self.request.query,
            self.request.header_dict,
        )
        self.bytes_in = len(response.body)
        logger.debug("Received %d bytes (HTTP %d)", self.bytes_in, response.status_code)

        if not response.ok:
            raise classify_status(response)

        try:
            self._document = json.loads(response.body)
        except ValueError as e:
            raise MalformedResponse(f"response body is not valid JSON: {e}") from e

        self._rows = flatten(self.resource, self._document, self.params)
        self.rows_fetched = len(self._rows)
        self.state = ScanState.STREAMING

    def next_row(self) -> Optional[tuple]:
        """
        Hand out the next row

        Returns:
            The next row tuple, or None when all rows have been returned

        Raises:
            ScanStateError: If the scan is not streaming
        """
        if self.state != ScanState.STREAMING:
            raise ScanStateError(
                f"next_row() called on scan of {self.resource_name} in state {self.state.name}"
            )

        if self._cursor >= len(self._rows):
            return None

        row = self._rows[self._cursor]
        self._cursor += 1
        self.rows_out += 1
        return row

    def close(self) -> None:
        """Release buffered rows and the parsed document; safe to call repeatedly"""
        if self.state != ScanState.CLOSED:
            logger.debug(
                "Closing scan of %s: %d bytes in, %d rows fetched, %d rows out",
                self.resource_name,
                self.bytes_in,
                self.rows_fetched,
                self.rows_out,
            )
        self._rows = []
        self._document = None
        self._cursor = 0
        self.state = ScanState.CLOSED

    def stats(self) -> dict[str, int]:
        return {
            "bytes_in": self.bytes_in,
            "rows_in": self.rows_fetched,
            "rows_out": self.rows_out,
        }

    def __iter__(self) -> Iterator[tuple]:
        while True:
            row = self.next_row()
            if row is None:
                return
            yield row

    def __enter__(self) -> "WeatherScan":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"WeatherScan({self.resource_name}, state={self.state.name})"


def open_scan(
    resource_name: str,
    predicates: Iterable[Condition],
    settings: Optional[WeatherSettings] = None,
    transport: Optional[Transport] = None,
    registry: Optional[Registry] = None,
    now: Optional[datetime] = None,
) -> WeatherScan:
    """
    Open a scan for the host engine

    Returns:
        An opened WeatherScan handle

    Raises:
        WeatherStreamError: If validation, the request or the response fails
    """
    scan = WeatherScan(
        resource_name,
        predicates,
        settings=settings,
        transport=transport,
        registry=registry,
        now=now,
    )
    return scan.open()


def next_row(handle: WeatherScan) -> Optional[tuple]:
    """Next row of an open scan, or None at end of data"""
    return handle.next_row()


def close_scan(handle: WeatherScan) -> None:
    """Close a scan; closing twice or after a failure is a no-op"""
    handle.close()
