"""
Transport collaborator

The core issues exactly one call per scan through a Transport. The default
implementation uses httpx; tests substitute a stub. Timeouts live here, not
in the scan logic. There are no retries.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, Sequence, Union

import httpx

from weatherstream.errors import TransportFailure

logger = logging.getLogger(__name__)

QueryParams = Union[Mapping[str, str], Sequence[tuple[str, str]]]


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of a completed call"""

    status_code: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    """Anything that can execute one HTTP request"""

    def execute(
        self,
        method: str,
        url: str,
        params: QueryParams,
        headers: Mapping[str, str],
    ) -> TransportResponse:
        """
        Execute a request and return its response

        Raises:
            TransportFailure: If no response was received
        """
        ...


class HttpxTransport:
    """
    Transport backed by httpx.Client

    Example:
        transport = HttpxTransport(timeout=10.0)
        response = transport.execute("GET", url, {"lat": "52.52"}, {})
    """

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.Client] = None):
        """
        Initialize transport

        Args:
            timeout: Total request timeout in seconds
            client: Existing client to use (its lifetime stays with the caller)
        """
        self.timeout = timeout
        self._client = client

    def execute(
        self,
        method: str,
        url: str,
        params: QueryParams,
        headers: Mapping[str, str],
    ) -> TransportResponse:
        try:
            if self._client is not None:
                response = self._client.request(
                    method, url, params=params, headers=dict(headers), timeout=self.timeout
                )
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                    response = client.request(method, url, params=params, headers=dict(headers))
        except httpx.HTTPError as e:
            raise TransportFailure(str(e) or e.__class__.__name__, network_error=e) from e

        logger.debug("%s %s -> %d", method, url, response.status_code)
        return TransportResponse(status_code=response.status_code, body=response.content)

    def __repr__(self) -> str:
        return f"HttpxTransport(timeout={self.timeout})"
