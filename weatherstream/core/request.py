"""
Request builder

Turns a resource and its validated parameters into a fully-specified
outbound request. Pure: no I/O, no clock, no randomness.
"""

from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlencode

from weatherstream.config import WeatherSettings
from weatherstream.core.registry import ResourceDefinition
from weatherstream.errors import Misconfigured

CREDENTIAL_PARAM = "appid"


@dataclass(frozen=True)
class RequestDescriptor:
    """
    A fully-specified outbound request

    Attributes:
        method: HTTP method (always GET)
        url: Absolute URL without query string
        path: Resource-relative API path
        query: Ordered query parameters, credential last
        headers: Request headers
        resource_name: Resource the request was built for
    """

    method: str
    url: str
    path: str
    query: tuple[tuple[str, str], ...]
    headers: tuple[tuple[str, str], ...]
    resource_name: str

    @property
    def params(self) -> dict[str, str]:
        return dict(self.query)

    @property
    def header_dict(self) -> dict[str, str]:
        return dict(self.headers)

    def full_url(self) -> str:
        return f"{self.url}?{urlencode(self.query)}"

    def redacted_url(self) -> str:
        """Full URL with the credential masked, for logs and explain output"""
        query = [
            (key, "***" if key == CREDENTIAL_PARAM else value)
            for key, value in self.query
        ]
        return f"{self.url}?{urlencode(query)}"


def format_value(value) -> str:
    """Render a validated parameter value as a query-string value"""
    if isinstance(value, float):
        return repr(value)
    return str(value)


def build_request(
    resource: ResourceDefinition,
    params: Mapping[str, object],
    settings: WeatherSettings,
) -> RequestDescriptor:
    """
    Build the outbound request for one scan

    Args:
        resource: Resource being scanned
        params: Validated parameters (see weatherstream.core.predicates)
        settings: Process-wide configuration

    Returns:
        RequestDescriptor ready for the transport

    Raises:
        Misconfigured: If the API key or base URL is missing or blank
    """
    api_key: Optional[str] = settings.get("api_key")
    if api_key is None:
        raise Misconfigured(
            "API key is not set. Set OPENWEATHER_API_KEY or pass --api-key"
        )

    base_url: Optional[str] = settings.get("api_url")
    if base_url is None:
        raise Misconfigured("API URL is not set. Set OPENWEATHER_API_URL or pass --api-url")

    query: list[tuple[str, str]] = []
    for param in resource.params:
        if param.name in params:
            query.append((param.query_key, format_value(params[param.name])))

    query.extend(resource.fixed_params)
    query.append((CREDENTIAL_PARAM, api_key.strip()))

    headers = (
        ("user-agent", settings.user_agent),
        ("accept", "application/json"),
    )

    return RequestDescriptor(
        method="GET",
        url=base_url.strip().rstrip("/") + resource.api_path,
        path=resource.api_path,
        query=tuple(query),
        headers=headers,
        resource_name=resource.name,
    )
