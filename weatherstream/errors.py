"""
Error taxonomy for weatherstream

Every error that ends a scan is a WeatherStreamError. Validation and
configuration errors are raised before any network I/O; transport and
response errors are raised as soon as they are detected.
"""

from typing import Any, Optional


class WeatherStreamError(Exception):
    """Base class for all weatherstream errors"""

    pass


class UnknownResource(WeatherStreamError):
    """Raised when a resource name is not in the registry"""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(
            f"unsupported resource '{name}'. Supported: {', '.join(available)}"
        )


class MissingParameter(WeatherStreamError):
    """A required predicate was not supplied as a literal equality"""

    def __init__(self, name: str, example: Optional[str] = None):
        self.name = name
        message = f"WHERE clause must include '{name}' as an equality with a literal value"
        if example:
            message += f". Example: {example}"
        super().__init__(message)


class OutOfRange(WeatherStreamError):
    """A supplied literal failed its domain check"""

    def __init__(self, name: str, value: Any, detail: str = ""):
        self.name = name
        self.value = value
        message = f"{name} out of range, got {value!r}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class InvalidFormat(WeatherStreamError):
    """A supplied literal did not parse under its expected grammar"""

    def __init__(self, name: str, value: Any, expected: str = ""):
        self.name = name
        self.value = value
        message = f"invalid value for {name}: {value!r}"
        if expected:
            message += f" (expected {expected})"
        super().__init__(message)


class Misconfigured(WeatherStreamError):
    """Process-wide configuration (credential, base URL, timeout) is absent or invalid"""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"misconfigured: {detail}")


class TransportFailure(WeatherStreamError):
    """
    Outbound call failed or returned a non-success status

    The provider's status code and message are kept verbatim. For network
    errors status_code is None and network_error holds the cause.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        network_error: Optional[BaseException] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.network_error = network_error
        if status_code is not None:
            super().__init__(f"HTTP {status_code}: {message}")
        else:
            super().__init__(f"request failed: {message}")


class Unauthorized(TransportFailure):
    """HTTP 401 - the API key was rejected"""

    pass


class NotFound(TransportFailure):
    """HTTP 404 - the provider has no data for the request"""

    pass


class RateLimited(TransportFailure):
    """HTTP 429 - the API key exceeded its call quota"""

    pass


class MalformedResponse(WeatherStreamError):
    """The response parsed but violated the shape expected for the resource"""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"malformed response: {detail}")


class TypeMismatch(WeatherStreamError):
    """A field's raw value could not be coerced to its declared type"""

    def __init__(self, field: str, detail: str):
        self.field = field
        self.detail = detail
        super().__init__(f"type mismatch for field '{field}': {detail}")


class ScanStateError(WeatherStreamError):
    """A scan operation was called in a state that does not allow it"""

    pass
