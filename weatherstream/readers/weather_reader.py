"""
Weather reader - rows from one OpenWeather resource

Pushed-down WHERE conditions become request parameters; the reader then
drives a single scan and yields its rows as dictionaries.
"""

from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Union

from weatherstream.config import WeatherSettings
from weatherstream.core.predicates import split_conditions
from weatherstream.core.registry import Registry, ResourceDefinition
from weatherstream.core.resources import default_registry
from weatherstream.core.scan import WeatherScan
from weatherstream.core.transport import Transport
from weatherstream.core.types import Schema
from weatherstream.readers.base import BaseReader
from weatherstream.sql.ast_nodes import Condition


class WeatherReader(BaseReader):
    """
    Read rows of one weather resource

    Example:
        reader = WeatherReader("hourly_forecast")
        reader.set_filter([
            Condition("latitude", "=", 52.52),
            Condition("longitude", "=", 13.405),
        ])
        for row in reader:
            print(row["forecast_time"], row["temperature_temp"])
    """

    def __init__(
        self,
        resource: Union[str, ResourceDefinition],
        settings: Optional[WeatherSettings] = None,
        transport: Optional[Transport] = None,
        registry: Optional[Registry] = None,
        now: Optional[datetime] = None,
    ):
        """
        Initialize weather reader

        Args:
            resource: Resource name or definition
            settings: Configuration (default: loaded from the environment)
            transport: Transport to call (default: HttpxTransport)
            registry: Registry to resolve names against
            now: Reference time for timestamp validation

        Raises:
            UnknownResource: If the resource name is not registered
        """
        self.registry = registry or default_registry()
        if isinstance(resource, ResourceDefinition):
            self.resource = resource
        else:
            self.resource = self.registry.get(resource)

        self.settings = settings
        self.transport = transport
        self.now = now

        self.filter_conditions: List[Condition] = []
        self.last_scan: Optional[WeatherScan] = None

    def supports_pushdown(self) -> bool:
        return True

    def set_filter(self, conditions: List[Condition]) -> None:
        self.filter_conditions = list(conditions)

    def residual_conditions(self, conditions: List[Condition]) -> List[Condition]:
        _, residual = split_conditions(conditions, self.resource)
        return residual

    def read_lazy(self) -> Iterator[Dict[str, Any]]:
        """
        Open one scan and yield its rows

        The scan is closed when iteration finishes, fails or is abandoned.
        """
        scan = WeatherScan(
            self.resource,
            self.filter_conditions,
            settings=self.settings,
            transport=self.transport,
            registry=self.registry,
            now=self.now,
        )
        self.last_scan = scan
        columns = self.resource.column_names

        try:
            scan.open()
            while True:
                row = scan.next_row()
                if row is None:
                    break
                yield dict(zip(columns, row))
        finally:
            scan.close()

    def get_schema(self) -> Schema:
        return self.resource.schema

    def __repr__(self) -> str:
        return f"WeatherReader({self.resource.name})"
