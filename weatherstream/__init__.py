"""
weatherstream - SQL over the OpenWeather One Call API 3.0

Eight tabular resources (current weather, forecasts, alerts, history and
daily aggregates) backed by one API call per query.

Example:
    >>> from weatherstream import query
    >>> rows = query(
    ...     "SELECT * FROM current_weather WHERE latitude = 52.52 AND longitude = 13.405"
    ... ).to_list()
"""

__version__ = "0.1.0"

from weatherstream.config import WeatherSettings, load_settings
from weatherstream.core.query import QueryResult, query
from weatherstream.core.resources import default_registry
from weatherstream.core.scan import ScanState, WeatherScan, close_scan, next_row, open_scan
from weatherstream.readers.weather_reader import WeatherReader

__all__ = [
    "__version__",
    "query",
    "QueryResult",
    "WeatherReader",
    "WeatherScan",
    "ScanState",
    "open_scan",
    "next_row",
    "close_scan",
    "default_registry",
    "WeatherSettings",
    "load_settings",
]
