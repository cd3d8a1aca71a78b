"""Row sources for the query engine"""

from weatherstream.readers.base import BaseReader
from weatherstream.readers.weather_reader import WeatherReader

__all__ = ["BaseReader", "WeatherReader"]
