"""
Pytest configuration and shared fixtures
"""

import json
from datetime import datetime, timezone

import pytest

from weatherstream.config import WeatherSettings
from weatherstream.core.transport import TransportResponse
from weatherstream.sql.ast_nodes import Condition

BERLIN = (52.52, 13.405)
BASE_TIME = 1717236000  # 2024-06-01 10:00:00 UTC


class StubTransport:
    """Transport that records calls and replies with a canned response"""

    def __init__(self, document=None, status_code=200, body=None):
        if body is None:
            body = json.dumps(document if document is not None else {}).encode("utf-8")
        self.response = TransportResponse(status_code=status_code, body=body)
        self.calls = []

    def execute(self, method, url, params, headers):
        self.calls.append(
            {"method": method, "url": url, "params": list(params), "headers": dict(headers)}
        )
        return self.response


class ForbiddenTransport:
    """Transport that fails the test if it is ever called"""

    def __init__(self):
        self.calls = []

    def execute(self, method, url, params, headers):
        self.calls.append(url)
        pytest.fail(f"unexpected network call to {url}")


def _weather(main="Clouds"):
    return [{"id": 803, "main": main, "description": "broken clouds", "icon": "04d"}]


def hourly_entry(index):
    entry = {
        "dt": BASE_TIME + index * 3600,
        "temp": 20.0 + index * 0.1,
        "feels_like": 19.5,
        "pressure": 1013,
        "humidity": 60,
        "dew_point": 11.2,
        "uvi": 3.1,
        "clouds": 75,
        "visibility": 10000,
        "wind_speed": 4.6,
        "wind_deg": 250,
        "wind_gust": 7.2,
        "pop": 0.2,
        "weather": _weather(),
    }
    if index % 10 == 0:
        entry["rain"] = {"1h": 0.35}
    return entry


def daily_entry(index):
    return {
        "dt": BASE_TIME + index * 86400,
        "sunrise": BASE_TIME - 20000 + index * 86400,
        "sunset": BASE_TIME + 30000 + index * 86400,
        "moonrise": BASE_TIME + index * 86400,
        "moonset": BASE_TIME + 40000 + index * 86400,
        "moon_phase": 0.25,
        "temp": {"day": 22.1, "min": 12.3, "max": 24.0, "night": 14.2, "eve": 20.3, "morn": 13.0},
        "feels_like": {"day": 21.8, "night": 13.9, "eve": 20.0, "morn": 12.6},
        "pressure": 1016,
        "humidity": 55,
        "dew_point": 10.4,
        "wind_speed": 5.1,
        "wind_deg": 240,
        "wind_gust": 9.8,
        "weather": _weather("Rain"),
        "clouds": 40,
        "pop": 0.6,
        "rain": 2.5,
        "uvi": 5.4,
    }


@pytest.fixture
def now():
    """Fixed reference time for timestamp validation"""
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings():
    """Settings with a test credential and base URL"""
    return WeatherSettings(api_key="test-key", api_url="https://api.test/data/3.0")


@pytest.fixture
def location():
    """Literal equality predicates for Berlin"""
    return [
        Condition("latitude", "=", BERLIN[0]),
        Condition("longitude", "=", BERLIN[1]),
    ]


@pytest.fixture
def stub_transport():
    """Factory for recording stub transports"""
    return StubTransport


@pytest.fixture
def forbidden_transport():
    """Transport that fails the test when called"""
    return ForbiddenTransport()


@pytest.fixture
def current_document():
    return {
        "lat": 52.52,
        "lon": 13.405,
        "timezone": "Europe/Berlin",
        "timezone_offset": 7200,
        "current": {
            "dt": BASE_TIME,
            "sunrise": BASE_TIME - 20000,
            "sunset": BASE_TIME + 30000,
            "temp": 21.4,
            "feels_like": 21.0,
            "pressure": 1014,
            "humidity": 58,
            "dew_point": 12.6,
            "uvi": 4.2,
            "clouds": 20,
            "visibility": 10000,
            "wind_speed": 3.6,
            "wind_deg": 270,
            "weather": _weather("Clear"),
        },
    }


@pytest.fixture
def hourly_document():
    """One Call document with 48 hourly entries; entry 5 has no wind_gust"""
    hourly = [hourly_entry(i) for i in range(48)]
    del hourly[5]["wind_gust"]
    return {"lat": 52.52, "lon": 13.405, "timezone": "Europe/Berlin", "hourly": hourly}


@pytest.fixture
def minutely_document():
    return {
        "lat": 52.52,
        "lon": 13.405,
        "minutely": [
            {"dt": BASE_TIME + i * 60, "precipitation": 0 if i < 30 else 0.12}
            for i in range(60)
        ],
    }


@pytest.fixture
def daily_document():
    return {"lat": 52.52, "lon": 13.405, "daily": [daily_entry(i) for i in range(8)]}


@pytest.fixture
def alerts_document():
    return {
        "lat": 52.52,
        "lon": 13.405,
        "alerts": [
            {
                "sender_name": "Deutscher Wetterdienst",
                "event": "Thunderstorm",
                "start": BASE_TIME,
                "end": BASE_TIME + 7200,
                "description": "Risk of thunderstorms with heavy rain.",
                "tags": ["Thunderstorm", "Rain"],
            },
            {
                "sender_name": "Deutscher Wetterdienst",
                "event": "Wind",
                "start": BASE_TIME + 3600,
                "end": BASE_TIME + 10800,
                "tags": [],
            },
        ],
    }


@pytest.fixture
def timemachine_document():
    return {
        "lat": 52.52,
        "lon": 13.405,
        "timezone": "Europe/Berlin",
        "timezone_offset": 3600,
        "data": [
            {
                "dt": 1704067200,
                "temp": 3.2,
                "feels_like": 0.4,
                "pressure": 1008,
                "humidity": 91,
                "dew_point": 1.9,
                "clouds": 100,
                "visibility": 8000,
                "wind_speed": 4.1,
                "wind_deg": 220,
                "weather": _weather("Drizzle"),
            }
        ],
    }


@pytest.fixture
def day_summary_document():
    return {
        "lat": 52.52,
        "lon": 13.405,
        "tz": "+01:00",
        "date": "2024-01-15",
        "units": "metric",
        "cloud_cover": {"afternoon": 75.0},
        "humidity": {"afternoon": 80.0},
        "precipitation": {"total": 1.4},
        "temperature": {
            "min": -2.1,
            "max": 4.3,
            "afternoon": 3.9,
            "night": -1.0,
            "evening": 1.2,
            "morning": -1.8,
        },
        "pressure": {"afternoon": 1021},
        "wind": {"max": {"speed": 6.2, "direction": 120}},
    }


@pytest.fixture
def overview_document():
    return {
        "lat": 52.52,
        "lon": 13.405,
        "tz": "+01:00",
        "date": "2024-01-15",
        "units": "metric",
        "weather_overview": "Overcast with light drizzle in the afternoon.",
    }
