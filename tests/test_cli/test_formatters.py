"""
Tests for CLI formatters
"""

import json
from datetime import datetime, timezone

import pytest

from weatherstream.cli.formatters import (
    CSVFormatter,
    JSONFormatter,
    TableFormatter,
    get_formatter,
)

OBSERVED = datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def results():
    return [
        {"observation_time": OBSERVED, "temperature_temp": 21.4, "wind_gust_speed_m_s": None},
        {"observation_time": OBSERVED, "temperature_temp": float("nan"), "wind_gust_speed_m_s": 7.2},
    ]


class TestGetFormatter:
    """Test formatter factory function"""

    @pytest.mark.parametrize(
        "name, cls", [("table", TableFormatter), ("json", JSONFormatter), ("csv", CSVFormatter)]
    )
    def test_known(self, name, cls):
        assert isinstance(get_formatter(name), cls)

    def test_unknown_formatter(self):
        with pytest.raises(ValueError, match="Unknown format"):
            get_formatter("markdown")


class TestJSONFormatter:
    """Test JSON formatter"""

    def test_timestamps_and_nulls(self, results):
        parsed = json.loads(JSONFormatter().format(results))

        assert parsed[0]["observation_time"] == "2024-06-01T10:00:00+00:00"
        assert parsed[0]["wind_gust_speed_m_s"] is None
        assert parsed[1]["temperature_temp"] is None

    def test_format_empty(self):
        assert json.loads(JSONFormatter().format([])) == []

    def test_format_compact(self, results):
        assert ", " not in JSONFormatter().format(results, compact=True)


class TestCSVFormatter:
    """Test CSV formatter"""

    def test_header_and_rows(self, results):
        lines = CSVFormatter().format(results).strip().splitlines()

        assert lines[0] == "observation_time,temperature_temp,wind_gust_speed_m_s"
        assert lines[1] == "2024-06-01T10:00:00+00:00,21.4,"

    def test_empty_with_columns(self):
        output = CSVFormatter().format([], columns=["latitude", "longitude"])
        assert output.strip() == "latitude,longitude"

    def test_empty_without_columns(self):
        assert CSVFormatter().format([]) == ""


class TestTableFormatter:
    """Test Rich table formatter"""

    def test_contains_values(self, results):
        output = TableFormatter().format(results, no_color=True)

        assert "temperature_temp" in output
        assert "21.4" in output
        assert "NULL" in output
        assert "2 rows" in output

    def test_no_footer(self, results):
        output = TableFormatter().format(results, no_color=True, show_footer=False)
        assert "2 rows" not in output

    def test_empty(self):
        assert TableFormatter().format([]) == "No results found."

    def test_empty_with_columns(self):
        output = TableFormatter().format([], columns=["alert_event_type"], no_color=True)
        assert "alert_event_type" in output
        assert "0 rows" in output
