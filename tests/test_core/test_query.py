"""
Tests for the SQL query front end
"""

import pytest

from weatherstream import query
from weatherstream.errors import MissingParameter, UnknownResource
from weatherstream.sql.parser import ParseError

BERLIN = "WHERE latitude = 52.52 AND longitude = 13.405"


class TestQuery:
    """Test query() end to end with a stub transport"""

    def test_select_star(self, current_document, settings, stub_transport):
        transport = stub_transport(current_document)
        rows = query(
            f"SELECT * FROM current_weather {BERLIN}", settings=settings, transport=transport
        ).to_list()

        assert len(rows) == 1
        assert rows[0]["latitude"] == 52.52
        assert rows[0]["longitude"] == 13.405
        assert rows[0]["temperature_temp"] == 21.4
        assert len(transport.calls) == 1

    def test_projection_and_limit(self, hourly_document, settings, stub_transport):
        rows = query(
            f"SELECT forecast_time, temperature_temp FROM hourly_forecast {BERLIN} LIMIT 5",
            settings=settings,
            transport=stub_transport(hourly_document),
        ).to_list()

        assert len(rows) == 5
        assert list(rows[0].keys()) == ["forecast_time", "temperature_temp"]

    def test_residual_filter(self, hourly_document, settings, stub_transport):
        rows = query(
            f"SELECT forecast_time FROM hourly_forecast {BERLIN} "
            "AND rain_volume_1h_mm > 0",
            settings=settings,
            transport=stub_transport(hourly_document),
        ).to_list()

        # Entries 0, 10, 20, 30, 40 carry rain
        assert len(rows) == 5

    def test_timestamp_residual(self, hourly_document, settings, stub_transport):
        rows = query(
            f"SELECT forecast_time FROM hourly_forecast {BERLIN} "
            "AND forecast_time < '2024-06-01 12:00:00+00'",
            settings=settings,
            transport=stub_transport(hourly_document),
        ).to_list()

        assert len(rows) == 2

    def test_order_by(self, hourly_document, settings, stub_transport):
        rows = query(
            f"SELECT forecast_time FROM hourly_forecast {BERLIN} "
            "ORDER BY forecast_time DESC LIMIT 1",
            settings=settings,
            transport=stub_transport(hourly_document),
        ).to_list()

        assert rows[0]["forecast_time"].timestamp() == 1717236000 + 47 * 3600

    def test_parameter_column_echoed(self, current_document, settings, stub_transport):
        """Equality on latitude holds for the returned row"""
        rows = query(
            "SELECT latitude FROM current_weather WHERE latitude = 52.52 "
            "AND longitude = 13.405 AND latitude = 52.52",
            settings=settings,
            transport=stub_transport(current_document),
        ).to_list()
        assert rows == [{"latitude": 52.52}]

    def test_schema_qualified_resource(self, current_document, settings, stub_transport):
        rows = query(
            f"SELECT * FROM fdw_open_weather.current_weather {BERLIN}",
            settings=settings,
            transport=stub_transport(current_document),
        ).to_list()
        assert len(rows) == 1

    def test_lazy_until_iterated(self, settings, forbidden_transport):
        result = query(
            f"SELECT * FROM current_weather {BERLIN}", settings=settings, transport=forbidden_transport
        )
        assert result.columns[0] == "latitude"
        assert forbidden_transport.calls == []

    def test_missing_parameter(self, settings, forbidden_transport):
        result = query(
            "SELECT * FROM current_weather WHERE latitude = 52.52",
            settings=settings,
            transport=forbidden_transport,
        )
        with pytest.raises(MissingParameter):
            result.to_list()

    def test_unknown_column(self, settings, forbidden_transport):
        result = query(
            f"SELECT nonexistent FROM current_weather {BERLIN}",
            settings=settings,
            transport=forbidden_transport,
        )
        with pytest.raises(ValueError, match="Available columns"):
            result.to_list()

    def test_unknown_resource(self, settings):
        with pytest.raises(UnknownResource):
            query(f"SELECT * FROM yearly_forecast {BERLIN}", settings=settings)

    def test_parse_error(self, settings):
        with pytest.raises(ParseError):
            query("SELECT * FROM current_weather WHERE latitude = 1 OR longitude = 2", settings=settings)


class TestExplain:
    """Test query plans"""

    def test_explain(self, settings, forbidden_transport):
        plan = query(
            f"SELECT forecast_time FROM hourly_forecast {BERLIN} "
            "AND temperature_temp > 20 LIMIT 3",
            settings=settings,
            transport=forbidden_transport,
        ).explain()

        assert "Limit(3)" in plan
        assert "Project(forecast_time)" in plan
        assert "Filter(temperature_temp > 20)" in plan
        assert "Scan(WeatherReader(hourly_forecast))" in plan
        assert "Pushed to request: latitude = 52.52, longitude = 13.405" in plan
        assert forbidden_transport.calls == []
