"""
Tests for predicate extraction and validation
"""

from datetime import datetime, timezone

import pytest

from weatherstream.core.predicates import extract_parameters, split_conditions, validate_literal
from weatherstream.core.registry import OneOf, ParamSpec, ParamType
from weatherstream.core.resources import default_registry
from weatherstream.errors import InvalidFormat, MissingParameter, OutOfRange
from weatherstream.sql.ast_nodes import Condition


def resource(name):
    return default_registry().get(name)


class TestLiteralSelection:
    """Test which conditions become parameters"""

    def test_location_and_defaults(self, location):
        params = extract_parameters(location, resource("current_weather"))

        assert list(params) == ["latitude", "longitude", "units", "lang"]
        assert params["latitude"] == 52.52
        assert params["longitude"] == 13.405
        assert params["units"] == "metric"
        assert params["lang"] == "en"
        assert params.residual == ()

    def test_non_equality_is_residual(self, location):
        extra = Condition("temperature_temp", ">", 20)
        params = extract_parameters(location + [extra], resource("current_weather"))
        assert params.residual == (extra,)

    def test_non_literal_is_not_a_parameter(self):
        conditions = [
            Condition("latitude", "=", "longitude", is_literal=False),
            Condition("longitude", "=", 13.405),
        ]
        with pytest.raises(MissingParameter) as exc_info:
            extract_parameters(conditions, resource("current_weather"))
        assert exc_info.value.name == "latitude"

    def test_range_operator_on_parameter_is_ignored(self):
        conditions = [
            Condition("latitude", ">", 50),
            Condition("longitude", "=", 13.405),
        ]
        with pytest.raises(MissingParameter):
            extract_parameters(conditions, resource("current_weather"))

    def test_first_equality_wins(self, location):
        repeat = Condition("latitude", "=", 10.0)
        params = extract_parameters(location + [repeat], resource("current_weather"))
        assert params["latitude"] == 52.52
        assert params.residual == (repeat,)

    def test_split_conditions(self, location):
        literals, residual = split_conditions(
            location + [Condition("units", "=", "imperial")], resource("hourly_forecast")
        )
        assert literals == {"latitude": 52.52, "longitude": 13.405, "units": "imperial"}
        assert residual == []

    def test_string_coordinates_accepted(self):
        conditions = [Condition("latitude", "=", "52.52"), Condition("longitude", "=", "13.405")]
        params = extract_parameters(conditions, resource("current_weather"))
        assert params["latitude"] == 52.52

    def test_parameters_are_immutable(self, location):
        params = extract_parameters(location, resource("current_weather"))
        with pytest.raises(TypeError):
            params["latitude"] = 1.0


class TestRequiredParameters:
    """Test missing parameter detection"""

    def test_missing_latitude_first(self):
        with pytest.raises(MissingParameter) as exc_info:
            extract_parameters([], resource("hourly_forecast"))
        assert exc_info.value.name == "latitude"
        assert "WHERE latitude = 52.52 AND longitude = 13.405" in str(exc_info.value)

    def test_missing_longitude(self):
        with pytest.raises(MissingParameter) as exc_info:
            extract_parameters([Condition("latitude", "=", 1.0)], resource("daily_forecast"))
        assert exc_info.value.name == "longitude"

    def test_missing_observation_time(self, location):
        with pytest.raises(MissingParameter) as exc_info:
            extract_parameters(location, resource("historical_weather"))
        assert exc_info.value.name == "observation_time"

    def test_missing_summary_date(self, location):
        with pytest.raises(MissingParameter) as exc_info:
            extract_parameters(location, resource("daily_summary"))
        assert exc_info.value.name == "summary_date"

    def test_missing_overview_date(self, location):
        with pytest.raises(MissingParameter) as exc_info:
            extract_parameters(location, resource("weather_overview"))
        assert exc_info.value.name == "overview_date"


class TestCoordinates:
    """Test coordinate domain checks"""

    @pytest.mark.parametrize("latitude", [90.0001, -91, 1000])
    def test_latitude_out_of_range(self, latitude):
        conditions = [Condition("latitude", "=", latitude), Condition("longitude", "=", 0)]
        with pytest.raises(OutOfRange) as exc_info:
            extract_parameters(conditions, resource("current_weather"))
        assert exc_info.value.name == "latitude"

    def test_longitude_out_of_range(self):
        conditions = [Condition("latitude", "=", 0), Condition("longitude", "=", 180.5)]
        with pytest.raises(OutOfRange) as exc_info:
            extract_parameters(conditions, resource("current_weather"))
        assert exc_info.value.name == "longitude"

    def test_bounds_are_inclusive(self):
        conditions = [Condition("latitude", "=", -90), Condition("longitude", "=", 180)]
        params = extract_parameters(conditions, resource("current_weather"))
        assert params["latitude"] == -90.0
        assert params["longitude"] == 180.0

    def test_non_numeric(self):
        conditions = [Condition("latitude", "=", "north"), Condition("longitude", "=", 0)]
        with pytest.raises(InvalidFormat):
            extract_parameters(conditions, resource("current_weather"))

    def test_mismatched_rule(self):
        """A coordinate parameter declared with a non-range rule is a registry error"""
        param = ParamSpec(
            name="latitude",
            semantic_type=ParamType.LATITUDE,
            rule=OneOf(frozenset({"north"})),
        )
        with pytest.raises(TypeError, match="Range"):
            validate_literal(param, 10)


class TestObservationTime:
    """Test historical timestamp validation"""

    def conditions(self, location, value):
        return location + [Condition("observation_time", "=", value)]

    def test_civil_timestamp(self, location, now):
        params = extract_parameters(
            self.conditions(location, "2024-01-01 00:00:00+00"),
            resource("historical_weather"),
            now=now,
        )
        assert params["observation_time"] == 1704067200

    def test_future_timestamp(self, location, now):
        with pytest.raises(OutOfRange) as exc_info:
            extract_parameters(
                self.conditions(location, "2024-06-02 00:00:00+00"),
                resource("historical_weather"),
                now=now,
            )
        assert exc_info.value.name == "observation_time"

    def test_now_is_not_in_the_past(self, location, now):
        with pytest.raises(OutOfRange):
            extract_parameters(
                self.conditions(location, now.isoformat()),
                resource("historical_weather"),
                now=now,
            )

    def test_before_1979(self, location, now):
        with pytest.raises(OutOfRange):
            extract_parameters(
                self.conditions(location, "1978-12-31 23:59:59+00"),
                resource("historical_weather"),
                now=now,
            )

    def test_epoch_floor_is_inclusive(self, location, now):
        params = extract_parameters(
            self.conditions(location, datetime(1979, 1, 1, tzinfo=timezone.utc)),
            resource("historical_weather"),
            now=now,
        )
        assert params["observation_time"] == 283996800

    def test_unparseable(self, location, now):
        with pytest.raises(InvalidFormat):
            extract_parameters(
                self.conditions(location, "last tuesday"),
                resource("historical_weather"),
                now=now,
            )


class TestDatesAndOptions:
    """Test date, units, lang and offset validation"""

    def test_summary_date(self, location):
        params = extract_parameters(
            location + [Condition("summary_date", "=", "2024-01-15")], resource("daily_summary")
        )
        assert params["summary_date"] == "2024-01-15"
        assert "timezone_offset" not in params

    def test_invalid_date(self, location):
        with pytest.raises(InvalidFormat):
            extract_parameters(
                location + [Condition("overview_date", "=", "2024-13-01")],
                resource("weather_overview"),
            )

    def test_timezone_offset_normalized(self, location):
        params = extract_parameters(
            location
            + [
                Condition("summary_date", "=", "2024-01-15"),
                Condition("timezone_offset", "=", "+0530"),
            ],
            resource("daily_summary"),
        )
        assert params["timezone_offset"] == "+05:30"

    def test_invalid_timezone_offset(self, location):
        with pytest.raises(InvalidFormat):
            extract_parameters(
                location
                + [
                    Condition("summary_date", "=", "2024-01-15"),
                    Condition("timezone_offset", "=", "UTC+2"),
                ],
                resource("daily_summary"),
            )

    def test_units(self, location):
        params = extract_parameters(
            location + [Condition("units", "=", "Imperial")], resource("current_weather")
        )
        assert params["units"] == "imperial"

    def test_invalid_units_do_not_fall_back(self, location):
        with pytest.raises(InvalidFormat):
            extract_parameters(
                location + [Condition("units", "=", "kelvin")], resource("current_weather")
            )

    def test_invalid_lang(self, location):
        with pytest.raises(InvalidFormat):
            extract_parameters(
                location + [Condition("lang", "=", "klingon")], resource("current_weather")
            )
