"""
Tests for SQL parser
"""

import pytest

from weatherstream.sql.ast_nodes import Condition, OrderByColumn, SelectStatement
from weatherstream.sql.parser import ParseError, parse


class TestBasicParsing:
    """Test basic SQL parsing"""

    def test_select_star(self):
        """Test SELECT * FROM resource"""
        ast = parse("SELECT * FROM current_weather")

        assert isinstance(ast, SelectStatement)
        assert ast.columns == ["*"]
        assert ast.source == "current_weather"
        assert ast.where is None
        assert ast.limit is None

    def test_select_columns(self):
        ast = parse("SELECT forecast_time, temperature_temp FROM hourly_forecast")
        assert ast.columns == ["forecast_time", "temperature_temp"]

    def test_trailing_semicolon(self):
        assert parse("SELECT * FROM daily_forecast;").source == "daily_forecast"

    def test_schema_qualified_source(self):
        assert parse("SELECT * FROM fdw_open_weather.hourly_forecast").source == "hourly_forecast"

    def test_quoted_source(self):
        assert parse('SELECT * FROM "weather_alerts"').source == "weather_alerts"

    def test_alias(self):
        ast = parse("SELECT h.forecast_time FROM hourly_forecast h WHERE h.latitude = 1")
        assert ast.columns == ["forecast_time"]
        assert ast.where.conditions[0].column == "latitude"

    def test_alias_with_as(self):
        assert parse("SELECT * FROM hourly_forecast AS h LIMIT 1").limit == 1

    def test_keywords_case_insensitive(self):
        ast = parse("select * from current_weather where latitude = 1 and longitude = 2 limit 3")
        assert len(ast.where.conditions) == 2
        assert ast.limit == 3


class TestWhereClause:
    """Test WHERE clause parsing"""

    def test_numeric_literals(self):
        ast = parse("SELECT * FROM current_weather WHERE latitude = 52.52 AND longitude = -13")
        lat, lon = ast.where.conditions

        assert lat == Condition("latitude", "=", 52.52, is_literal=True)
        assert lon.value == -13
        assert isinstance(lon.value, int)

    def test_string_literal(self):
        cond = parse("SELECT * FROM daily_summary WHERE summary_date = '2024-01-15'").where.conditions[0]
        assert cond.value == "2024-01-15"
        assert cond.is_literal

    def test_escaped_quote(self):
        cond = parse("SELECT * FROM weather_alerts WHERE alert_event_type = 'Gale''s End'").where.conditions[0]
        assert cond.value == "Gale's End"

    def test_timestamp_literal_with_spaces(self):
        cond = parse(
            "SELECT * FROM historical_weather WHERE observation_time = '2024-01-01 00:00:00+00'"
        ).where.conditions[0]
        assert cond.value == "2024-01-01 00:00:00+00"

    def test_boolean_literal(self):
        cond = parse("SELECT * FROM current_weather WHERE flag = TRUE").where.conditions[0]
        assert cond.value is True
        assert cond.is_literal

    def test_column_reference_is_not_literal(self):
        cond = parse("SELECT * FROM current_weather WHERE latitude = longitude").where.conditions[0]
        assert cond.value == "longitude"
        assert cond.is_literal is False

    def test_function_call_is_not_literal(self):
        cond = parse("SELECT * FROM historical_weather WHERE observation_time = now()").where.conditions[0]
        assert cond.value == "now()"
        assert cond.is_literal is False

    @pytest.mark.parametrize("op", [">", "<", ">=", "<=", "!="])
    def test_operators(self, op):
        cond = parse(f"SELECT * FROM hourly_forecast WHERE temperature_temp {op} 20").where.conditions[0]
        assert cond.operator == op

    def test_not_equal_normalized(self):
        cond = parse("SELECT * FROM hourly_forecast WHERE humidity_pct <> 50").where.conditions[0]
        assert cond.operator == "!="

    def test_or_rejected(self):
        with pytest.raises(ParseError, match="OR"):
            parse("SELECT * FROM current_weather WHERE latitude = 1 OR latitude = 2")


class TestOrderByAndLimit:
    """Test ORDER BY and LIMIT"""

    def test_order_by(self):
        ast = parse("SELECT * FROM hourly_forecast ORDER BY temperature_temp DESC, forecast_time")
        assert ast.order_by == [
            OrderByColumn("temperature_temp", "DESC"),
            OrderByColumn("forecast_time", "ASC"),
        ]

    def test_limit(self):
        assert parse("SELECT * FROM hourly_forecast LIMIT 10").limit == 10

    def test_negative_limit(self):
        with pytest.raises(ParseError):
            parse("SELECT * FROM hourly_forecast LIMIT -1")

    def test_non_integer_limit(self):
        with pytest.raises(ParseError):
            parse("SELECT * FROM hourly_forecast LIMIT ten")


class TestParseErrors:
    """Test malformed SQL"""

    def test_missing_from(self):
        with pytest.raises(ParseError):
            parse("SELECT *")

    def test_unterminated_string(self):
        with pytest.raises(ParseError):
            parse("SELECT * FROM daily_summary WHERE summary_date = '2024-01-15")

    def test_trailing_tokens(self):
        with pytest.raises(ParseError):
            parse("SELECT * FROM current_weather LIMIT 1 extra")

    def test_invalid_operator(self):
        with pytest.raises(ParseError):
            parse("SELECT * FROM current_weather WHERE latitude LIKE 1")
