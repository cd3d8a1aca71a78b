"""
Resource definitions for the OpenWeather One Call API 3.0

Eight tables backed by four endpoints:

    current_weather     /onecall              -> current          (1 row)
    minutely_forecast   /onecall              -> minutely[]       (60 rows)
    hourly_forecast     /onecall              -> hourly[]         (48 rows)
    daily_forecast      /onecall              -> daily[]          (8 rows)
    weather_alerts      /onecall              -> alerts[]         (0-N rows)
    historical_weather  /onecall/timemachine  -> data[0]          (1 row)
    daily_summary       /onecall/day_summary  -> document         (1 row)
    weather_overview    /onecall/overview     -> document         (1 row)

API documentation: https://openweathermap.org/api/one-call-3
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache

from weatherstream.core.registry import (
    DateFormat,
    FixedCount,
    OffsetFormat,
    OneOf,
    ParamSpec,
    ParamType,
    PastTimestamp,
    Range,
    Registry,
    ResourceDefinition,
    Single,
    Variable,
    column,
)
from weatherstream.core.types import DataType

INTEGER = DataType.INTEGER
FLOAT = DataType.FLOAT
TEXT = DataType.TEXT
TIMESTAMP = DataType.TIMESTAMP

UNITS = frozenset({"standard", "metric", "imperial"})

LANGUAGES = frozenset({
    "af", "al", "ar", "az", "bg", "ca", "cz", "da", "de", "el", "en", "es",
    "eu", "fa", "fi", "fr", "gl", "he", "hi", "hr", "hu", "id", "it", "ja",
    "kr", "la", "lt", "mk", "nl", "no", "pl", "pt", "pt_br", "ro", "ru",
    "se", "sk", "sl", "sp", "sr", "sv", "th", "tr", "ua", "uk", "vi",
    "zh_cn", "zh_tw", "zu",
})

# Earliest date the timemachine endpoint serves
HISTORY_EPOCH_FLOOR = datetime(1979, 1, 1, tzinfo=timezone.utc)
HISTORY_RECENCY_FLOOR = timedelta(0)

ONECALL_SECTIONS = ("current", "minutely", "hourly", "daily", "alerts")

LOCATION_EXAMPLE = "WHERE latitude = 52.52 AND longitude = 13.405"


# ---------------------------------------------------------------------------
# Shared parameters
# ---------------------------------------------------------------------------

LATITUDE = ParamSpec(
    name="latitude",
    semantic_type=ParamType.LATITUDE,
    rule=Range(-90.0, 90.0),
    api_name="lat",
    example=LOCATION_EXAMPLE,
)

LONGITUDE = ParamSpec(
    name="longitude",
    semantic_type=ParamType.LONGITUDE,
    rule=Range(-180.0, 180.0),
    api_name="lon",
    example=LOCATION_EXAMPLE,
)

UNITS_PARAM = ParamSpec(
    name="units",
    semantic_type=ParamType.ENUM,
    rule=OneOf(UNITS),
    required=False,
    default="metric",
)

LANG_PARAM = ParamSpec(
    name="lang",
    semantic_type=ParamType.ENUM,
    rule=OneOf(LANGUAGES),
    required=False,
    default="en",
)

LOCATION_PARAMS = (LATITUDE, LONGITUDE)
OPTION_PARAMS = (UNITS_PARAM, LANG_PARAM)


def _exclude_all_but(section: str) -> tuple[tuple[str, str], ...]:
    """Ask /onecall to omit every section except the one a resource reads"""
    excluded = ",".join(s for s in ONECALL_SECTIONS if s != section)
    return (("exclude", excluded),)


def _location_columns() -> tuple:
    # Echo the request coordinates so equality re-checks on them hold
    return (
        column("latitude", FLOAT, "@latitude"),
        column("longitude", FLOAT, "@longitude"),
    )


def _condition_columns() -> tuple:
    # The provider sends a one-element "weather" array per data point
    return (
        column("weather_condition", TEXT, "weather[0].main"),
        column("weather_description", TEXT, "weather[0].description", nullable=True),
        column("weather_icon_code", TEXT, "weather[0].icon", nullable=True),
    )


# ---------------------------------------------------------------------------
# /onecall
# ---------------------------------------------------------------------------

CURRENT_WEATHER = ResourceDefinition(
    name="current_weather",
    api_path="/onecall",
    cardinality=Single("current"),
    params=LOCATION_PARAMS + OPTION_PARAMS,
    fixed_params=_exclude_all_but("current"),
    description="Current weather conditions",
    fields=_location_columns() + (
        column("timezone_name", TEXT, "$.timezone", nullable=True),
        column("observation_time", TIMESTAMP, "dt"),
        column("temperature_temp", FLOAT, "temp"),
        column("apparent_temperature_temp", FLOAT, "feels_like"),
        column("pressure_hpa", INTEGER, "pressure"),
        column("humidity_pct", INTEGER, "humidity"),
        column("dew_point_temp", FLOAT, "dew_point"),
        column("uv_index", FLOAT, "uvi"),
        column("cloud_cover_pct", INTEGER, "clouds"),
        column("visibility_m", INTEGER, "visibility"),
        column("wind_speed_m_s", FLOAT, "wind_speed"),
        column("wind_direction_deg", INTEGER, "wind_deg"),
        column("wind_gust_speed_m_s", FLOAT, "wind_gust", nullable=True),
    ) + _condition_columns(),
)

MINUTELY_FORECAST = ResourceDefinition(
    name="minutely_forecast",
    api_path="/onecall",
    cardinality=FixedCount(60, "minutely"),
    params=LOCATION_PARAMS + OPTION_PARAMS,
    fixed_params=_exclude_all_but("minutely"),
    description="Minute-by-minute precipitation for the next hour",
    fields=_location_columns() + (
        column("forecast_time", TIMESTAMP, "dt"),
        column("precipitation_mm", FLOAT, "precipitation", nullable=True),
    ),
)

HOURLY_FORECAST = ResourceDefinition(
    name="hourly_forecast",
    api_path="/onecall",
    cardinality=FixedCount(48, "hourly"),
    params=LOCATION_PARAMS + OPTION_PARAMS,
    fixed_params=_exclude_all_but("hourly"),
    description="Hourly forecast for 48 hours",
    fields=_location_columns() + (
        column("forecast_time", TIMESTAMP, "dt"),
        column("temperature_temp", FLOAT, "temp"),
        column("apparent_temperature_temp", FLOAT, "feels_like"),
        column("pressure_hpa", INTEGER, "pressure"),
        column("humidity_pct", INTEGER, "humidity"),
        column("dew_point_temp", FLOAT, "dew_point"),
        column("uv_index", FLOAT, "uvi"),
        column("cloud_cover_pct", INTEGER, "clouds"),
        column("visibility_m", INTEGER, "visibility"),
        column("wind_speed_m_s", FLOAT, "wind_speed"),
        column("wind_direction_deg", INTEGER, "wind_deg"),
        column("wind_gust_speed_m_s", FLOAT, "wind_gust", nullable=True),
        column("precipitation_probability", FLOAT, "pop"),
        # rain/snow wrappers are omitted entirely when there is none
        column("rain_volume_1h_mm", FLOAT, "rain.1h", nullable=True),
        column("snow_volume_1h_mm", FLOAT, "snow.1h", nullable=True),
    ) + _condition_columns(),
)

DAILY_FORECAST = ResourceDefinition(
    name="daily_forecast",
    api_path="/onecall",
    cardinality=FixedCount(8, "daily"),
    params=LOCATION_PARAMS + OPTION_PARAMS,
    fixed_params=_exclude_all_but("daily"),
    description="Daily forecast for 8 days",
    fields=_location_columns() + (
        column("forecast_date", TIMESTAMP, "dt"),
        column("sunrise_time", TIMESTAMP, "sunrise"),
        column("sunset_time", TIMESTAMP, "sunset"),
        column("moonrise_time", TIMESTAMP, "moonrise"),
        column("moonset_time", TIMESTAMP, "moonset"),
        column("moon_phase_fraction", FLOAT, "moon_phase"),
        column("temperature_day_temp", FLOAT, "temp.day"),
        column("temperature_min_temp", FLOAT, "temp.min"),
        column("temperature_max_temp", FLOAT, "temp.max"),
        column("temperature_night_temp", FLOAT, "temp.night"),
        column("temperature_evening_temp", FLOAT, "temp.eve"),
        column("temperature_morning_temp", FLOAT, "temp.morn"),
        column("apparent_temperature_day_temp", FLOAT, "feels_like.day"),
        column("apparent_temperature_night_temp", FLOAT, "feels_like.night"),
        column("apparent_temperature_evening_temp", FLOAT, "feels_like.eve"),
        column("apparent_temperature_morning_temp", FLOAT, "feels_like.morn"),
        column("pressure_hpa", INTEGER, "pressure"),
        column("humidity_pct", INTEGER, "humidity"),
        column("dew_point_temp", FLOAT, "dew_point"),
        column("wind_speed_m_s", FLOAT, "wind_speed"),
        column("wind_direction_deg", INTEGER, "wind_deg"),
        column("wind_gust_speed_m_s", FLOAT, "wind_gust", nullable=True),
        column("cloud_cover_pct", INTEGER, "clouds"),
        column("precipitation_probability", FLOAT, "pop"),
        column("rain_volume_mm", FLOAT, "rain", nullable=True),
        column("snow_volume_mm", FLOAT, "snow", nullable=True),
        column("uv_index", FLOAT, "uvi"),
    ) + _condition_columns(),
)

WEATHER_ALERTS = ResourceDefinition(
    name="weather_alerts",
    api_path="/onecall",
    cardinality=Variable("alerts"),
    params=LOCATION_PARAMS + OPTION_PARAMS,
    fixed_params=_exclude_all_but("alerts"),
    description="Government weather alerts",
    fields=_location_columns() + (
        column("alert_sender_name", TEXT, "sender_name", nullable=True),
        column("alert_event_type", TEXT, "event", nullable=True),
        column("alert_start_time", TIMESTAMP, "start", nullable=True),
        column("alert_end_time", TIMESTAMP, "end", nullable=True),
        column("alert_description", TEXT, "description", nullable=True),
        column("alert_tags", TEXT, "tags", nullable=True, join_with=","),
    ),
)


# ---------------------------------------------------------------------------
# /onecall/timemachine, /onecall/day_summary, /onecall/overview
# ---------------------------------------------------------------------------

HISTORICAL_WEATHER = ResourceDefinition(
    name="historical_weather",
    api_path="/onecall/timemachine",
    cardinality=Single("data[0]"),
    params=LOCATION_PARAMS + (
        ParamSpec(
            name="observation_time",
            semantic_type=ParamType.TIMESTAMP,
            rule=PastTimestamp(HISTORY_EPOCH_FLOOR, HISTORY_RECENCY_FLOOR),
            api_name="dt",
            example=LOCATION_EXAMPLE + " AND observation_time = '2024-01-01 00:00:00+00'",
        ),
    ) + OPTION_PARAMS,
    description="Historical weather for a point in time",
    fields=_location_columns() + (
        column("observation_time", TIMESTAMP, "dt"),
        column("temperature_temp", FLOAT, "temp"),
        column("apparent_temperature_temp", FLOAT, "feels_like"),
        column("pressure_hpa", INTEGER, "pressure"),
        column("humidity_pct", INTEGER, "humidity"),
        column("dew_point_temp", FLOAT, "dew_point"),
        column("cloud_cover_pct", INTEGER, "clouds"),
        column("visibility_m", INTEGER, "visibility"),
        column("wind_speed_m_s", FLOAT, "wind_speed"),
        column("wind_direction_deg", INTEGER, "wind_deg"),
    ) + _condition_columns(),
)

DAILY_SUMMARY = ResourceDefinition(
    name="daily_summary",
    api_path="/onecall/day_summary",
    cardinality=Single(),
    params=LOCATION_PARAMS + (
        ParamSpec(
            name="summary_date",
            semantic_type=ParamType.DATE,
            rule=DateFormat(),
            api_name="date",
            example=LOCATION_EXAMPLE + " AND summary_date = '2024-01-15'",
        ),
        ParamSpec(
            name="timezone_offset",
            semantic_type=ParamType.TZ_OFFSET,
            rule=OffsetFormat(),
            required=False,
            api_name="tz",
        ),
    ) + OPTION_PARAMS,
    description="Aggregated weather statistics for one day",
    fields=(
        column("latitude", FLOAT, "lat"),
        column("longitude", FLOAT, "lon"),
        column("timezone_offset", TEXT, "tz", nullable=True),
        column("summary_date", TEXT, "date", nullable=True),
        column("unit_system", TEXT, "units", nullable=True),
        column("temperature_min_temp", FLOAT, "temperature.min"),
        column("temperature_max_temp", FLOAT, "temperature.max"),
        column("temperature_morning_temp", FLOAT, "temperature.morning", nullable=True),
        column("temperature_afternoon_temp", FLOAT, "temperature.afternoon", nullable=True),
        column("temperature_evening_temp", FLOAT, "temperature.evening", nullable=True),
        column("temperature_night_temp", FLOAT, "temperature.night", nullable=True),
        column("cloud_cover_afternoon_pct", FLOAT, "cloud_cover.afternoon", nullable=True),
        column("humidity_afternoon_pct", FLOAT, "humidity.afternoon", nullable=True),
        column("pressure_afternoon_hpa", FLOAT, "pressure.afternoon", nullable=True),
        column("precipitation_total_mm", FLOAT, "precipitation.total", nullable=True),
        column("wind_max_speed_m_s", FLOAT, "wind.max.speed", nullable=True),
        column("wind_max_direction_deg", FLOAT, "wind.max.direction", nullable=True),
    ),
)

WEATHER_OVERVIEW = ResourceDefinition(
    name="weather_overview",
    api_path="/onecall/overview",
    cardinality=Single(),
    params=LOCATION_PARAMS + (
        ParamSpec(
            name="overview_date",
            semantic_type=ParamType.DATE,
            rule=DateFormat(),
            api_name="date",
            example=LOCATION_EXAMPLE + " AND overview_date = '2024-01-15'",
        ),
    ) + OPTION_PARAMS,
    description="Human-readable weather summary for a day",
    fields=(
        column("latitude", FLOAT, "lat"),
        column("longitude", FLOAT, "lon"),
        column("timezone_offset", TEXT, "tz", nullable=True),
        column("overview_date", TEXT, "date", nullable=True),
        column("unit_system", TEXT, "units", nullable=True),
        column("weather_overview", TEXT, "weather_overview", nullable=True),
    ),
)

ALL_RESOURCES = (
    CURRENT_WEATHER,
    MINUTELY_FORECAST,
    HOURLY_FORECAST,
    DAILY_FORECAST,
    WEATHER_ALERTS,
    HISTORICAL_WEATHER,
    DAILY_SUMMARY,
    WEATHER_OVERVIEW,
)


@lru_cache(maxsize=None)
def default_registry() -> Registry:
    """The registry of all eight resources, built once per process"""
    return Registry(ALL_RESOURCES)
