"""
weatherstream CLI - Query OpenWeather One Call data with SQL

Usage:
    weatherstream query "<sql>" [options]
    weatherstream resources
    weatherstream describe <resource>
    weatherstream ddl [--server NAME] [--schema NAME]
"""

import logging
import sys
import time
from typing import Optional

import click
from pydantic import ValidationError

from weatherstream import __version__
from weatherstream.cli.formatters import FORMATTERS, get_formatter
from weatherstream.config import load_settings
from weatherstream.core.query import query as query_fn
from weatherstream.core.resources import default_registry
from weatherstream.errors import WeatherStreamError
from weatherstream.sql.parser import ParseError

# Errors reported as "Error: ..." with exit code 1
USER_ERRORS = (WeatherStreamError, ParseError, ValidationError, ValueError, OSError)


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="weatherstream")
@click.option("--verbose", "-v", count=True, help="Log fetches (-v) or everything (-vv)")
def cli(verbose: int):
    """
    weatherstream - Query OpenWeather One Call 3.0 data with SQL

    Each query calls the API once for the resource in its FROM clause.
    """
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@cli.command()
@click.argument("sql", type=str)
@click.option(
    "--format",
    "-f",
    type=click.Choice(list(FORMATTERS), case_sensitive=False),
    default="table",
    help="Output format (default: table)",
)
@click.option(
    "--limit",
    "-l",
    type=int,
    default=None,
    help="Limit number of rows displayed",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Write output to file instead of stdout",
)
@click.option("--api-key", default=None, help="OpenWeather API key (default: $OPENWEATHER_API_KEY)")
@click.option("--api-url", default=None, help="API base URL (default: $OPENWEATHER_API_URL or the public endpoint)")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--explain", is_flag=True, help="Show query execution plan instead of results")
@click.option("--time", "-t", "show_time", is_flag=True, help="Show execution time")
def query(
    sql: str,
    format: str,
    limit: Optional[int],
    output: Optional[str],
    api_key: Optional[str],
    api_url: Optional[str],
    no_color: bool,
    explain: bool,
    show_time: bool,
):
    """
    Execute a SQL query against a weather resource

    Examples:

        \b
        # Current conditions in Berlin
        $ weatherstream query "SELECT * FROM current_weather WHERE latitude = 52.52 AND longitude = 13.405"

        \b
        # Next 5 hours as JSON
        $ weatherstream query "SELECT forecast_time, temperature_temp FROM hourly_forecast
            WHERE latitude = 52.52 AND longitude = 13.405 LIMIT 5" -f json

        \b
        # Show query plan (no API call)
        $ weatherstream query "SELECT * FROM daily_forecast WHERE latitude = 1 AND longitude = 2" --explain
    """
    fmt = format.lower()
    del format

    try:
        start_time = time.time()
        settings = load_settings(api_key=api_key, api_url=api_url)
        result = query_fn(sql, settings=settings)

        if explain:
            click.echo(result.explain())
            return

        results_list = result.to_list()

        # Infer format from output file extension when -f was not given
        output_format = fmt
        if output and fmt == "table":
            if output.endswith(".json"):
                output_format = "json"
            elif output.endswith(".csv"):
                output_format = "csv"

        # Display limit, independent of the query's LIMIT
        if limit is not None:
            results_list = results_list[:limit]

        formatter = get_formatter(output_format)
        output_text = formatter.format(
            results_list,
            columns=result.columns,
            no_color=no_color or (not sys.stdout.isatty()),
            show_footer=not output,
        )

        if show_time:
            elapsed = time.time() - start_time
            output_text += f"\nProcessed {len(results_list)} rows in {elapsed:.3f}s"

        if output:
            with open(output, "w") as f:
                f.write(output_text)
            click.echo(f"Results written to {output} ({output_format} format)", err=True)
        else:
            click.echo(output_text)

    except USER_ERRORS as e:
        _fail(e)


@cli.command()
@click.option(
    "--format",
    "-f",
    type=click.Choice(list(FORMATTERS), case_sensitive=False),
    default="table",
    help="Output format (default: table)",
)
def resources(format: str):
    """List the queryable resources"""
    rows = [
        {
            "resource": r.name,
            "endpoint": r.api_path,
            "rows": str(r.cardinality),
            "required": ", ".join(p.name for p in r.required_params),
            "optional": ", ".join(p.name for p in r.optional_params),
            "description": r.description,
        }
        for r in default_registry()
    ]
    click.echo(
        get_formatter(format.lower()).format(
            rows, no_color=not sys.stdout.isatty(), show_footer=False
        )
    )


@cli.command()
@click.argument("resource", type=str)
@click.option(
    "--format",
    "-f",
    type=click.Choice(list(FORMATTERS), case_sensitive=False),
    default="table",
    help="Output format (default: table)",
)
def describe(resource: str, format: str):
    """
    Show the columns and parameters of a resource

    Examples:

        \b
        $ weatherstream describe hourly_forecast
    """
    try:
        definition = default_registry().get(resource)
    except WeatherStreamError as e:
        _fail(e)
        return

    formatter = get_formatter(format.lower())
    no_color = not sys.stdout.isatty()

    columns = [
        {
            "column": f.output_name,
            "type": str(f.value_type),
            "nullable": f.nullable,
            "source": str(f.json_path),
        }
        for f in definition.fields
    ]
    params = [
        {
            "parameter": p.name,
            "required": p.required,
            "rule": p.rule.describe(),
            "default": p.default,
            "query_key": p.query_key,
        }
        for p in definition.params
    ]

    if formatter.get_name() == "table":
        click.echo(f"{definition.name}: {definition.description}")
        click.echo(f"GET {definition.api_path} ({definition.cardinality})")
    click.echo(formatter.format(columns, no_color=no_color, show_footer=False))
    click.echo(formatter.format(params, no_color=no_color, show_footer=False))


@cli.command()
@click.option("--server", default="openweather_server", help="Foreign server name")
@click.option("--schema", default=None, help="Schema to create the tables in")
@click.argument("resource", type=str, required=False)
def ddl(server: str, schema: Optional[str], resource: Optional[str]):
    """
    Print foreign table definitions

    Examples:

        \b
        $ weatherstream ddl --schema fdw_open_weather
        $ weatherstream ddl hourly_forecast
    """
    registry = default_registry()
    try:
        if resource:
            statements = [registry.get(resource).to_ddl(server, schema)]
        else:
            statements = registry.to_ddl(server, schema)
    except WeatherStreamError as e:
        _fail(e)
        return

    click.echo(";\n\n".join(statements) + ";")


if __name__ == "__main__":
    cli()
