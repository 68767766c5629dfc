"""vigilのコマンドラインインターフェース。

Usage:
    vigil check --tag production --validation-period P7D
    vigil check --query-count-threshold 10 --markdown
    vigil serve --port 8000
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import click

from vigil.config import VigilConfig, load_config
from vigil.console import ClickSink
from vigil.models.errors import VigilError
from vigil.models.report import OutputMode
from vigil.services.check import CheckOptions, CheckService

logger = logging.getLogger(__name__)


def _configure_logging(config: VigilConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load(ctx: click.Context, **overrides: Any) -> VigilConfig:
    try:
        config = load_config(ctx.obj["config_path"], **overrides)
    except VigilError as e:
        raise click.ClickException(str(e)) from e
    _configure_logging(config, ctx.obj["verbose"])
    return config


@click.group()
@click.version_option(package_name="vigil", prog_name="vigil")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a vigil.yaml project file (defaults to ./vigil.yaml when present)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """Check a service against known operation workloads to find breaking changes."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose
    ctx.obj.setdefault("service_factory", CheckService.from_config)


@cli.command("check")
@click.option("--tag", "-t", help="The published tag to check this service against")
@click.option(
    "--validation-period",
    "--validationPeriod",
    "validation_period",
    help=(
        "The size of the time window with which to validate the schema against. "
        "You may provide a number (in seconds), or an ISO 8601 duration such as P7D or PT12H"
    ),
)
@click.option(
    "--query-count-threshold",
    "--queryCountThreshold",
    "query_count_threshold",
    type=int,
    help="Minimum number of requests within the requested time window for a query to be considered",
)
@click.option(
    "--query-count-threshold-percentage",
    "--queryCountThresholdPercentage",
    "query_count_threshold_percentage",
    type=float,
    help=(
        "Number of requests within the requested time window for a query to be considered, "
        "relative to total request count. Expected values are between 0 and 0.05"
    ),
)
@click.option("--json", "output_json", is_flag=True, help="Output result in JSON, which can be parsed by tools like jq")
@click.option("--markdown", "output_markdown", is_flag=True, help="Output result in Markdown")
@click.option("--service", "service_name", help="Service name (overrides VIGIL_SERVICE_NAME)")
@click.option(
    "--schema",
    "schema_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Local schema file (SDL or introspection JSON)",
)
@click.option("--frontend", help="Frontend URL used for the check details link")
@click.pass_context
def check(
    ctx: click.Context,
    tag: str | None,
    validation_period: str | None,
    query_count_threshold: int | None,
    query_count_threshold_percentage: float | None,
    output_json: bool,
    output_markdown: bool,
    service_name: str | None,
    schema_file: Path | None,
    frontend: str | None,
) -> None:
    """Check the local schema for breaking changes against recent operations."""
    if output_json and output_markdown:
        raise click.UsageError("--json and --markdown are mutually exclusive")
    if output_json:
        output = OutputMode.JSON
    elif output_markdown:
        output = OutputMode.MARKDOWN
    else:
        output = OutputMode.TABLE

    config = _load(ctx, service_name=service_name, schema_file=schema_file, frontend=frontend)
    options = CheckOptions(
        tag=tag,
        validation_period=validation_period,
        query_count_threshold=query_count_threshold,
        query_count_threshold_percentage=query_count_threshold_percentage,
        output=output,
    )

    try:
        service = ctx.obj["service_factory"](config)
        exit_code = asyncio.run(service.run(options, ClickSink()))
    except VigilError as e:
        logger.debug("Check failed", exc_info=True)
        raise click.ClickException(str(e)) from e
    ctx.exit(exit_code)


@cli.command("serve")
@click.option("--host", help="Bind address (overrides VIGIL_HOST)")
@click.option("--port", type=int, help="Bind port (overrides VIGIL_PORT)")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the MCP server exposing the service check as a tool."""
    from vigil.server import create_server

    config = _load(ctx, host=host, port=port)
    mcp = create_server(config, service_factory=ctx.obj["service_factory"])
    logger.info("Starting MCP server on %s:%d", config.host, config.port)
    mcp.run(transport="streamable-http", host=config.host, port=config.port)


def main() -> None:
    cli(prog_name="vigil")
