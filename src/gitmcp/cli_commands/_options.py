"""Shared CLI options and the config/logging bootstrap behind them."""

from __future__ import annotations

import functools
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from gitmcp.config import ENV_PREFIX, ConfigError, build_config
from gitmcp.server.models import ToolsetMode
from gitmcp.utils.console import setup_logging, stderr_console

if TYPE_CHECKING:
    from collections.abc import Callable

    from gitmcp.server.models import ServerConfig


def server_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the configuration options shared by every command."""
    options = [
        click.option(
            "--config",
            "config_file",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            envvar=f"{ENV_PREFIX}CONFIG",
            default=None,
            help="YAML configuration file.",
        ),
        click.option(
            "--toolset-mode",
            type=click.Choice([m.value for m in ToolsetMode]),
            envvar=f"{ENV_PREFIX}TOOLSET_MODE",
            default=None,
            help="Which tools to expose (default: readOnly).",
        ),
        click.option(
            "--available-tools",
            envvar=f"{ENV_PREFIX}AVAILABLE_TOOLS",
            default=None,
            help="Comma-separated allow-list of tool names.",
        ),
        click.option(
            "--dynamic-tool-discovery/--no-dynamic-tool-discovery",
            envvar=f"{ENV_PREFIX}DYNAMIC_TOOL_DISCOVERY",
            default=None,
            help="Advertise and send tool list change notifications.",
        ),
        click.option(
            "--instructions",
            envvar=f"{ENV_PREFIX}INSTRUCTIONS",
            default=None,
            help="Override the usage instructions sent to clients.",
        ),
        click.option(
            "--log-level",
            envvar=f"{ENV_PREFIX}LOG_LEVEL",
            default="INFO",
            show_default=True,
            help="Python logging level (logs go to stderr).",
        ),
        click.option("--verbose", "-v", is_flag=True, help="Enable debug logging."),
        click.option("--telemetry", is_flag=True, help="Enable OpenTelemetry tracing."),
        click.option(
            "--otlp-endpoint",
            envvar="OTEL_EXPORTER_OTLP_ENDPOINT",
            default=None,
            help="Export spans via OTLP/gRPC to this endpoint.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def bootstrap(
    *,
    config_file: Path | None,
    toolset_mode: str | None,
    available_tools: str | None,
    dynamic_tool_discovery: bool | None,
    instructions: str | None,
    log_level: str,
    verbose: bool,
    telemetry: bool,
    otlp_endpoint: str | None,
    console_spans: bool = False,
) -> ServerConfig:
    """Configure logging (and tracing) and build the server configuration.

    Exits with status 1 on configuration errors.
    """
    setup_logging(log_level, verbose=verbose)

    if telemetry:
        from gitmcp.utils.telemetry import configure_telemetry

        configure_telemetry(
            export_to_console=console_spans and otlp_endpoint is None,
            otlp_endpoint=otlp_endpoint,
        )

    try:
        return build_config(
            config_file=config_file,
            toolset_mode=toolset_mode,
            available_tools=available_tools,
            dynamic_tool_discovery=dynamic_tool_discovery,
            instructions=instructions,
        )
    except ConfigError as exc:
        stderr_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)


def with_bootstrap(*, console_spans: bool = False) -> Callable[..., Any]:
    """Replace the shared option kwargs with a ready ``config`` argument."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(**kwargs: Any) -> Any:
            shared = {
                key: kwargs.pop(key)
                for key in (
                    "config_file",
                    "toolset_mode",
                    "available_tools",
                    "dynamic_tool_discovery",
                    "instructions",
                    "log_level",
                    "verbose",
                    "telemetry",
                    "otlp_endpoint",
                )
            }
            config = bootstrap(console_spans=console_spans, **shared)
            return func(config=config, **kwargs)

        return server_options(wrapper)

    return decorator
