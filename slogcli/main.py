"""Main entry point for the slog application.

Sets up the Typer CLI application, performs dependency injection (Composition
Root), defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from typing import Any, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

from slogcli import __version__

# --- Core Layer ---
from slogcli.core.command_handler import CommandHandler, DEFAULT_TAIL_QUERY
from slogcli.core.services.event_service import EventService
from slogcli.core.services.issue_service import IssueService
from slogcli.core.services.tail_service import TailService

# --- Domain Layer ---
from slogcli.domain.models.common import OutputFormat
from slogcli.domain.models.errors import ConfigurationError

# --- Infrastructure Layer ---
from slogcli.infrastructure.api.sentry_client import SentryClient, build_http_client
from slogcli.infrastructure.cli.display import ConsoleDisplay
from slogcli.infrastructure.config.settings import (
    CONFIG_HELP, LOG_FILE_KEY, LOG_LEVEL_KEY, get_config, get_config_source, get_sentry_config,
)
from slogcli.infrastructure.monitoring.logger_setup import parse_log_level, setup_logging

logger = logging.getLogger(__name__)


# --- Dependency Injection (Manual) ---

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up the objects one command needs.

    Raises:
        ConfigurationError: If credentials are missing.
    """
    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()
    dependencies['config'] = get_sentry_config()
    dependencies['config_source'] = get_config_source()

    # One client, hence one rate-limit tracker, per invocation
    dependencies['client'] = SentryClient(
        dependencies['config'], http_client=build_http_client(dependencies['config']),
    )

    dependencies['issue_service'] = IssueService(tracker=dependencies['client'], ui=dependencies['ui'])
    dependencies['event_service'] = EventService(tracker=dependencies['client'], ui=dependencies['ui'])
    dependencies['tail_service'] = TailService(tracker=dependencies['client'], ui=dependencies['ui'])
    dependencies['command_handler'] = CommandHandler(
        issue_service=dependencies['issue_service'],
        event_service=dependencies['event_service'],
        tail_service=dependencies['tail_service'],
        tracker=dependencies['client'],
        ui=dependencies['ui'],
    )
    logger.debug("All dependencies initialized.")
    return dependencies


def _load_dependencies() -> Dict[str, Any]:
    """create_dependencies(), exiting with the configuration help on failure."""
    try:
        return create_dependencies()
    except ConfigurationError as e:
        logger.debug(f"Configuration error: {e}")
        ui = ConsoleDisplay()
        ui.display_error(str(e))
        ui.display_info(CONFIG_HELP)
        raise typer.Exit(code=1)


def run_async(coro: Coroutine[Any, Any, bool], dependencies: Dict[str, Any]) -> bool:
    """Runs a handler coroutine, closing the HTTP client on the same event loop."""
    async def runner() -> bool:
        try:
            return await coro
        finally:
            await dependencies['client'].aclose()

    return asyncio.run(runner())


def _finish(ok: bool) -> None:
    if not ok:
        raise typer.Exit(code=1)


# --- Typer App Definition ---
app = typer.Typer(
    name="slog",
    help="Fast, scriptable CLI for querying Sentry issues and events.",
    add_completion=False,
    no_args_is_help=True,
)

# Shared options
FormatOption = Annotated[
    OutputFormat,
    typer.Option("--format", "-f", case_sensitive=False, help="Output format: table or json."),
]
RedactOption = Annotated[
    bool,
    typer.Option("--redact", help="Redact sensitive data (emails, tokens, secrets)."),
]
FieldsOption = Annotated[
    Optional[str],
    typer.Option("--fields", help="Comma-separated list of fields to include in JSON output."),
]
EnvOption = Annotated[Optional[str], typer.Option("--env", "-e", help="Filter by environment.")]
ProjectOption = Annotated[Optional[str], typer.Option("--project", "-p", help="Filter by project slug.")]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging on stderr.")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
):
    """Configures logging before any command runs."""
    log_level = logging.DEBUG if verbose else parse_log_level(get_config(LOG_LEVEL_KEY))
    setup_logging(log_level=log_level, log_file=get_config(LOG_FILE_KEY))


@app.command()
def issues(
    query: Annotated[
        Optional[str],
        typer.Option("--query", "-q", help='Sentry search query (e.g., "is:unresolved level:error").'),
    ] = None,
    env: EnvOption = None,
    since: Annotated[str, typer.Option("--since", "-s", help="Time period (e.g., 1h, 24h, 7d).")] = "24h",
    limit: Annotated[int, typer.Option("--limit", "-l", min=1, help="Maximum number of issues to return.")] = 25,
    project: ProjectOption = None,
    output_format: FormatOption = OutputFormat.TABLE,
    redact: RedactOption = False,
    fields: FieldsOption = None,
):
    """List issues (error groups) from Sentry."""
    dependencies = _load_dependencies()
    handler: CommandHandler = dependencies['command_handler']
    _finish(run_async(
        handler.handle_issues(query, env, since, limit, project, output_format, redact, fields),
        dependencies,
    ))


@app.command()
def events(
    issue_id: Annotated[str, typer.Argument(help="Issue id or short id.")],
    limit: Annotated[int, typer.Option("--limit", "-l", min=1, help="Maximum number of events to return.")] = 10,
    expand: Annotated[
        bool,
        typer.Option("--expand", "-x", help="Fetch full event payload including stacktrace & breadcrumbs."),
    ] = False,
    output_format: FormatOption = OutputFormat.TABLE,
    redact: RedactOption = False,
    fields: FieldsOption = None,
):
    """List recent events for a specific issue."""
    dependencies = _load_dependencies()
    handler: CommandHandler = dependencies['command_handler']
    _finish(run_async(
        handler.handle_events(issue_id, limit, expand, output_format, redact, fields),
        dependencies,
    ))


@app.command()
def tail(
    query: Annotated[str, typer.Option("--query", "-q", help="Sentry search query.")] = DEFAULT_TAIL_QUERY,
    env: EnvOption = None,
    project: ProjectOption = None,
    interval: Annotated[int, typer.Option("--interval", "-i", min=1, help="Polling interval in seconds.")] = 10,
    output_format: FormatOption = OutputFormat.TABLE,
    redact: RedactOption = False,
    fields: FieldsOption = None,
):
    """Poll for new events and print them as they appear."""
    dependencies = _load_dependencies()
    handler: CommandHandler = dependencies['command_handler']
    try:
        ok = run_async(
            handler.handle_tail(query, env, project, interval, output_format, redact, fields),
            dependencies,
        )
    except KeyboardInterrupt:
        dependencies['ui'].display_info("Stopped tailing.")
        ok = True
    _finish(ok)


@app.command()
def check():
    """Show where configuration comes from and test the API connection."""
    dependencies = _load_dependencies()
    handler: CommandHandler = dependencies['command_handler']
    _finish(run_async(
        handler.handle_check(dependencies['config'], dependencies['config_source']),
        dependencies,
    ))


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
