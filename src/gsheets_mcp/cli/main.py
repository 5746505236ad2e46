"""Command-line interface for gsheets-mcp."""

import asyncio
import json
import logging
import sys

import click

from gsheets_mcp.__version__ import __version__

NOISY_LOGGERS = ("httpx", "httpcore", "mcp.server.lowlevel.server")


def configure_logging(level: str) -> None:
    """Send logs to stderr and quiet the HTTP stack.

    stdout is reserved for the stdio protocol stream.
    """
    logging.basicConfig(
        level=level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    default="INFO",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (logs go to stderr)",
)
def main(log_level: str) -> None:
    """Google Drive and Sheets MCP servers.

    Start a Drive or Sheets tool server over stdio, or exchange a refresh
    token for a new access token.
    """
    configure_logging(log_level)


@main.command()
@click.option(
    "--access-token",
    envvar="ACCESS_TOKEN",
    default=None,
    help="Bind one OAuth access token to the session (otherwise read per request)",
)
def drive(access_token: str | None) -> None:
    """Start the Google Drive MCP server."""
    from gsheets_mcp.server.drive_server import main as server_main

    _run_server("Drive", server_main, access_token)


@main.command()
@click.option(
    "--access-token",
    envvar="ACCESS_TOKEN",
    default=None,
    help="Bind one OAuth access token to the session (otherwise read per request)",
)
def sheets(access_token: str | None) -> None:
    """Start the Google Sheets MCP server."""
    from gsheets_mcp.server.sheets_server import main as server_main

    _run_server("Sheets", server_main, access_token)


def _run_server(label: str, server_main, access_token: str | None) -> None:
    mode = "session token, serialized calls" if access_token else "per-request tokens"
    click.echo(f"Starting {label} MCP server ({mode})...", err=True)
    try:
        server_main(access_token=access_token)
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)
    except Exception as e:
        click.echo(f"❌ {label} server error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option("--client-id", envvar="GOOGLE_CLIENT_ID", required=True, help="Google OAuth client ID")
@click.option(
    "--client-secret",
    envvar="GOOGLE_CLIENT_SECRET",
    required=True,
    help="Google OAuth client secret",
)
@click.option(
    "--refresh-token",
    envvar="GOOGLE_REFRESH_TOKEN",
    required=True,
    help="OAuth refresh token",
)
def refresh(client_id: str, client_secret: str, refresh_token: str) -> None:
    """Exchange a refresh token for a new access token and print it as JSON."""
    from gsheets_mcp.auth import GoogleAuthService

    service = GoogleAuthService(client_id=client_id, client_secret=client_secret)
    try:
        token = asyncio.run(service.refresh_token(refresh_token))
    except Exception as e:
        click.echo(f"❌ Token refresh failed: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(token.model_dump(), indent=2))


if __name__ == "__main__":
    main()
