"""Main CLI entry point for cognito-auth.

Defines the CLI group and registers all subcommands.

Commands:
    pools        - List configured user pools
    secret-hash  - Compute the SECRET_HASH for a username
    token        - Bearer token tools (validate, issue)

Subcommand help:
    cognito-auth COMMAND -h    Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli", "main"]

import sys
from pathlib import Path

import click

from cognito_auth import __version__
from cognito_auth.constants import APP_NAME, CONFIG_ENV_VAR, DEFAULT_CONFIG_FILENAME

from .commands.pools import pools
from .commands.secret_hash import secret_hash
from .commands.token import token


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=CONFIG_ENV_VAR,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    help=f"Configuration file (or ${CONFIG_ENV_VAR})",
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, config_path: Path, version: bool) -> None:
    """cognito-auth: Cognito password and bearer token authentication."""
    if version:
        click.echo(f"{APP_NAME} {__version__}")
        sys.exit(0)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(pools)
cli.add_command(secret_hash)
cli.add_command(token)


def main() -> None:
    """CLI entry point."""
    cli()
