"""Shared CLI utility functions."""

from __future__ import annotations

__all__ = [
    "load_config_or_exit",
    "parse_claims",
]

from pathlib import Path
from typing import Any

import click

from cognito_auth.config import AuthConfig, load_config
from cognito_auth.exceptions import ConfigurationError


def load_config_or_exit(ctx: click.Context) -> AuthConfig:
    """Load the configuration named by the root --config option.

    Raises:
        click.ClickException: If the file is missing or invalid.
    """
    config_path: Path = ctx.find_root().obj["config_path"]
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(f"Failed to load configuration: {e}") from e


def parse_claims(values: tuple[str, ...]) -> dict[str, Any]:
    """Parse repeated NAME=VALUE options into a claims dict.

    Raises:
        click.BadParameter: If a value has no '='.
    """
    claims: dict[str, Any] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"Expected NAME=VALUE, got {item!r}", param_hint="--claim")
        claims[name] = value
    return claims
