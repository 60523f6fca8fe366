"""Token command group for cognito-auth CLI.

Validate bearer tokens against the configured signing keys, or mint local
test tokens with a throwaway RSA key.
"""

from __future__ import annotations

__all__ = ["token"]

import json
import sys
from pathlib import Path

import click

from cognito_auth.exceptions import CognitoAuthError
from cognito_auth.pools import PoolRegistry
from cognito_auth.testing import LOCAL_ISSUER, LocalSigningKey
from cognito_auth.tokens.keys import load_signing_keys
from cognito_auth.tokens.validator import TokenValidator
from cognito_auth.utils.cli import load_config_or_exit, parse_claims

from ..styling import style_accepted, style_field, style_hint, style_pool, style_rejected


@click.group()
def token() -> None:
    """Bearer token tools."""
    pass


@token.command("validate")
@click.argument("raw_token")
@click.option("--pool", "pool_identifier", help="Declared pool (as sent in the pool side header)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def token_validate(ctx: click.Context, raw_token: str, pool_identifier: str | None, as_json: bool) -> None:
    """Validate RAW_TOKEN against the configured signing keys.

    Exits with status 1 unless the token is accepted.
    """
    config = load_config_or_exit(ctx)
    if config.jwk is None:
        raise click.ClickException("No jwk section in the configuration")

    try:
        registry = PoolRegistry(config.user_pools)
        keys = load_signing_keys(config.jwk)
        validator = TokenValidator(
            config.jwk,
            keys,
            registry,
            allow_unverified=config.allow_unverified_tokens,
        )
    except CognitoAuthError as e:
        raise click.ClickException(str(e)) from e

    outcome = validator.validate(raw_token, pool_identifier)

    if as_json:
        data = {
            "status": outcome.status.value,
            "detail": outcome.detail,
            "pool": outcome.token.pool_identifier if outcome.token else None,
            "claims": outcome.token.claims if outcome.token else None,
        }
        click.echo(json.dumps(data, indent=2, default=str))
    elif outcome.accepted and outcome.token is not None:
        click.echo(style_accepted("Token accepted for pool ") + style_pool(outcome.token.pool_identifier or "?"))
        click.echo(style_field("Subject", outcome.token.subject))
        if outcome.token.expires_at is not None:
            click.echo(style_field("Expires at", outcome.token.expires_at))
    else:
        click.echo(style_rejected(f"Token rejected: {outcome.status.value} ({outcome.detail})"), err=True)

    if not outcome.accepted:
        sys.exit(1)


@token.command("issue")
@click.option("--subject", "-s", required=True, help="The 'sub' claim")
@click.option("--pool", "pool_identifier", help="Pool identifier (default: first configured pool)")
@click.option("--issuer", default=LOCAL_ISSUER, show_default=True, help="Issuer suffix")
@click.option("--expires-in", type=click.IntRange(min=1), help="Lifetime in seconds (default: no exp claim)")
@click.option("--claim", "claims", multiple=True, help="Extra claim as NAME=VALUE (repeatable)")
@click.option(
    "--jwks-out",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write the public JWKS here so the token can be validated",
)
@click.pass_context
def token_issue(
    ctx: click.Context,
    subject: str,
    pool_identifier: str | None,
    issuer: str,
    expires_in: int | None,
    claims: tuple[str, ...],
    jwks_out: Path | None,
) -> None:
    """Mint a test token signed with a fresh local RSA key.

    \b
    For development only: the key is generated per invocation. Point
    jwk.jwks_path at the --jwks-out file to have the token accepted.
    """
    extra_claims = parse_claims(claims)

    if pool_identifier is None:
        config = load_config_or_exit(ctx)
        try:
            pool_identifier = PoolRegistry(config.user_pools).default().identifier
        except CognitoAuthError as e:
            raise click.ClickException(str(e)) from e

    signing_key = LocalSigningKey(issuer=issuer)
    raw = signing_key.issue_token(subject, pool_identifier, claims=extra_claims, expires_in=expires_in)

    if jwks_out is not None:
        jwks_out.write_text(json.dumps(signing_key.jwks, indent=2), encoding="utf-8")
        click.echo(style_hint(f"JWKS written to {jwks_out}"), err=True)

    click.echo(raw)
