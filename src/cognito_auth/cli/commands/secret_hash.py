"""Secret-hash command for cognito-auth CLI."""

from __future__ import annotations

__all__ = ["secret_hash"]

import click

from cognito_auth.exceptions import CognitoAuthError
from cognito_auth.pools import PoolRegistry
from cognito_auth.secret_hash import derive_secret_hash
from cognito_auth.utils.cli import load_config_or_exit

from ..styling import style_hint


@click.command("secret-hash")
@click.argument("username")
@click.option("--pool", "pool_identifier", help="Pool identifier from the configuration (default: first pool)")
@click.option("--client-id", help="App client ID (skips the configuration file)")
@click.option("--secret", envvar="COGNITO_CLIENT_SECRET", help="App client secret (or $COGNITO_CLIENT_SECRET)")
@click.pass_context
def secret_hash(
    ctx: click.Context,
    username: str,
    pool_identifier: str | None,
    client_id: str | None,
    secret: str | None,
) -> None:
    """Compute the SECRET_HASH for USERNAME.

    \b
    Uses the pool's client_id and secret from the configuration, or
    --client-id and --secret when given. Prints nothing useful for
    public clients (no secret configured).
    """
    if client_id is None:
        config = load_config_or_exit(ctx)
        try:
            pool = PoolRegistry(config.user_pools).resolve(pool_identifier)
        except CognitoAuthError as e:
            raise click.ClickException(str(e)) from e
        client_id = pool.client_id
        secret = secret or pool.secret

    proof = derive_secret_hash(username, client_id, secret)
    if not proof:
        click.echo(style_hint("No client secret configured; SECRET_HASH is not required."), err=True)
        return
    click.echo(proof)
