"""Pools command for cognito-auth CLI."""

from __future__ import annotations

__all__ = ["pools"]

import json

import click

from cognito_auth.pools import PoolRegistry
from cognito_auth.utils.cli import load_config_or_exit

from ..styling import style_field, style_hint, style_pool, style_title


@click.command("pools")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def pools(ctx: click.Context, as_json: bool) -> None:
    """List configured user pools.

    The first pool is the default, used when a request names no pool.
    Client secrets are never printed.
    """
    config = load_config_or_exit(ctx)
    registry = PoolRegistry(config.user_pools)

    if as_json:
        data = [
            {
                "identifier": pool.identifier,
                "region": pool.region,
                "client_id": pool.client_id,
                "pool_id": pool.pool_id,
                "has_secret": bool(pool.secret),
                "has_static_credentials": pool.has_static_credentials,
                "default": index == 0,
            }
            for index, pool in enumerate(registry)
        ]
        click.echo(json.dumps(data, indent=2))
        return

    if not len(registry):
        click.echo(style_hint("No user pools configured."))
        return

    click.echo(style_title("User pools"))
    for index, pool in enumerate(registry):
        click.echo(f"  {style_pool(pool.identifier, is_default=index == 0)}")
        click.echo(f"    {style_field('region', pool.region)}")
        click.echo(f"    {style_field('client_id', pool.client_id)}")
        click.echo(f"    {style_field('pool_id', pool.pool_id)}")
        click.echo(f"    {style_field('secret', 'configured' if pool.secret else None)}")
