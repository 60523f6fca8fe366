"""Terminal styling for cognito-auth CLI output.

Accepted results print green with a check mark and rejections red with a
cross. Pool names are bold; the default pool carries a dim marker.
"""

from __future__ import annotations

__all__ = [
    "style_accepted",
    "style_field",
    "style_hint",
    "style_pool",
    "style_rejected",
    "style_title",
]

import click


def style_title(title: str) -> str:
    """Section title, e.g. "--- User pools ---" in cyan bold."""
    return click.style(f"--- {title} ---", fg="cyan", bold=True)


def style_field(name: str, value: object) -> str:
    """Render "name: value" with a cyan name.

    Example:
        >>> click.echo(style_field("region", pool.region))
        region: eu-west-1
    """
    shown = "(not set)" if value is None else str(value)
    return click.style(f"{name}:", fg="cyan", bold=True) + f" {shown}"


def style_pool(identifier: str, is_default: bool = False) -> str:
    name = click.style(identifier, bold=True)
    if is_default:
        return name + click.style(" (default)", dim=True)
    return name


def style_accepted(message: str) -> str:
    return click.style(f"✓ {message}", fg="green")


def style_rejected(message: str) -> str:
    return click.style(f"✗ {message}", fg="red")


def style_hint(message: str) -> str:
    return click.style(message, dim=True)
