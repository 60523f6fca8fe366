"""Command-line interface for cognito-auth.

Developer tooling for inspecting configuration, computing secret hashes
and minting or validating bearer tokens.
"""

from .main import cli, main

__all__ = ["cli", "main"]
