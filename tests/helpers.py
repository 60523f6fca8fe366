"""Test doubles shared across the suite.

Importable because pytest puts tests/ on sys.path (see pythonpath in
pyproject.toml). Fixtures wrapping these live in conftest.py.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

from cognito_auth.config import PoolConfig
from cognito_auth.gateway.protocol import AuthResult, IdentityProviderGateway, ProviderUserRecord
from cognito_auth.users import Credentials

FIXED_NOW = 1_700_000_000.0


class LocalUser:
    """Stand-in for an application user record."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"LocalUser({self.name!r})"


class RecordingUserStore:
    """UserStore returning a fixed user (or None) and recording every lookup."""

    def __init__(self, user: Any | None = None) -> None:
        self.user = user
        self.username_lookups: list[tuple[str, str, Credentials]] = []
        self.attribute_lookups: list[tuple[str, str, str, int | None]] = []

    def find_by_username(self, username: str, pool_identifier: str, credentials: Credentials) -> Any | None:
        self.username_lookups.append((username, pool_identifier, credentials))
        return self.user

    def find_by_attribute(
        self,
        value: str,
        pool_identifier: str,
        access_token: str,
        expires_at: int | None,
    ) -> Any | None:
        self.attribute_lookups.append((value, pool_identifier, access_token, expires_at))
        return self.user


class RecordingCallback:
    """NotFoundCallback returning a fixed user (or None) and recording calls."""

    def __init__(self, user: Any | None = None) -> None:
        self.user = user
        self.calls: list[tuple[ProviderUserRecord, str]] = []

    def __call__(self, provider_user: ProviderUserRecord, pool_identifier: str) -> Any | None:
        self.calls.append((provider_user, pool_identifier))
        return self.user


class GatewayFactory:
    """Builds MagicMock gateways per pool and remembers them."""

    def __init__(self) -> None:
        self.gateways: dict[str, MagicMock] = {}
        self.requested: list[str] = []

    def __call__(self, pool: PoolConfig) -> MagicMock:
        self.requested.append(pool.identifier)
        if pool.identifier not in self.gateways:
            gateway = MagicMock(spec=IdentityProviderGateway)
            gateway.pool = pool
            gateway.initiate_auth.return_value = AuthResult(
                access_token=f"access-{pool.identifier}",
                expires_in=3600,
                refresh_token=f"refresh-{pool.identifier}",
            )
            gateway.fetch_user.return_value = ProviderUserRecord(
                username="user@example.com",
                attributes={"sub": "provider-sub", "email": "user@example.com"},
            )
            self.gateways[pool.identifier] = gateway
        return self.gateways[pool.identifier]
