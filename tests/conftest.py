"""Shared fixtures for cognito-auth tests.

Provides pool configs, a session-scoped local signing key, a local user
and a gateway factory handing out MagicMock gateways (see helpers.py).
"""

from __future__ import annotations

import pytest

from cognito_auth.config import PoolConfig
from cognito_auth.testing import LocalSigningKey
from helpers import GatewayFactory, LocalUser


# ---------------------------------------------------------------------------
# Pools
# ---------------------------------------------------------------------------


@pytest.fixture
def pool_a() -> PoolConfig:
    """Default pool with a client secret."""
    return PoolConfig(
        identifier="main",
        region="eu-west-1",
        client_id="client-main",
        pool_id="eu-west-1_Main",
        secret="secret-main",
    )


@pytest.fixture
def pool_b() -> PoolConfig:
    """Second pool, public client."""
    return PoolConfig(
        identifier="partners",
        region="us-east-1",
        client_id="client-partners",
        pool_id="us-east-1_Partners",
    )


# ---------------------------------------------------------------------------
# Signing keys
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def signing_key() -> LocalSigningKey:
    """RSA signing key shared by the whole session (key generation is slow)."""
    return LocalSigningKey(kid="test-key")


@pytest.fixture(scope="session")
def other_signing_key() -> LocalSigningKey:
    """A second key with the same kid, for wrong-signature tests."""
    return LocalSigningKey(kid="test-key")


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def local_user() -> LocalUser:
    return LocalUser("alice")


@pytest.fixture
def gateway_factory() -> GatewayFactory:
    return GatewayFactory()
