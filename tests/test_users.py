"""Unit tests for local user resolution.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from cognito_auth.config import PoolConfig
from cognito_auth.exceptions import ProviderError, ProviderErrorKind
from cognito_auth.gateway.protocol import AuthResult
from cognito_auth.tokens.validator import DecodedToken
from cognito_auth.users import Credentials, UserResolver, UserStore, reject_unknown_users
from helpers import GatewayFactory, LocalUser, RecordingCallback, RecordingUserStore


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(access_token="access", refresh_token="refresh", expires_at=1_700_003_600)


@pytest.fixture
def decoded_token() -> DecodedToken:
    return DecodedToken(
        raw="raw-token",
        subject="user-1",
        issuer="main-local_issuer",
        pool_identifier="main",
        expires_at=1_700_003_600,
        claims={"sub": "user-1", "custom:external_id": "ext-9"},
    )


class TestCredentials:
    """Tests for Credentials construction."""

    def test_expiry_is_issue_time_plus_lifetime(self) -> None:
        """Given a 3600s lifetime at a fixed issue time, expires_at is issue time + 3600."""
        # Arrange
        result = AuthResult(access_token="access", refresh_token="refresh", expires_in=3600)

        # Act
        credentials = Credentials.from_auth_result(result, issued_at=1_700_000_000.9)

        # Assert
        assert credentials == Credentials(access_token="access", refresh_token="refresh", expires_at=1_700_003_600)

    def test_repr_hides_tokens(self, credentials: Credentials) -> None:
        """Given credentials, repr() contains no token material."""
        # Assert
        assert "access" not in repr(credentials)
        assert "refresh" not in repr(credentials)


class TestResolveFromPassword:
    """Tests for UserResolver.resolve_from_password()."""

    def test_store_hit_skips_provider(
        self,
        pool_a: PoolConfig,
        gateway_factory: GatewayFactory,
        credentials: Credentials,
        local_user: LocalUser,
    ) -> None:
        """Given a local user, it is returned without fetching the provider record."""
        # Arrange
        store = RecordingUserStore(local_user)
        callback = RecordingCallback()
        gateway = gateway_factory(pool_a)
        resolver = UserResolver(store, callback)

        # Act
        user = resolver.resolve_from_password("user@example.com", "main", credentials, gateway)

        # Assert
        assert user is local_user
        assert store.username_lookups == [("user@example.com", "main", credentials)]
        gateway.fetch_user.assert_not_called()
        assert callback.calls == []

    def test_store_miss_invokes_callback_once(
        self,
        pool_a: PoolConfig,
        gateway_factory: GatewayFactory,
        credentials: Credentials,
        local_user: LocalUser,
    ) -> None:
        """Given no local user, the provider record is fetched once and passed to the callback."""
        # Arrange
        callback = RecordingCallback(local_user)
        gateway = gateway_factory(pool_a)
        resolver = UserResolver(RecordingUserStore(None), callback)

        # Act
        user = resolver.resolve_from_password("user@example.com", "main", credentials, gateway)

        # Assert
        assert user is local_user
        gateway.fetch_user.assert_called_once_with("access")
        assert len(callback.calls) == 1
        assert callback.calls[0] == (gateway.fetch_user.return_value, "main")

    def test_callback_none_is_final(
        self,
        pool_a: PoolConfig,
        gateway_factory: GatewayFactory,
        credentials: Credentials,
    ) -> None:
        """Given a callback returning None, the result is None."""
        # Arrange
        resolver = UserResolver(RecordingUserStore(None), RecordingCallback(None))

        # Act
        user = resolver.resolve_from_password("user@example.com", "main", credentials, gateway_factory(pool_a))

        # Assert
        assert user is None

    def test_store_errors_propagate(
        self,
        pool_a: PoolConfig,
        gateway_factory: GatewayFactory,
        credentials: Credentials,
    ) -> None:
        """Given a failing store, the error reaches the caller."""
        # Arrange
        store = MagicMock(spec=UserStore)
        store.find_by_username.side_effect = RuntimeError("database down")
        resolver = UserResolver(store)

        # Act & Assert
        with pytest.raises(RuntimeError, match="database down"):
            resolver.resolve_from_password("user@example.com", "main", credentials, gateway_factory(pool_a))

    def test_provider_errors_propagate(
        self,
        pool_a: PoolConfig,
        gateway_factory: GatewayFactory,
        credentials: Credentials,
    ) -> None:
        """Given a failing provider fetch, ProviderError reaches the caller and the callback is skipped."""
        # Arrange
        gateway = gateway_factory(pool_a)
        gateway.fetch_user.side_effect = ProviderError(ProviderErrorKind.OTHER, "down")
        callback = RecordingCallback()
        resolver = UserResolver(RecordingUserStore(None), callback)

        # Act & Assert
        with pytest.raises(ProviderError):
            resolver.resolve_from_password("user@example.com", "main", credentials, gateway)
        assert callback.calls == []

    def test_default_callback_rejects(self, pool_a: PoolConfig, gateway_factory: GatewayFactory) -> None:
        """Given the default callback, unknown users resolve to None."""
        # Arrange
        resolver = UserResolver(RecordingUserStore(None))

        # Act
        user = resolver.resolve_from_password(
            "user@example.com",
            "main",
            Credentials("a", None, 0),
            gateway_factory(pool_a),
        )

        # Assert
        assert user is None
        assert reject_unknown_users(MagicMock(), "main") is None


class TestResolveFromToken:
    """Tests for UserResolver.resolve_from_token()."""

    def test_looks_up_by_identifying_attribute(
        self,
        pool_a: PoolConfig,
        gateway_factory: GatewayFactory,
        decoded_token: DecodedToken,
        local_user: LocalUser,
    ) -> None:
        """Given a configured attribute, the store is queried with that claim's value."""
        # Arrange
        store = RecordingUserStore(local_user)
        resolver = UserResolver(store, identifying_attribute="custom:external_id")

        # Act
        user = resolver.resolve_from_token(decoded_token, gateway_factory(pool_a))

        # Assert
        assert user is local_user
        assert store.attribute_lookups == [("ext-9", "main", "raw-token", 1_700_003_600)]

    def test_store_miss_fetches_with_raw_token(
        self,
        pool_a: PoolConfig,
        gateway_factory: GatewayFactory,
        decoded_token: DecodedToken,
        local_user: LocalUser,
    ) -> None:
        """Given no local user, the provider is asked with the bearer token itself."""
        # Arrange
        callback = RecordingCallback(local_user)
        gateway = gateway_factory(pool_a)
        resolver = UserResolver(RecordingUserStore(None), callback)

        # Act
        user = resolver.resolve_from_token(decoded_token, gateway)

        # Assert
        assert user is local_user
        gateway.fetch_user.assert_called_once_with("raw-token")
        assert callback.calls[0][1] == "main"

    def test_missing_attribute_skips_store(
        self,
        pool_a: PoolConfig,
        gateway_factory: GatewayFactory,
        decoded_token: DecodedToken,
    ) -> None:
        """Given a token without the identifying claim, the store is not queried."""
        # Arrange
        store = RecordingUserStore(None)
        callback = RecordingCallback(None)
        resolver = UserResolver(store, callback, identifying_attribute="email")

        # Act
        user = resolver.resolve_from_token(decoded_token, gateway_factory(pool_a))

        # Assert
        assert user is None
        assert store.attribute_lookups == []
        assert len(callback.calls) == 1

    def test_provisioned_user_is_audited(
        self,
        pool_a: PoolConfig,
        gateway_factory: GatewayFactory,
        decoded_token: DecodedToken,
        local_user: LocalUser,
    ) -> None:
        """Given a callback supplying a user, the auth logger records the provisioning."""
        # Arrange
        auth_logger = MagicMock()
        resolver = UserResolver(RecordingUserStore(None), RecordingCallback(local_user), auth_logger=auth_logger)

        # Act
        resolver.resolve_from_token(decoded_token, gateway_factory(pool_a))

        # Assert
        auth_logger.log_user_provisioned.assert_called_once_with(
            strategy="token", pool="main", subject="user@example.com"
        )
