"""Local user resolution.

Maps an identity confirmed by the identity provider onto a user of the
embedding application. Resolution is two-tier:

1. Ask the local UserStore (by username for the password flow, by the
   configured identifying attribute for the token flow).
2. If the store has no such user, fetch the provider's canonical record
   and hand it to the NotFoundCallback, whose return value is final.

There is no retry and no caching: one store lookup, at most one provider
fetch and one callback invocation per request. Errors raised by the store
or the callback propagate to the caller; provisioning failures belong to
the embedding application.
"""

from __future__ import annotations

__all__ = [
    "Credentials",
    "NotFoundCallback",
    "UserResolver",
    "UserStore",
    "reject_unknown_users",
]

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from cognito_auth.telemetry.system_logger import get_system_logger

if TYPE_CHECKING:
    from cognito_auth.gateway.protocol import AuthResult, IdentityProviderGateway, ProviderUserRecord
    from cognito_auth.telemetry.auth_logger import AuthLogger, StrategyName
    from cognito_auth.tokens.validator import DecodedToken


@dataclass(frozen=True)
class Credentials:
    """Fresh credential material from a password login.

    Handed to the user store, which may persist or refresh it.

    Attributes:
        access_token: Provider access token.
        refresh_token: Provider refresh token.
        expires_at: Absolute expiry as epoch seconds (issue time + lifetime).
    """

    access_token: str
    refresh_token: str | None
    expires_at: int

    @classmethod
    def from_auth_result(cls, result: "AuthResult", issued_at: float) -> "Credentials":
        """Build credentials from a provider result.

        Args:
            result: Tokens returned by initiate_auth.
            issued_at: Issue time as epoch seconds.

        Returns:
            Credentials with expires_at = issued_at + result.expires_in.
        """
        return cls(
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            expires_at=int(issued_at) + int(result.expires_in),
        )

    def __repr__(self) -> str:
        return f"Credentials(expires_at={self.expires_at})"


@runtime_checkable
class UserStore(Protocol):
    """Local user persistence, supplied by the embedding application.

    Both lookups return the local user or None. The core never inspects the
    returned value beyond "is it None".
    """

    def find_by_username(self, username: str, pool_identifier: str, credentials: Credentials) -> Any | None:
        """Find a user by provider username/email within a pool.

        The store may persist the fresh credentials as a side effect.
        """
        ...

    def find_by_attribute(
        self,
        value: str,
        pool_identifier: str,
        access_token: str,
        expires_at: int | None,
    ) -> Any | None:
        """Find a user by the configured identifying attribute within a pool."""
        ...


@runtime_checkable
class NotFoundCallback(Protocol):
    """Hook invoked when a provider-confirmed identity has no local user.

    Returns a user (e.g. freshly provisioned) to accept the login, or None
    to reject it.
    """

    def __call__(self, provider_user: "ProviderUserRecord", pool_identifier: str) -> Any | None: ...


def reject_unknown_users(provider_user: "ProviderUserRecord", pool_identifier: str) -> None:
    """Default NotFoundCallback: never provisions, so unknown users are rejected."""
    return None


class UserResolver:
    """Resolves provider identities to local users.

    Usage:
        resolver = UserResolver(store, provision_user, identifying_attribute="sub")
        user = resolver.resolve_from_password(email, "main", credentials, gateway)
    """

    def __init__(
        self,
        store: UserStore,
        not_found_callback: NotFoundCallback = reject_unknown_users,
        identifying_attribute: str = "sub",
        auth_logger: "AuthLogger | None" = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            store: Local user store.
            not_found_callback: Invoked with (provider record, pool identifier)
                when the store has no matching user.
            identifying_attribute: Token claim used for token-flow lookups.
            auth_logger: Audit logger for users supplied by the callback (optional).
        """
        self._store = store
        self._callback = not_found_callback
        self._identifying_attribute = identifying_attribute
        self._auth_logger = auth_logger
        self._logger = get_system_logger()

    @property
    def identifying_attribute(self) -> str:
        """Token claim used for token-flow lookups."""
        return self._identifying_attribute

    def resolve_from_password(
        self,
        email: str,
        pool_identifier: str,
        credentials: Credentials,
        gateway: "IdentityProviderGateway",
    ) -> Any | None:
        """Resolve the user behind a successful password login.

        Args:
            email: Username/email the user logged in with.
            pool_identifier: Pool the login was routed to.
            credentials: Fresh tokens for the store to persist.
            gateway: Gateway scoped to the same pool.

        Returns:
            Local user, the callback's user, or None.

        Raises:
            ProviderError: If the provider fetch fails.
        """
        user = self._store.find_by_username(email, pool_identifier, credentials)
        if user is not None:
            return user
        return self._not_found(pool_identifier, credentials.access_token, gateway, "password")

    def resolve_from_token(self, token: "DecodedToken", gateway: "IdentityProviderGateway") -> Any | None:
        """Resolve the user behind a validated bearer token.

        Args:
            token: Decoded token (pool identifier must be set).
            gateway: Gateway scoped to the token's pool.

        Returns:
            Local user, the callback's user, or None.

        Raises:
            ProviderError: If the provider fetch fails.
        """
        pool_identifier = token.pool_identifier or gateway.pool.identifier
        value = token.attribute(self._identifying_attribute)

        if value is not None:
            user = self._store.find_by_attribute(value, pool_identifier, token.raw, token.expires_at)
            if user is not None:
                return user

        return self._not_found(pool_identifier, token.raw, gateway, "token")

    def _not_found(
        self,
        pool_identifier: str,
        access_token: str,
        gateway: "IdentityProviderGateway",
        strategy: "StrategyName",
    ) -> Any | None:
        """Fetch the provider record and let the callback decide."""
        provider_user = gateway.fetch_user(access_token)
        self._logger.info(
            {
                "event": "local_user_not_found",
                "message": f"No local user in pool {pool_identifier!r}, invoking not-found callback",
                "pool": pool_identifier,
            }
        )
        user = self._callback(provider_user, pool_identifier)

        if user is not None and self._auth_logger is not None:
            self._auth_logger.log_user_provisioned(
                strategy=strategy,
                pool=pool_identifier,
                subject=provider_user.username,
            )
        return user
