"""Shared strategy types and wiring.

Every strategy runs the same two-phase protocol:

    is_applicable()  ->  authenticate()

and terminates in exactly one AuthOutcome: success(user), failure(reason)
or not-applicable. Strategy instances are built per request and discarded;
the StrategyContext they receive is built once at startup and only read.
"""

from __future__ import annotations

__all__ = [
    "AuthOutcome",
    "AuthStatus",
    "AuthStrategy",
    "FailureReason",
    "StrategyContext",
    "build_context",
]

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from cognito_auth.constants import DEFAULT_BEARER_SCHEME, DEFAULT_POOL_IDENTIFIER_HEADER, DEFAULT_SESSION_KEY
from cognito_auth.gateway.cognito import create_cognito_gateway
from cognito_auth.pools import PoolRegistry
from cognito_auth.telemetry.auth_logger import create_auth_logger
from cognito_auth.telemetry.system_logger import configure_system_logger, get_system_logger
from cognito_auth.tokens.keys import load_signing_keys
from cognito_auth.tokens.validator import TokenValidator
from cognito_auth.users import UserResolver, reject_unknown_users

if TYPE_CHECKING:
    import httpx

    from cognito_auth.config import AuthConfig
    from cognito_auth.gateway.protocol import GatewayFactory
    from cognito_auth.telemetry.auth_logger import AuthLogger
    from cognito_auth.users import NotFoundCallback, UserStore

# Log file names below LoggingConfig.log_dir
SYSTEM_LOG_FILE = "system.jsonl"
AUTH_LOG_FILE = "auth.jsonl"


# =============================================================================
# Outcomes
# =============================================================================


class AuthStatus(str, Enum):
    """Terminal state of one strategy run."""

    NOT_APPLICABLE = "not_applicable"
    SUCCESS = "success"
    FAILURE = "failure"


class FailureReason(str, Enum):
    """Stable symbolic failure reasons surfaced to the caller.

    The caller maps these to HTTP status and message. TOKEN_EXPIRED is kept
    apart from the other token failures since it usually warrants a refresh
    prompt rather than a login redirect.
    """

    INVALID = "invalid"
    UNCONFIRMED = "unconfirmed"
    UNKNOWN_RESPONSE = "unknown_response"
    TOKEN_EXPIRED = "token_expired"
    UNKNOWN_USER = "unknown_user"
    UNKNOWN_ERROR = "unknown_error"


@dataclass(frozen=True)
class AuthOutcome:
    """Result of a strategy run.

    Attributes:
        status: Success, failure or not-applicable.
        user: Local user on success.
        reason: Failure reason on failure.
    """

    status: AuthStatus
    user: Any | None = None
    reason: FailureReason | None = None

    @classmethod
    def success(cls, user: Any) -> "AuthOutcome":
        return cls(AuthStatus.SUCCESS, user=user)

    @classmethod
    def failure(cls, reason: FailureReason) -> "AuthOutcome":
        return cls(AuthStatus.FAILURE, reason=reason)

    @classmethod
    def not_applicable(cls) -> "AuthOutcome":
        return cls(AuthStatus.NOT_APPLICABLE)

    @property
    def succeeded(self) -> bool:
        return self.status is AuthStatus.SUCCESS


# =============================================================================
# Context
# =============================================================================


@dataclass(frozen=True)
class StrategyContext:
    """Process-wide, read-only dependencies shared by all strategy instances.

    Attributes:
        registry: User pool registry.
        validator: Bearer token validator, or None when token authentication
            is not configured (no jwk section and no test bypass).
        resolver: Local user resolver.
        gateway_factory: Builds a pool-scoped identity provider gateway.
        clock: Returns current epoch seconds.
        bearer_scheme: Literal Authorization scheme (case-sensitive).
        pool_identifier_header: Header naming the target pool in the token flow.
        session_key: Top-level params key promoted into the scope key.
        auth_logger: Audit logger for authentication outcomes (optional).
    """

    registry: PoolRegistry
    validator: TokenValidator | None
    resolver: UserResolver
    gateway_factory: "GatewayFactory" = create_cognito_gateway
    clock: Callable[[], float] = time.time
    bearer_scheme: str = DEFAULT_BEARER_SCHEME
    pool_identifier_header: str = DEFAULT_POOL_IDENTIFIER_HEADER
    session_key: str = DEFAULT_SESSION_KEY
    auth_logger: "AuthLogger | None" = None


def build_context(
    config: "AuthConfig",
    user_store: "UserStore",
    not_found_callback: "NotFoundCallback" = reject_unknown_users,
    *,
    gateway_factory: "GatewayFactory" = create_cognito_gateway,
    http_client: "httpx.Client | None" = None,
    clock: Callable[[], float] = time.time,
) -> StrategyContext:
    """Wire a StrategyContext from configuration.

    Applies logging configuration, builds the pool registry, loads signing
    keys (once) and constructs the validator and resolver. Without a jwk
    section (and without the test bypass) no validator is built and the
    token strategy never applies, so password-only deployments need no keys.

    Args:
        config: Validated configuration.
        user_store: Local user store supplied by the application.
        not_found_callback: Called when a provider-confirmed user has no local match.
        gateway_factory: Builds a gateway for a pool (default: boto3 Cognito).
        http_client: Optional httpx client for fetching a JWKS URL.
        clock: Returns current epoch seconds (for testing).

    Returns:
        StrategyContext ready to share across requests.

    Raises:
        ConfigurationError: If pools are inconsistent, or a jwk section
            names no key source without the test bypass.
        SigningKeyError: If signing keys cannot be loaded.
    """
    log_dir = Path(config.logging.log_dir).expanduser() if config.logging.log_dir else None
    configure_system_logger(
        config.logging.log_level,
        log_dir / SYSTEM_LOG_FILE if log_dir is not None else None,
    )
    auth_logger = create_auth_logger(log_dir / AUTH_LOG_FILE) if log_dir is not None else None

    registry = PoolRegistry(config.user_pools)
    validator: TokenValidator | None = None
    if config.jwk is not None or config.allow_unverified_tokens:
        keys = load_signing_keys(config.jwk, http_client) if config.jwk is not None else None
        validator = TokenValidator(
            config.jwk,
            keys,
            registry,
            allow_unverified=config.allow_unverified_tokens,
            clock=clock,
        )
    resolver = UserResolver(
        user_store,
        not_found_callback,
        identifying_attribute=config.identifying_attribute,
        auth_logger=auth_logger,
    )

    get_system_logger().info(
        {
            "event": "auth_context_ready",
            "message": f"Authentication ready with {len(registry)} user pool(s)",
            "pools": list(registry.identifiers),
            "token_auth": validator is not None,
            "token_bypass": validator is not None and validator.bypass_enabled,
        }
    )

    return StrategyContext(
        registry=registry,
        validator=validator,
        resolver=resolver,
        gateway_factory=gateway_factory,
        clock=clock,
        bearer_scheme=config.bearer_scheme,
        pool_identifier_header=config.pool_identifier_header,
        session_key=config.session_key,
        auth_logger=auth_logger,
    )


# =============================================================================
# Strategy base
# =============================================================================


class AuthStrategy(ABC):
    """Two-phase authentication strategy.

    Subclasses implement is_applicable() and authenticate(). authenticate()
    must only be called after is_applicable() returned True; run() chains both.
    """

    def __init__(self, context: StrategyContext) -> None:
        self._context = context
        self._logger = get_system_logger()

    @abstractmethod
    def is_applicable(self) -> bool:
        """Whether this request carries what the strategy needs."""

    @abstractmethod
    def authenticate(self) -> AuthOutcome:
        """Attempt authentication; returns success or failure."""

    def run(self) -> AuthOutcome:
        """Check applicability, then authenticate.

        Returns:
            NOT_APPLICABLE without side effects when the request does not
            apply, otherwise the authenticate() outcome.
        """
        if not self.is_applicable():
            return AuthOutcome.not_applicable()
        return self.authenticate()
