"""Custom exceptions for cognito-auth.

This module contains all custom exceptions used throughout the package.
Exceptions are organized into two categories:

Startup Failures (configuration cannot be used):
    - ConfigurationError: Config file missing, invalid, or inconsistent
    - SigningKeyError: Signing-key material cannot be loaded

Per-request Failures (caught at the strategy boundary):
    - UnknownPoolError: Request names a pool that is not registered
    - NoPoolsConfiguredError: No pool available to fall back to
    - ProviderError: Identity provider call failed (tagged with a ProviderErrorKind)

Strategies never let ProviderError or token validation errors escape; they
map them to a FailureReason. Errors raised by the local user store or the
not-found callback are not caught and propagate to the caller.

Usage:
    from cognito_auth.exceptions import ProviderError, ProviderErrorKind
"""

from __future__ import annotations

__all__ = [
    "CognitoAuthError",
    "ConfigurationError",
    "NoPoolsConfiguredError",
    "ProviderError",
    "ProviderErrorKind",
    "SigningKeyError",
    "UnknownPoolError",
]

from enum import Enum


class CognitoAuthError(Exception):
    """Base exception for all cognito-auth errors."""


# =============================================================================
# Startup Failures
# =============================================================================


class ConfigurationError(CognitoAuthError):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file does not exist
    - Config file contains invalid JSON
    - Config file fails Pydantic validation
    - Two pools share an identifier
    - Token validation has no signing keys and the test bypass is not enabled
    """


class SigningKeyError(ConfigurationError):
    """Signing-key material could not be loaded or parsed.

    Raised when the JWKS file is unreadable, the JWKS endpoint is
    unreachable, or the key set contains no usable keys.
    """


# =============================================================================
# Pool resolution
# =============================================================================


class UnknownPoolError(CognitoAuthError):
    """A pool identifier was given but no such pool is registered."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Unknown user pool: {identifier!r}")


class NoPoolsConfiguredError(CognitoAuthError):
    """The pool registry is empty, so there is no default pool."""

    def __init__(self) -> None:
        super().__init__("No user pools configured")


# =============================================================================
# Identity provider
# =============================================================================


class ProviderErrorKind(str, Enum):
    """Kind of identity provider failure surfaced past the gateway boundary.

    Strategies match on the kind, never on SDK exception types.
    """

    NOT_AUTHORIZED = "not_authorized"
    USER_NOT_CONFIRMED = "user_not_confirmed"
    OTHER = "other"


class ProviderError(CognitoAuthError):
    """Identity provider call failed.

    Attributes:
        kind: Tagged failure kind (bad credentials, unconfirmed account, other).
        code: Provider error code if one was returned (e.g. "NotAuthorizedException").
        operation: Gateway operation that failed (e.g. "initiate_auth").
    """

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str,
        *,
        code: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.kind = kind
        self.code = code
        self.operation = operation
        super().__init__(message)

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return f"ProviderError(kind={self.kind.value!r}, code={self.code!r}, operation={self.operation!r})"
