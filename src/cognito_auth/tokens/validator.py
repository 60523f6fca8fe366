"""Offline bearer token validation.

Validates signed tokens against the configured signing keys without any
network call. Validation steps, in order:

1. Test bypass: with no signing keys and allow_unverified_tokens enabled,
   claims are read without verification and the token is accepted
2. Signature: key selected by "kid" header, algorithm fixed by config
3. Issuer: iss must equal "<pool identifier>-<configured issuer>"
4. Expiry: exp (if present) must lie in the future, within leeway

The validator returns a ValidationOutcome instead of raising, so callers
match on the status. PyJWT exceptions never escape this module.
"""

from __future__ import annotations

__all__ = [
    "DecodedToken",
    "TokenValidator",
    "ValidationOutcome",
    "ValidationStatus",
]

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

import jwt

from cognito_auth.constants import DEFAULT_SIGNING_ALGORITHM, ISSUER_SEPARATOR
from cognito_auth.exceptions import ConfigurationError
from cognito_auth.telemetry.system_logger import get_system_logger

if TYPE_CHECKING:
    from cognito_auth.config import SigningKeyConfig
    from cognito_auth.pools import PoolRegistry
    from cognito_auth.tokens.keys import SigningKeys


class ValidationStatus(str, Enum):
    """Result of validating one bearer token."""

    ACCEPTED = "accepted"
    EXPIRED = "expired"
    INVALID_ISSUER = "invalid_issuer"
    BAD_SIGNATURE = "bad_signature"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class DecodedToken:
    """Claims extracted from a bearer token.

    Attributes:
        raw: The token as presented (for downstream provider calls).
        subject: The 'sub' claim, if present.
        issuer: The 'iss' claim, if present.
        pool_identifier: Pool the token belongs to (declared or parsed from iss).
        expires_at: The 'exp' claim as epoch seconds, if present.
        claims: All token claims.
    """

    raw: str = field(repr=False)
    subject: str | None
    issuer: str | None
    pool_identifier: str | None
    expires_at: int | None
    claims: dict[str, Any] = field(default_factory=dict, repr=False)

    def attribute(self, name: str) -> str | None:
        """Return a claim as a string, or None if the token lacks it."""
        value = self.claims.get(name)
        if value is None:
            return None
        return str(value)


@dataclass(frozen=True)
class ValidationOutcome:
    """Tagged result of TokenValidator.validate().

    Attributes:
        status: What the validation concluded.
        token: Decoded claims for ACCEPTED and EXPIRED outcomes.
        detail: Short reason for failures (safe to log).
    """

    status: ValidationStatus
    token: DecodedToken | None = None
    detail: str | None = None

    @property
    def accepted(self) -> bool:
        """True if the token passed validation."""
        return self.status is ValidationStatus.ACCEPTED


class TokenValidator:
    """Validates bearer tokens against signing keys, issuer and expiry.

    Holds only immutable configuration; every validate() call is independent
    and safe to run concurrently.

    Usage:
        validator = TokenValidator(config.jwk, load_signing_keys(config.jwk), registry)
        outcome = validator.validate(token, declared_pool="main")
        if outcome.accepted:
            print(outcome.token.subject)
    """

    def __init__(
        self,
        config: "SigningKeyConfig | None",
        keys: "SigningKeys | None",
        registry: "PoolRegistry | None" = None,
        *,
        allow_unverified: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the validator.

        Args:
            config: Signing-key configuration (issuer, algorithm, leeway).
            keys: Loaded signing keys, or None for the test bypass.
            registry: Pool registry; when given, the token's pool must be registered.
            allow_unverified: Explicit opt-in for the test bypass.
            clock: Returns current epoch seconds (for testing).

        Raises:
            ConfigurationError: If keys are missing without the bypass opt-in,
                or keys are given without an issuer configuration.
        """
        if keys is None and not allow_unverified:
            raise ConfigurationError(
                "No signing keys configured for token validation. "
                "Configure jwk.jwks, jwk.jwks_path or jwk.jwks_url "
                "(allow_unverified_tokens is for tests only)."
            )
        if keys is not None and config is None:
            raise ConfigurationError("Signing keys require a jwk configuration with an issuer")

        self._keys = keys
        self._registry = registry
        self._issuer = config.issuer if config is not None else None
        self._algorithm = config.algorithm if config is not None else DEFAULT_SIGNING_ALGORITHM
        self._leeway = config.leeway_seconds if config is not None else 0
        self._clock = clock
        self._logger = get_system_logger()

        if self.bypass_enabled:
            self._logger.warning(
                {
                    "event": "token_verification_disabled",
                    "message": "Bearer token verification is DISABLED (test bypass). Never use in production.",
                }
            )

    @property
    def bypass_enabled(self) -> bool:
        """Whether tokens are accepted without verification."""
        return self._keys is None

    def validate(self, raw_token: str | None, declared_pool: str | None = None) -> ValidationOutcome:
        """Validate a bearer token.

        Args:
            raw_token: Token string from the Authorization header.
            declared_pool: Pool identifier named by the request's side header, if any.

        Returns:
            ValidationOutcome; ACCEPTED and EXPIRED carry the decoded token.
        """
        if not raw_token:
            return self._reject(ValidationStatus.MALFORMED, "empty token")

        if self._keys is None:
            return self._validate_unverified(raw_token, declared_pool)

        # Signature
        try:
            signing_key = self._keys.select(raw_token)
            claims: dict[str, Any] = jwt.decode(
                raw_token,
                signing_key.key,
                algorithms=[self._algorithm],
                leeway=self._leeway,
                options={
                    "require": ["iss"],
                    "verify_exp": False,  # checked after the issuer
                    "verify_aud": False,
                },
            )
        except (jwt.InvalidSignatureError, jwt.InvalidKeyError, jwt.InvalidAlgorithmError) as e:
            return self._reject(ValidationStatus.BAD_SIGNATURE, type(e).__name__)
        except jwt.PyJWTError as e:
            return self._reject(ValidationStatus.MALFORMED, type(e).__name__)

        # Issuer and pool binding
        issuer = str(claims.get("iss"))
        pool_identifier = self._pool_from_issuer(issuer, declared_pool)
        if pool_identifier is None:
            return self._reject(ValidationStatus.INVALID_ISSUER, "issuer does not match pool")

        # Expiry
        try:
            expires_at = self._expiry(claims)
        except (TypeError, ValueError):
            return self._reject(ValidationStatus.MALFORMED, "exp is not a timestamp")

        token = self._decoded(raw_token, claims, pool_identifier, expires_at)
        if expires_at is not None and expires_at <= self._clock() - self._leeway:
            return ValidationOutcome(ValidationStatus.EXPIRED, token=token, detail="token expired")

        return ValidationOutcome(ValidationStatus.ACCEPTED, token=token)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _validate_unverified(self, raw_token: str, declared_pool: str | None) -> ValidationOutcome:
        """Test bypass: read claims without verifying anything."""
        try:
            claims: dict[str, Any] = jwt.decode(raw_token, options={"verify_signature": False})
        except jwt.PyJWTError as e:
            return self._reject(ValidationStatus.MALFORMED, type(e).__name__)

        issuer = claims.get("iss")
        pool_identifier = declared_pool
        if not pool_identifier and issuer is not None:
            pool_identifier = self._pool_from_issuer(str(issuer), None)
        if not pool_identifier and self._registry is not None and len(self._registry):
            pool_identifier = self._registry.default().identifier

        try:
            expires_at = self._expiry(claims)
        except (TypeError, ValueError):
            expires_at = None

        return ValidationOutcome(
            ValidationStatus.ACCEPTED,
            token=self._decoded(raw_token, claims, pool_identifier, expires_at),
        )

    def _pool_from_issuer(self, issuer: str, declared_pool: str | None) -> str | None:
        """Return the pool the issuer binds the token to, or None on mismatch.

        With a declared pool the issuer must be exactly "<declared>-<issuer>".
        Otherwise the pool is the prefix before "-<issuer>".
        """
        if self._issuer is None:
            return None
        suffix = f"{ISSUER_SEPARATOR}{self._issuer}"

        if declared_pool:
            if issuer != f"{declared_pool}{suffix}":
                return None
            pool_identifier = declared_pool
        else:
            if not issuer.endswith(suffix):
                return None
            pool_identifier = issuer[: -len(suffix)]
            if not pool_identifier:
                return None

        if self._registry is not None and pool_identifier not in self._registry:
            return None
        return pool_identifier

    @staticmethod
    def _expiry(claims: dict[str, Any]) -> int | None:
        exp = claims.get("exp")
        if exp is None:
            return None
        if isinstance(exp, bool):
            raise TypeError("exp must be numeric")
        if isinstance(exp, float) and not math.isfinite(exp):
            raise ValueError("exp must be finite")
        return int(exp)

    @staticmethod
    def _decoded(
        raw_token: str,
        claims: dict[str, Any],
        pool_identifier: str | None,
        expires_at: int | None,
    ) -> DecodedToken:
        sub = claims.get("sub")
        iss = claims.get("iss")
        return DecodedToken(
            raw=raw_token,
            subject=str(sub) if sub is not None else None,
            issuer=str(iss) if iss is not None else None,
            pool_identifier=pool_identifier,
            expires_at=expires_at,
            claims=claims,
        )

    def _reject(self, status: ValidationStatus, detail: str) -> ValidationOutcome:
        self._logger.debug(
            {
                "event": "token_validation_failed",
                "message": f"Bearer token rejected: {status.value} ({detail})",
                "status": status.value,
                "detail": detail,
            }
        )
        return ValidationOutcome(status, detail=detail)
