"""Bearer token strategy.

Authenticates requests carrying "Authorization: Bearer <token>". An optional
side header (X-Authorization-Pool-Identifier by default) names the pool the
token was issued for; without it the pool is parsed from the issuer claim.

Expired tokens stay applicable so they fail with token_expired, which
callers can turn into a refresh prompt. Other invalid tokens make the
strategy decline, leaving the request to the next strategy.
"""

from __future__ import annotations

__all__ = ["TokenAuthStrategy"]

from collections.abc import Mapping

from cognito_auth.constants import AUTHORIZATION_HEADER
from cognito_auth.exceptions import CognitoAuthError
from cognito_auth.strategies.base import AuthOutcome, AuthStrategy, FailureReason, StrategyContext
from cognito_auth.tokens.validator import ValidationOutcome, ValidationStatus


class TokenAuthStrategy(AuthStrategy):
    """Authenticate with a bearer token.

    Usage:
        strategy = TokenAuthStrategy(request.headers, context)
        outcome = strategy.run()
    """

    def __init__(self, headers: Mapping[str, str], context: StrategyContext) -> None:
        """Initialize for one request.

        Args:
            headers: Request headers (names matched case-insensitively).
            context: Shared strategy context.
        """
        super().__init__(context)
        self._headers = {name.lower(): value for name, value in headers.items()}

    @property
    def token(self) -> str | None:
        """Bearer token from the Authorization header, or None."""
        header = self._header(AUTHORIZATION_HEADER)
        if not header:
            return None
        parts = header.split()
        if len(parts) < 2 or parts[0] != self._context.bearer_scheme:
            return None
        return parts[1]

    @property
    def declared_pool(self) -> str | None:
        """Pool identifier from the side header, or None."""
        return self._header(self._context.pool_identifier_header) or None

    def is_applicable(self) -> bool:
        """Whether the request carries a usable (possibly expired) bearer token."""
        validator = self._context.validator
        if validator is None:
            return False
        if validator.bypass_enabled:
            return True

        token = self.token
        if token is None:
            return False

        outcome = self._validate(token)
        return outcome.accepted or outcome.status is ValidationStatus.EXPIRED

    def authenticate(self) -> AuthOutcome:
        """Validate the token and resolve the local user.

        Validation and provider errors map to failure reasons. Errors raised
        by the user store or the not-found callback propagate.
        """
        token = self.token
        if token is None:
            return self._fail(FailureReason.UNKNOWN_ERROR, "missing bearer token")
        if self._context.validator is None:
            return self._fail(FailureReason.UNKNOWN_ERROR, "token authentication is not configured")

        outcome = self._validate(token)
        if outcome.status is ValidationStatus.EXPIRED:
            return self._fail(FailureReason.TOKEN_EXPIRED, outcome.detail, outcome)
        if outcome.status is ValidationStatus.INVALID_ISSUER:
            return self._fail(FailureReason.INVALID, outcome.detail, outcome)
        if not outcome.accepted or outcome.token is None:
            return self._fail(FailureReason.UNKNOWN_ERROR, outcome.detail, outcome)

        decoded = outcome.token
        try:
            pool = self._context.registry.resolve(decoded.pool_identifier)
            gateway = self._context.gateway_factory(pool)
            user = self._context.resolver.resolve_from_token(decoded, gateway)
        except CognitoAuthError as e:
            return self._fail(FailureReason.UNKNOWN_ERROR, str(e), outcome, error_type=type(e).__name__)

        if user is None:
            return self._fail(FailureReason.UNKNOWN_USER, "no local user", outcome)
        return AuthOutcome.success(user)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _header(self, name: str) -> str | None:
        return self._headers.get(name.lower())

    def _validate(self, token: str) -> ValidationOutcome:
        validator = self._context.validator
        if validator is None:
            return ValidationOutcome(ValidationStatus.MALFORMED, detail="token authentication is not configured")
        return validator.validate(token, self.declared_pool)

    def _fail(
        self,
        reason: FailureReason,
        detail: str | None,
        outcome: ValidationOutcome | None = None,
        error_type: str | None = None,
    ) -> AuthOutcome:
        if self._context.auth_logger is not None:
            token = outcome.token if outcome is not None else None
            self._context.auth_logger.log_token_rejected(
                pool=token.pool_identifier if token is not None else self.declared_pool,
                subject=token.subject if token is not None else None,
                reason=reason.value,
                error_type=error_type,
                message=detail,
            )
        return AuthOutcome.failure(reason)
