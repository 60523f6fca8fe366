"""Username/password strategy.

Exchanges an email and password for provider tokens, then resolves the
local user. Expects request params shaped like:

    {"user": {"email": "...", "password": "...", "pool_identifier": "main"}}

where "user" is the scope. An unscoped payload under the session key
({"session": {...}}) is promoted into the scope before the check.
"""

from __future__ import annotations

__all__ = ["PasswordAuthStrategy"]

from collections.abc import Mapping, MutableMapping
from typing import Any

from cognito_auth.constants import AUTH_PARAM_EMAIL, AUTH_PARAM_PASSWORD, AUTH_PARAM_POOL_IDENTIFIER
from cognito_auth.exceptions import CognitoAuthError, ProviderError, ProviderErrorKind
from cognito_auth.strategies.base import AuthOutcome, AuthStrategy, FailureReason, StrategyContext
from cognito_auth.users import Credentials

# Provider error kinds with a dedicated failure reason
_PROVIDER_FAILURES: dict[ProviderErrorKind, FailureReason] = {
    ProviderErrorKind.NOT_AUTHORIZED: FailureReason.INVALID,
    ProviderErrorKind.USER_NOT_CONFIRMED: FailureReason.UNCONFIRMED,
}


class PasswordAuthStrategy(AuthStrategy):
    """Authenticate with email and password against a user pool.

    Usage:
        strategy = PasswordAuthStrategy(request.params, "user", context)
        outcome = strategy.run()
    """

    def __init__(self, params: MutableMapping[str, Any], scope: str, context: StrategyContext) -> None:
        """Initialize for one request.

        Args:
            params: Request parameters; may be mutated once by session promotion.
            scope: Scope name under which the credentials are expected.
            context: Shared strategy context.
        """
        super().__init__(context)
        self._params = params
        self._scope = scope

    def is_applicable(self) -> bool:
        """Whether the scoped payload carries a non-empty email and password."""
        self._promote_session()
        return bool(self.email) and bool(self.password)

    def authenticate(self) -> AuthOutcome:
        """Exchange credentials with the provider and resolve the local user.

        Provider and pool errors map to failure reasons. Errors raised by the
        user store or the not-found callback propagate.
        """
        email = self.email or ""

        try:
            pool = self._context.registry.resolve(self.pool_identifier)
        except CognitoAuthError as e:
            return self._fail(FailureReason.UNKNOWN_RESPONSE, self.pool_identifier, e)

        try:
            gateway = self._context.gateway_factory(pool)
            issued_at = self._context.clock()
            result = gateway.initiate_auth(email, self.password or "")
        except ProviderError as e:
            reason = _PROVIDER_FAILURES.get(e.kind, FailureReason.UNKNOWN_RESPONSE)
            return self._fail(reason, pool.identifier, e)

        credentials = Credentials.from_auth_result(result, issued_at)
        try:
            user = self._context.resolver.resolve_from_password(email, pool.identifier, credentials, gateway)
        except ProviderError as e:
            return self._fail(FailureReason.UNKNOWN_RESPONSE, pool.identifier, e)

        if user is None:
            return self._fail(FailureReason.INVALID, pool.identifier)

        if self._context.auth_logger is not None:
            self._context.auth_logger.log_login_succeeded(pool=pool.identifier, subject=email)
        return AuthOutcome.success(user)

    # -------------------------------------------------------------------------
    # Request params
    # -------------------------------------------------------------------------

    @property
    def email(self) -> str | None:
        return self._auth_param(AUTH_PARAM_EMAIL)

    @property
    def password(self) -> str | None:
        return self._auth_param(AUTH_PARAM_PASSWORD)

    @property
    def pool_identifier(self) -> str | None:
        return self._auth_param(AUTH_PARAM_POOL_IDENTIFIER)

    def _payload(self) -> Mapping[str, Any]:
        payload = self._params.get(self._scope)
        if isinstance(payload, Mapping):
            return payload
        return {}

    def _auth_param(self, name: str) -> str | None:
        value = self._payload().get(name)
        if value is None or value == "":
            return None
        return str(value)

    def _promote_session(self) -> None:
        """Copy the session payload into the scope key when the scope is blank."""
        if self._params.get(self._scope):
            return
        session = self._params.get(self._context.session_key)
        if session:
            self._params[self._scope] = session

    def _fail(
        self,
        reason: FailureReason,
        pool_identifier: str | None,
        error: Exception | None = None,
    ) -> AuthOutcome:
        if self._context.auth_logger is not None:
            self._context.auth_logger.log_login_failed(
                pool=pool_identifier,
                subject=self.email,
                reason=reason.value,
                error_type=type(error).__name__ if error is not None else None,
                message=str(error) if error is not None else None,
            )
        return AuthOutcome.failure(reason)
