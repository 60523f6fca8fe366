"""Authentication strategies.

- PasswordAuthStrategy: email/password exchange with the identity provider
- TokenAuthStrategy: bearer token validation on every request
"""

from cognito_auth.strategies.base import (
    AuthOutcome,
    AuthStatus,
    AuthStrategy,
    FailureReason,
    StrategyContext,
    build_context,
)
from cognito_auth.strategies.password import PasswordAuthStrategy
from cognito_auth.strategies.token import TokenAuthStrategy

__all__ = [
    "AuthOutcome",
    "AuthStatus",
    "AuthStrategy",
    "FailureReason",
    "PasswordAuthStrategy",
    "StrategyContext",
    "TokenAuthStrategy",
    "build_context",
]
