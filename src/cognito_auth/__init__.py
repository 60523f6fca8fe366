"""cognito-auth: password and bearer token authentication against Cognito user pools.

Two strategies bridge identity provider authentication to local users:
- PasswordAuthStrategy: email/password exchange producing provider tokens
- TokenAuthStrategy: signed bearer token validation on every request

Example usage:
    config = load_config(Path("cognito_auth.json"))
    context = build_context(config, user_store=repo, not_found_callback=provision)
    outcome = TokenAuthStrategy(request.headers, context).run()
"""

__version__ = "0.1.0"

from cognito_auth.config import AuthConfig, PoolConfig, SigningKeyConfig, load_config
from cognito_auth.exceptions import (
    CognitoAuthError,
    ConfigurationError,
    ProviderError,
    ProviderErrorKind,
)
from cognito_auth.strategies import (
    AuthOutcome,
    AuthStatus,
    FailureReason,
    PasswordAuthStrategy,
    StrategyContext,
    TokenAuthStrategy,
    build_context,
)
from cognito_auth.users import Credentials, NotFoundCallback, UserStore

__all__ = [
    "AuthConfig",
    "AuthOutcome",
    "AuthStatus",
    "CognitoAuthError",
    "ConfigurationError",
    "Credentials",
    "FailureReason",
    "NotFoundCallback",
    "PasswordAuthStrategy",
    "PoolConfig",
    "ProviderError",
    "ProviderErrorKind",
    "SigningKeyConfig",
    "StrategyContext",
    "TokenAuthStrategy",
    "UserStore",
    "__version__",
    "build_context",
    "load_config",
]
