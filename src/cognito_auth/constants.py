"""Application-wide constants for cognito-auth.

Constants that define library behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_FILENAME",
    # Password flow
    "DEFAULT_SESSION_KEY",
    "AUTH_PARAM_EMAIL",
    "AUTH_PARAM_PASSWORD",
    "AUTH_PARAM_POOL_IDENTIFIER",
    # Token flow
    "DEFAULT_BEARER_SCHEME",
    "DEFAULT_POOL_IDENTIFIER_HEADER",
    "AUTHORIZATION_HEADER",
    "DEFAULT_IDENTIFYING_ATTRIBUTE",
    "DEFAULT_SIGNING_ALGORITHM",
    "ISSUER_SEPARATOR",
    # Signing keys
    "JWKS_FETCH_TIMEOUT_SECONDS",
    # Cognito
    "COGNITO_SERVICE_NAME",
    "USER_PASSWORD_AUTH_FLOW",
    "REFRESH_TOKEN_AUTH_FLOW",
    "SECRET_HASH_PARAMETER",
    "LIST_USERS_PAGE_LIMIT",
    # Audit logging
    "HASHED_ID_LENGTH",
]

# =============================================================================
# Application identity
# =============================================================================

APP_NAME = "cognito-auth"

# CLI configuration lookup: --config, then $COGNITO_AUTH_CONFIG, then ./cognito_auth.json
CONFIG_ENV_VAR = "COGNITO_AUTH_CONFIG"
DEFAULT_CONFIG_FILENAME = "cognito_auth.json"

# =============================================================================
# Password flow
# =============================================================================

# Top-level params key promoted into the scope key when the scope key is absent
DEFAULT_SESSION_KEY = "session"

AUTH_PARAM_EMAIL = "email"
AUTH_PARAM_PASSWORD = "password"
AUTH_PARAM_POOL_IDENTIFIER = "pool_identifier"

# =============================================================================
# Token flow
# =============================================================================

DEFAULT_BEARER_SCHEME = "Bearer"
AUTHORIZATION_HEADER = "Authorization"
DEFAULT_POOL_IDENTIFIER_HEADER = "X-Authorization-Pool-Identifier"

# Claim used for local lookups in the token flow unless configured otherwise
DEFAULT_IDENTIFYING_ATTRIBUTE = "sub"

DEFAULT_SIGNING_ALGORITHM = "RS256"

# Issuer claims take the form "<pool identifier>-<configured issuer>"
ISSUER_SEPARATOR = "-"

# =============================================================================
# Signing keys
# =============================================================================

# Fail fast at startup if the JWKS endpoint is unreachable
JWKS_FETCH_TIMEOUT_SECONDS = 5

# =============================================================================
# Cognito
# =============================================================================

COGNITO_SERVICE_NAME = "cognito-idp"
USER_PASSWORD_AUTH_FLOW = "USER_PASSWORD_AUTH"
REFRESH_TOKEN_AUTH_FLOW = "REFRESH_TOKEN_AUTH"
SECRET_HASH_PARAMETER = "SECRET_HASH"

# Cognito caps ListUsers at 60 per page
LIST_USERS_PAGE_LIMIT = 50

# =============================================================================
# Audit logging
# =============================================================================

# Hex characters kept from the SHA-256 of subject identifiers in audit logs
HASHED_ID_LENGTH = 12
