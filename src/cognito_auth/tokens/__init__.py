"""Bearer token validation.

- SigningKeys / load_signing_keys: verification keys, loaded once at startup
- TokenValidator: offline signature, issuer and expiry validation
"""

from cognito_auth.tokens.keys import SigningKeys, load_signing_keys
from cognito_auth.tokens.validator import (
    DecodedToken,
    TokenValidator,
    ValidationOutcome,
    ValidationStatus,
)

__all__ = [
    "DecodedToken",
    "SigningKeys",
    "TokenValidator",
    "ValidationOutcome",
    "ValidationStatus",
    "load_signing_keys",
]
