"""Logging for cognito-auth.

- System logger: operational events (stderr, optional system.jsonl)
- Auth logger: authentication outcomes (auth.jsonl)
"""

from cognito_auth.telemetry.auth_logger import AuthEvent, AuthLogger, create_auth_logger, hash_identifier
from cognito_auth.telemetry.system_logger import configure_system_logger, get_system_logger

__all__ = [
    "AuthEvent",
    "AuthLogger",
    "configure_system_logger",
    "create_auth_logger",
    "get_system_logger",
    "hash_identifier",
]
