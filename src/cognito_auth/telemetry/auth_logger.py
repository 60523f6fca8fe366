"""Authentication audit logger.

Logs authentication outcomes to auth.jsonl:
- Password logins (success and failure)
- Bearer token failures (expired, invalid issuer, unknown user, ...)
- Users provisioned by the not-found callback

Note: Successful bearer token authentications are not logged as they create
noise (per-request validation fires constantly). Only failures are logged
for security auditing.

Subject identifiers and usernames are hashed before logging so that log
lines can be correlated without storing PII.
"""

from __future__ import annotations

__all__ = [
    "AuthEvent",
    "AuthLogger",
    "create_auth_logger",
    "hash_identifier",
]

import hashlib
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict

from cognito_auth.constants import APP_NAME, HASHED_ID_LENGTH
from cognito_auth.telemetry.system_logger import jsonl_file_handler

StrategyName = Literal["password", "token"]


def hash_identifier(value: str | None) -> str | None:
    """Hash a user identifier for logging.

    Args:
        value: Username, email or subject claim.

    Returns:
        Truncated SHA-256 hex digest, or None if value is None.
    """
    if value is None:
        return None
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:HASHED_ID_LENGTH]


class AuthEvent(BaseModel):
    """One authentication log entry (auth.jsonl).

    Note: 'time' is added by ISO8601Formatter during logging.
    """

    event_type: Literal[
        "login_succeeded",
        "login_failed",
        "token_rejected",
        "user_provisioned",
    ]
    status: Literal["Success", "Failure"]
    strategy: StrategyName
    pool: str | None = None
    subject: str | None = None  # hashed
    reason: str | None = None  # FailureReason value
    error_type: str | None = None  # e.g. "ProviderError"
    message: str | None = None

    model_config = ConfigDict(extra="forbid")


class AuthLogger:
    """Audit logger for authentication outcomes.

    Usage:
        auth_logger = create_auth_logger(Path("/var/log/app/auth.jsonl"))
        auth_logger.log_login_failed(pool="main", subject="a@b.c", reason="invalid")
    """

    def __init__(self, logger: logging.Logger) -> None:
        """Initialize auth logger.

        Args:
            logger: Configured JSONL logger.
        """
        self._logger = logger

    def _log_event(self, event: AuthEvent) -> None:
        self._logger.info(event.model_dump(mode="json", exclude_none=True))

    def log_login_succeeded(self, *, pool: str | None, subject: str | None) -> None:
        """Log a successful password login."""
        self._log_event(
            AuthEvent(
                event_type="login_succeeded",
                status="Success",
                strategy="password",
                pool=pool,
                subject=hash_identifier(subject),
            )
        )

    def log_login_failed(
        self,
        *,
        pool: str | None,
        subject: str | None,
        reason: str,
        error_type: str | None = None,
        message: str | None = None,
    ) -> None:
        """Log a failed password login.

        Args:
            pool: Pool identifier the attempt was routed to (if resolved).
            subject: Email/username from the request (hashed before logging).
            reason: FailureReason value.
            error_type: Exception class name, if an error caused the failure.
            message: Optional human-readable message.
        """
        self._log_event(
            AuthEvent(
                event_type="login_failed",
                status="Failure",
                strategy="password",
                pool=pool,
                subject=hash_identifier(subject),
                reason=reason,
                error_type=error_type,
                message=message,
            )
        )

    def log_token_rejected(
        self,
        *,
        pool: str | None,
        subject: str | None,
        reason: str,
        error_type: str | None = None,
        message: str | None = None,
    ) -> None:
        """Log a rejected bearer token."""
        self._log_event(
            AuthEvent(
                event_type="token_rejected",
                status="Failure",
                strategy="token",
                pool=pool,
                subject=hash_identifier(subject),
                reason=reason,
                error_type=error_type,
                message=message,
            )
        )

    def log_user_provisioned(self, *, strategy: StrategyName, pool: str | None, subject: str | None) -> None:
        """Log a user supplied by the not-found callback."""
        self._log_event(
            AuthEvent(
                event_type="user_provisioned",
                status="Success",
                strategy=strategy,
                pool=pool,
                subject=hash_identifier(subject),
            )
        )


def create_auth_logger(log_path: Path) -> AuthLogger:
    """Create an auth logger writing to the given JSONL file.

    Args:
        log_path: Path to auth.jsonl.

    Returns:
        AuthLogger: Configured logger for authentication events.
    """
    logger = logging.getLogger(f"{APP_NAME}.audit.auth")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    for stale in list(logger.handlers):
        stale.close()
        logger.removeHandler(stale)
    logger.addHandler(jsonl_file_handler(log_path, logging.INFO))
    return AuthLogger(logger)
