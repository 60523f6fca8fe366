"""Configuration models for cognito-auth.

Configuration is loaded once at process start and is immutable afterwards:
every model is frozen, and the strategies only ever read it.

Example usage:
    config = load_config(Path("cognito_auth.json"))
    context = build_context(config, user_store=repo, not_found_callback=provision)
"""

from __future__ import annotations

__all__ = [
    "AuthConfig",
    "LoggingConfig",
    "PoolConfig",
    "SigningKeyConfig",
    "load_config",
]

from pathlib import Path
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cognito_auth.constants import (
    DEFAULT_BEARER_SCHEME,
    DEFAULT_IDENTIFYING_ATTRIBUTE,
    DEFAULT_POOL_IDENTIFIER_HEADER,
    DEFAULT_SESSION_KEY,
    DEFAULT_SIGNING_ALGORITHM,
)
from cognito_auth.utils.file_helpers import load_validated_json

# =============================================================================
# User Pools
# =============================================================================


class PoolConfig(BaseModel):
    """Configuration for one Cognito user pool (a tenant).

    Attributes:
        identifier: Symbolic pool name, unique within the process
            (e.g. "main", "partners"). Requests refer to pools by this name.
        region: AWS region hosting the pool (e.g. "eu-west-1").
        client_id: App client ID used for user-facing calls.
        pool_id: User pool ID (e.g. "eu-west-1_AbCdEf"). Only needed by
            admin operations.
        secret: App client secret. Set only for confidential clients; every
            username-bound call then carries a SECRET_HASH.
        access_key_id: Static AWS credentials (optional, both or neither).
        secret_access_key: Static AWS credentials (optional, both or neither).
    """

    identifier: str = Field(min_length=1)
    region: str = Field(min_length=1)
    client_id: str = Field(min_length=1)
    pool_id: str | None = None
    secret: str | None = Field(default=None, repr=False)
    access_key_id: str | None = None
    secret_access_key: str | None = Field(default=None, repr=False)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def credentials_come_in_pairs(self) -> Self:
        """Static AWS credentials need both the key id and the secret key."""
        if (self.access_key_id is None) != (self.secret_access_key is None):
            raise ValueError("access_key_id and secret_access_key must be set together")
        return self

    @property
    def has_static_credentials(self) -> bool:
        """Whether the pool carries its own AWS credentials."""
        return self.access_key_id is not None and self.secret_access_key is not None


# =============================================================================
# Token validation
# =============================================================================


class SigningKeyConfig(BaseModel):
    """Signing-key material for bearer token validation.

    At most one key source may be set. With no source at all, token
    validation only works in the explicit test bypass mode
    (AuthConfig.allow_unverified_tokens).

    Attributes:
        issuer: Configured issuer suffix. Tokens must carry
            iss == "<pool identifier>-<issuer>".
        algorithm: Signature algorithm, fixed at configuration time.
        jwks: Inline JSON Web Key Set ({"keys": [...]}).
        jwks_path: Path to a JSON Web Key Set file.
        jwks_url: URL of a JSON Web Key Set, fetched once at startup.
        leeway_seconds: Clock skew tolerance for the expiry check.
    """

    issuer: str = Field(min_length=1)
    algorithm: str = DEFAULT_SIGNING_ALGORITHM
    jwks: dict[str, Any] | None = None
    jwks_path: str | None = None
    jwks_url: str | None = Field(default=None, pattern=r"^https?://")
    leeway_seconds: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def at_most_one_key_source(self) -> Self:
        """Only one of jwks, jwks_path and jwks_url may be configured."""
        sources = [s for s in (self.jwks, self.jwks_path, self.jwks_url) if s is not None]
        if len(sources) > 1:
            raise ValueError("Configure only one of jwks, jwks_path or jwks_url")
        return self

    @property
    def has_key_source(self) -> bool:
        """Whether any signing-key source is configured."""
        return any(s is not None for s in (self.jwks, self.jwks_path, self.jwks_url))


# =============================================================================
# Logging
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    When log_dir is set, logs are written below it:
        <log_dir>/
        ├── system.jsonl   # WARNING and above from the system logger
        └── auth.jsonl     # Authentication outcomes (auth audit trail)

    Without log_dir only the stderr console handler is active.

    Attributes:
        log_dir: Base directory for JSONL logs (optional).
        log_level: Console logging level.
    """

    log_dir: str | None = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Root configuration
# =============================================================================


class AuthConfig(BaseModel):
    """Root configuration for both authentication strategies.

    Attributes:
        user_pools: Registered pools. The first one is the default pool.
        jwk: Signing-key configuration for the token flow.
        identifying_attribute: Token claim used to look up local users in the
            token flow (e.g. "sub", "cognito:username", "custom:external_id").
        bearer_scheme: Literal scheme expected in the Authorization header.
        pool_identifier_header: Header naming the target pool in the token flow.
        session_key: Top-level params key promoted into the scope key.
        allow_unverified_tokens: Test bypass. When True and no signing keys are
            configured, tokens are accepted without signature, issuer or expiry
            checks. Never enable this in production.
        logging: Logging configuration.
    """

    user_pools: list[PoolConfig] = Field(default_factory=list)
    jwk: SigningKeyConfig | None = None
    identifying_attribute: str = Field(default=DEFAULT_IDENTIFYING_ATTRIBUTE, min_length=1)
    bearer_scheme: str = Field(default=DEFAULT_BEARER_SCHEME, min_length=1, pattern=r"^\S+$")
    pool_identifier_header: str = Field(default=DEFAULT_POOL_IDENTIFIER_HEADER, min_length=1)
    session_key: str = Field(default=DEFAULT_SESSION_KEY, min_length=1)
    allow_unverified_tokens: bool = False
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def pool_identifiers_are_unique(self) -> Self:
        """Pool identifiers must be unique within the process."""
        seen: set[str] = set()
        for pool in self.user_pools:
            if pool.identifier in seen:
                raise ValueError(f"Duplicate user pool identifier: {pool.identifier!r}")
            seen.add(pool.identifier)
        return self

    @property
    def token_bypass_enabled(self) -> bool:
        """Whether token validation runs in the explicit test bypass mode."""
        has_keys = self.jwk is not None and self.jwk.has_key_source
        return self.allow_unverified_tokens and not has_keys


def load_config(config_path: Path) -> AuthConfig:
    """Load configuration from a JSON file.

    Args:
        config_path: Path to the config JSON file.

    Returns:
        Validated AuthConfig.

    Raises:
        ConfigurationError: If the file is missing, not JSON, or fails validation.
    """
    return load_validated_json(config_path, AuthConfig, file_type="configuration")
