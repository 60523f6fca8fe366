"""Test helpers for applications embedding cognito-auth.

Provides a locally generated RSA signing key that mints tokens the
TokenValidator accepts, so request-level tests can exercise the token flow
without a real user pool.

Usage:
    signing_key = LocalSigningKey()
    config = AuthConfig(user_pools=[...], jwk=signing_key.signing_key_config())
    headers = signing_key.auth_headers({}, subject="user-1", pool_identifier="main")
"""

from __future__ import annotations

__all__ = [
    "LOCAL_ISSUER",
    "LocalSigningKey",
]

import json
import secrets
import time
from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from cognito_auth.config import SigningKeyConfig
from cognito_auth.constants import (
    AUTHORIZATION_HEADER,
    DEFAULT_BEARER_SCHEME,
    DEFAULT_SIGNING_ALGORITHM,
    ISSUER_SEPARATOR,
)

LOCAL_ISSUER = "local_issuer"


class LocalSigningKey:
    """RSA key pair for minting bearer tokens in tests.

    Attributes:
        kid: Key id placed in the JWK and in every token header.
        issuer: Issuer suffix; tokens carry iss == "<pool>-<issuer>".
    """

    def __init__(self, kid: str | None = None, issuer: str = LOCAL_ISSUER, key_size: int = 2048) -> None:
        self.kid = kid or secrets.token_hex(8)
        self.issuer = issuer
        self._private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)

    @property
    def private_key(self) -> rsa.RSAPrivateKey:
        return self._private_key

    @property
    def jwk(self) -> dict[str, Any]:
        """Public key as a JWK dict."""
        data: dict[str, Any] = json.loads(RSAAlgorithm.to_jwk(self._private_key.public_key()))
        data.update({"kid": self.kid, "alg": DEFAULT_SIGNING_ALGORITHM, "use": "sig"})
        return data

    @property
    def jwks(self) -> dict[str, Any]:
        """Public key as a JWKS document."""
        return {"keys": [self.jwk]}

    def signing_key_config(self, leeway_seconds: int = 0) -> SigningKeyConfig:
        """SigningKeyConfig that trusts this key."""
        return SigningKeyConfig(issuer=self.issuer, jwks=self.jwks, leeway_seconds=leeway_seconds)

    def issuer_for(self, pool_identifier: str) -> str:
        return f"{pool_identifier}{ISSUER_SEPARATOR}{self.issuer}"

    def issue_token(
        self,
        subject: str,
        pool_identifier: str,
        *,
        claims: dict[str, Any] | None = None,
        expires_in: int | None = None,
        issuer: str | None = None,
        now: float | None = None,
    ) -> str:
        """Mint a signed token.

        Args:
            subject: The 'sub' claim.
            pool_identifier: Pool the token is issued for.
            claims: Extra claims (e.g. the identifying attribute).
            expires_in: Lifetime in seconds; no 'exp' claim when None.
            issuer: Override the 'iss' claim.
            now: Issue time as epoch seconds (default: current time).

        Returns:
            Encoded JWT.
        """
        issued_at = int(now if now is not None else time.time())
        payload: dict[str, Any] = {
            "sub": subject,
            "iss": issuer if issuer is not None else self.issuer_for(pool_identifier),
        }
        if expires_in is not None:
            payload["exp"] = issued_at + expires_in
        payload.update(claims or {})

        return jwt.encode(
            payload,
            self._private_key,
            algorithm=DEFAULT_SIGNING_ALGORITHM,
            headers={"kid": self.kid},
        )

    def auth_headers(
        self,
        headers: dict[str, str],
        subject: str,
        pool_identifier: str,
        **token_options: Any,
    ) -> dict[str, str]:
        """Return a copy of headers with an Authorization bearer token added.

        Args:
            headers: Existing request headers (not modified).
            subject: The 'sub' claim.
            pool_identifier: Pool the token is issued for.
            **token_options: Passed to issue_token().
        """
        token = self.issue_token(subject, pool_identifier, **token_options)
        return {**headers, AUTHORIZATION_HEADER: f"{DEFAULT_BEARER_SCHEME} {token}"}
