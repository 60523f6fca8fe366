"""Signing-key loading for bearer token validation.

Keys are loaded once at startup from one of three sources:
- inline JWKS in the configuration
- a JWKS file on disk
- a JWKS URL (e.g. a Cognito pool's /.well-known/jwks.json), fetched with httpx

The resulting SigningKeys object is immutable and shared by all requests,
so validation itself never touches the network.
"""

from __future__ import annotations

__all__ = [
    "SigningKeys",
    "load_signing_keys",
]

from pathlib import Path
from typing import Any

import httpx
import jwt
from jwt import PyJWK, PyJWKSet
from jwt.exceptions import PyJWKError, PyJWKSetError

from cognito_auth.config import SigningKeyConfig
from cognito_auth.constants import JWKS_FETCH_TIMEOUT_SECONDS
from cognito_auth.exceptions import ConfigurationError, SigningKeyError
from cognito_auth.telemetry.system_logger import get_system_logger
from cognito_auth.utils.file_helpers import load_json


class SigningKeys:
    """Immutable set of verification keys with key-id selection.

    A token's "kid" header selects the key. A token without "kid" is only
    accepted when exactly one key is configured.
    """

    def __init__(self, keys: list[PyJWK]) -> None:
        """Initialize with parsed keys.

        Args:
            keys: Verification keys (at least one).

        Raises:
            SigningKeyError: If no keys are given.
        """
        if not keys:
            raise SigningKeyError("Signing key set contains no usable keys")
        self._keys = tuple(keys)
        self._by_kid = {k.key_id: k for k in keys if k.key_id}

    @classmethod
    def from_jwks(cls, data: dict[str, Any]) -> "SigningKeys":
        """Build from a JWKS document or a single JWK.

        Raises:
            SigningKeyError: If the document holds no usable key.
        """
        document = data if "keys" in data else {"keys": [data]}
        try:
            key_set = PyJWKSet.from_dict(document)
        except (PyJWKSetError, PyJWKError) as e:
            raise SigningKeyError(f"Invalid JWKS: {e}") from e
        return cls(list(key_set.keys))

    @property
    def key_ids(self) -> tuple[str, ...]:
        """Key ids of the configured keys (keys without kid are omitted)."""
        return tuple(self._by_kid)

    def __len__(self) -> int:
        return len(self._keys)

    def select(self, token: str) -> PyJWK:
        """Select the verification key for a token.

        Args:
            token: Raw JWT.

        Returns:
            The matching key.

        Raises:
            jwt.DecodeError: If the header is unreadable.
            jwt.InvalidKeyError: If no key matches the header's kid.
        """
        header = jwt.get_unverified_header(token)
        kid = header.get("kid")

        if kid is None:
            if len(self._keys) == 1:
                return self._keys[0]
            raise jwt.InvalidKeyError("Token has no kid and several signing keys are configured")

        key = self._by_kid.get(kid)
        if key is None:
            # A single key without kid matches any token
            if len(self._keys) == 1 and not self._keys[0].key_id:
                return self._keys[0]
            raise jwt.InvalidKeyError(f"No signing key with kid {kid!r}")
        return key


def _fetch_jwks(url: str, http_client: httpx.Client | None = None) -> dict[str, Any]:
    """Fetch a JWKS document over HTTP.

    Raises:
        SigningKeyError: If the endpoint is unreachable or returns an error.
    """
    client = http_client or httpx.Client(timeout=JWKS_FETCH_TIMEOUT_SECONDS)
    owns_client = http_client is None

    try:
        response = client.get(url, follow_redirects=True)
        response.raise_for_status()
        data: dict[str, Any] = response.json()
        return data
    except httpx.TimeoutException as e:
        raise SigningKeyError(
            f"Connection to JWKS endpoint timed out after {JWKS_FETCH_TIMEOUT_SECONDS}s.\nEndpoint: {url}"
        ) from e
    except httpx.HTTPStatusError as e:
        raise SigningKeyError(
            f"JWKS endpoint returned error: HTTP {e.response.status_code}\nEndpoint: {url}"
        ) from e
    except httpx.RequestError as e:
        raise SigningKeyError(f"Cannot reach JWKS endpoint: {type(e).__name__}\nEndpoint: {url}") from e
    except ValueError as e:
        raise SigningKeyError(f"JWKS endpoint did not return JSON\nEndpoint: {url}") from e
    finally:
        if owns_client:
            client.close()


def load_signing_keys(
    config: SigningKeyConfig,
    http_client: httpx.Client | None = None,
) -> SigningKeys | None:
    """Load signing keys from the configured source.

    Args:
        config: Signing-key configuration.
        http_client: Optional httpx client (for testing).

    Returns:
        SigningKeys, or None when no key source is configured.

    Raises:
        SigningKeyError: If the source cannot be read or holds no usable key.
    """
    logger = get_system_logger()

    if config.jwks is not None:
        data = config.jwks
        source = "inline"
    elif config.jwks_path is not None:
        path = Path(config.jwks_path).expanduser()
        try:
            data = load_json(path, file_type="JWKS")
        except ConfigurationError as e:
            raise SigningKeyError(str(e)) from e
        source = str(path)
    elif config.jwks_url is not None:
        data = _fetch_jwks(config.jwks_url, http_client)
        source = config.jwks_url
    else:
        return None

    if not isinstance(data, dict):
        raise SigningKeyError(f"JWKS from {source} must be a JSON object")

    keys = SigningKeys.from_jwks(data)
    logger.info(
        {
            "event": "signing_keys_loaded",
            "message": f"Loaded {len(keys)} signing key(s) from {source}",
            "source": source,
            "key_ids": list(keys.key_ids),
        }
    )
    return keys
