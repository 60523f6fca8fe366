"""Secret hash derivation for confidential identity provider clients.

App clients configured with a client secret require every username-bound
call (InitiateAuth, SignUp, ForgotPassword, ...) to carry a SECRET_HASH:

    base64(HMAC-SHA256(key=client_secret, msg=username + client_id))

Public clients (no secret) must omit it, so an absent secret yields an
empty proof rather than an error.
"""

from __future__ import annotations

__all__ = [
    "derive_secret_hash",
    "secret_hash_parameters",
]

import base64
import hashlib
import hmac

from cognito_auth.constants import SECRET_HASH_PARAMETER


def derive_secret_hash(username: str, client_id: str, secret: str | None) -> str:
    """Compute the secret hash proof for a username/client pair.

    Args:
        username: Username (or email) the call is made for.
        client_id: App client ID of the pool.
        secret: App client secret; None or empty for public clients.

    Returns:
        Base64-encoded digest (standard alphabet, no line wraps),
        or an empty string when no secret is configured.
    """
    if not secret:
        return ""

    # No separator between username and client_id
    message = f"{username}{client_id}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def secret_hash_parameters(username: str, client_id: str, secret: str | None) -> dict[str, str]:
    """Build the auth-parameter fragment carrying the secret hash.

    Args:
        username: Username (or email) the call is made for.
        client_id: App client ID of the pool.
        secret: App client secret; None or empty for public clients.

    Returns:
        {"SECRET_HASH": proof} when a secret is configured, otherwise {}.
    """
    proof = derive_secret_hash(username, client_id, secret)
    if not proof:
        return {}
    return {SECRET_HASH_PARAMETER: proof}
