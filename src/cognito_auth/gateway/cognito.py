"""AWS Cognito implementation of the identity provider gateway.

Wraps a boto3 "cognito-idp" client scoped to one user pool. Every call goes
through _call(), which maps botocore failures onto ProviderError kinds:

    NotAuthorizedException     -> NotAuthorized
    UserNotConfirmedException  -> UserNotConfirmed
    anything else              -> Other

boto3 and botocore exception types never leave this module.
"""

from __future__ import annotations

__all__ = [
    "CognitoGateway",
    "create_cognito_gateway",
]

from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cognito_auth.constants import (
    COGNITO_SERVICE_NAME,
    LIST_USERS_PAGE_LIMIT,
    REFRESH_TOKEN_AUTH_FLOW,
    USER_PASSWORD_AUTH_FLOW,
)
from cognito_auth.exceptions import ProviderError, ProviderErrorKind
from cognito_auth.gateway.protocol import AuthResult, ProviderUserRecord
from cognito_auth.secret_hash import derive_secret_hash, secret_hash_parameters
from cognito_auth.telemetry.system_logger import get_system_logger

if TYPE_CHECKING:
    from cognito_auth.config import PoolConfig

# Provider error codes with a dedicated kind; all others map to OTHER
_ERROR_KINDS: dict[str, ProviderErrorKind] = {
    "NotAuthorizedException": ProviderErrorKind.NOT_AUTHORIZED,
    "UserNotConfirmedException": ProviderErrorKind.USER_NOT_CONFIRMED,
}



def _attribute_map(attributes: list[dict[str, Any]] | None) -> dict[str, str]:
    """Flatten a list of Cognito AttributeType entries; Value is optional there."""
    return {attr["Name"]: attr.get("Value", "") for attr in attributes or []}

class CognitoGateway:
    """Pool-scoped Cognito client.

    Usage:
        gateway = CognitoGateway(registry.resolve("main"))
        result = gateway.initiate_auth("user@example.com", "secret")
    """

    def __init__(self, pool: "PoolConfig", client: Any | None = None) -> None:
        """Initialize the gateway.

        Args:
            pool: Pool this gateway is scoped to.
            client: Optional pre-built boto3 cognito-idp client (for testing).
        """
        self._pool = pool
        self._client = client
        self._logger = get_system_logger()

    @property
    def pool(self) -> "PoolConfig":
        """Pool this gateway is scoped to."""
        return self._pool

    @property
    def client(self) -> Any:
        """boto3 cognito-idp client, created on first use."""
        if self._client is None:
            kwargs: dict[str, Any] = {"region_name": self._pool.region}
            if self._pool.has_static_credentials:
                kwargs["aws_access_key_id"] = self._pool.access_key_id
                kwargs["aws_secret_access_key"] = self._pool.secret_access_key
            self._client = boto3.client(COGNITO_SERVICE_NAME, **kwargs)
        return self._client

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def initiate_auth(self, username: str, password: str) -> AuthResult:
        """Exchange username and password for tokens (USER_PASSWORD_AUTH).

        Raises:
            ProviderError: NOT_AUTHORIZED for bad credentials, USER_NOT_CONFIRMED
                for unverified accounts, OTHER for anything else including a
                challenge response without tokens.
        """
        parameters = {"USERNAME": str(username), "PASSWORD": str(password)}
        parameters.update(self._secret_hash_parameters(username))

        response = self._call(
            "initiate_auth",
            ClientId=self._pool.client_id,
            AuthFlow=USER_PASSWORD_AUTH_FLOW,
            AuthParameters=parameters,
        )
        return self._parse_auth_result(response, "initiate_auth")

    def refresh_token(self, username: str, refresh_token: str) -> AuthResult:
        """Obtain fresh tokens from a refresh token (REFRESH_TOKEN_AUTH).

        The username is only used to compute the secret hash.
        """
        parameters = {"REFRESH_TOKEN": str(refresh_token)}
        parameters.update(self._secret_hash_parameters(username))

        response = self._call(
            "initiate_auth",
            ClientId=self._pool.client_id,
            AuthFlow=REFRESH_TOKEN_AUTH_FLOW,
            AuthParameters=parameters,
        )
        return self._parse_auth_result(response, "refresh_token")

    def fetch_user(self, access_token: str) -> ProviderUserRecord:
        """Fetch the user owning an access token (GetUser)."""
        response = self._call("get_user", AccessToken=str(access_token))
        try:
            attributes = _attribute_map(response.get("UserAttributes"))
        except (AttributeError, KeyError, TypeError) as e:
            raise ProviderError(
                ProviderErrorKind.OTHER,
                "Unexpected GetUser response: malformed UserAttributes",
                operation="fetch_user",
            ) from e
        return ProviderUserRecord(
            username=str(response.get("Username") or ""),
            attributes=attributes,
            user_status=response.get("UserStatus"),
            raw=dict(response),
        )

    def revoke_token(self, refresh_token: str) -> None:
        """Revoke a refresh token."""
        kwargs: dict[str, Any] = {"Token": str(refresh_token), "ClientId": self._pool.client_id}
        if self._pool.secret:
            kwargs["ClientSecret"] = self._pool.secret
        self._call("revoke_token", **kwargs)

    def sign_out(self, access_token: str) -> None:
        """Sign the user out of every device (GlobalSignOut)."""
        self._call("global_sign_out", AccessToken=str(access_token))

    # -------------------------------------------------------------------------
    # Account management
    # -------------------------------------------------------------------------

    def sign_up(self, username: str, password: str) -> None:
        """Register a new user."""
        kwargs: dict[str, Any] = {
            "ClientId": self._pool.client_id,
            "Username": str(username),
            "Password": str(password),
        }
        secret_hash = self._secret_hash(username)
        if secret_hash:
            kwargs["SecretHash"] = secret_hash
        self._call("sign_up", **kwargs)

    def update_email(self, email: str, access_token: str) -> None:
        """Change the user's email attribute."""
        self._call(
            "update_user_attributes",
            AccessToken=str(access_token),
            UserAttributes=[{"Name": "email", "Value": str(email)}],
        )

    def change_password(self, current_password: str, password: str, access_token: str) -> None:
        """Change the user's password."""
        self._call(
            "change_password",
            PreviousPassword=str(current_password),
            ProposedPassword=str(password),
            AccessToken=str(access_token),
        )

    def verify_email(self, code: str, access_token: str) -> None:
        """Confirm the email attribute with a verification code."""
        self._call(
            "verify_user_attribute",
            AccessToken=str(access_token),
            AttributeName="email",
            Code=str(code),
        )

    def send_email_verification_code(
        self, access_token: str, client_metadata: dict[str, str] | None = None
    ) -> None:
        """Send a verification code for the current email.

        Args:
            access_token: User's access token.
            client_metadata: Passed to the pool's custom message trigger
                (e.g. {"url": "https://app.example.com/verify-email"}).
        """
        kwargs: dict[str, Any] = {"AccessToken": str(access_token), "AttributeName": "email"}
        if client_metadata:
            kwargs["ClientMetadata"] = dict(client_metadata)
        self._call("get_user_attribute_verification_code", **kwargs)

    def forgot_password(self, username: str) -> None:
        """Start the forgotten-password flow."""
        kwargs: dict[str, Any] = {"ClientId": self._pool.client_id, "Username": str(username)}
        secret_hash = self._secret_hash(username)
        if secret_hash:
            kwargs["SecretHash"] = secret_hash
        self._call("forgot_password", **kwargs)

    def confirm_forgot_password(self, username: str, password: str, code: str) -> None:
        """Finish the forgotten-password flow with the emailed code."""
        kwargs: dict[str, Any] = {
            "ClientId": self._pool.client_id,
            "Username": str(username),
            "ConfirmationCode": str(code),
            "Password": str(password),
        }
        secret_hash = self._secret_hash(username)
        if secret_hash:
            kwargs["SecretHash"] = secret_hash
        self._call("confirm_forgot_password", **kwargs)

    # -------------------------------------------------------------------------
    # Admin operations (require pool_id)
    # -------------------------------------------------------------------------

    def set_user_password(self, username: str, password: str) -> None:
        """Set a permanent password for a user."""
        self._call(
            "admin_set_user_password",
            UserPoolId=self._require_pool_id("set_user_password"),
            Username=str(username),
            Password=str(password),
            Permanent=True,
        )

    def update_email_verification(self, username: str, email_verified: bool) -> None:
        """Set the email_verified attribute of a user."""
        self._call(
            "admin_update_user_attributes",
            UserPoolId=self._require_pool_id("update_email_verification"),
            Username=str(username),
            UserAttributes=[{"Name": "email_verified", "Value": "true" if email_verified else "false"}],
        )

    def delete_user(self, username: str) -> None:
        """Delete a user by username."""
        self._call(
            "admin_delete_user",
            UserPoolId=self._require_pool_id("delete_user"),
            Username=str(username),
        )

    def delete_user_by_email(self, email: str) -> bool:
        """Delete the user holding an email address.

        Returns:
            True if a user was found and deleted, False if none matched.
        """
        pool_id = self._require_pool_id("delete_user_by_email")
        escaped = str(email).replace("\\", "\\\\").replace('"', '\\"')
        response = self._call(
            "list_users",
            UserPoolId=pool_id,
            AttributesToGet=["email"],
            Filter=f'email = "{escaped}"',
            Limit=LIST_USERS_PAGE_LIMIT,
        )

        try:
            matches = [
                user["Username"]
                for user in response.get("Users") or []
                if _attribute_map(user.get("Attributes")).get("email") == email
            ]
        except (AttributeError, KeyError, TypeError) as e:
            raise ProviderError(
                ProviderErrorKind.OTHER,
                "Unexpected ListUsers response: malformed Users",
                operation="delete_user_by_email",
            ) from e

        if not matches:
            return False
        self._call("admin_delete_user", UserPoolId=pool_id, Username=matches[0])
        return True

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _secret_hash(self, username: str) -> str:
        return derive_secret_hash(str(username), self._pool.client_id, self._pool.secret)

    def _secret_hash_parameters(self, username: str) -> dict[str, str]:
        return secret_hash_parameters(str(username), self._pool.client_id, self._pool.secret)

    def _require_pool_id(self, operation: str) -> str:
        if not self._pool.pool_id:
            raise ProviderError(
                ProviderErrorKind.OTHER,
                f"Pool {self._pool.identifier!r} has no pool_id configured",
                operation=operation,
            )
        return self._pool.pool_id

    def _parse_auth_result(self, response: dict[str, Any], operation: str) -> AuthResult:
        """Extract tokens from an InitiateAuth response.

        Raises:
            ProviderError: OTHER if the provider answered with a challenge
                (e.g. NEW_PASSWORD_REQUIRED) instead of tokens.
        """
        result = response.get("AuthenticationResult")
        if not result or "AccessToken" not in result:
            challenge = response.get("ChallengeName", "unknown")
            raise ProviderError(
                ProviderErrorKind.OTHER,
                f"Unexpected authentication response (challenge: {challenge})",
                operation=operation,
            )

        return AuthResult(
            access_token=result["AccessToken"],
            expires_in=int(result.get("ExpiresIn", 0)),
            refresh_token=result.get("RefreshToken"),
            id_token=result.get("IdToken"),
            token_type=result.get("TokenType"),
        )

    def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        """Invoke a boto3 operation and map failures onto ProviderError.

        Args:
            operation: boto3 client method name (e.g. "initiate_auth").
            **kwargs: Request parameters.

        Returns:
            Raw response dict.

        Raises:
            ProviderError: For every provider, network or SDK failure.
        """
        try:
            response: dict[str, Any] = getattr(self.client, operation)(**kwargs)
            return response
        except ClientError as e:
            error = e.response.get("Error", {})
            code = error.get("Code", "Unknown")
            kind = _ERROR_KINDS.get(code, ProviderErrorKind.OTHER)
            log = self._logger.warning if kind is ProviderErrorKind.OTHER else self._logger.info
            log(
                {
                    "event": "provider_call_failed",
                    "message": f"Cognito {operation} failed: {code}",
                    "operation": operation,
                    "pool": self._pool.identifier,
                    "error_code": code,
                    "kind": kind.value,
                }
            )
            raise ProviderError(
                kind,
                error.get("Message", code),
                code=code,
                operation=operation,
            ) from e
        except BotoCoreError as e:
            self._logger.warning(
                {
                    "event": "provider_unreachable",
                    "message": f"Cognito {operation} failed: {type(e).__name__}",
                    "operation": operation,
                    "pool": self._pool.identifier,
                    "error_type": type(e).__name__,
                }
            )
            raise ProviderError(
                ProviderErrorKind.OTHER,
                f"Identity provider unavailable: {type(e).__name__}",
                operation=operation,
            ) from e


def create_cognito_gateway(pool: "PoolConfig") -> CognitoGateway:
    """Default GatewayFactory: a boto3-backed gateway for the pool."""
    return CognitoGateway(pool)
