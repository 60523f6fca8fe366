"""Protocol definition for the identity provider gateway.

The gateway is the outbound call surface to the identity provider. Each
gateway instance is scoped to one resolved pool; its client id, region and
secret come from that pool's configuration.

Strategies only depend on this protocol. CognitoGateway implements it over
boto3; tests substitute mocks. Implementations must raise ProviderError
(tagged with a ProviderErrorKind) and never let SDK exception types escape.
"""

from __future__ import annotations

__all__ = [
    "AuthResult",
    "GatewayFactory",
    "IdentityProviderGateway",
    "ProviderUserRecord",
]

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cognito_auth.config import PoolConfig


@dataclass(frozen=True)
class AuthResult:
    """Tokens issued by a successful authentication.

    Attributes:
        access_token: Access token for user-scoped provider calls.
        refresh_token: Refresh token (absent on refresh responses).
        id_token: OIDC ID token.
        expires_in: Access token lifetime in seconds.
        token_type: Token type (normally "Bearer").
    """

    access_token: str
    expires_in: int
    refresh_token: str | None = None
    id_token: str | None = None
    token_type: str | None = None

    def __repr__(self) -> str:
        # Tokens stay out of reprs and logs
        return f"AuthResult(expires_in={self.expires_in}, token_type={self.token_type!r})"


@dataclass(frozen=True)
class ProviderUserRecord:
    """The provider's canonical record for a user.

    Attributes:
        username: Provider username (for Cognito, usually a UUID).
        attributes: User attributes by name (e.g. "email", "sub").
        user_status: Account status if reported (e.g. "CONFIRMED").
        raw: Unmodified provider response.
    """

    username: str
    attributes: dict[str, str] = field(default_factory=dict)
    user_status: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return a user attribute by name."""
        return self.attributes.get(name, default)


@runtime_checkable
class IdentityProviderGateway(Protocol):
    """Protocol for pool-scoped identity provider calls.

    Required by the strategies:
    - initiate_auth(): username/password exchange
    - fetch_user(): canonical user record for an access token

    Available to surrounding flows on the same handle:
    - token lifecycle: refresh_token(), revoke_token(), sign_out()
    - account: sign_up(), update_email(), change_password(),
      verify_email(), send_email_verification_code(),
      forgot_password(), confirm_forgot_password()
    - admin: set_user_password(), update_email_verification(),
      delete_user(), delete_user_by_email()

    Errors:
        ProviderError with kind NOT_AUTHORIZED (bad credentials),
        USER_NOT_CONFIRMED (account exists but unverified) or
        OTHER (network, service or unexpected failure).
    """

    @property
    def pool(self) -> "PoolConfig":
        """Pool this gateway is scoped to."""
        ...

    def initiate_auth(self, username: str, password: str) -> AuthResult:
        """Exchange username and password for tokens."""
        ...

    def fetch_user(self, access_token: str) -> ProviderUserRecord:
        """Fetch the user owning an access token."""
        ...

    def refresh_token(self, username: str, refresh_token: str) -> AuthResult:
        """Obtain fresh tokens from a refresh token."""
        ...

    def revoke_token(self, refresh_token: str) -> None:
        """Revoke a refresh token and the access tokens issued from it."""
        ...

    def sign_out(self, access_token: str) -> None:
        """Invalidate every token issued to the user."""
        ...

    def sign_up(self, username: str, password: str) -> None:
        """Register a new user."""
        ...

    def update_email(self, email: str, access_token: str) -> None:
        """Change the user's email attribute."""
        ...

    def change_password(self, current_password: str, password: str, access_token: str) -> None:
        """Change the user's password."""
        ...

    def verify_email(self, code: str, access_token: str) -> None:
        """Confirm the email attribute with a verification code."""
        ...

    def send_email_verification_code(
        self, access_token: str, client_metadata: dict[str, str] | None = None
    ) -> None:
        """Send a verification code for the current email."""
        ...

    def forgot_password(self, username: str) -> None:
        """Start the forgotten-password flow."""
        ...

    def confirm_forgot_password(self, username: str, password: str, code: str) -> None:
        """Finish the forgotten-password flow with the emailed code."""
        ...

    def set_user_password(self, username: str, password: str) -> None:
        """Set a permanent password (admin)."""
        ...

    def update_email_verification(self, username: str, email_verified: bool) -> None:
        """Set the email_verified attribute (admin)."""
        ...

    def delete_user(self, username: str) -> None:
        """Delete a user by username (admin)."""
        ...

    def delete_user_by_email(self, email: str) -> bool:
        """Delete the user holding an email address (admin)."""
        ...


# Builds the gateway for a resolved pool
GatewayFactory = Callable[["PoolConfig"], IdentityProviderGateway]
