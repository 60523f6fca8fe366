"""Unit tests for the boto3 Cognito gateway.

The boto3 client is replaced by a MagicMock; botocore errors are built
with real ClientError instances.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from cognito_auth.config import PoolConfig
from cognito_auth.exceptions import ProviderError, ProviderErrorKind
from cognito_auth.gateway import CognitoGateway, IdentityProviderGateway, create_cognito_gateway
from cognito_auth.secret_hash import derive_secret_hash


def client_error(code: str, operation: str = "InitiateAuth", message: str = "boom") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def client() -> MagicMock:
    """boto3 cognito-idp client double with a successful InitiateAuth."""
    mock = MagicMock()
    mock.initiate_auth.return_value = {
        "AuthenticationResult": {
            "AccessToken": "access",
            "RefreshToken": "refresh",
            "IdToken": "id",
            "ExpiresIn": 3600,
            "TokenType": "Bearer",
        }
    }
    return mock


@pytest.fixture
def gateway(pool_a: PoolConfig, client: MagicMock) -> CognitoGateway:
    return CognitoGateway(pool_a, client=client)


# ============================================================================
# Tests: Client construction
# ============================================================================


class TestClientConstruction:
    """Tests for lazy boto3 client creation."""

    def test_implements_protocol(self, gateway: CognitoGateway) -> None:
        """Given a CognitoGateway, it satisfies IdentityProviderGateway."""
        # Assert
        assert isinstance(gateway, IdentityProviderGateway)

    def test_client_uses_pool_region(self, pool_a: PoolConfig) -> None:
        """Given a pool without static credentials, only the region is passed."""
        # Arrange
        gateway = create_cognito_gateway(pool_a)

        # Act
        with patch("cognito_auth.gateway.cognito.boto3.client") as mock_client:
            gateway.client

        # Assert
        mock_client.assert_called_once_with("cognito-idp", region_name="eu-west-1")

    def test_client_uses_static_credentials(self) -> None:
        """Given static credentials, they are passed to boto3."""
        # Arrange
        pool = PoolConfig(
            identifier="main",
            region="eu-west-1",
            client_id="c",
            access_key_id="AKIA",
            secret_access_key="shh",
        )
        gateway = CognitoGateway(pool)

        # Act
        with patch("cognito_auth.gateway.cognito.boto3.client") as mock_client:
            gateway.client
            gateway.client

        # Assert
        mock_client.assert_called_once_with(
            "cognito-idp",
            region_name="eu-west-1",
            aws_access_key_id="AKIA",
            aws_secret_access_key="shh",
        )


# ============================================================================
# Tests: initiate_auth
# ============================================================================


class TestInitiateAuth:
    """Tests for the USER_PASSWORD_AUTH exchange."""

    def test_returns_tokens(self, gateway: CognitoGateway) -> None:
        """Given a successful response, returns an AuthResult."""
        # Act
        result = gateway.initiate_auth("user@example.com", "pw")

        # Assert
        assert result.access_token == "access"
        assert result.refresh_token == "refresh"
        assert result.id_token == "id"
        assert result.expires_in == 3600

    def test_sends_secret_hash_for_confidential_client(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a pool with a secret, SECRET_HASH is sent with the pool's client id."""
        # Act
        gateway.initiate_auth("user@example.com", "pw")

        # Assert
        client.initiate_auth.assert_called_once_with(
            ClientId="client-main",
            AuthFlow="USER_PASSWORD_AUTH",
            AuthParameters={
                "USERNAME": "user@example.com",
                "PASSWORD": "pw",
                "SECRET_HASH": derive_secret_hash("user@example.com", "client-main", "secret-main"),
            },
        )

    def test_omits_secret_hash_for_public_client(self, pool_b: PoolConfig, client: MagicMock) -> None:
        """Given a pool without a secret, no SECRET_HASH is sent."""
        # Arrange
        gateway = CognitoGateway(pool_b, client=client)

        # Act
        gateway.initiate_auth("user@example.com", "pw")

        # Assert
        params = client.initiate_auth.call_args.kwargs["AuthParameters"]
        assert "SECRET_HASH" not in params
        assert client.initiate_auth.call_args.kwargs["ClientId"] == "client-partners"

    @pytest.mark.parametrize(
        ("code", "kind"),
        [
            ("NotAuthorizedException", ProviderErrorKind.NOT_AUTHORIZED),
            ("UserNotConfirmedException", ProviderErrorKind.USER_NOT_CONFIRMED),
            ("TooManyRequestsException", ProviderErrorKind.OTHER),
            ("UserNotFoundException", ProviderErrorKind.OTHER),
        ],
    )
    def test_maps_client_errors_to_kinds(
        self,
        gateway: CognitoGateway,
        client: MagicMock,
        code: str,
        kind: ProviderErrorKind,
    ) -> None:
        """Given a provider error code, raises ProviderError with the mapped kind."""
        # Arrange
        client.initiate_auth.side_effect = client_error(code)

        # Act & Assert
        with pytest.raises(ProviderError) as exc_info:
            gateway.initiate_auth("user@example.com", "pw")
        assert exc_info.value.kind is kind
        assert exc_info.value.code == code
        assert exc_info.value.operation == "initiate_auth"

    def test_maps_network_errors_to_other(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a botocore connection failure, raises ProviderError(OTHER)."""
        # Arrange
        client.initiate_auth.side_effect = EndpointConnectionError(endpoint_url="https://cognito-idp")

        # Act & Assert
        with pytest.raises(ProviderError) as exc_info:
            gateway.initiate_auth("user@example.com", "pw")
        assert exc_info.value.kind is ProviderErrorKind.OTHER

    def test_challenge_response_is_other(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a challenge instead of tokens, raises ProviderError(OTHER)."""
        # Arrange
        client.initiate_auth.return_value = {"ChallengeName": "NEW_PASSWORD_REQUIRED", "Session": "s"}

        # Act & Assert
        with pytest.raises(ProviderError, match="NEW_PASSWORD_REQUIRED") as exc_info:
            gateway.initiate_auth("user@example.com", "pw")
        assert exc_info.value.kind is ProviderErrorKind.OTHER


# ============================================================================
# Tests: Token lifecycle and user lookup
# ============================================================================


class TestTokenLifecycle:
    """Tests for refresh, revoke, sign-out and fetch_user."""

    def test_refresh_token_uses_refresh_flow(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a refresh token, REFRESH_TOKEN_AUTH is used with the secret hash."""
        # Act
        result = gateway.refresh_token("user-uuid", "refresh")

        # Assert
        kwargs = client.initiate_auth.call_args.kwargs
        assert kwargs["AuthFlow"] == "REFRESH_TOKEN_AUTH"
        assert kwargs["AuthParameters"]["REFRESH_TOKEN"] == "refresh"
        assert kwargs["AuthParameters"]["SECRET_HASH"] == derive_secret_hash("user-uuid", "client-main", "secret-main")
        assert result.access_token == "access"

    def test_fetch_user_flattens_attributes(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a GetUser response, attributes become a name/value dict."""
        # Arrange
        client.get_user.return_value = {
            "Username": "user-uuid",
            "UserAttributes": [
                {"Name": "sub", "Value": "user-uuid"},
                {"Name": "email", "Value": "user@example.com"},
            ],
        }

        # Act
        record = gateway.fetch_user("access")

        # Assert
        client.get_user.assert_called_once_with(AccessToken="access")
        assert record.username == "user-uuid"
        assert record.get("email") == "user@example.com"
        assert record.get("missing") is None

    def test_fetch_user_tolerates_attribute_without_value(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given an attribute with no Value, it maps to an empty string."""
        # Arrange
        client.get_user.return_value = {"Username": "u", "UserAttributes": [{"Name": "email"}]}

        # Act
        record = gateway.fetch_user("access")

        # Assert
        assert record.username == "u"
        assert record.attributes == {"email": ""}

    @pytest.mark.parametrize(
        "attributes",
        [[{"Value": "nameless"}], ["not-a-mapping"], "not-a-list-of-dicts"],
    )
    def test_fetch_user_malformed_attributes_is_other(
        self,
        gateway: CognitoGateway,
        client: MagicMock,
        attributes: object,
    ) -> None:
        """Given malformed UserAttributes, raises ProviderError OTHER instead of a raw exception."""
        # Arrange
        client.get_user.return_value = {"Username": "u", "UserAttributes": attributes}

        # Act & Assert
        with pytest.raises(ProviderError) as exc_info:
            gateway.fetch_user("access")
        assert exc_info.value.kind is ProviderErrorKind.OTHER

    def test_revoke_token_sends_client_secret(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a confidential client, revoke_token passes the client secret."""
        # Act
        gateway.revoke_token("refresh")

        # Assert
        client.revoke_token.assert_called_once_with(
            Token="refresh", ClientId="client-main", ClientSecret="secret-main"
        )

    def test_sign_out_is_global(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given an access token, sign_out calls GlobalSignOut."""
        # Act
        gateway.sign_out("access")

        # Assert
        client.global_sign_out.assert_called_once_with(AccessToken="access")


# ============================================================================
# Tests: Account management
# ============================================================================


class TestAccountManagement:
    """Tests for user-facing account operations."""

    def test_sign_up_includes_secret_hash(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a confidential client, sign_up carries SecretHash."""
        # Act
        gateway.sign_up("user@example.com", "pw")

        # Assert
        client.sign_up.assert_called_once_with(
            ClientId="client-main",
            Username="user@example.com",
            Password="pw",
            SecretHash=derive_secret_hash("user@example.com", "client-main", "secret-main"),
        )

    def test_forgot_password_without_secret(self, pool_b: PoolConfig, client: MagicMock) -> None:
        """Given a public client, forgot_password omits SecretHash."""
        # Arrange
        gateway = CognitoGateway(pool_b, client=client)

        # Act
        gateway.forgot_password("user@example.com")

        # Assert
        client.forgot_password.assert_called_once_with(ClientId="client-partners", Username="user@example.com")

    def test_confirm_forgot_password(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a code and new password, the flow is confirmed."""
        # Act
        gateway.confirm_forgot_password("user@example.com", "new-pw", "123456")

        # Assert
        kwargs = client.confirm_forgot_password.call_args.kwargs
        assert kwargs["ConfirmationCode"] == "123456"
        assert kwargs["Password"] == "new-pw"
        assert "SecretHash" in kwargs

    def test_update_email(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a new email, the email attribute is updated."""
        # Act
        gateway.update_email("new@example.com", "access")

        # Assert
        client.update_user_attributes.assert_called_once_with(
            AccessToken="access",
            UserAttributes=[{"Name": "email", "Value": "new@example.com"}],
        )

    def test_change_password(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given current and new passwords, ChangePassword is called."""
        # Act
        gateway.change_password("old", "new", "access")

        # Assert
        client.change_password.assert_called_once_with(
            PreviousPassword="old", ProposedPassword="new", AccessToken="access"
        )

    def test_verify_email(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a code, the email attribute is verified."""
        # Act
        gateway.verify_email("123456", "access")

        # Assert
        client.verify_user_attribute.assert_called_once_with(
            AccessToken="access", AttributeName="email", Code="123456"
        )

    def test_send_email_verification_code_passes_metadata(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given client metadata, it is forwarded to the custom message trigger."""
        # Act
        gateway.send_email_verification_code("access", {"url": "https://app.example.com/verify"})

        # Assert
        client.get_user_attribute_verification_code.assert_called_once_with(
            AccessToken="access",
            AttributeName="email",
            ClientMetadata={"url": "https://app.example.com/verify"},
        )


# ============================================================================
# Tests: Admin operations
# ============================================================================


class TestAdminOperations:
    """Tests for admin operations that need a pool id."""

    def test_set_user_password_is_permanent(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a username, sets a permanent password in the pool."""
        # Act
        gateway.set_user_password("user-uuid", "pw")

        # Assert
        client.admin_set_user_password.assert_called_once_with(
            UserPoolId="eu-west-1_Main", Username="user-uuid", Password="pw", Permanent=True
        )

    def test_update_email_verification(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a flag, email_verified is set as a string attribute."""
        # Act
        gateway.update_email_verification("user-uuid", False)

        # Assert
        kwargs = client.admin_update_user_attributes.call_args.kwargs
        assert kwargs["UserAttributes"] == [{"Name": "email_verified", "Value": "false"}]

    def test_admin_operation_without_pool_id_fails(self, client: MagicMock) -> None:
        """Given a pool without pool_id, admin operations raise ProviderError(OTHER)."""
        # Arrange
        pool = PoolConfig(identifier="main", region="eu-west-1", client_id="c")
        gateway = CognitoGateway(pool, client=client)

        # Act & Assert
        with pytest.raises(ProviderError, match="no pool_id") as exc_info:
            gateway.delete_user("user-uuid")
        assert exc_info.value.kind is ProviderErrorKind.OTHER
        client.admin_delete_user.assert_not_called()

    def test_delete_user_by_email_deletes_match(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given a listed user with the email, deletes it and returns True."""
        # Arrange
        client.list_users.return_value = {
            "Users": [{"Username": "user-uuid", "Attributes": [{"Name": "email", "Value": "user@example.com"}]}]
        }

        # Act
        deleted = gateway.delete_user_by_email("user@example.com")

        # Assert
        assert deleted is True
        assert client.list_users.call_args.kwargs["Filter"] == 'email = "user@example.com"'
        client.admin_delete_user.assert_called_once_with(UserPoolId="eu-west-1_Main", Username="user-uuid")

    def test_delete_user_by_email_without_match(self, gateway: CognitoGateway, client: MagicMock) -> None:
        """Given no listed user, returns False and deletes nothing."""
        # Arrange
        client.list_users.return_value = {"Users": []}

        # Act
        deleted = gateway.delete_user_by_email("nobody@example.com")

        # Assert
        assert deleted is False
        client.admin_delete_user.assert_not_called()

    def test_delete_user_by_email_skips_value_less_attributes(
        self,
        gateway: CognitoGateway,
        client: MagicMock,
    ) -> None:
        """Given a listed user whose email has no Value, it is not a match."""
        # Arrange
        client.list_users.return_value = {"Users": [{"Username": "user-uuid", "Attributes": [{"Name": "email"}]}]}

        # Act
        deleted = gateway.delete_user_by_email("user@example.com")

        # Assert
        assert deleted is False
        client.admin_delete_user.assert_not_called()

    def test_delete_user_by_email_malformed_response_is_other(
        self,
        gateway: CognitoGateway,
        client: MagicMock,
    ) -> None:
        """Given a matching user without Username, raises ProviderError OTHER."""
        # Arrange
        client.list_users.return_value = {"Users": [{"Attributes": [{"Name": "email", "Value": "user@example.com"}]}]}

        # Act & Assert
        with pytest.raises(ProviderError) as exc_info:
            gateway.delete_user_by_email("user@example.com")
        assert exc_info.value.kind is ProviderErrorKind.OTHER
