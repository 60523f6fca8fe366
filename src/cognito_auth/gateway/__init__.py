"""Identity provider gateway.

- IdentityProviderGateway: Protocol consumed by the strategies
- CognitoGateway: boto3 implementation for AWS Cognito user pools
"""

from cognito_auth.gateway.cognito import CognitoGateway, create_cognito_gateway
from cognito_auth.gateway.protocol import (
    AuthResult,
    GatewayFactory,
    IdentityProviderGateway,
    ProviderUserRecord,
)

__all__ = [
    "AuthResult",
    "CognitoGateway",
    "GatewayFactory",
    "IdentityProviderGateway",
    "ProviderUserRecord",
    "create_cognito_gateway",
]
