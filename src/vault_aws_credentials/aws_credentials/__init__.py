"""AWS credential utilities."""

from vault_aws_credentials.aws_credentials.botocore_provider import (
    VaultBotocoreProvider,
    create_botocore_session,
)
from vault_aws_credentials.aws_credentials.vault_provider import (
    PROVIDER_NAME,
    CredentialSet,
    MalformedResponseError,
    TransportError,
    VaultCredentialError,
    VaultCredentialProvider,
    get_default_provider,
    new_vault_provider,
)

__all__ = [
    "PROVIDER_NAME",
    "CredentialSet",
    "MalformedResponseError",
    "TransportError",
    "VaultBotocoreProvider",
    "VaultCredentialError",
    "VaultCredentialProvider",
    "create_botocore_session",
    "get_default_provider",
    "new_vault_provider",
]
