"""Vault HTTP API client."""

from vault_aws_credentials.vault.client import VaultClient, VaultError, VaultResponseError

__all__ = [
    "VaultClient",
    "VaultError",
    "VaultResponseError",
]
