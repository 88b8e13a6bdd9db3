"""botocore credential provider backed by Vault."""

from __future__ import annotations

from typing import Any

import botocore.credentials
import botocore.session

from vault_aws_credentials.aws_credentials.vault_provider import VaultCredentialProvider


class VaultBotocoreProvider(botocore.credentials.CredentialProvider):
    """Boto3 credential provider for Vault-issued STS credentials.

    Nothing is fetched until a client first signs a request. botocore then
    refreshes through ``retrieve()`` under its own refresh lock, so clients
    sharing a session trigger one Vault request per refresh.
    """

    METHOD = "vault-sts"
    CANONICAL_NAME = "VaultSTS"

    def __init__(
        self,
        provider: VaultCredentialProvider,
        session: botocore.session.Session | None = None,
    ) -> None:
        self.provider = provider
        super().__init__(session)

    def load(self) -> botocore.credentials.DeferredRefreshableCredentials:
        return botocore.credentials.DeferredRefreshableCredentials(
            self._refresh, method=self.METHOD
        )

    def _refresh(self) -> dict[str, Any]:
        credentials = self.provider.retrieve()
        return {
            "access_key": credentials.access_key_id,
            "secret_key": credentials.secret_access_key,
            "token": credentials.session_token,
            "expiry_time": self.provider.expires_at.isoformat(),
        }


def create_botocore_session(
    provider: VaultCredentialProvider,
    session: botocore.session.Session | None = None,
) -> botocore.session.Session:
    """Return a botocore session that resolves credentials from Vault first."""
    session = session or botocore.session.get_session()
    resolver = session.get_component("credential_provider")
    # "env" is absent from the chain when a profile was set explicitly.
    resolver.providers.insert(0, VaultBotocoreProvider(provider, session))
    return session
