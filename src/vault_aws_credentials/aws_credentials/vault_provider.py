"""AWS credential provider backed by the Vault AWS secrets engine.

Credentials come from the engine's ``<mount>/sts/<role>`` endpoint, which
returns an access key, secret key and session token together with the
lease duration Vault granted. The provider caches only the resulting
expiry time; callers check ``is_expired()`` before using credentials they
hold and call ``retrieve()`` for a fresh set when it reports ``True``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Callable, Mapping, Protocol

from vault_aws_credentials.config import Settings, load_settings
from vault_aws_credentials.utils.masking import describe_vault_response, mask_identifier
from vault_aws_credentials.utils.time import format_duration, parse_duration, utc_now
from vault_aws_credentials.vault.client import VaultClient, VaultError, VaultResponseError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "VaultSTS"
DEFAULT_LEASE_DURATION = timedelta(minutes=30)
DEFAULT_EXPIRY_WINDOW = timedelta(seconds=10)

_ACCESS_KEY_FIELD = "access_key"
_SECRET_KEY_FIELD = "secret_key"
_SESSION_TOKEN_FIELD = "security_token"
# Ten years.
_MAX_LEASE_SECONDS = 10 * 365 * 24 * 3600


class SecretWriter(Protocol):
    def write(self, path: str, data: dict[str, Any] | None = None) -> Any: ...


@dataclass(frozen=True)
class CredentialSet:
    """Temporary AWS credentials issued by Vault."""

    access_key_id: str
    secret_access_key: str
    session_token: str
    provider_name: str = PROVIDER_NAME

    def __repr__(self) -> str:
        return (
            f"CredentialSet(access_key_id={mask_identifier(self.access_key_id)}, "
            f"provider_name={self.provider_name!r})"
        )


class VaultCredentialError(Exception):
    """Base class for credential retrieval failures."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class TransportError(VaultCredentialError):
    """Raised when the request to Vault fails (network, auth, or server error)."""


class MalformedResponseError(VaultCredentialError):
    """Raised when Vault answers but the response is missing or mistypes a field."""

    def __init__(self, message: str, code: str = "malformed_response") -> None:
        super().__init__(message, code)


class VaultCredentialProvider:
    """Fetch STS credentials from Vault and track their expiry.

    ``expires_at`` starts at construction time, so a new provider reports
    itself expired until the first successful ``retrieve()``. A failed
    ``retrieve()`` never moves ``expires_at``.
    """

    def __init__(
        self,
        client: SecretWriter,
        sts_creds_path: str,
        *,
        lease_duration: timedelta = DEFAULT_LEASE_DURATION,
        expiry_window: timedelta = DEFAULT_EXPIRY_WINDOW,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if lease_duration < timedelta(0):
            raise ValueError("lease_duration must not be negative")
        if expiry_window < timedelta(0):
            raise ValueError("expiry_window must not be negative")
        self.client = client
        self.sts_creds_path = sts_creds_path
        self.lease_duration = lease_duration
        self.expiry_window = expiry_window
        self._clock = clock
        self._expires_at = clock()
        self._lock = threading.Lock()

    @property
    def expires_at(self) -> datetime:
        return self._expires_at

    def is_expired(self) -> bool:
        """Return True once we are within ``expiry_window`` of ``expires_at``."""
        return self._clock() >= self._expires_at - self.expiry_window

    def retrieve(self) -> CredentialSet:
        """Request a new credential set from Vault.

        Raises:
            TransportError: the Vault request failed
            MalformedResponseError: the response lacks a required field
        """
        with self._lock:
            params = {"ttl": format_duration(self.lease_duration)}
            try:
                response = self.client.write(self.sts_creds_path, params)
            except VaultResponseError as exc:
                logger.warning("Vault response undecodable: path=%s", self.sts_creds_path)
                raise MalformedResponseError(str(exc)) from exc
            except VaultError as exc:
                logger.warning(
                    "Vault credential request failed: path=%s, error=%s",
                    self.sts_creds_path,
                    exc.code,
                )
                raise TransportError(str(exc), code=exc.code) from exc

            credentials, lease_seconds = self._decode_response(response)
            self._expires_at = self._clock() + timedelta(seconds=lease_seconds)

        logger.info(
            "Retrieved AWS credentials: path=%s, key=%s, lease=%ds",
            self.sts_creds_path,
            mask_identifier(credentials.access_key_id),
            lease_seconds,
        )
        return credentials

    async def aretrieve(self) -> CredentialSet:
        return await asyncio.to_thread(self.retrieve)

    def _decode_response(self, response: object) -> tuple[CredentialSet, int]:
        if not isinstance(response, Mapping):
            raise self._malformed(response, "response is not an object")

        lease_seconds = response.get("lease_duration")
        if isinstance(lease_seconds, bool) or not isinstance(lease_seconds, int):
            raise self._malformed(response, "'lease_duration' is missing or not an integer")
        if lease_seconds < 0:
            raise self._malformed(response, "'lease_duration' is negative")
        if lease_seconds > _MAX_LEASE_SECONDS:
            raise self._malformed(response, "'lease_duration' is out of range")

        data = response.get("data")
        if not isinstance(data, Mapping):
            raise self._malformed(response, "'data' is missing or not an object")

        values: dict[str, str] = {}
        for field in (_ACCESS_KEY_FIELD, _SECRET_KEY_FIELD, _SESSION_TOKEN_FIELD):
            value = data.get(field)
            if not isinstance(value, str):
                raise self._malformed(response, f"'data.{field}' is missing or not a string")
            values[field] = value

        credentials = CredentialSet(
            access_key_id=values[_ACCESS_KEY_FIELD],
            secret_access_key=values[_SECRET_KEY_FIELD],
            session_token=values[_SESSION_TOKEN_FIELD],
        )
        return credentials, lease_seconds

    def _malformed(self, response: object, reason: str) -> MalformedResponseError:
        logger.warning(
            "Malformed Vault response: path=%s, reason=%s, body=%r",
            self.sts_creds_path,
            reason,
            describe_vault_response(response),
        )
        return MalformedResponseError(
            f"Malformed response from Vault at {self.sts_creds_path}: {reason}"
        )


def build_sts_creds_path(engine_path: str, role_name: str) -> str:
    return f"{engine_path.rstrip('/')}/sts/{role_name}"


def new_vault_provider(
    engine_path: str,
    role_name: str,
    *,
    client: SecretWriter | None = None,
    lease_duration: str | timedelta | None = None,
    settings: Settings | None = None,
) -> VaultCredentialProvider:
    """Create a provider for ``role_name`` on the engine mounted at ``engine_path``.

    Without an explicit ``client`` a ``VaultClient`` is configured from
    ``VAULT_ADDR`` / ``VAULT_TOKEN``. A missing token, a bad address or an unusable CA
    bundle raises ``VaultError`` here rather than on the first ``retrieve()``.
    """
    if settings is None:
        try:
            settings = load_settings()
        except RuntimeError as exc:
            raise VaultError(str(exc), "invalid_config") from exc
    if client is None:
        client = VaultClient.from_settings(settings.vault)
    if lease_duration is None:
        lease_duration = settings.credentials.lease_duration

    return VaultCredentialProvider(
        client,
        build_sts_creds_path(engine_path, role_name),
        lease_duration=parse_duration(lease_duration),
        expiry_window=timedelta(seconds=settings.credentials.expiry_window_seconds),
    )


@lru_cache(maxsize=1)
def get_default_provider() -> VaultCredentialProvider:
    settings = load_settings()
    role_name = settings.credentials.role_name
    if not role_name:
        raise RuntimeError("VAULT_AWS_ROLE is required for the default Vault credential provider")
    return new_vault_provider(settings.credentials.mount_path, role_name, settings=settings)
