"""Minimal synchronous client for the Vault HTTP API."""

from __future__ import annotations

import logging
import ssl
import threading
from typing import TYPE_CHECKING, Any

import httpx

from vault_aws_credentials.utils.http import join_api_path, normalize_vault_addr

if TYPE_CHECKING:
    from vault_aws_credentials.config import VaultSettings

logger = logging.getLogger(__name__)

_STATUS_CODE_MAP = {
    400: "invalid_request",
    401: "unauthorized",
    403: "forbidden",
    404: "invalid_path",
    412: "precondition_failed",
    429: "throttled",
    500: "server_error",
    502: "bad_gateway",
    503: "vault_sealed",
}


class VaultError(Exception):
    """Raised when a Vault request cannot be completed."""

    def __init__(self, message: str, code: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class VaultResponseError(VaultError):
    """Raised when Vault answers successfully but the body cannot be decoded."""


class VaultClient:
    """Thread-safe Vault client authenticated with a static token.

    The underlying ``httpx.Client`` is created on first use, so building a
    ``VaultClient`` never touches the network.
    """

    def __init__(
        self,
        addr: str,
        token: str | None,
        *,
        namespace: str | None = None,
        verify: bool = True,
        ca_cert: str | None = None,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        try:
            self._addr = normalize_vault_addr(addr)
        except ValueError as exc:
            raise VaultError(f"Invalid Vault address {addr!r}: {exc}", "invalid_config") from exc
        if not token:
            raise VaultError(
                "A Vault token is required (set VAULT_TOKEN)",
                "missing_token",
            )
        self._token = token
        self._namespace = namespace
        self._verify = self._ssl_verify(verify, ca_cert)
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: "VaultSettings") -> "VaultClient":
        return cls(
            settings.addr,
            settings.token,
            namespace=settings.namespace,
            verify=not settings.skip_verify,
            ca_cert=settings.ca_cert,
            timeout=settings.timeout_seconds,
        )

    @property
    def addr(self) -> str:
        return self._addr

    def _get_client(self) -> httpx.Client:
        if self._client is not None:
            return self._client

        with self._lock:
            if self._client is not None:
                return self._client

            headers = {"X-Vault-Token": self._token, "X-Vault-Request": "true"}
            if self._namespace:
                headers["X-Vault-Namespace"] = self._namespace

            self._client = httpx.Client(
                base_url=self._addr,
                headers=headers,
                timeout=self._timeout,
                verify=self._verify,
                transport=self._transport,
            )
            logger.info("Vault client initialized (addr=%s)", self._addr)
            return self._client

    @staticmethod
    def _ssl_verify(verify: bool, ca_cert: str | None) -> bool | ssl.SSLContext:
        if not verify:
            return False
        if not ca_cert:
            return True
        try:
            return ssl.create_default_context(cafile=ca_cert)
        except OSError as exc:
            raise VaultError(
                f"Cannot load Vault CA certificate {ca_cert!r}: {exc}", "invalid_config"
            ) from exc

    def write(self, path: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
        """Issue a write (``POST``) against a logical Vault path.

        Returns the decoded JSON body, or ``{}`` when Vault sends no content.

        Raises:
            VaultError: transport failure or a non-2xx status
            VaultResponseError: a 2xx body that is not a JSON document
        """
        api_path = join_api_path(path)
        client = self._get_client()

        try:
            response = client.post(api_path, json=data or {})
        except httpx.HTTPError as exc:
            logger.warning("Vault request failed: path=%s, error=%s", api_path, exc)
            raise VaultError(f"Vault request to {api_path} failed: {exc}", "connection_error") from exc

        if response.status_code >= 400:
            raise self._map_error_response(api_path, response)

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as exc:
            raise VaultResponseError(
                f"Vault returned a non-JSON response for {api_path}",
                "invalid_response",
                status_code=response.status_code,
            ) from exc

    def _map_error_response(self, api_path: str, response: httpx.Response) -> VaultError:
        errors: list[str] = []
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("errors"), list):
            errors = [str(item) for item in body["errors"]]

        message = "; ".join(errors) or response.reason_phrase or "request failed"
        code = _STATUS_CODE_MAP.get(response.status_code, "vault_error")

        logger.warning(
            "Vault error: path=%s, status=%d, error=%s: %s",
            api_path,
            response.status_code,
            code,
            message,
        )
        return VaultError(
            f"Vault returned HTTP {response.status_code} for {api_path}: {message}",
            code,
            status_code=response.status_code,
        )

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> "VaultClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
