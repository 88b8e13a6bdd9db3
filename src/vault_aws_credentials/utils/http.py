"""Shared HTTP utilities."""

from __future__ import annotations

from urllib.parse import urlparse

_VAULT_ADDR_ALLOWED_SCHEMES = frozenset({"http", "https"})


def normalize_vault_addr(value: str) -> str:
    """Normalize and validate a Vault server address (``VAULT_ADDR``)."""
    candidate = value.strip()
    if not candidate:
        raise ValueError("Vault address must not be empty")

    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in _VAULT_ADDR_ALLOWED_SCHEMES:
        raise ValueError("Vault address must use http or https")
    if not parsed.netloc:
        raise ValueError("Vault address must include host")
    if parsed.query or parsed.fragment:
        raise ValueError("Vault address must not include query or fragment")
    if parsed.username or parsed.password:
        raise ValueError("Vault address must not include userinfo")

    normalized_path = parsed.path.rstrip("/")
    return f"{parsed.scheme.lower()}://{parsed.netloc}{normalized_path}"


def join_api_path(path: str) -> str:
    """Build the ``/v1/...`` API path for a logical Vault path."""
    cleaned = path.strip().strip("/")
    if not cleaned:
        raise ValueError("Vault path must not be empty")
    return f"/v1/{cleaned}"
