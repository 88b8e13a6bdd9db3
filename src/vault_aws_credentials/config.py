"""Configuration management for the Vault AWS credential provider."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from vault_aws_credentials.utils.http import normalize_vault_addr
from vault_aws_credentials.utils.time import parse_duration

_config_logger = logging.getLogger(__name__)


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class VaultSettings(BaseModel):
    """Connection settings for the Vault server.

    Environment variable names match the ones the Vault CLI reads, so a
    shell that can run ``vault`` commands can also run this provider.
    """

    addr: str = Field(default="https://127.0.0.1:8200")
    token: str | None = Field(default=None, repr=False)
    namespace: str | None = Field(default=None)
    skip_verify: bool = Field(default=False)
    ca_cert: str | None = Field(default=None)
    timeout_seconds: float = Field(default=60.0, gt=0, le=3600)

    @field_validator("addr")
    @classmethod
    def _validate_addr(cls, value: str) -> str:
        return normalize_vault_addr(value)


class CredentialSettings(BaseModel):
    mount_path: str = Field(default="aws", min_length=1)
    role_name: str | None = Field(default=None)
    lease_duration: str = Field(
        default="30m",
        description="Requested TTL for issued STS credentials (Vault duration string)",
    )
    expiry_window_seconds: int = Field(
        default=10,
        ge=0,
        le=3600,
        description="Report credentials as expired this many seconds early.",
    )

    @field_validator("lease_duration")
    @classmethod
    def _validate_lease_duration(cls, value: str) -> str:
        parse_duration(value)
        return value.strip()


class Settings(BaseModel):
    vault: VaultSettings = Field(default_factory=VaultSettings)
    credentials: CredentialSettings = Field(default_factory=CredentialSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


ENV_KEYS = {
    "vault_addr": "VAULT_ADDR",
    "vault_token": "VAULT_TOKEN",
    "vault_namespace": "VAULT_NAMESPACE",
    "vault_skip_verify": "VAULT_SKIP_VERIFY",
    "vault_ca_cert": "VAULT_CACERT",
    "vault_timeout": "VAULT_CLIENT_TIMEOUT",
    "mount_path": "VAULT_AWS_MOUNT_PATH",
    "role_name": "VAULT_AWS_ROLE",
    "lease_duration": "VAULT_AWS_TTL",
    "expiry_window": "VAULT_AWS_EXPIRY_WINDOW_SECONDS",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
}

_TRUE_VALUES = frozenset({"1", "true", "yes"})


def _env_str(key: str) -> str | None:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def _env_duration_seconds(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return parse_duration(value).total_seconds()
    except ValueError:
        _config_logger.warning(
            "Invalid duration value for %s: %r, using default %s", key, value, default
        )
        return default


def _resolve_path(path: str) -> str:
    return str(Path(path).expanduser().resolve())


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv(dotenv_path=Path.cwd() / ".env")
    log_file_env = _env_str(ENV_KEYS["log_file"])
    ca_cert_env = _env_str(ENV_KEYS["vault_ca_cert"])

    settings_data: dict[str, object] = {
        "vault": {
            "addr": _env_str(ENV_KEYS["vault_addr"]) or VaultSettings().addr,
            "token": _env_str(ENV_KEYS["vault_token"]),
            "namespace": _env_str(ENV_KEYS["vault_namespace"]),
            "skip_verify": _env_bool(
                ENV_KEYS["vault_skip_verify"], VaultSettings().skip_verify
            ),
            "ca_cert": _resolve_path(ca_cert_env) if ca_cert_env else None,
            "timeout_seconds": _env_duration_seconds(
                ENV_KEYS["vault_timeout"], VaultSettings().timeout_seconds
            ),
        },
        "credentials": {
            "mount_path": _env_str(ENV_KEYS["mount_path"]) or CredentialSettings().mount_path,
            "role_name": _env_str(ENV_KEYS["role_name"]),
            "lease_duration": (
                _env_str(ENV_KEYS["lease_duration"]) or CredentialSettings().lease_duration
            ),
            "expiry_window_seconds": _env_int(
                ENV_KEYS["expiry_window"],
                CredentialSettings().expiry_window_seconds,
            ),
        },
        "logging": {
            "level": os.getenv(ENV_KEYS["log_level"], LoggingSettings().level),
            "file": _resolve_path(log_file_env) if log_file_env else None,
        },
    }

    try:
        settings = Settings.model_validate(settings_data)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    return settings
