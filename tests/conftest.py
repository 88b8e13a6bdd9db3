from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterator

import pytest

from vault_aws_credentials import config

_ISOLATED_ENV_KEYS = (
    *config.ENV_KEYS.values(),
    "AWS_PROFILE",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
)


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeVaultClient:
    """Records writes and replays canned responses or errors."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, dict[str, Any] | None]] = []

    def write(self, path: str, data: dict[str, Any] | None = None) -> Any:
        self.calls.append((path, data))
        result = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(result, BaseException):
            raise result
        return result


def sts_response(
    lease_duration: int = 1800,
    access_key: str = "AK",
    secret_key: str = "SK",
    security_token: str = "TOK",
) -> dict[str, Any]:
    return {
        "request_id": "6d0f1c8b-0000-4000-8000-000000000000",
        "lease_id": "",
        "renewable": False,
        "lease_duration": lease_duration,
        "data": {
            "access_key": access_key,
            "secret_key": secret_key,
            "security_token": security_token,
        },
        "wrap_info": None,
        "warnings": None,
        "auth": None,
    }


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in _ISOLATED_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda **_: None)
    config._load_settings_cached.cache_clear()
    yield
    config._load_settings_cached.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
