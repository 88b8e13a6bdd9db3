"""Masking for credential values that end up in log lines and reprs."""

from __future__ import annotations

from typing import Mapping

_MASK = "***"

# Vault response sections that can carry secret material.
_SECRET_SECTIONS = frozenset({"data", "auth", "wrap_info"})


def mask_identifier(value: str, *, visible: int = 8) -> str:
    """Keep the first ``visible`` characters of an identifier."""
    if len(value) <= visible:
        return _MASK
    return f"{value[:visible]}{_MASK}"


def _type_tag(value: object) -> str:
    return f"<{type(value).__name__}>"


def describe_vault_response(response: object) -> object:
    """Return a loggable view of a Vault response body.

    Envelope fields such as ``lease_duration`` or ``warnings`` are kept as-is.
    Values inside ``data``, ``auth`` and ``wrap_info`` are replaced by their
    type, so a log line shows which field is wrong without showing the field.
    """
    if not isinstance(response, Mapping):
        return _type_tag(response)

    view: dict[object, object] = {}
    for key, value in response.items():
        if key not in _SECRET_SECTIONS or value is None:
            view[key] = value
        elif isinstance(value, Mapping):
            view[key] = {field: _type_tag(item) for field, item in value.items()}
        else:
            view[key] = _type_tag(value)
    return view
