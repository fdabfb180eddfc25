"""
Response decoding and error mapping.

Every Key Vault response goes through raise_for_status() first; only 2xx
bodies are decoded. Anything a 2xx body is missing is a DecodeError, never a
default value.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from azkv.errors import ApiError, AuthenticationError, DecodeError, NotFoundError
from azkv.models import Secret, SecretProperties, parse_secret_id


def _error_envelope(body: str) -> tuple[str | None, str | None]:
    """Extract (code, message) from ``{"error": {"code": ..., "message": ...}}``."""
    try:
        data = json.loads(body)
    except ValueError:
        return None, None
    if not isinstance(data, dict) or not isinstance(data.get("error"), dict):
        return None, None
    err = data["error"]
    return err.get("code"), err.get("message")


def raise_for_status(status: int, body: str) -> None:
    """Raise the typed error for a non-2xx Key Vault response."""
    if 200 <= status < 300:
        return
    code, message = _error_envelope(body)
    if status == 404:
        raise NotFoundError(message or "Secret not found", status=status)
    if status in (401, 403):
        raise AuthenticationError(
            f"Key Vault rejected the request ({status}): {message or body[:200]}",
            status=status,
        )
    raise ApiError(status, body, code=code, message=message)


def decode_json(body: str) -> dict[str, Any]:
    """Parse a response body that must be a JSON object."""
    if not body or not body.strip():
        raise DecodeError("Response body is empty")
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise DecodeError(f"Response body is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"Response is missing required field {key!r}")
    return value


def _identity(data: dict[str, Any]) -> tuple[str, str | None]:
    secret_id = _require_str(data, "id")
    try:
        return parse_secret_id(secret_id)
    except ValueError as exc:
        raise DecodeError(str(exc)) from exc


def _clean(data: dict[str, Any]) -> dict[str, Any]:
    # Key Vault sends explicit nulls for unset optional fields
    return {k: v for k, v in data.items() if v is not None}


def decode_secret(status: int, body: str) -> Secret:
    """Map a get/set response to a Secret or raise."""
    raise_for_status(status, body)
    data = decode_json(body)
    _require_str(data, "value")
    name, version = _identity(data)
    try:
        return Secret.model_validate({**_clean(data), "name": name, "version": version})
    except ValidationError as exc:
        raise DecodeError(f"Malformed secret response: {exc}") from exc


def decode_secret_list(status: int, body: str) -> tuple[list[SecretProperties], str | None]:
    """Map one page of a secret listing to (items, next_link)."""
    raise_for_status(status, body)
    data = decode_json(body)
    items = data.get("value")
    if not isinstance(items, list):
        raise DecodeError("Response is missing required field 'value'")

    secrets: list[SecretProperties] = []
    for item in items:
        if not isinstance(item, dict):
            raise DecodeError("Secret listing contains a non-object entry")
        name, _ = _identity(item)
        try:
            secrets.append(SecretProperties.model_validate({**_clean(item), "name": name}))
        except ValidationError as exc:
            raise DecodeError(f"Malformed secret listing entry: {exc}") from exc

    next_link = data.get("nextLink")
    if next_link is not None and not isinstance(next_link, str):
        raise DecodeError("nextLink must be a string")
    return secrets, next_link or None
