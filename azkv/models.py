"""Key Vault secret models.

Wire payloads use camelCase (``contentType``, ``recoveryLevel``); the models
expose snake_case and accept either on input. Timestamps arrive as Unix
seconds and are decoded to UTC datetimes.
"""

from __future__ import annotations

from datetime import datetime
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class SecretAttributes(_WireModel):
    """Server-managed metadata for one secret version."""

    enabled: bool | None = None
    created: datetime | None = None
    updated: datetime | None = None
    not_before: datetime | None = Field(default=None, alias="nbf")
    expires: datetime | None = Field(default=None, alias="exp")
    recovery_level: str | None = Field(default=None, alias="recoveryLevel")


class Secret(_WireModel):
    """A secret value as returned by Key Vault (never constructed client-side)."""

    name: str
    value: str = Field(repr=False)
    id: str | None = None
    version: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")
    tags: dict[str, str] = Field(default_factory=dict)
    attributes: SecretAttributes | None = None


class SecretProperties(_WireModel):
    """One entry from a secret listing: identity and metadata, no value."""

    id: str
    name: str
    content_type: str | None = Field(default=None, alias="contentType")
    tags: dict[str, str] = Field(default_factory=dict)
    attributes: SecretAttributes | None = None


def parse_secret_id(secret_id: str) -> tuple[str, str | None]:
    """Split ``https://{vault}/secrets/{name}[/{version}]`` into (name, version).

    Raises:
        ValueError: the id is not a Key Vault secret identifier.
    """
    parts = [p for p in urlsplit(secret_id).path.split("/") if p]
    if len(parts) not in (2, 3) or parts[0] != "secrets":
        raise ValueError(f"Not a secret identifier: {secret_id!r}")
    name = parts[1]
    version = parts[2] if len(parts) == 3 else None
    return name, version
