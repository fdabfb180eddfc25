"""URL and header construction for Key Vault secret requests."""

from __future__ import annotations

import re

import httpx

from azkv.auth import Token
from azkv.config import DEFAULT_API_VERSION, PUBLIC_ENDPOINT_SUFFIX

# Key Vault object names: alphanumerics and dashes, 1-127 chars
SECRET_NAME_RE = re.compile(r"^[0-9a-zA-Z-]{1,127}$")
# Versions are server-assigned 32-char hex ids
SECRET_VERSION_RE = re.compile(r"^[0-9a-zA-Z]{1,64}$")

MAX_PAGE_SIZE = 25


def vault_url(vault_name: str, endpoint_suffix: str = PUBLIC_ENDPOINT_SUFFIX) -> str:
    if not vault_name:
        raise ValueError("vault_name must not be empty")
    return f"https://{vault_name}.{endpoint_suffix}"


def validate_secret_name(name: str) -> str:
    if not name or not SECRET_NAME_RE.fullmatch(name):
        raise ValueError(
            f"Invalid secret name {name!r}: expected 1-127 letters, digits or dashes"
        )
    return name


def secret_url(
    base_url: str,
    name: str,
    version: str | None = None,
    api_version: str = DEFAULT_API_VERSION,
) -> httpx.URL:
    """Build ``{base_url}/secrets/{name}[/{version}]?api-version=...``."""
    path = f"/secrets/{validate_secret_name(name)}"
    if version:
        if not SECRET_VERSION_RE.fullmatch(version):
            raise ValueError(f"Invalid secret version {version!r}")
        path += f"/{version}"
    return httpx.URL(base_url + path, params={"api-version": api_version})


def secrets_url(
    base_url: str,
    max_results: int = MAX_PAGE_SIZE,
    api_version: str = DEFAULT_API_VERSION,
) -> httpx.URL:
    """Build the first page URL for listing secrets."""
    return httpx.URL(
        base_url + "/secrets",
        params={"api-version": api_version, "maxresults": str(max_results)},
    )


def auth_headers(token: Token, *, json_body: bool = False) -> dict[str, str]:
    headers = {"Authorization": f"Bearer {token.access_token}"}
    if json_body:
        headers["Content-Type"] = "application/json"
    return headers
