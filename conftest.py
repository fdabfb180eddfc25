"""
Root-level shared test fixtures.

FakeVault stands in for both AAD and Key Vault behind an httpx.MockTransport,
so client tests exercise real URLs, headers and JSON bodies without a network.
"""

from __future__ import annotations

import json
import time
import uuid
from datetime import UTC, datetime

import httpx
import pytest
import pytest_asyncio

from azkv.client import SecretClient
from azkv.config import reset_config

TENANT = "bc598e67-03d8-44d5-aa46-8289b9a39a14"
CLIENT_ID = "c1a6d79b-082b-4798-b362-a77e96de50db"
CLIENT_SECRET = "SUPER_SECRET_KEY"
VAULT = "test-keyvault"
VAULT_HOST = f"{VAULT}.vault.azure.net"


class FakeVault:
    """In-memory AAD token endpoint plus Key Vault secrets API."""

    def __init__(self) -> None:
        self.secrets: dict[str, list[dict]] = {}
        self.requests: list[httpx.Request] = []
        self.token_requests = 0
        self.token_status = 200
        self.token_lifetime = 3600
        self.issued: list[str] = []
        # Overrides the vault response for every secrets call when set
        self.vault_override: httpx.Response | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "login.microsoftonline.com":
            return self._token(request)
        if request.url.host != VAULT_HOST:
            return httpx.Response(502, text="unexpected host")
        if request.headers.get("Authorization") not in {f"Bearer {t}" for t in self.issued}:
            return httpx.Response(401, json={"error": {"code": "Unauthorized", "message": "bad token"}})
        if self.vault_override is not None:
            return self.vault_override

        parts = [p for p in request.url.path.split("/") if p]
        if parts == ["secrets"] and request.method == "GET":
            return self._list(request)
        if len(parts) in (2, 3) and parts[0] == "secrets":
            if request.method == "PUT" and len(parts) == 2:
                return self._set(parts[1], json.loads(request.content))
            if request.method == "GET":
                return self._get(parts[1], parts[2] if len(parts) == 3 else None)
        return httpx.Response(405, json={"error": {"code": "BadMethod", "message": "nope"}})

    # AAD -----------------------------------------------------------------

    def _token(self, request: httpx.Request) -> httpx.Response:
        self.token_requests += 1
        if self.token_status != 200:
            return httpx.Response(
                self.token_status,
                json={"error": "invalid_client", "error_description": "AADSTS7000215: Invalid client secret"},
            )
        form = dict(httpx.QueryParams(request.content.decode()))
        assert form["grant_type"] == "client_credentials"
        assert form["resource"] == "https://vault.azure.net"
        token = f"token-{self.token_requests}"
        self.issued.append(token)
        return httpx.Response(
            200,
            json={
                "token_type": "Bearer",
                "expires_in": str(self.token_lifetime),
                "expires_on": str(int(time.time()) + self.token_lifetime),
                "resource": "https://vault.azure.net",
                "access_token": token,
            },
        )

    # Key Vault -----------------------------------------------------------

    def _bundle(self, name: str, entry: dict) -> dict:
        return {
            "value": entry["value"],
            "id": f"https://{VAULT_HOST}/secrets/{name}/{entry['version']}",
            "contentType": entry.get("contentType"),
            "tags": entry.get("tags"),
            "attributes": {
                "enabled": True,
                "created": entry["created"],
                "updated": entry["created"],
                "recoveryLevel": "Recoverable+Purgeable",
            },
        }

    def _set(self, name: str, body: dict) -> httpx.Response:
        entry = {
            "value": body["value"],
            "version": uuid.uuid4().hex,
            "created": int(datetime.now(UTC).timestamp()),
            "contentType": body.get("contentType"),
            "tags": body.get("tags"),
        }
        self.secrets.setdefault(name, []).append(entry)
        return httpx.Response(200, json=self._bundle(name, entry))

    def _get(self, name: str, version: str | None) -> httpx.Response:
        versions = self.secrets.get(name, [])
        if version:
            versions = [v for v in versions if v["version"] == version]
        if not versions:
            return httpx.Response(
                404,
                json={"error": {"code": "SecretNotFound", "message": f"A secret with (name/id) {name} was not found in this key vault."}},
            )
        return httpx.Response(200, json=self._bundle(name, versions[-1]))

    def _list(self, request: httpx.Request) -> httpx.Response:
        size = int(request.url.params.get("maxresults", "25"))
        offset = int(request.url.params.get("$skiptoken", "0"))
        names = sorted(self.secrets)
        page = names[offset : offset + size]
        next_link = None
        if offset + size < len(names):
            next_link = (
                f"https://{VAULT_HOST}/secrets?api-version=7.0"
                f"&maxresults={size}&$skiptoken={offset + size}"
            )
        return httpx.Response(
            200,
            json={
                "value": [
                    {"id": f"https://{VAULT_HOST}/secrets/{n}", "attributes": {"enabled": True}}
                    for n in page
                ],
                "nextLink": next_link,
            },
        )


@pytest.fixture
def fake_vault() -> FakeVault:
    return FakeVault()


@pytest_asyncio.fixture
async def client(fake_vault):
    """SecretClient wired to FakeVault."""
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_vault))
    kv = SecretClient(TENANT, CLIENT_ID, CLIENT_SECRET, VAULT, http_client=http)
    yield kv
    await http.aclose()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove azkv env vars that leak between tests."""
    for key in [
        "AZURE_TENANT_ID",
        "AZURE_CLIENT_ID",
        "AZURE_CLIENT_SECRET",
        "AZKV_VAULT_NAME",
        "AZKV_ENDPOINT_SUFFIX",
        "AZKV_API_VERSION",
        "AZKV_AUTHORITY",
        "AZKV_TIMEOUT",
    ]:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()
