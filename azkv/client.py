"""
Async client for Azure Key Vault secrets.

Each operation obtains a bearer token (reusing the cached one while it is
valid), issues one authenticated request, and decodes the response into a
model or a typed error. Nothing is retried.

Usage:
    from azkv import SecretClient

    async with SecretClient(tenant_id, client_id, client_secret, "my-vault") as client:
        await client.set_secret("test-secret", "42")
        secret = await client.get_secret("test-secret")
        print(secret.value)  # "42"

A client instance is meant to be driven by one task at a time. Concurrent
calls are safe only in the sense that a stale token is refreshed once.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from azkv.auth import Clock, ClientSecretCredential, TokenCache, TokenCredential, utcnow
from azkv.config import (
    DEFAULT_API_VERSION,
    DEFAULT_AUTHORITY,
    DEFAULT_TIMEOUT,
    PUBLIC_ENDPOINT_SUFFIX,
    VaultConfig,
    get_config,
)
from azkv.decoding import decode_secret, decode_secret_list
from azkv.errors import DecodeError, TransportError
from azkv.models import Secret, SecretProperties
from azkv.request import (
    MAX_PAGE_SIZE,
    auth_headers,
    secret_url,
    secrets_url,
    vault_url,
)

logger = logging.getLogger(__name__)


class SecretClient:
    """Get, set and list secrets in a single vault."""

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        vault_name: str,
        *,
        endpoint_suffix: str = PUBLIC_ENDPOINT_SUFFIX,
        api_version: str = DEFAULT_API_VERSION,
        authority: str = DEFAULT_AUTHORITY,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
        credential: TokenCredential | None = None,
        clock: Clock = utcnow,
    ) -> None:
        if credential is None and not (tenant_id and client_id and client_secret):
            raise ValueError("tenant_id, client_id and client_secret are required")
        self.vault_name = vault_name
        self.vault_url = vault_url(vault_name, endpoint_suffix)
        self.api_version = api_version
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        if credential is None:
            credential = ClientSecretCredential(
                tenant_id,
                client_id,
                client_secret,
                authority=authority,
                timeout=timeout,
                http_client=self._http,
                clock=clock,
            )
        self.tokens = TokenCache(credential, clock=clock)

    @classmethod
    def from_config(cls, cfg: VaultConfig | None = None, **kwargs: Any) -> SecretClient:
        """Build a client from a VaultConfig (the env-loaded singleton by default)."""
        cfg = (cfg or get_config()).require()
        options: dict[str, Any] = {
            "endpoint_suffix": cfg.endpoint_suffix,
            "api_version": cfg.api_version,
            "authority": cfg.authority,
            "timeout": cfg.timeout,
        }
        options.update(kwargs)
        return cls(cfg.tenant_id, cfg.client_id, cfg.client_secret, cfg.vault_name, **options)

    @classmethod
    def from_env(cls, **kwargs: Any) -> SecretClient:
        return cls.from_config(None, **kwargs)

    def __repr__(self) -> str:
        return f"SecretClient(vault_url={self.vault_url!r})"

    async def __aenter__(self) -> SecretClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    # Public API ----------------------------------------------------------

    async def get_secret(self, name: str, version: str | None = None) -> Secret:
        """Fetch a secret. Without ``version`` the latest version is returned.

        Raises:
            ValueError: ``name`` or ``version`` is not a valid identifier.
            NotFoundError: no such secret (or version).
            AuthenticationError: AAD or Key Vault rejected the caller.
            ApiError: any other non-2xx response.
            DecodeError: the response body was malformed.
            TransportError: the request never got a response.
        """
        url = secret_url(self.vault_url, name, version, self.api_version)
        resp = await self._send("GET", url)
        return decode_secret(resp.status_code, resp.text)

    async def set_secret(
        self,
        name: str,
        value: str,
        *,
        content_type: str | None = None,
        tags: dict[str, str] | None = None,
    ) -> Secret:
        """Store a new version of a secret and return it as the server saw it.

        Raises the same errors as get_secret(), plus ValueError for an empty value.
        """
        url = secret_url(self.vault_url, name, api_version=self.api_version)
        if not value:
            raise ValueError("Secret value must not be empty")

        body: dict[str, Any] = {"value": value}
        if content_type is not None:
            body["contentType"] = content_type
        if tags is not None:
            body["tags"] = tags

        resp = await self._send("PUT", url, json=body)
        secret = decode_secret(resp.status_code, resp.text)
        logger.info("Stored secret %s (version %s) in %s", secret.name, secret.version, self.vault_name)
        return secret

    async def list_secrets(self, max_results: int = MAX_PAGE_SIZE) -> list[SecretProperties]:
        """List up to ``max_results`` secret identifiers, following nextLink pages."""
        if max_results < 1:
            raise ValueError("max_results must be at least 1")

        url: httpx.URL | None = secrets_url(
            self.vault_url, min(max_results, MAX_PAGE_SIZE), self.api_version
        )
        results: list[SecretProperties] = []
        while url is not None and len(results) < max_results:
            resp = await self._send("GET", url)
            page, next_link = decode_secret_list(resp.status_code, resp.text)
            results.extend(page)
            if not page or not next_link:
                break
            next_url = self._next_page(next_link)
            if next_url == url:
                logger.warning("nextLink repeats %s, stopping", url.path)
                break
            url = next_url
        return results[:max_results]

    # Internal helpers ----------------------------------------------------

    def _next_page(self, next_link: str) -> httpx.URL:
        url = httpx.URL(next_link)
        # The bearer token must not leave the vault host or go out in cleartext
        if url.scheme != "https":
            raise DecodeError(f"nextLink is not https: {url.scheme}")
        if url.host != httpx.URL(self.vault_url).host:
            raise DecodeError(f"nextLink points outside the vault: {url.host}")
        return url

    async def _send(
        self, method: str, url: httpx.URL, *, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        token = await self.tokens.get_or_refresh()
        try:
            resp = await self._http.request(
                method,
                url,
                headers=auth_headers(token, json_body=json is not None),
                json=json,
            )
        except httpx.DecodingError as exc:
            raise DecodeError(f"{method} {url.path} returned an undecodable body: {exc}") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"{method} {url.path} failed: {exc}") from exc

        logger.debug("%s %s -> %d", method, url.path, resp.status_code)
        if resp.status_code == 401:
            # Force a fresh token on the next call
            self.tokens.invalidate()
        return resp
