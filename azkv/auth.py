"""
Azure Active Directory authentication for Key Vault.

ClientSecretCredential performs the OAuth2 client-credentials grant against
the AAD v1 token endpoint, scoped to the Key Vault resource. TokenCache keeps
the most recent token and only goes back to AAD once it has expired.

Usage:
    credential = ClientSecretCredential(tenant_id, client_id, client_secret)
    cache = TokenCache(credential)
    token = await cache.get_or_refresh()
    headers = {"Authorization": f"Bearer {token.access_token}"}
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

import httpx

from azkv.config import DEFAULT_AUTHORITY, DEFAULT_TIMEOUT
from azkv.errors import AuthenticationError

logger = logging.getLogger(__name__)

KEYVAULT_RESOURCE = "https://vault.azure.net"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Token:
    """A bearer token and the moment it stops being valid."""

    access_token: str = field(repr=False)
    expires_on: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) >= self.expires_on


class TokenCredential(Protocol):
    async def get_token(self) -> Token: ...


class ClientSecretCredential:
    """Obtains Key Vault access tokens for a service principal."""

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        *,
        authority: str = DEFAULT_AUTHORITY,
        resource: str = KEYVAULT_RESOURCE,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock = utcnow,
    ) -> None:
        if not tenant_id or not client_id or not client_secret:
            raise ValueError("tenant_id, client_id and client_secret are required")
        self.tenant_id = tenant_id
        self.client_id = client_id
        self._client_secret = client_secret
        self.authority = authority.rstrip("/")
        self.resource = resource
        self.timeout = timeout
        self._http = http_client
        self._clock = clock

    def __repr__(self) -> str:
        return f"ClientSecretCredential(tenant_id={self.tenant_id!r}, client_id={self.client_id!r})"

    @property
    def token_endpoint(self) -> str:
        return f"{self.authority}/{self.tenant_id}/oauth2/token"

    async def get_token(self) -> Token:
        """Request a fresh token. One round trip, no retry.

        Raises:
            AuthenticationError: the endpoint rejected the credentials, could
                not be reached, or answered with something that isn't a token.
        """
        form = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "resource": self.resource,
        }
        try:
            resp = await self._post(form)
        except httpx.RequestError as exc:
            raise AuthenticationError(
                f"Failed to reach Azure Active Directory at {self.authority}: {exc}"
            ) from exc

        if not resp.is_success:
            raise AuthenticationError(
                f"Failed to authenticate to Azure Active Directory: "
                f"{resp.status_code} {_error_description(resp)}",
                status=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise AuthenticationError("Token response is not valid JSON") from exc
        if not isinstance(data, dict) or not data.get("access_token"):
            raise AuthenticationError("Token response did not include an access token")

        token = Token(access_token=data["access_token"], expires_on=self._expiry(data))
        logger.info(
            "Acquired Key Vault token for tenant %s, expires %s",
            self.tenant_id,
            token.expires_on.isoformat(),
        )
        return token

    async def _post(self, form: dict[str, str]) -> httpx.Response:
        if self._http is not None:
            return await self._http.post(self.token_endpoint, data=form, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.token_endpoint, data=form)

    def _expiry(self, data: dict[str, Any]) -> datetime:
        # v1 endpoints send both as strings
        try:
            if data.get("expires_on") is not None:
                return datetime.fromtimestamp(int(data["expires_on"]), UTC)
            if data.get("expires_in") is not None:
                return self._clock() + timedelta(seconds=int(data["expires_in"]))
        except (TypeError, ValueError) as exc:
            raise AuthenticationError("Token response has an unreadable expiry") from exc
        raise AuthenticationError("Token response did not include an expiry")


def _error_description(resp: httpx.Response) -> str:
    """Pull AAD's error_description out of a failed token response."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict):
        return str(data.get("error_description") or data.get("error") or "")[:200]
    return resp.text[:200]


class TokenCache:
    """Holds the current token and refreshes it on demand.

    Concurrent callers that find the cache stale wait on a single refresh;
    only the first one goes to the credential.
    """

    def __init__(self, credential: TokenCredential, *, clock: Clock = utcnow) -> None:
        self.credential = credential
        self._clock = clock
        self._token: Token | None = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> Token | None:
        return self._token

    def _valid(self) -> Token | None:
        token = self._token
        if token is not None and not token.is_expired(self._clock()):
            return token
        return None

    async def get_or_refresh(self) -> Token:
        """Return a token that is valid right now, fetching one if needed."""
        token = self._valid()
        if token is not None:
            return token
        async with self._lock:
            token = self._valid()
            if token is not None:
                return token
            if self._token is not None:
                logger.debug("Cached token expired at %s, refreshing", self._token.expires_on)
            self._token = None
            self._token = await self.credential.get_token()
            return self._token

    def invalidate(self) -> None:
        self._token = None
