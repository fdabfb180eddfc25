"""
Error taxonomy for the Key Vault client.

Every failure raised by azkv is a KeyVaultError tagged with an ErrorKind.
Callers can catch a concrete subclass (NotFoundError, ApiError, ...) or catch
KeyVaultError and branch on ``err.kind``.

Input validation (empty names, bad page sizes) raises the builtin ValueError
before any network I/O.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    API = "api"
    DECODE = "decode"
    TRANSPORT = "transport"


class KeyVaultError(Exception):
    """Base class for every error surfaced by azkv."""

    kind: ErrorKind = ErrorKind.API
    status: int | None = None

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        if kind is not None:
            self.kind = kind


class AuthenticationError(KeyVaultError):
    """Credentials were rejected, or the identity endpoint was unreachable."""

    kind = ErrorKind.AUTHENTICATION


class NotFoundError(KeyVaultError):
    """The requested secret (or secret version) does not exist."""

    kind = ErrorKind.NOT_FOUND


class ApiError(KeyVaultError):
    """Any other non-2xx response from Key Vault."""

    kind = ErrorKind.API

    def __init__(
        self,
        status: int,
        body: str,
        *,
        code: str | None = None,
        message: str | None = None,
    ) -> None:
        self.body = body
        self.code = code
        self.message = message
        detail = f"{code}: {message}" if code else body[:200]
        super().__init__(f"Key Vault returned HTTP {status}: {detail}", status=status)


class DecodeError(KeyVaultError):
    """A 2xx response body was malformed or missing required fields."""

    kind = ErrorKind.DECODE


class TransportError(KeyVaultError):
    """The request failed before any response was received."""

    kind = ErrorKind.TRANSPORT


__all__ = [
    "ApiError",
    "AuthenticationError",
    "DecodeError",
    "ErrorKind",
    "KeyVaultError",
    "NotFoundError",
    "TransportError",
]
