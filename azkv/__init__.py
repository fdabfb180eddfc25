"""
azkv — async client for Azure Key Vault secrets.

Public API:
    SecretClient(tenant_id, client_id, client_secret, vault_name)
    await client.get_secret(name, version=None)   → Secret
    await client.set_secret(name, value)          → Secret
    await client.list_secrets(max_results=25)     → list[SecretProperties]
"""

from __future__ import annotations

from azkv.auth import ClientSecretCredential, Token, TokenCache
from azkv.client import SecretClient
from azkv.config import VaultConfig, get_config
from azkv.errors import (
    ApiError,
    AuthenticationError,
    DecodeError,
    ErrorKind,
    KeyVaultError,
    NotFoundError,
    TransportError,
)
from azkv.models import Secret, SecretAttributes, SecretProperties

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "AuthenticationError",
    "ClientSecretCredential",
    "DecodeError",
    "ErrorKind",
    "KeyVaultError",
    "NotFoundError",
    "Secret",
    "SecretAttributes",
    "SecretClient",
    "SecretProperties",
    "Token",
    "TokenCache",
    "TransportError",
    "VaultConfig",
    "get_config",
]
