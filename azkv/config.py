"""
Centralized configuration for azkv.

All configuration is loaded from environment variables with sensible defaults.
The client itself takes plain strings; this module only exists so scripts and
services don't have to read the environment by hand.

Usage:
    from azkv.config import get_config
    cfg = get_config().require()
    print(cfg.vault_url)     # "https://my-vault.vault.azure.net"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

PUBLIC_ENDPOINT_SUFFIX = "vault.azure.net"
DEFAULT_API_VERSION = "7.0"
DEFAULT_AUTHORITY = "https://login.microsoftonline.com"
DEFAULT_TIMEOUT = 30.0

# Required fields and the env var each one is read from
_REQUIRED = {
    "tenant_id": "AZURE_TENANT_ID",
    "client_id": "AZURE_CLIENT_ID",
    "client_secret": "AZURE_CLIENT_SECRET",
    "vault_name": "AZKV_VAULT_NAME",
}


@dataclass(frozen=True)
class VaultConfig:
    """Service principal credentials plus vault addressing."""

    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    vault_name: str = ""
    endpoint_suffix: str = PUBLIC_ENDPOINT_SUFFIX
    api_version: str = DEFAULT_API_VERSION
    authority: str = DEFAULT_AUTHORITY
    timeout: float = DEFAULT_TIMEOUT

    @property
    def vault_url(self) -> str:
        return f"https://{self.vault_name}.{self.endpoint_suffix}"

    @property
    def missing(self) -> list[str]:
        """Env var names for required fields that are still empty."""
        return [env for name, env in _REQUIRED.items() if not getattr(self, name)]

    def require(self) -> VaultConfig:
        """Return self, or raise ValueError naming every missing variable."""
        missing = self.missing
        if missing:
            raise ValueError(f"Missing Key Vault configuration: {', '.join(missing)}")
        return self


# Singleton
_config: VaultConfig | None = None


def get_config() -> VaultConfig:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> VaultConfig:
    """Load configuration from environment variables."""
    return VaultConfig(
        tenant_id=os.environ.get("AZURE_TENANT_ID", ""),
        client_id=os.environ.get("AZURE_CLIENT_ID", ""),
        client_secret=os.environ.get("AZURE_CLIENT_SECRET", ""),
        vault_name=os.environ.get("AZKV_VAULT_NAME", ""),
        endpoint_suffix=os.environ.get("AZKV_ENDPOINT_SUFFIX", PUBLIC_ENDPOINT_SUFFIX),
        api_version=os.environ.get("AZKV_API_VERSION", DEFAULT_API_VERSION),
        authority=os.environ.get("AZKV_AUTHORITY", DEFAULT_AUTHORITY).rstrip("/"),
        timeout=float(os.environ.get("AZKV_TIMEOUT", str(DEFAULT_TIMEOUT))),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
