"""
Set Secret Example
==================

Stores a value, reads it back, and checks the two match.

Prerequisites:
  - A service principal with "get" and "set" permissions on the vault's secrets

Usage:
  export AZURE_TENANT_ID=... AZURE_CLIENT_ID=... AZURE_CLIENT_SECRET=...
  export AZKV_VAULT_NAME=my-vault
  python main.py test whatup
"""

import asyncio
import logging
import sys

from azkv import SecretClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


async def main(name: str, value: str) -> int:
    async with SecretClient.from_env() as client:
        stored = await client.set_secret(name, value)
        print(f"Stored {stored.name} as version {stored.version}")

        fetched = await client.get_secret(name)

    assert fetched.value == value, "read-back value does not match"
    print("Read-back OK")
    return 0


if __name__ == "__main__":
    args = sys.argv[1:] or ["test", "whatup"]
    if len(args) != 2:
        print("usage: python main.py NAME VALUE", file=sys.stderr)
        sys.exit(2)
    sys.exit(asyncio.run(main(*args)))
