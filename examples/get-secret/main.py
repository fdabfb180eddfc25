"""
Get Secret Example
==================

Fetches the latest version of a secret and prints its value and metadata.

Prerequisites:
  - A service principal with "get" permission on the vault's secrets

Usage:
  export AZURE_TENANT_ID=... AZURE_CLIENT_ID=... AZURE_CLIENT_SECRET=...
  export AZKV_VAULT_NAME=my-vault
  python main.py test
"""

import asyncio
import logging
import sys

from azkv import NotFoundError, SecretClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def main(name: str) -> int:
    async with SecretClient.from_env() as client:
        try:
            secret = await client.get_secret(name)
        except NotFoundError:
            logger.error("Secret %s does not exist in %s", name, client.vault_url)
            return 1

    print(f"name:    {secret.name}")
    print(f"version: {secret.version}")
    print(f"value:   {secret.value}")
    if secret.attributes:
        print(f"enabled: {secret.attributes.enabled}")
        print(f"updated: {secret.attributes.updated}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "test")))
