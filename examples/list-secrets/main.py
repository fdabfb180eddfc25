"""
List Secrets Example
====================

Prints the names of up to N secrets in the vault (values are never listed).

Usage:
  export AZURE_TENANT_ID=... AZURE_CLIENT_ID=... AZURE_CLIENT_SECRET=...
  export AZKV_VAULT_NAME=my-vault
  python main.py 25
"""

import asyncio
import logging
import sys

from azkv import SecretClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


async def main(limit: int) -> int:
    async with SecretClient.from_env() as client:
        secrets = await client.list_secrets(max_results=limit)

    for s in secrets:
        enabled = s.attributes.enabled if s.attributes else None
        print(f"{s.name:40} enabled={enabled}")
    print(f"\n{len(secrets)} secret(s)")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(int(sys.argv[1]) if len(sys.argv) > 1 else 25)))
