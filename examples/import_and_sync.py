"""
Import and Sync Example

Creates a SQLite-backed VaultService, imports a small batch the way a
client does (folders linked to ciphers by position), then prints the
sync response.
"""

import asyncio
import json
import logging

from vault_sync.config import VaultSettings, create_service
from vault_sync.errors import VaultError, error_response

USER_ID = "user_123"


async def main():
    logging.basicConfig(level=logging.INFO)
    print("=== Import and Sync Example ===\n")

    service = create_service(VaultSettings(database_url="sqlite:///example_vault.db"))

    batch = {
        "folders": [{"id": "tmp-0", "name": "2.Work"}, {"id": "tmp-1", "name": "2.Home"}],
        "ciphers": [
            {
                "encryptedFor": USER_ID,
                "type": 1,
                "name": "2.Email",
                "login": {"username": "2.me", "password": "2.secret"},
            },
            {"encryptedFor": USER_ID, "type": 2, "name": "2.Wifi", "secureNote": {"type": 0}},
        ],
        # ciphers[1] goes into folders[1]; the second entry points past the end and is ignored
        "folderRelationships": [{"key": 1, "value": 1}, {"key": 9, "value": 0}],
    }

    print(await service.import_vault(USER_ID, batch))

    # Importing the same batch again is a no-op
    await service.import_vault(USER_ID, batch)

    sync = await service.sync(USER_ID)
    print(json.dumps(sync, indent=2))

    # A batch encrypted for someone else is rejected as a whole
    batch["ciphers"][0]["encryptedFor"] = "someone_else"
    try:
        await service.import_vault(USER_ID, batch)
    except VaultError as e:
        print(error_response(e))

    print("\n=== Example Complete ===")


if __name__ == "__main__":
    asyncio.run(main())
