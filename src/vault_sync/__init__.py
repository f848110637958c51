"""
vault-sync: server core for a password-manager vault sync API.

Core components:
- models: Canonical vault models (Cipher, CipherData, Folder)
- codec: Client JSON ⇄ canonical model (decode requests, encode responses)
- reconciler: Bulk import reconciliation (positional folder links, ownership)
- storage: Database handle protocol, chunked batch execution, SQLAlchemy backend
- service: VaultService tying the above together per request
"""

__version__ = "0.1.0"

from vault_sync.errors import BadInput, NotFound, StorageFailure, Unauthorized, VaultError
from vault_sync.models import Cipher, CipherData, CipherType, Folder, ImportPlan
from vault_sync.reconciler import ImportReconciler
from vault_sync.service import VaultService

__all__ = [
    "__version__",
    # Models
    "Cipher",
    "CipherData",
    "CipherType",
    "Folder",
    "ImportPlan",
    # Errors
    "VaultError",
    "BadInput",
    "NotFound",
    "StorageFailure",
    "Unauthorized",
    # Components
    "ImportReconciler",
    "VaultService",
]
