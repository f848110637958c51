"""
Import reconciliation.

Turns one bulk import batch into the folder and cipher records to persist.
Clients link ciphers to folders by position (`folderRelationships` holds
`{key: cipherIndex, value: folderIndex}` pairs), not by id; this linkage is
resolved here against the original input order before any cipher is built.

Record ids are derived from the owner, the batch contents and the record
position. Submitting the same batch again yields the same ids, and since the
inserts ignore existing ids the retry is a no-op.
"""

import hashlib
import json
import logging
import uuid
from typing import Callable, List, Optional, Tuple

from vault_sync.codec.decode import ImportRequest
from vault_sync.errors import Unauthorized
from vault_sync.models import Cipher, Folder, ImportPlan
from vault_sync.storage import queries
from vault_sync.storage.protocols import DatabaseHandle, PreparedStatement

logger = logging.getLogger(__name__)

IMPORT_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "urn:vault-sync:import")

# (owner_id, batch_digest, record_kind, position) -> id
IdFactory = Callable[[str, str, str, int], str]


def derive_import_id(owner_id: str, batch_digest: str, kind: str, position: int) -> str:
    """Stable id for the record at `position` of a given owner's batch."""
    return str(uuid.uuid5(IMPORT_NAMESPACE, f"{owner_id}:{batch_digest}:{kind}:{position}"))


def batch_digest(request: ImportRequest) -> str:
    """Content fingerprint of an import batch."""
    canonical = json.dumps(
        request.model_dump(mode="json", by_alias=True), sort_keys=True, separators=(",", ":")
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class ImportReconciler:
    """
    Resolves an import batch into persistable records.

    Reconciliation is pure: nothing is written here. All validation (including
    the ownership check) happens before the caller issues any write, so a
    rejected batch leaves no partial state behind.
    """

    def __init__(self, id_factory: Optional[IdFactory] = None):
        """
        Initialize the reconciler.

        Args:
            id_factory: Function producing record ids; defaults to
                derive_import_id
        """
        self.id_factory = id_factory or derive_import_id

    def resolve_folder_links(
        self, request: ImportRequest, folder_ids: List[str]
    ) -> Tuple[List[Optional[str]], int]:
        """
        Apply positional folder relationships.

        Args:
            request: The import batch
            folder_ids: Resolved id for each folder, in input order

        Returns:
            Tuple of (folder id for each cipher, number of ignored relationships)
        """
        cipher_folders = [c.folder_id for c in request.ciphers]
        ignored = 0

        for rel in request.folder_relationships:
            if not (0 <= rel.key < len(cipher_folders) and 0 <= rel.value < len(folder_ids)):
                ignored += 1
                continue
            cipher_folders[rel.key] = folder_ids[rel.value]

        if ignored:
            logger.warning(f"Ignored {ignored} out-of-range folder relationship(s)")

        return cipher_folders, ignored

    def reconcile(self, request: ImportRequest, owner_id: str, now: str) -> ImportPlan:
        """
        Build the records for one import batch.

        Args:
            request: Decoded import batch
            owner_id: The authenticated principal
            now: Timestamp shared by every record of the batch

        Returns:
            ImportPlan with folders then ciphers, in input order

        Raises:
            Unauthorized: If any cipher is encrypted for another principal
        """
        digest = batch_digest(request)

        folders = [
            Folder(
                id=self.id_factory(owner_id, digest, "folder", position),
                user_id=owner_id,
                name=import_folder.name,
                created_at=now,
                updated_at=now,
            )
            for position, import_folder in enumerate(request.folders)
        ]

        cipher_folders, ignored = self.resolve_folder_links(request, [f.id for f in folders])

        for position, import_cipher in enumerate(request.ciphers):
            if import_cipher.encrypted_for != owner_id:
                logger.warning(
                    f"Rejected import for user {owner_id}: cipher {position} "
                    f"encrypted for another user"
                )
                raise Unauthorized("Cipher encrypted for wrong user")

        ciphers = [
            Cipher(
                id=self.id_factory(owner_id, digest, "cipher", position),
                user_id=owner_id,
                organization_id=import_cipher.organization_id,
                type=import_cipher.type,
                data=import_cipher.to_cipher_data(),
                favorite=import_cipher.favorite,
                folder_id=cipher_folders[position],
                created_at=now,
                updated_at=now,
            )
            for position, import_cipher in enumerate(request.ciphers)
        ]

        return ImportPlan(folders=folders, ciphers=ciphers, ignored_relationships=ignored)

    def build_operations(
        self, db: DatabaseHandle, plan: ImportPlan
    ) -> Tuple[List[PreparedStatement], List[PreparedStatement]]:
        """
        Insert statements for a plan.

        Returns:
            Tuple of (folder inserts, cipher inserts); both ignore ids that
            already exist
        """
        folder_ops = [queries.insert_folder(db, f, ignore_existing=True) for f in plan.folders]
        cipher_ops = [queries.insert_cipher(db, c, ignore_existing=True) for c in plan.ciphers]
        return folder_ops, cipher_ops
