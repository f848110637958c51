"""
Vault service: the operations behind the vault sync API.

Takes parsed client JSON and the authenticated principal's id, runs the
codec, reconciler and storage steps, and returns JSON-ready dictionaries.
Holds no per-request state; one instance can serve every request.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from vault_sync.codec import (
    decode_cipher_request,
    decode_folder_request,
    decode_import_request,
    decode_stored_cipher,
    encode_cipher,
    encode_folder,
    encode_list,
    encode_sync,
)
from vault_sync.errors import NotFound, StorageFailure
from vault_sync.models import Cipher, Folder
from vault_sync.reconciler import ImportReconciler
from vault_sync.storage import queries
from vault_sync.storage.batch import DEFAULT_BATCH_SIZE, execute_batched
from vault_sync.storage.protocols import DatabaseHandle
from vault_sync.utils.timestamps import utc_now

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class VaultService:
    def __init__(
        self,
        db: DatabaseHandle,
        batch_size: int = DEFAULT_BATCH_SIZE,
        reconciler: Optional[ImportReconciler] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        """
        Initialize the service.

        Args:
            db: Database handle for all reads and writes
            batch_size: Statements per atomic chunk during import (0 = one chunk)
            reconciler: Import reconciler; a default one is created if omitted
            clock: Returns the current time; defaults to the system UTC clock
            id_factory: Generates ids for single-record creates
        """
        self.db = db
        self.batch_size = batch_size
        self.reconciler = reconciler or ImportReconciler()
        self.clock = clock
        self.id_factory = id_factory

        logger.info(f"VaultService initialized (batch_size={batch_size})")

    def _now(self) -> str:
        return utc_now(self.clock() if self.clock else None)

    def _load_cipher(self, owner_id: str, cipher_id: str) -> Cipher:
        row = queries.owned(self.db, queries.SELECT_CIPHER, cipher_id, owner_id).first()
        if row is None:
            raise NotFound("Cipher not found")
        return decode_stored_cipher(row)

    def _load_folder(self, owner_id: str, folder_id: str) -> Folder:
        row = queries.owned(self.db, queries.SELECT_FOLDER, folder_id, owner_id).first()
        if row is None:
            raise NotFound("Folder not found")
        return Folder(**row)

    def _check_folder(self, owner_id: str, folder_id: Optional[str]) -> None:
        if folder_id is not None:
            self._load_folder(owner_id, folder_id)

    # ------------------------------------------------------------------
    # Ciphers
    # ------------------------------------------------------------------

    async def create_cipher(self, owner_id: str, payload: Any) -> Dict[str, Any]:
        """
        Create a cipher from a flat or nested request body.

        Args:
            owner_id: The authenticated principal
            payload: Parsed JSON body

        Returns:
            The encoded cipher, including any collectionIds from the request
        """
        request, collection_ids = decode_cipher_request(payload)
        self._check_folder(owner_id, request.folder_id)

        now = self._now()
        cipher = Cipher(
            id=self.id_factory(),
            user_id=owner_id,
            organization_id=request.organization_id,
            type=request.type,
            data=request.to_cipher_data(),
            favorite=request.favorite,
            folder_id=request.folder_id,
            created_at=now,
            updated_at=now,
            collection_ids=collection_ids,
        )
        queries.insert_cipher(self.db, cipher).run()

        logger.info(f"Created cipher {cipher.id} for user {owner_id}")
        return encode_cipher(cipher)

    async def update_cipher(self, owner_id: str, cipher_id: str, payload: Any) -> Dict[str, Any]:
        """
        Replace a cipher's contents, keeping its id and creation date.

        Raises:
            NotFound: If the cipher does not exist for this owner, or the
                request moves it into a folder the owner does not have
        """
        request, _ = decode_cipher_request(payload)
        existing = self._load_cipher(owner_id, cipher_id)
        # An unchanged reference may point at a folder deleted since the last sync
        if request.folder_id != existing.folder_id:
            self._check_folder(owner_id, request.folder_id)

        cipher = Cipher(
            id=existing.id,
            user_id=owner_id,
            organization_id=request.organization_id,
            type=request.type,
            data=request.to_cipher_data(),
            favorite=request.favorite,
            folder_id=request.folder_id,
            deleted_at=existing.deleted_at,
            created_at=existing.created_at,
            updated_at=self._now(),
        )
        queries.update_cipher(self.db, cipher).run()

        logger.info(f"Updated cipher {cipher.id} for user {owner_id}")
        return encode_cipher(cipher)

    async def get_cipher(self, owner_id: str, cipher_id: str) -> Dict[str, Any]:
        return encode_cipher(self._load_cipher(owner_id, cipher_id))

    async def list_ciphers(self, owner_id: str) -> Dict[str, Any]:
        return encode_list(encode_cipher(c) for c in self._user_ciphers(owner_id))

    async def delete_cipher(self, owner_id: str, cipher_id: str) -> None:
        """Permanently delete a cipher. Raises NotFound if absent for this owner."""
        deleted = queries.owned(self.db, queries.DELETE_CIPHER, cipher_id, owner_id).run()
        if not deleted:
            raise NotFound("Cipher not found")
        logger.info(f"Deleted cipher {cipher_id} for user {owner_id}")

    async def soft_delete_cipher(self, owner_id: str, cipher_id: str) -> None:
        """Move a cipher to the trash by setting its deletion date."""
        now = self._now()
        self._set_deleted_at(owner_id, cipher_id, deleted_at=now, updated_at=now)
        logger.info(f"Trashed cipher {cipher_id} for user {owner_id}")

    async def restore_cipher(self, owner_id: str, cipher_id: str) -> Dict[str, Any]:
        """Take a cipher out of the trash and return it."""
        self._set_deleted_at(owner_id, cipher_id, deleted_at=None, updated_at=self._now())
        logger.info(f"Restored cipher {cipher_id} for user {owner_id}")
        return encode_cipher(self._load_cipher(owner_id, cipher_id))

    def _set_deleted_at(
        self, owner_id: str, cipher_id: str, deleted_at: Optional[str], updated_at: str
    ) -> None:
        updated = (
            self.db.prepare(queries.SET_CIPHER_DELETED_AT)
            .bind(
                {
                    "id": cipher_id,
                    "user_id": owner_id,
                    "deleted_at": deleted_at,
                    "updated_at": updated_at,
                }
            )
            .run()
        )
        if not updated:
            raise NotFound("Cipher not found")

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    async def import_vault(self, owner_id: str, payload: Any) -> Dict[str, Any]:
        """
        Import folders and ciphers in bulk.

        Folder inserts are fully written before any cipher insert is issued.
        Writes are chunked by `batch_size`; a failing chunk aborts the import
        with earlier chunks left applied. Re-submitting the same batch is safe.

        Args:
            owner_id: The authenticated principal
            payload: Parsed import body

        Returns:
            Empty object on success

        Raises:
            BadInput: If the payload is malformed
            Unauthorized: If a cipher is encrypted for another principal
            NotFound: If a cipher names a folder the owner does not have
            StorageFailure: If a write fails
        """
        request = decode_import_request(payload)
        plan = self.reconciler.reconcile(request, owner_id, self._now())

        # Folder ids set directly on ciphers (not via relationships) must exist
        planned_folders = {f.id for f in plan.folders}
        for folder_id in {c.folder_id for c in plan.ciphers if c.folder_id} - planned_folders:
            self._load_folder(owner_id, folder_id)

        folder_ops, cipher_ops = self.reconciler.build_operations(self.db, plan)
        folder_chunks = execute_batched(self.db, folder_ops, self.batch_size)
        cipher_chunks = execute_batched(self.db, cipher_ops, self.batch_size)

        logger.info(
            f"Imported {len(plan.folders)} folders and {len(plan.ciphers)} ciphers "
            f"for user {owner_id} ({folder_chunks + cipher_chunks} chunks, "
            f"{plan.ignored_relationships} relationships ignored)"
        )
        return {}

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    async def create_folder(self, owner_id: str, payload: Any) -> Dict[str, Any]:
        request = decode_folder_request(payload)
        now = self._now()
        folder = Folder(
            id=self.id_factory(),
            user_id=owner_id,
            name=request.name,
            created_at=now,
            updated_at=now,
        )
        queries.insert_folder(self.db, folder).run()

        logger.info(f"Created folder {folder.id} for user {owner_id}")
        return encode_folder(folder)

    async def update_folder(self, owner_id: str, folder_id: str, payload: Any) -> Dict[str, Any]:
        request = decode_folder_request(payload)
        folder = self._load_folder(owner_id, folder_id)
        folder = folder.model_copy(update={"name": request.name, "updated_at": self._now()})
        params = {
            "id": folder.id,
            "user_id": owner_id,
            "name": folder.name,
            "updated_at": folder.updated_at,
        }
        self.db.prepare(queries.UPDATE_FOLDER).bind(params).run()

        logger.info(f"Renamed folder {folder_id} for user {owner_id}")
        return encode_folder(folder)

    async def delete_folder(self, owner_id: str, folder_id: str) -> None:
        """Delete a folder; ciphers that referenced it are left untouched."""
        deleted = queries.owned(self.db, queries.DELETE_FOLDER, folder_id, owner_id).run()
        if not deleted:
            raise NotFound("Folder not found")
        logger.info(f"Deleted folder {folder_id} for user {owner_id}")

    async def list_folders(self, owner_id: str) -> Dict[str, Any]:
        return encode_list(encode_folder(f) for f in self._user_folders(owner_id))

    def _user_ciphers(self, owner_id: str) -> List[Cipher]:
        """All ciphers of the owner; corrupt rows are left out of the listing."""
        rows = self.db.prepare(queries.SELECT_USER_CIPHERS).bind({"user_id": owner_id}).all()
        ciphers = []
        for row in rows:
            try:
                ciphers.append(decode_stored_cipher(row))
            except StorageFailure:
                # Logged by the decoder
                continue
        return ciphers

    def _user_folders(self, owner_id: str) -> List[Folder]:
        rows = self.db.prepare(queries.SELECT_USER_FOLDERS).bind({"user_id": owner_id}).all()
        return [Folder(**row) for row in rows]

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    async def sync(self, owner_id: str) -> Dict[str, Any]:
        """Every cipher and folder of the owner, for a full client sync."""
        return encode_sync(self._user_ciphers(owner_id), self._user_folders(owner_id))
