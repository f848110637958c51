"""
SQL statements for ciphers and folders.

Every statement that reads or mutates an existing record is scoped by
`(id, user_id)`, so one principal can never touch another's records.
"""

import json
from typing import Any, Dict

from vault_sync.models import Cipher, Folder
from vault_sync.storage.protocols import DatabaseHandle, PreparedStatement

_CIPHER_COLUMNS = (
    "id, user_id, organization_id, type, data, favorite, folder_id, created_at, updated_at"
)
_CIPHER_VALUES = (
    ":id, :user_id, :organization_id, :type, :data, :favorite, :folder_id, :created_at, :updated_at"
)

INSERT_CIPHER = f"INSERT INTO ciphers ({_CIPHER_COLUMNS}) VALUES ({_CIPHER_VALUES})"
# Re-importing an id that already exists is a no-op
INSERT_CIPHER_IGNORE = INSERT_CIPHER + " ON CONFLICT (id) DO NOTHING"
SELECT_CIPHER = "SELECT * FROM ciphers WHERE id = :id AND user_id = :user_id"
SELECT_USER_CIPHERS = "SELECT * FROM ciphers WHERE user_id = :user_id ORDER BY created_at, id"
UPDATE_CIPHER = (
    "UPDATE ciphers SET organization_id = :organization_id, type = :type, data = :data, "
    "favorite = :favorite, folder_id = :folder_id, updated_at = :updated_at "
    "WHERE id = :id AND user_id = :user_id"
)
SET_CIPHER_DELETED_AT = (
    "UPDATE ciphers SET deleted_at = :deleted_at, updated_at = :updated_at "
    "WHERE id = :id AND user_id = :user_id"
)
DELETE_CIPHER = "DELETE FROM ciphers WHERE id = :id AND user_id = :user_id"

INSERT_FOLDER = (
    "INSERT INTO folders (id, user_id, name, created_at, updated_at) "
    "VALUES (:id, :user_id, :name, :created_at, :updated_at)"
)
INSERT_FOLDER_IGNORE = INSERT_FOLDER + " ON CONFLICT (id) DO NOTHING"
SELECT_FOLDER = "SELECT * FROM folders WHERE id = :id AND user_id = :user_id"
SELECT_USER_FOLDERS = "SELECT * FROM folders WHERE user_id = :user_id ORDER BY created_at, id"
UPDATE_FOLDER = (
    "UPDATE folders SET name = :name, updated_at = :updated_at "
    "WHERE id = :id AND user_id = :user_id"
)
DELETE_FOLDER = "DELETE FROM folders WHERE id = :id AND user_id = :user_id"


def cipher_params(cipher: Cipher) -> Dict[str, Any]:
    """Column values for a cipher row; `data` is serialized and `favorite` is 0/1."""
    return {
        "id": cipher.id,
        "user_id": cipher.user_id,
        "organization_id": cipher.organization_id,
        "type": int(cipher.type),
        "data": json.dumps(cipher.data.to_storage()) if cipher.data is not None else "{}",
        "favorite": 1 if cipher.favorite else 0,
        "folder_id": cipher.folder_id,
        "created_at": cipher.created_at,
        "updated_at": cipher.updated_at,
    }


def folder_params(folder: Folder) -> Dict[str, Any]:
    return folder.model_dump()


def insert_cipher(
    db: DatabaseHandle, cipher: Cipher, ignore_existing: bool = False
) -> PreparedStatement:
    sql = INSERT_CIPHER_IGNORE if ignore_existing else INSERT_CIPHER
    return db.prepare(sql).bind(cipher_params(cipher))


def update_cipher(db: DatabaseHandle, cipher: Cipher) -> PreparedStatement:
    params = cipher_params(cipher)
    del params["created_at"]
    return db.prepare(UPDATE_CIPHER).bind(params)


def insert_folder(
    db: DatabaseHandle, folder: Folder, ignore_existing: bool = False
) -> PreparedStatement:
    sql = INSERT_FOLDER_IGNORE if ignore_existing else INSERT_FOLDER
    return db.prepare(sql).bind(folder_params(folder))


def owned(db: DatabaseHandle, sql: str, record_id: str, user_id: str) -> PreparedStatement:
    """Statement scoped to one record of one owner."""
    return db.prepare(sql).bind({"id": record_id, "user_id": user_id})
