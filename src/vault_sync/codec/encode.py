"""
Canonical model → client JSON.

The response shape is fixed by what existing clients parse: every key is
always present, and the four type-specific payload keys (`login`,
`secureNote`, `card`, `identity`) are all emitted with exactly one of them
populated according to the cipher type.
"""

from typing import Any, Dict, Iterable, List, Optional

from vault_sync.models import Cipher, CipherData, CipherType, Folder

CIPHER_OBJECT = "cipher"
FOLDER_OBJECT = "folder"

_PAYLOAD_KEYS = (
    (CipherType.LOGIN, "login"),
    (CipherType.SECURE_NOTE, "secureNote"),
    (CipherType.CARD, "card"),
    (CipherType.IDENTITY, "identity"),
)


def _payload_fields(cipher_type: int, data: Optional[CipherData]) -> Dict[str, Any]:
    if data is None:
        # Unparseable stored blob: degrade every payload-derived key to null
        fields = dict.fromkeys(("name", "notes", "fields", "passwordHistory", "reprompt"))
        fields.update(dict.fromkeys(key for _, key in _PAYLOAD_KEYS))
        return fields

    fields = {
        "name": data.name,
        "notes": data.notes,
        "fields": data.fields,
        "passwordHistory": data.password_history,
        "reprompt": data.reprompt if data.reprompt is not None else 0,
    }
    for kind, key in _PAYLOAD_KEYS:
        fields[key] = getattr(data, kind.payload_field) if cipher_type == kind else None
    return fields


def encode_cipher(cipher: Cipher) -> Dict[str, Any]:
    """
    Render a cipher as the JSON object clients expect.

    Args:
        cipher: The cipher to render

    Returns:
        Dictionary with a deterministic key set and order
    """
    response: Dict[str, Any] = {
        "object": CIPHER_OBJECT,
        "id": cipher.id,
        "organizationId": cipher.organization_id,
        "folderId": cipher.folder_id,
        "type": int(cipher.type),
        "favorite": cipher.favorite,
        "edit": cipher.edit,
        "viewPassword": cipher.view_password,
        # Newer clients read permissions; derived from the legacy edit flag
        "permissions": {"delete": cipher.edit, "restore": cipher.edit},
        "organizationUseTotp": cipher.organization_use_totp,
        "collectionIds": list(cipher.collection_ids) if cipher.collection_ids else None,
        "revisionDate": cipher.updated_at,
        "creationDate": cipher.created_at,
        "deletedDate": cipher.deleted_at,
    }
    response.update(_payload_fields(cipher.type, cipher.data))
    return response


def encode_folder(folder: Folder) -> Dict[str, Any]:
    return {
        "id": folder.id,
        "name": folder.name,
        "revisionDate": folder.updated_at,
        "object": FOLDER_OBJECT,
    }


def encode_list(items: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Wrap already-encoded objects in the list envelope."""
    return {"object": "list", "data": list(items), "continuationToken": None}


def encode_sync(ciphers: List[Cipher], folders: List[Folder]) -> Dict[str, Any]:
    return {
        "object": "sync",
        "ciphers": [encode_cipher(c) for c in ciphers],
        "folders": [encode_folder(f) for f in folders],
    }
