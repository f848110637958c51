"""
Wire codec: client JSON ⇄ canonical vault models.

- decode: request bodies (flat or nested), import batches, stored rows
- encode: cipher, folder, list and sync response objects
"""

from vault_sync.codec.decode import (
    CipherRecord,
    CipherRequest,
    CreateCipherEnvelope,
    FolderRequest,
    ImportCipher,
    ImportRequest,
    LooseBool,
    decode_cipher_record,
    decode_cipher_request,
    decode_folder_request,
    decode_import_request,
    decode_stored_cipher,
    decode_stored_data,
)
from vault_sync.codec.encode import encode_cipher, encode_folder, encode_list, encode_sync

__all__ = [
    # Decode
    "CipherRecord",
    "CipherRequest",
    "CreateCipherEnvelope",
    "FolderRequest",
    "ImportCipher",
    "ImportRequest",
    "LooseBool",
    "decode_cipher_record",
    "decode_cipher_request",
    "decode_folder_request",
    "decode_import_request",
    "decode_stored_cipher",
    "decode_stored_data",
    # Encode
    "encode_cipher",
    "encode_folder",
    "encode_list",
    "encode_sync",
]
