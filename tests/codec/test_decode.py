"""
Unit tests for request decoding.

Covers the flat and nested single-item shapes, loose boolean coercion,
forward compatibility with unknown fields, import batches and stored rows.
"""

import json

import pytest

from vault_sync.codec.decode import (
    decode_cipher_record,
    decode_cipher_request,
    decode_folder_request,
    decode_import_request,
    decode_stored_cipher,
    decode_stored_data,
)
from vault_sync.errors import BadInput, StorageFailure
from vault_sync.models import CipherType


@pytest.fixture
def flat_body():
    """Flat create body as sent by clients without collection assignments."""
    return {
        "type": 1,
        "name": "2.name-ciphertext",
        "notes": "2.notes-ciphertext",
        "favorite": False,
        "folderId": None,
        "organizationId": None,
        "login": {"username": "2.user", "password": "2.pass", "uris": [{"uri": "2.uri"}]},
        "fields": [{"name": "2.f", "value": "2.v", "type": 0}],
        "passwordHistory": None,
        "reprompt": 0,
        "lastKnownRevisionDate": "2024-01-01T00:00:00.000Z",
        "key": "2.cipher-key",
    }


def test_flat_and_nested_decode_to_same_request(flat_body):
    flat, flat_collections = decode_cipher_request(flat_body)
    nested, nested_collections = decode_cipher_request({"cipher": flat_body, "collectionIds": []})

    assert flat == nested
    assert flat.to_cipher_data() == nested.to_cipher_data()
    assert flat_collections is None
    # Empty list is normalized to absent
    assert nested_collections is None


def test_nested_collection_ids(flat_body):
    body = {"cipher": flat_body, "collectionIds": ["col1", "col2"]}

    _, collections = decode_cipher_request(body)

    assert collections == ["col1", "col2"]


def test_nested_accepts_pascal_case_envelope(flat_body):
    request, collections = decode_cipher_request({"Cipher": flat_body, "CollectionIds": ["c"]})

    assert request.name == "2.name-ciphertext"
    assert collections == ["c"]


def test_decoded_fields(flat_body):
    request, _ = decode_cipher_request(flat_body)

    assert request.type == CipherType.LOGIN
    assert request.login["username"] == "2.user"
    assert request.reprompt == 0
    assert request.last_known_revision_date == "2024-01-01T00:00:00.000Z"
    assert request.key == "2.cipher-key"


@pytest.mark.parametrize("value,expected", [(True, True), (1, True), (False, False), (0, False)])
def test_favorite_accepts_bool_or_zero_one(flat_body, value, expected):
    flat_body["favorite"] = value

    request, _ = decode_cipher_request(flat_body)

    assert request.favorite is expected


@pytest.mark.parametrize("value", [2, -1, "true", 1.5, None])
def test_favorite_rejects_other_values(flat_body, value):
    flat_body["favorite"] = value

    with pytest.raises(BadInput) as exc_info:
        decode_cipher_request(flat_body)

    assert "favorite" in exc_info.value.message


def test_favorite_defaults_to_false(flat_body):
    del flat_body["favorite"]

    request, _ = decode_cipher_request(flat_body)

    assert request.favorite is False


def test_unknown_fields_are_ignored(flat_body):
    flat_body["someFutureField"] = {"x": 1}
    flat_body["attachments"] = None

    request, _ = decode_cipher_request(flat_body)

    assert request.name == "2.name-ciphertext"


def test_missing_name_is_bad_input(flat_body):
    del flat_body["name"]

    with pytest.raises(BadInput) as exc_info:
        decode_cipher_request(flat_body)

    assert "name" in exc_info.value.message


@pytest.mark.parametrize("cipher_type", [0, 5, 99])
def test_out_of_domain_type_is_bad_input(flat_body, cipher_type):
    flat_body["type"] = cipher_type

    with pytest.raises(BadInput):
        decode_cipher_request(flat_body)


@pytest.mark.parametrize("payload", [None, [], "cipher", 42])
def test_non_object_body_is_bad_input(payload):
    with pytest.raises(BadInput):
        decode_cipher_request(payload)


def test_import_request_decoding():
    request = decode_import_request(
        {
            "folders": [{"id": "tmp-1", "name": "2.folder"}],
            "ciphers": [{"encryptedFor": "user-1", "type": 2, "name": "2.n", "favorite": 1}],
            "folderRelationships": [{"key": 0, "value": 0}],
        }
    )

    assert request.folders[0].name == "2.folder"
    assert request.ciphers[0].encrypted_for == "user-1"
    assert request.ciphers[0].favorite is True
    assert request.folder_relationships[0].key == 0


def test_import_request_missing_sections_default_to_empty():
    request = decode_import_request({"ciphers": None})

    assert request.folders == []
    assert request.ciphers == []
    assert request.folder_relationships == []


def test_import_cipher_requires_encrypted_for():
    with pytest.raises(BadInput) as exc_info:
        decode_import_request({"ciphers": [{"type": 1, "name": "n"}]})

    assert "encryptedFor" in exc_info.value.message


def test_folder_request():
    assert decode_folder_request({"name": "2.folder"}).name == "2.folder"

    with pytest.raises(BadInput):
        decode_folder_request({})


def test_stored_data_parses_blob():
    data = decode_stored_data(json.dumps({"name": "n", "secureNote": {"type": 0}}))

    assert data.name == "n"
    assert data.secure_note == {"type": 0}


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"notes": "no name"}', None])
def test_stored_data_degrades_to_none(raw):
    assert decode_stored_data(raw) is None


def test_stored_row_decoding():
    row = {
        "id": "c1",
        "user_id": "u1",
        "organization_id": None,
        "type": 3,
        "data": json.dumps({"name": "n", "card": {"number": "2.num"}}),
        "favorite": 1,
        "folder_id": "f1",
        "deleted_at": None,
        "created_at": "2024-01-01T00:00:00.000Z",
        "updated_at": "2024-01-02T00:00:00.000Z",
    }

    cipher = decode_stored_cipher(row)

    assert cipher.type == CipherType.CARD
    assert cipher.favorite is True
    assert cipher.folder_id == "f1"
    assert cipher.data.card == {"number": "2.num"}


def test_stored_row_with_unknown_type_is_storage_failure():
    row = {
        "id": "c1",
        "user_id": "u1",
        "type": 9,
        "data": json.dumps({"name": "n"}),
        "favorite": 0,
        "created_at": "2024-01-01T00:00:00.000Z",
        "updated_at": "2024-01-02T00:00:00.000Z",
    }

    with pytest.raises(StorageFailure):
        decode_stored_cipher(row)


def test_cipher_record_accepts_integer_legacy_flags():
    cipher = decode_cipher_record(
        {
            "id": "c1",
            "type": 1,
            "favorite": 1,
            "edit": 0,
            "viewPassword": 1,
            "organizationUseTotp": 0,
            "revisionDate": "2024-01-02T00:00:00.000Z",
            "creationDate": "2024-01-01T00:00:00.000Z",
            "name": "n",
        }
    )

    assert cipher.favorite is True
    assert cipher.edit is False
    assert cipher.view_password is True
    assert cipher.organization_use_totp is False


def test_cipher_record_rejects_out_of_range_flag():
    with pytest.raises(BadInput):
        decode_cipher_record(
            {
                "id": "c1",
                "type": 1,
                "edit": 3,
                "revisionDate": "2024-01-02T00:00:00.000Z",
                "creationDate": "2024-01-01T00:00:00.000Z",
                "name": "n",
            }
        )
