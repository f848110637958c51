"""
Unit tests for response encoding.

The response shape is a compatibility contract: fixed key order, explicit
nulls, and exactly one populated type-specific payload key.
"""

import pytest

from vault_sync.codec.decode import decode_cipher_request
from vault_sync.codec.encode import encode_cipher, encode_folder, encode_list, encode_sync
from vault_sync.models import Cipher, CipherData, CipherType, Folder

EXPECTED_KEYS = [
    "object",
    "id",
    "organizationId",
    "folderId",
    "type",
    "favorite",
    "edit",
    "viewPassword",
    "permissions",
    "organizationUseTotp",
    "collectionIds",
    "revisionDate",
    "creationDate",
    "deletedDate",
    "name",
    "notes",
    "fields",
    "passwordHistory",
    "reprompt",
    "login",
    "secureNote",
    "card",
    "identity",
]

PAYLOAD_KEYS = {
    CipherType.LOGIN: "login",
    CipherType.SECURE_NOTE: "secureNote",
    CipherType.CARD: "card",
    CipherType.IDENTITY: "identity",
}


_DEFAULT_DATA = object()


def make_cipher(cipher_type=CipherType.LOGIN, data=_DEFAULT_DATA, **overrides):
    """
    Cipher whose stored payload populates all four type-specific fields.

    Pass `data=None` for a cipher whose stored blob could not be parsed.
    """
    if data is _DEFAULT_DATA:
        data = CipherData(
            name="2.name",
            notes="2.notes",
            login={"username": "2.u"},
            card={"number": "2.n"},
            identity={"firstName": "2.f"},
            secure_note={"type": 0},
            fields=[{"name": "2.k", "value": "2.v", "type": 0}],
            password_history=[{"password": "2.p", "lastUsedDate": "2024-01-01T00:00:00.000Z"}],
            reprompt=1,
        )
    values = dict(
        id="cipher-1",
        user_id="user-1",
        type=cipher_type,
        data=data,
        created_at="2024-01-01T00:00:00.000Z",
        updated_at="2024-02-01T00:00:00.000Z",
    )
    values.update(overrides)
    return Cipher(**values)


def test_key_set_and_order():
    assert list(encode_cipher(make_cipher())) == EXPECTED_KEYS


@pytest.mark.parametrize("cipher_type", list(CipherType))
def test_only_selected_payload_populated(cipher_type):
    """Stored data may carry all four payloads; only the one for the type is emitted."""
    response = encode_cipher(make_cipher(cipher_type))

    for kind, key in PAYLOAD_KEYS.items():
        assert key in response
        if kind == cipher_type:
            assert response[key] is not None
        else:
            assert response[key] is None


def test_envelope_values():
    response = encode_cipher(make_cipher(favorite=True, folder_id="folder-1"))

    assert response["object"] == "cipher"
    assert response["id"] == "cipher-1"
    assert response["type"] == 1
    assert response["favorite"] is True
    assert response["folderId"] == "folder-1"
    assert response["organizationId"] is None
    assert response["edit"] is True
    assert response["viewPassword"] is True
    assert response["organizationUseTotp"] is False
    assert response["revisionDate"] == "2024-02-01T00:00:00.000Z"
    assert response["creationDate"] == "2024-01-01T00:00:00.000Z"
    assert response["deletedDate"] is None


def test_user_id_is_not_emitted():
    assert "userId" not in encode_cipher(make_cipher())


@pytest.mark.parametrize("edit", [True, False])
def test_permissions_mirror_edit(edit):
    response = encode_cipher(make_cipher(edit=edit))

    assert response["permissions"] == {"delete": edit, "restore": edit}


@pytest.mark.parametrize("collection_ids,expected", [(None, None), ([], None), (["c1"], ["c1"])])
def test_collection_ids_null_when_empty(collection_ids, expected):
    response = encode_cipher(make_cipher(collection_ids=collection_ids))

    assert response["collectionIds"] == expected


def test_reprompt_defaults_to_zero():
    response = encode_cipher(make_cipher(data=CipherData(name="2.n")))

    assert response["reprompt"] == 0
    assert response["notes"] is None
    assert response["fields"] is None
    assert response["passwordHistory"] is None


def test_unparseable_payload_degrades_to_nulls():
    """A cipher whose stored blob could not be parsed still encodes."""
    response = encode_cipher(make_cipher(cipher_type=CipherType.CARD, data=None))

    assert list(response) == EXPECTED_KEYS
    for key in EXPECTED_KEYS[EXPECTED_KEYS.index("name") :]:
        assert response[key] is None
    assert response["id"] == "cipher-1"
    assert response["type"] == 3


def test_round_trip_preserves_payload():
    cipher = make_cipher(cipher_type=CipherType.SECURE_NOTE)

    request, _ = decode_cipher_request(encode_cipher(cipher))
    data = request.to_cipher_data()

    assert data.name == cipher.data.name
    assert data.notes == cipher.data.notes
    assert data.fields == cipher.data.fields
    assert data.password_history == cipher.data.password_history
    assert data.reprompt == cipher.data.reprompt
    assert data.secure_note == cipher.data.secure_note
    # Sibling payloads are null on the wire, so they come back absent
    assert data.login is None
    assert data.card is None


def test_round_trip_unset_optionals_stay_null():
    cipher = make_cipher(data=CipherData(name="2.n", reprompt=0))

    request, _ = decode_cipher_request(encode_cipher(cipher))

    assert request.to_cipher_data().to_storage() == {"name": "2.n", "reprompt": 0}


def test_encode_folder():
    folder = Folder(
        id="f1",
        user_id="u1",
        name="2.folder",
        created_at="2024-01-01T00:00:00.000Z",
        updated_at="2024-01-03T00:00:00.000Z",
    )

    assert encode_folder(folder) == {
        "id": "f1",
        "name": "2.folder",
        "revisionDate": "2024-01-03T00:00:00.000Z",
        "object": "folder",
    }


def test_encode_list_and_sync():
    cipher = make_cipher()
    folder = Folder(
        id="f1",
        user_id="u1",
        name="n",
        created_at="2024-01-01T00:00:00.000Z",
        updated_at="2024-01-01T00:00:00.000Z",
    )

    listing = encode_list([{"id": "a"}])
    sync = encode_sync([cipher], [folder])

    assert listing == {"object": "list", "data": [{"id": "a"}], "continuationToken": None}
    assert sync["object"] == "sync"
    assert sync["ciphers"] == [encode_cipher(cipher)]
    assert sync["folders"] == [encode_folder(folder)]
