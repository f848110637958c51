"""
Client JSON → canonical model.

Clients send camelCase JSON with loosely typed booleans. Single-item requests
arrive either flat (fields directly on the body) or nested under `cipher`
together with `collectionIds`; both decode to the same CipherRequest.
Unknown fields are ignored so newer clients keep working.
"""

import json
import logging
from typing import Annotated, Any, List, Mapping, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from vault_sync.errors import BadInput, StorageFailure
from vault_sync.models import (
    Cipher,
    CipherData,
    CipherType,
    FolderRelationship,
    ImportFolder,
)

logger = logging.getLogger(__name__)


def _coerce_bool(value: Any) -> Any:
    """Accept a native boolean or the integers 0/1; reject everything else."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValueError("expected a boolean or an integer 0 or 1")


LooseBool = Annotated[bool, BeforeValidator(_coerce_bool)]


class CipherRequest(BaseModel):
    """Body of a single-item create or update request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: CipherType
    folder_id: Optional[str] = None
    organization_id: Optional[str] = None
    name: str
    notes: Optional[str] = None
    favorite: LooseBool = False
    login: Optional[Any] = None
    card: Optional[Any] = None
    identity: Optional[Any] = None
    secure_note: Optional[Any] = None
    fields: Optional[Any] = None
    password_history: Optional[Any] = None
    reprompt: Optional[int] = None
    # Accepted for client compatibility; not stored
    last_known_revision_date: Optional[str] = None
    key: Optional[str] = None

    def to_cipher_data(self) -> CipherData:
        """Canonical payload carried by this request."""
        return CipherData(
            name=self.name,
            notes=self.notes,
            login=self.login,
            card=self.card,
            identity=self.identity,
            secure_note=self.secure_note,
            fields=self.fields,
            password_history=self.password_history,
            reprompt=self.reprompt,
        )


class CreateCipherEnvelope(BaseModel):
    """Nested create shape: `{cipher: {...}, collectionIds: [...]}`."""

    cipher: CipherRequest = Field(validation_alias=AliasChoices("cipher", "Cipher"))
    collection_ids: Optional[List[str]] = Field(
        default=None, validation_alias=AliasChoices("collectionIds", "CollectionIds")
    )


class ImportCipher(CipherRequest):
    """Import item; must be encrypted for the importing principal."""

    encrypted_for: str


class ImportRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    folders: List[ImportFolder] = Field(default_factory=list)
    ciphers: List[ImportCipher] = Field(default_factory=list)
    folder_relationships: List[FolderRelationship] = Field(default_factory=list)

    @field_validator("folders", "ciphers", "folder_relationships", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return [] if v is None else v


class FolderRequest(BaseModel):
    """Body of a folder create or rename request."""

    name: str


class CipherRecord(BaseModel):
    """
    A full cipher object as emitted by `encode_cipher`.

    Used when a client sends back a complete cipher; tolerates integer
    booleans on the legacy flags.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    organization_id: Optional[str] = None
    folder_id: Optional[str] = None
    type: CipherType
    favorite: LooseBool = False
    edit: LooseBool = True
    view_password: LooseBool = True
    organization_use_totp: LooseBool = False
    collection_ids: Optional[List[str]] = None
    revision_date: str
    creation_date: str
    deleted_date: Optional[str] = None
    name: Optional[str] = None
    notes: Optional[str] = None
    login: Optional[Any] = None
    card: Optional[Any] = None
    identity: Optional[Any] = None
    secure_note: Optional[Any] = None
    fields: Optional[Any] = None
    password_history: Optional[Any] = None
    reprompt: Optional[int] = None

    def to_cipher(self, user_id: Optional[str] = None) -> Cipher:
        data = None
        if self.name is not None:
            data = CipherData(
                name=self.name,
                notes=self.notes,
                login=self.login,
                card=self.card,
                identity=self.identity,
                secure_note=self.secure_note,
                fields=self.fields,
                password_history=self.password_history,
                reprompt=self.reprompt,
            )
        return Cipher(
            id=self.id,
            user_id=user_id,
            organization_id=self.organization_id,
            type=self.type,
            data=data,
            favorite=self.favorite,
            folder_id=self.folder_id,
            deleted_at=self.deleted_date,
            created_at=self.creation_date,
            updated_at=self.revision_date,
            organization_use_totp=self.organization_use_totp,
            edit=self.edit,
            view_password=self.view_password,
            collection_ids=self.collection_ids or None,
        )


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def _require_object(payload: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise BadInput(f"Invalid {what}: expected a JSON object")
    return payload


def decode_cipher_request(payload: Any) -> Tuple[CipherRequest, Optional[List[str]]]:
    """
    Decode a single-item create/update body.

    Args:
        payload: Parsed JSON body, flat or nested under `cipher`

    Returns:
        Tuple of (request, collection_ids); collection_ids is None when absent
        or empty

    Raises:
        BadInput: If the body is malformed
    """
    body = _require_object(payload, "cipher payload")
    try:
        if "cipher" in body or "Cipher" in body:
            envelope = CreateCipherEnvelope.model_validate(body)
            return envelope.cipher, envelope.collection_ids or None
        return CipherRequest.model_validate(body), None
    except ValidationError as e:
        raise BadInput(f"Invalid cipher payload: {_summarize(e)}") from e


def decode_import_request(payload: Any) -> ImportRequest:
    """Decode a bulk import body. Raises BadInput if malformed."""
    body = _require_object(payload, "import payload")
    try:
        return ImportRequest.model_validate(body)
    except ValidationError as e:
        raise BadInput(f"Invalid import payload: {_summarize(e)}") from e


def decode_cipher_record(payload: Any, user_id: Optional[str] = None) -> Cipher:
    """Decode a full cipher object (the shape produced by encode_cipher)."""
    body = _require_object(payload, "cipher")
    try:
        return CipherRecord.model_validate(body).to_cipher(user_id=user_id)
    except ValidationError as e:
        raise BadInput(f"Invalid cipher: {_summarize(e)}") from e


def decode_stored_data(raw: Optional[str]) -> Optional[CipherData]:
    """
    Parse the stored `data` blob.

    Returns None instead of failing when the blob is missing or malformed, so
    one bad row degrades to null payload fields rather than a failed response.
    """
    if raw is None:
        return None
    try:
        parsed = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        return CipherData.model_validate(parsed)
    except (ValueError, TypeError, ValidationError) as e:
        logger.warning(f"Unparseable cipher data blob: {type(e).__name__}")
        return None


def decode_stored_cipher(row: Mapping[str, Any]) -> Cipher:
    """
    Build a Cipher from a `ciphers` table row.

    Raises:
        StorageFailure: If the row itself is invalid (e.g. an unknown type)
    """
    try:
        return Cipher(
            id=row["id"],
            user_id=row["user_id"],
            organization_id=row.get("organization_id"),
            type=row["type"],
            data=decode_stored_data(row.get("data")),
            favorite=bool(row.get("favorite") or 0),
            folder_id=row.get("folder_id"),
            deleted_at=row.get("deleted_at"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
    except ValidationError as e:
        logger.error(f"Corrupt cipher row {row.get('id')}: {_summarize(e)}")
        raise StorageFailure(f"Corrupt cipher row {row.get('id')}") from e


def decode_folder_request(payload: Any) -> FolderRequest:
    """Decode a folder create/rename body. Raises BadInput if malformed."""
    body = _require_object(payload, "folder payload")
    try:
        return FolderRequest.model_validate(body)
    except ValidationError as e:
        raise BadInput(f"Invalid folder payload: {_summarize(e)}") from e
