from enum import IntEnum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CipherType(IntEnum):
    LOGIN = 1
    SECURE_NOTE = 2
    CARD = 3
    IDENTITY = 4

    @property
    def payload_field(self) -> str:
        """Name of the CipherData attribute that holds this kind's payload."""
        return _PAYLOAD_FIELDS[self]


_PAYLOAD_FIELDS = {
    CipherType.LOGIN: "login",
    CipherType.SECURE_NOTE: "secure_note",
    CipherType.CARD: "card",
    CipherType.IDENTITY: "identity",
}


class CipherData(BaseModel):
    """
    Canonical payload of a vault item, stored in the `data` column.

    Everything except `name` is opaque client ciphertext and is carried
    through untouched. Serialized with camelCase keys and without unset
    fields.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    notes: Optional[str] = None
    login: Optional[Any] = None
    card: Optional[Any] = None
    identity: Optional[Any] = None
    secure_note: Optional[Any] = None
    fields: Optional[Any] = None
    password_history: Optional[Any] = None
    reprompt: Optional[int] = None

    def to_storage(self) -> dict:
        """Dictionary form written to storage (camelCase, nulls dropped)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Cipher(BaseModel):
    """A stored vault item (login, secure note, card or identity)."""

    id: str
    user_id: Optional[str] = None
    organization_id: Optional[str] = None
    type: CipherType
    # None when the stored blob could not be parsed
    data: Optional[CipherData] = None
    favorite: bool = False
    folder_id: Optional[str] = None
    deleted_at: Optional[str] = None
    created_at: str
    updated_at: str

    # Response-only flags; always these values for user-owned items
    organization_use_totp: bool = False
    edit: bool = True
    view_password: bool = True
    collection_ids: Optional[List[str]] = None


class Folder(BaseModel):
    id: str
    user_id: str
    name: str
    created_at: str
    updated_at: str


class ImportFolder(BaseModel):
    """Folder descriptor inside an import batch; `id` is a client-side temporary id."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    name: str


class FolderRelationship(BaseModel):
    """Positional link: ciphers[key] belongs to folders[value]."""

    key: int
    value: int


class ImportPlan(BaseModel):
    """Records produced by reconciling one import batch, in write order."""

    folders: List[Folder] = Field(default_factory=list)
    ciphers: List[Cipher] = Field(default_factory=list)
    ignored_relationships: int = 0
