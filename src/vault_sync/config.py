"""
Runtime configuration.

Settings are read from the environment (and an optional `.env` file) once,
at startup, and then passed explicitly to the components that need them.
"""

import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine

from vault_sync.service import VaultService
from vault_sync.storage.batch import DEFAULT_BATCH_SIZE
from vault_sync.storage.sqlalchemy import SQLAlchemyDatabase

logger = logging.getLogger(__name__)


class VaultSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Statements per atomic import chunk; 0 imports everything in one chunk
    import_batch_size: int = DEFAULT_BATCH_SIZE
    database_url: str = "sqlite:///vault.db"

    @field_validator("import_batch_size", mode="before")
    @classmethod
    def fallback_batch_size(cls, v):
        """Invalid or negative values fall back to the default instead of failing startup."""
        try:
            size = int(str(v).strip())
        except (TypeError, ValueError):
            logger.warning(f"Invalid IMPORT_BATCH_SIZE {v!r}, using {DEFAULT_BATCH_SIZE}")
            return DEFAULT_BATCH_SIZE
        if size < 0:
            logger.warning(f"Negative IMPORT_BATCH_SIZE {size}, using {DEFAULT_BATCH_SIZE}")
            return DEFAULT_BATCH_SIZE
        return size


def create_service(settings: Optional[VaultSettings] = None) -> VaultService:
    """
    Build a VaultService backed by the configured database.

    Args:
        settings: Settings to use; loaded from the environment when omitted

    Returns:
        A ready-to-use VaultService (tables are created if missing)
    """
    settings = settings or VaultSettings()
    engine = create_engine(settings.database_url, pool_pre_ping=True)
    db = SQLAlchemyDatabase(engine)
    db.create_tables()
    return VaultService(db, batch_size=settings.import_batch_size)
