"""
Storage layer for the vault core.

Defines the database handle protocol consumed by the core, chunked batch
execution, the SQL statements for ciphers and folders, and a SQLAlchemy
implementation of the handle.
"""

from vault_sync.storage.batch import DEFAULT_BATCH_SIZE, execute_batched
from vault_sync.storage.protocols import DatabaseHandle, PreparedStatement
from vault_sync.storage.sqlalchemy import SQLAlchemyDatabase

__all__ = [
    "DatabaseHandle",
    "PreparedStatement",
    "SQLAlchemyDatabase",
    "DEFAULT_BATCH_SIZE",
    "execute_batched",
]
