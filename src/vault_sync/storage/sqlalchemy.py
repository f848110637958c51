"""
SQLAlchemy-based database handle.

Provides the DatabaseHandle protocol on top of any SQLAlchemy-compatible
database (SQLite, PostgreSQL, ...). Statements are plain SQL text with
`:name` placeholders; each `batch` runs inside one transaction.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import Column, Engine, Integer, String, Text, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base

from vault_sync.errors import StorageFailure

logger = logging.getLogger(__name__)

# Create SQLAlchemy Base
Base = declarative_base()


class CipherDB(Base):
    """Schema of the `ciphers` table."""

    __tablename__ = "ciphers"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    organization_id = Column(String, nullable=True)
    type = Column(Integer, nullable=False)

    # Canonical payload, JSON text
    data = Column(Text, nullable=False)
    favorite = Column(Integer, nullable=False, default=0)

    # No foreign key: deleting a folder does not cascade to ciphers
    folder_id = Column(String, nullable=True)

    deleted_at = Column(String, nullable=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)


class FolderDB(Base):
    """Schema of the `folders` table."""

    __tablename__ = "folders"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(Text, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)


class SQLAlchemyStatement:
    """Prepared statement bound to a SQLAlchemyDatabase."""

    def __init__(
        self,
        database: "SQLAlchemyDatabase",
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
    ):
        self.database = database
        self.sql = sql
        self.params: Dict[str, Any] = dict(params or {})

    def bind(self, params: Mapping[str, Any]) -> "SQLAlchemyStatement":
        return SQLAlchemyStatement(self.database, self.sql, params)

    def first(self) -> Optional[Dict[str, Any]]:
        with self.database._transaction() as conn:
            row = conn.execute(text(self.sql), self.params).mappings().first()
            return dict(row) if row is not None else None

    def all(self) -> List[Dict[str, Any]]:
        with self.database._transaction() as conn:
            return [dict(row) for row in conn.execute(text(self.sql), self.params).mappings()]

    def run(self) -> int:
        with self.database._transaction() as conn:
            return conn.execute(text(self.sql), self.params).rowcount

    def __repr__(self) -> str:
        return f"SQLAlchemyStatement({self.sql.split()[0]}, params={sorted(self.params)})"


class SQLAlchemyDatabase:
    """
    DatabaseHandle implementation backed by a SQLAlchemy engine.

    Example:
        from sqlalchemy import create_engine
        engine = create_engine("sqlite:///vault.db")
        db = SQLAlchemyDatabase(engine)
        db.create_tables()
        row = db.prepare("SELECT * FROM folders WHERE id = :id").bind({"id": "f1"}).first()
    """

    def __init__(self, engine: Engine):
        """
        Initialize the database handle.

        Args:
            engine: SQLAlchemy engine for database connection
        """
        self.engine = engine
        logger.info(f"SQLAlchemyDatabase initialized (engine={engine.url})")

    @contextmanager
    def _transaction(self):
        """Connection in a transaction; commits on success, rolls back on error."""
        try:
            with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error(f"Database error: {e}")
            raise StorageFailure(f"Database error: {e}") from e

    def create_tables(self):
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)
        logger.info("Database tables created/verified")

    def prepare(self, sql: str) -> SQLAlchemyStatement:
        return SQLAlchemyStatement(self, sql)

    def batch(self, statements: Sequence[SQLAlchemyStatement]) -> List[int]:
        """Execute statements in order inside a single transaction."""
        with self._transaction() as conn:
            return [conn.execute(text(stmt.sql), stmt.params).rowcount for stmt in statements]
