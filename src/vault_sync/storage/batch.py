"""
Chunked execution of write statements.

Large imports can exceed what one backend transaction accepts, so writes are
split into consecutive chunks, each executed as one atomic `batch`. There is
no atomicity across chunks: a failure leaves earlier chunks applied and stops
before later ones.
"""

import logging
from typing import Sequence

from vault_sync.storage.protocols import DatabaseHandle, PreparedStatement

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 30


def execute_batched(
    db: DatabaseHandle,
    statements: Sequence[PreparedStatement],
    chunk_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """
    Execute statements in chunks of at most `chunk_size`.

    Args:
        db: Database handle used to run each chunk
        statements: Statements to execute, in order
        chunk_size: Maximum statements per atomic chunk; 0 runs everything
            as a single chunk

    Returns:
        Number of chunks executed

    Raises:
        ValueError: If chunk_size is negative
        StorageFailure: If a chunk fails; remaining chunks are not executed
    """
    if chunk_size < 0:
        raise ValueError(f"chunk_size must be >= 0, got {chunk_size}")

    statements = list(statements)
    if not statements:
        return 0

    if chunk_size == 0:
        chunk_size = len(statements)

    chunks = 0
    for start in range(0, len(statements), chunk_size):
        chunk = statements[start : start + chunk_size]
        db.batch(chunk)
        chunks += 1
        logger.debug(f"Executed batch chunk {chunks} ({len(chunk)} statements)")

    return chunks
