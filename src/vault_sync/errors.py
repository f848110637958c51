"""
Error taxonomy for the vault core.

Every failure surfaced to a client is one of the VaultError subclasses below.
Each carries the HTTP-style status code and the client-facing message; the
JSON response boundary turns them into an error body with `to_response()`.
"""

import logging
from typing import Any, Dict, Tuple

logger = logging.getLogger(__name__)

GENERIC_INTERNAL_MESSAGE = "Internal server error"


class VaultError(Exception):
    """Base class for errors surfaced to vault clients."""

    status_code: int = 500

    def __init__(self, message: str = GENERIC_INTERNAL_MESSAGE):
        super().__init__(message)
        self.message = message

    @property
    def client_message(self) -> str:
        """Message safe to return to the client."""
        return self.message

    def to_response(self) -> Tuple[int, Dict[str, Any]]:
        """Render this error as a (status_code, json_body) pair."""
        return self.status_code, {"message": self.client_message, "object": "error"}


class BadInput(VaultError):
    """Malformed payload or out-of-domain value."""

    status_code = 400


class Unauthorized(VaultError):
    """Request is not allowed for the authenticated principal."""

    status_code = 401


class NotFound(VaultError):
    """Referenced record does not exist for the owner."""

    status_code = 404


class StorageFailure(VaultError):
    """
    Persistence-layer failure.

    The detailed message is kept for logs only; clients always receive the
    generic internal error message.
    """

    status_code = 500

    @property
    def client_message(self) -> str:
        return GENERIC_INTERNAL_MESSAGE


def error_response(exc: BaseException) -> Tuple[int, Dict[str, Any]]:
    """
    Map any exception to a (status_code, json_body) pair.

    Unknown exceptions become a generic 500 with no detail.
    """
    if isinstance(exc, VaultError):
        # Storage failures are logged where they are raised
        return exc.to_response()

    logger.error(f"Unhandled error: {type(exc).__name__}: {exc}")
    return 500, {"message": GENERIC_INTERNAL_MESSAGE, "object": "error"}
