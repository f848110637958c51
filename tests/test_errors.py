"""
Unit tests for the error taxonomy and the JSON error boundary.
"""

import pytest

from vault_sync.errors import (
    GENERIC_INTERNAL_MESSAGE,
    BadInput,
    NotFound,
    StorageFailure,
    Unauthorized,
    VaultError,
    error_response,
)


@pytest.mark.parametrize(
    "error_cls,status",
    [(BadInput, 400), (Unauthorized, 401), (NotFound, 404), (StorageFailure, 500)],
)
def test_status_codes(error_cls, status):
    assert issubclass(error_cls, VaultError)
    assert error_cls("x").status_code == status


def test_client_errors_keep_message():
    status, body = NotFound("Cipher not found").to_response()

    assert status == 404
    assert body == {"message": "Cipher not found", "object": "error"}


def test_storage_failure_hides_detail():
    """Database detail never reaches the client."""
    error = StorageFailure("Database error: UNIQUE constraint failed: ciphers.id")

    status, body = error_response(error)

    assert status == 500
    assert body["message"] == GENERIC_INTERNAL_MESSAGE
    assert "UNIQUE" not in body["message"]
    # Still available for logs
    assert "UNIQUE" in error.message


def test_unknown_exception_becomes_generic_500():
    status, body = error_response(RuntimeError("secret detail"))

    assert status == 500
    assert body == {"message": GENERIC_INTERNAL_MESSAGE, "object": "error"}


def test_unauthorized_response():
    status, body = error_response(Unauthorized("Cipher encrypted for wrong user"))

    assert status == 401
    assert body["message"] == "Cipher encrypted for wrong user"
