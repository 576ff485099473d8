"""Tests for application error classes."""

import pytest

from app.core.errors import (
    AppError,
    AuthenticationFault,
    ConflictFault,
    IntegrityFault,
    NotFoundOrForbidden,
    PermissionDenied,
    TransportFault,
    ValidationFault,
)


@pytest.mark.parametrize("error_cls, status, code", [
    (ValidationFault, 400, "VALIDATION_ERROR"),
    (AuthenticationFault, 401, "AUTHENTICATION_ERROR"),
    (PermissionDenied, 403, "PERMISSION_DENIED"),
    (NotFoundOrForbidden, 404, "NOT_FOUND"),
    (ConflictFault, 409, "CONFLICT"),
    (IntegrityFault, 500, "INTEGRITY_ERROR"),
    (TransportFault, 500, "DB_ERROR"),
])
def test_status_and_code(error_cls, status, code) -> None:
    error = error_cls()
    assert isinstance(error, AppError)
    assert error.status_code == status
    assert error.code == code


def test_permission_denied_names_the_permission() -> None:
    assert PermissionDenied("customers.delete").detail == "Insufficient permissions. Required: customers.delete"


def test_not_found_message_does_not_reveal_existence() -> None:
    assert NotFoundOrForbidden("Customer").detail == "Customer not found or not accessible"


def test_server_side_errors_hide_their_message() -> None:
    error = TransportFault("Failed to get Customer: connection refused on 10.0.0.4")
    assert error.message.startswith("Failed to get Customer")
    assert error.detail == "Internal server error"
    assert IntegrityFault("2 rows").detail == "Internal server error"


def test_client_errors_expose_their_message() -> None:
    assert ValidationFault("limit must be between 1 and 100").detail == "limit must be between 1 and 100"
