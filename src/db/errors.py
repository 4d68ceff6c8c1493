"""Classification of store errors into a closed set of kinds.

Services decide what to do with a failed statement by its kind
(``StoreErrorKind``) and never look at driver-specific SQLSTATE codes.
"""

from __future__ import annotations

from enum import Enum

from sqlalchemy import exc

# PostgreSQL SQLSTATE codes
_UNIQUE_VIOLATION = "23505"
_INTEGRITY_CLASS = "23"
_CONNECTION_CLASS = "08"
_SYNTAX_CLASS = "42"


class StoreErrorKind(str, Enum):
    """What went wrong in the relational store."""

    DUPLICATE = "duplicate"
    CONSTRAINT_VIOLATION = "constraint_violation"
    CONNECTION_FAILURE = "connection_failure"
    QUERY_SYNTAX = "query_syntax"
    OTHER = "other"


def _sqlstate(error: exc.DBAPIError) -> str | None:
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return str(code) if code else None


def classify_error(error: BaseException) -> StoreErrorKind:
    """Map an exception raised by SQLAlchemy to a StoreErrorKind."""
    if isinstance(error, exc.TimeoutError | exc.DisconnectionError):
        return StoreErrorKind.CONNECTION_FAILURE
    if not isinstance(error, exc.DBAPIError):
        return StoreErrorKind.OTHER

    code = _sqlstate(error)
    if code is not None:
        if code == _UNIQUE_VIOLATION:
            return StoreErrorKind.DUPLICATE
        if code.startswith(_INTEGRITY_CLASS):
            return StoreErrorKind.CONSTRAINT_VIOLATION
        if code.startswith(_CONNECTION_CLASS):
            return StoreErrorKind.CONNECTION_FAILURE
        if code.startswith(_SYNTAX_CLASS):
            return StoreErrorKind.QUERY_SYNTAX

    if isinstance(error, exc.IntegrityError):
        # Drivers without SQLSTATE (e.g. sqlite) only expose the message
        message = str(error.orig).lower()
        if "unique" in message or "duplicate key" in message:
            return StoreErrorKind.DUPLICATE
        return StoreErrorKind.CONSTRAINT_VIOLATION
    if error.connection_invalidated or isinstance(error, exc.InterfaceError | exc.OperationalError):
        return StoreErrorKind.CONNECTION_FAILURE
    if isinstance(error, exc.ProgrammingError):
        return StoreErrorKind.QUERY_SYNTAX
    return StoreErrorKind.OTHER


def error_message(error: BaseException) -> str:
    """Raw driver message for an error, without SQLAlchemy's statement dump."""
    if isinstance(error, exc.DBAPIError) and error.orig is not None:
        return str(error.orig)
    return str(error)
