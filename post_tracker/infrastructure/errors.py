"""
Error taxonomy and translation for the persistence gateway.

Every failure that can come back from the data service, the network or
the decode step is turned into a GatewayError with a stable ErrorKind
and a human-readable message. Raw backend messages only reach the user
as a fallback when nothing more specific applies.
"""

from enum import Enum
from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError

logger = structlog.get_logger()


class ErrorKind(str, Enum):
    """Category of a failed action."""
    VALIDATION = "validation"      # Record failed schema checks
    NOT_FOUND = "not_found"        # Target id absent locally or remotely
    CONFLICT = "conflict"          # Unique constraint violated
    REFERENCE = "reference"        # Foreign key violated
    PERMISSION = "permission"      # Backend refused the operation
    TRANSPORT = "transport"        # Network failure or timeout
    UNKNOWN = "unknown"            # Unclassified backend error
    CONFIGURATION = "configuration"  # Missing backend credentials


class Operation(str, Enum):
    """Kind of call that failed; shapes the reference-error message."""
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


DEFAULT_MESSAGE = "An unexpected error occurred"

MESSAGES = {
    ErrorKind.CONFLICT: "This record already exists",
    ErrorKind.PERMISSION: "You do not have permission to perform this action",
    ErrorKind.NOT_FOUND: "The record no longer exists",
}

REFERENCE_MESSAGES = {
    Operation.DELETE: "Cannot delete this record because it is referenced by other data",
    Operation.INSERT: "The parent record this refers to does not exist",
    Operation.UPDATE: "The parent record this refers to does not exist",
    Operation.SELECT: "The parent record this refers to does not exist",
}

# PostgreSQL / PostgREST error codes
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"
PG_CHECK_VIOLATION = "23514"
PG_INVALID_TEXT = "22P02"
PG_INSUFFICIENT_PRIVILEGE = "42501"
PGRST_NO_ROWS = "PGRST116"


class GatewayError(Exception):
    """A translated failure from the gateway or a store pre-check."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        code: Optional[str] = None,
        raw: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code
        self.raw = raw

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "code": self.code,
            "raw": self.raw,
        }


def not_found(entity: str) -> GatewayError:
    return GatewayError(ErrorKind.NOT_FOUND, f"{entity} not found")


def pending(entity: str) -> GatewayError:
    return GatewayError(
        ErrorKind.NOT_FOUND,
        f"{entity} has not been saved yet; try again once it is saved",
    )


def pending_parent(entity: str) -> GatewayError:
    return GatewayError(
        ErrorKind.REFERENCE,
        f"The parent {entity} has not been saved yet",
    )


def immutable_field(field_name: str) -> GatewayError:
    return GatewayError(
        ErrorKind.VALIDATION,
        f"Validation error: {field_name} cannot be changed (field: {field_name})",
    )


def validation_message(exc: ValidationError) -> str:
    """First validation problem, with the offending field path."""
    errors = exc.errors()
    if not errors:
        return "Validation error"
    first = errors[0]
    message = first.get("msg", "invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    text = f"Validation error: {message}"
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        text += f" (field: {location})"
    return text


def error_from_response(
    status_code: int,
    payload: Any,
    operation: Operation,
) -> GatewayError:
    """
    Translate a PostgREST error body into a GatewayError.

    Codes are checked before the raw message so known failures always
    get their specific wording.
    """
    body = payload if isinstance(payload, dict) else {}
    code = body.get("code")
    raw = body.get("message") or (payload if isinstance(payload, str) else None)

    if code == PG_UNIQUE_VIOLATION:
        return GatewayError(ErrorKind.CONFLICT, MESSAGES[ErrorKind.CONFLICT], code, raw)
    if code == PG_FOREIGN_KEY_VIOLATION:
        return GatewayError(ErrorKind.REFERENCE, REFERENCE_MESSAGES[operation], code, raw)
    if code == PG_INSUFFICIENT_PRIVILEGE or (code is None and status_code in (401, 403)):
        return GatewayError(ErrorKind.PERMISSION, MESSAGES[ErrorKind.PERMISSION], code, raw)
    if code == PGRST_NO_ROWS:
        return GatewayError(ErrorKind.NOT_FOUND, MESSAGES[ErrorKind.NOT_FOUND], code, raw)
    if code in (PG_CHECK_VIOLATION, PG_INVALID_TEXT):
        return GatewayError(
            ErrorKind.VALIDATION,
            f"Validation error: {raw or 'invalid value'}",
            code,
            raw,
        )

    if raw:
        return GatewayError(ErrorKind.UNKNOWN, f"Database error: {raw}", code, raw)
    return GatewayError(
        ErrorKind.UNKNOWN,
        f"Database error: HTTP {status_code}",
        code,
        raw,
    )


def translate_error(exc: BaseException, operation: Operation = Operation.SELECT) -> GatewayError:
    """Map any exception raised during a gateway call to a GatewayError."""
    if isinstance(exc, GatewayError):
        return exc
    if isinstance(exc, ValidationError):
        return GatewayError(ErrorKind.VALIDATION, validation_message(exc), raw=str(exc))
    if isinstance(exc, httpx.TimeoutException):
        return GatewayError(
            ErrorKind.TRANSPORT,
            "Network error: the data service did not respond in time",
            raw=str(exc) or None,
        )
    if isinstance(exc, httpx.TransportError):
        detail = str(exc) or exc.__class__.__name__
        return GatewayError(
            ErrorKind.TRANSPORT,
            f"Network error: {detail}",
            raw=str(exc) or None,
        )

    logger.warning(
        "gateway.unclassified_error",
        error_type=exc.__class__.__name__,
        error=str(exc),
    )
    raw = str(exc) or None
    return GatewayError(ErrorKind.UNKNOWN, raw or DEFAULT_MESSAGE, raw=raw)
