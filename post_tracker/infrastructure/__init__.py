# Infrastructure components
from .errors import (
    ErrorKind,
    GatewayError,
    Operation,
    error_from_response,
    translate_error,
)
from .gateway import PersistenceGateway
from .result import Result

__all__ = [
    "ErrorKind",
    "GatewayError",
    "Operation",
    "error_from_response",
    "translate_error",
    "PersistenceGateway",
    "Result",
]
