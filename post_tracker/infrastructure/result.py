"""Uniform success/error envelope returned by gateway and store actions."""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from .errors import ErrorKind, GatewayError

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """
    Outcome of a gateway call or store action.

    Callers only need success/data/error; error_kind lets the view layer
    choose between a blocking panel and a transient notification.
    """
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: GatewayError) -> "Result[T]":
        return cls(success=False, error=error.message, error_kind=error.kind)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "data": _dump(self.data),
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
        }


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_dump(item) for item in value]
    return value
