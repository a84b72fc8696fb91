from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Generic, Optional, TypeVar

from db.models import Pagination

T = TypeVar("T")


def to_plain(value: Any) -> Any:
    """Convert models, Decimals and containers into JSON-friendly values."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


@dataclass
class ApiResponse(Generic[T]):
    """Uniform result of every backend operation."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
    pagination: Optional[Pagination] = None

    @classmethod
    def ok(
        cls,
        data: Optional[T] = None,
        message: Optional[str] = None,
        pagination: Optional[Pagination] = None,
    ) -> "ApiResponse[T]":
        return cls(success=True, data=data, message=message, pagination=pagination)

    @classmethod
    def fail(cls, error: str) -> "ApiResponse[T]":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            out["data"] = to_plain(self.data)
        if self.error is not None:
            out["error"] = self.error
        if self.message is not None:
            out["message"] = self.message
        if self.pagination is not None:
            out["pagination"] = self.pagination.to_dict()
        return out
