from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

UNAUTHENTICATED = "unauthenticated"
PROVIDER_ERROR = "provider_error"
STORE_ERROR = "store_error"
INVALID_INPUT = "invalid_input"
NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ServiceError:
    message: str
    code: str = PROVIDER_ERROR
    status: int = 400


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Either ``data`` or ``error`` is set, never both."""

    data: T | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T | None = None) -> ServiceResult[T]:
        return cls(data=data, error=None)

    @classmethod
    def failure(cls, message: str, code: str = PROVIDER_ERROR, status: int = 400) -> ServiceResult[T]:
        return cls(data=None, error=ServiceError(message=message, code=code, status=status))
