"""Uniform success/error envelope returned by every public workflow operation.

Workflows raise `DomainError` subclasses internally and stay straight-line;
`service_operation` turns whatever escapes into an `OperationResult` so that
nothing leaks past the service boundary as an exception.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, ParamSpec, TypeVar

from acadvizen.exceptions import DomainError, ErrorCode


logger = logging.getLogger(__name__)

T = TypeVar("T")
P = ParamSpec("P")

UNEXPECTED_ERROR = "An unexpected error occurred"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """`{success, data?, error?}` plus the failure code for HTTP mapping."""

    success: bool
    data: T | None = None
    error: str | None = None
    code: ErrorCode | None = None
    exception: DomainError | None = field(default=None, repr=False, compare=False)

    @classmethod
    def ok(cls, data: T | None = None) -> OperationResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: DomainError) -> OperationResult[T]:
        return cls(success=False, error=exc.message, code=exc.code, exception=exc)

    def unwrap(self) -> T:
        """Return the payload, or re-raise the failure as its domain exception."""
        if self.success:
            return self.data  # type: ignore[return-value]
        if self.exception is not None:
            raise self.exception
        raise DomainError(self.error or UNEXPECTED_ERROR)


def service_operation(
    description: str,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[OperationResult[T]]]]:
    """Wrap an async workflow step so it always returns an `OperationResult`."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[OperationResult[T]]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> OperationResult[T]:
            try:
                return OperationResult.ok(await func(*args, **kwargs))
            except DomainError as e:
                logger.warning(f"{description} failed: {e.message}")
                return OperationResult.fail(e)
            except Exception:
                logger.exception(f"{description} error")
                return OperationResult(success=False, error=UNEXPECTED_ERROR, code=ErrorCode.INTERNAL)

        return wrapper

    return decorator
