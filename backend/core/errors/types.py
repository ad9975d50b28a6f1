"""Monadic Error Handling Types

Result/Either types for deterministic, composable error propagation through
the word bank engine. A "not ready" submission, a broken curriculum file and a
failing reward ledger all travel as values, never as control flow.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import (
    TYPE_CHECKING, Callable, Generic, Iterator, NoReturn,
    TypeVar, Union, final,
)
from uuid import uuid4

if TYPE_CHECKING:
    from collections.abc import Awaitable

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound="AppError")
F = TypeVar("F", bound="AppError")


class ErrorCode(Enum):
    """Hierarchical error code taxonomy.

    E1xxx: External collaborator failures (reward ledger, mastery tracker)
    E2xxx: Validation errors
    E4xxx: Content errors (vocabulary, curriculum files)
    E5xxx: Business logic errors
    E9xxx: Internal/Unknown errors
    """
    # External collaborators (E1xxx)
    E1000_EXTERNAL_GENERIC = 1000
    E1010_REWARD_LEDGER_FAILED = 1010
    E1011_MASTERY_TRACKER_FAILED = 1011

    # Validation (E2xxx)
    E2000_VALIDATION_GENERIC = 2000
    E2001_REQUIRED_FIELD_MISSING = 2001
    E2002_INVALID_FORMAT = 2002
    E2003_OUT_OF_RANGE = 2003
    E2004_INVALID_TYPE = 2004
    E2010_INVALID_TARGET = 2010
    E2020_INVALID_CURRICULUM = 2020
    E2030_INCOMPLETE_SUBMISSION = 2030

    # Content (E4xxx)
    E4000_CONTENT_GENERIC = 4000
    E4010_VOCABULARY_NOT_FOUND = 4010
    E4020_CURRICULUM_NOT_FOUND = 4020

    # Business Logic (E5xxx)
    E5000_BUSINESS_GENERIC = 5000
    E5002_STATE_CONFLICT = 5002
    E5003_PRECONDITION_FAILED = 5003

    # Internal (E9xxx)
    E9000_INTERNAL_GENERIC = 9000
    E9001_UNEXPECTED_ERROR = 9001

    @property
    def category(self) -> str:
        """Human-readable error category."""
        code = self.value
        if 1000 <= code < 2000:
            return "external"
        if 2000 <= code < 3000:
            return "validation"
        if 4000 <= code < 5000:
            return "content"
        if 5000 <= code < 6000:
            return "business"
        return "internal"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Immutable context for error tracing and debugging."""
    correlation_id: str = field(default_factory=lambda: str(uuid4())[:8])
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    origin: str = ""
    exercise_id: str | None = None


@dataclass(frozen=True, slots=True)
class AppError:
    """Base engine error with full context.

    All errors carry:
    - Typed error code from taxonomy
    - Human-readable message
    - Structured metadata for debugging
    - Tracing context (correlation id, origin, exercise id)
    - Optional cause for error chaining
    """
    code: ErrorCode
    message: str
    context: ErrorContext = field(default_factory=ErrorContext)
    metadata: dict = field(default_factory=dict)
    cause: Exception | None = None

    @property
    def error_id(self) -> str:
        """Unique identifier for this error instance."""
        return f"{self.code.name}:{self.context.correlation_id}"

    def with_context(self, **kwargs) -> AppError:
        """Create new error with updated context."""
        new_ctx = ErrorContext(
            correlation_id=kwargs.get("correlation_id", self.context.correlation_id),
            timestamp=self.context.timestamp,
            origin=kwargs.get("origin", self.context.origin),
            exercise_id=kwargs.get("exercise_id", self.context.exercise_id),
        )
        return AppError(
            code=self.code,
            message=self.message,
            context=new_ctx,
            metadata={**self.metadata, **kwargs.get("metadata", {})},
            cause=self.cause,
        )

    def to_dict(self) -> dict:
        """Serialize error for logs and collaborators."""
        return {
            "code": self.code.name,
            "code_num": self.code.value,
            "message": self.message,
            "category": self.code.category,
            "correlation_id": self.context.correlation_id,
            "origin": self.context.origin,
            "timestamp": self.context.timestamp.isoformat(),
            "metadata": self.metadata,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (correlation_id={self.context.correlation_id})"


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result monad."""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, AppError]:
        """Transform the success value."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[AppError], F]) -> Result[T, F]:
        return self  # type: ignore

    def __iter__(self) -> Iterator[T]:
        yield self.value


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result monad. Carries the AppError."""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raises because Err has no value to unwrap."""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        return self  # type: ignore

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        """Transform the error."""
        return Err(f(self.error))

    def __iter__(self) -> Iterator:
        return iter([])


# Type alias for Result monad
Result = Union[Ok[T], Err[E]]


def from_exception(
    exc: Exception,
    code: ErrorCode = ErrorCode.E9001_UNEXPECTED_ERROR,
    message: str | None = None,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Convert exception to Err with full context."""
    return Err(AppError(
        code=code,
        message=message or str(exc) or type(exc).__name__,
        context=ErrorContext(origin=origin),
        metadata=metadata,
        cause=exc,
    ))


async def try_result_async(
    f: Callable[[], Awaitable[T]],
    code: ErrorCode = ErrorCode.E9001_UNEXPECTED_ERROR,
    origin: str = "",
) -> Result[T, AppError]:
    """Await a collaborator call and wrap its outcome in a Result.

    Exceptions become Err; cancellation is not an error and propagates.
    """
    try:
        return Ok(await f())
    except Exception as e:
        return from_exception(e, code=code, origin=origin)


def ensure(
    condition: bool,
    error: AppError,
) -> Result[None, AppError]:
    """Guard function that returns Err if condition is False."""
    return Ok(None) if condition else Err(error)
