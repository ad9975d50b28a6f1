"""Error Boundary Mappers

Module boundary error mapping. Each engine module reports a single error
type at its boundary, tagged with where it came from.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .types import (
    AppError,
    ErrorCode,
    ErrorContext,
    Result,
)
from .builders import internal_error

T = TypeVar("T")


class ErrorMapper(ABC, Generic[T]):
    """Abstract base for error mappers at module boundaries."""

    @abstractmethod
    def map_error(self, error: AppError) -> AppError:
        """Map internal error to boundary error."""
        pass

    def map_result(self, result: Result[T, AppError]) -> Result[T, AppError]:
        """Map errors in Result while preserving success values."""
        return result.map_err(self.map_error)


class ValidationErrorMapper(ErrorMapper[T]):
    """Maps content validation errors (pydantic) to AppErrors."""

    def __init__(self, origin: str = "validation"):
        self.origin = origin

    def map_error(self, error: AppError) -> AppError:
        if 2000 <= error.code.value < 3000:
            return error
        return error.with_context(origin=self.origin)

    def map_pydantic_errors(self, errors: list[dict]) -> list[AppError]:
        """Map Pydantic validation errors to AppErrors."""
        result = []
        for err in errors:
            field = ".".join(str(loc) for loc in err.get("loc", []))
            msg = err.get("msg", "Validation error")
            err_type = err.get("type", "value_error")

            code = ErrorCode.E2000_VALIDATION_GENERIC
            if err_type == "missing":
                code = ErrorCode.E2001_REQUIRED_FIELD_MISSING
            elif err_type.endswith("_type"):
                code = ErrorCode.E2004_INVALID_TYPE
            elif "value_error" in err_type or err_type.endswith("_parsing"):
                code = ErrorCode.E2002_INVALID_FORMAT

            result.append(AppError(
                code=code,
                message=f"{field}: {msg}",
                context=ErrorContext(origin=self.origin),
                metadata={"field": field, "error_type": err_type},
            ))

        return result


class EngineErrorMapper(ErrorMapper[T]):
    """Tags engine errors with an ``engine.<name>`` origin."""

    def __init__(self, engine_name: str):
        self.engine_name = engine_name
        self.origin = f"engine.{engine_name}"

    def map_error(self, error: AppError) -> AppError:
        return error.with_context(origin=self.origin)

    def map_exception(self, exc: Exception) -> AppError:
        return internal_error(
            f"Engine error in {self.engine_name}: {exc}",
            origin=self.origin,
            cause=exc,
        ).error
