"""Monadic Error Handling System

Type-safe error handling inspired by Haskell's Either monad and Rust's
Result type.

Key components:
- Result[T, E]: Monadic container for success/failure
- AppError: Base error type with full context
- ErrorCode: Hierarchical error code taxonomy
- Builder functions: Ergonomic error construction

Usage:
    from core.errors import Ok, Err, Result, AppError, vocabulary_not_found

    def lookup(item_id: str) -> Result[VocabularyItem, AppError]:
        item = pool.get(item_id)
        if item is None:
            return vocabulary_not_found(item_id, origin="engine.lexicon")
        return Ok(item)

    match validate(keys, units, bank):
        case Ok(result):
            ...
        case Err(error) if error.code is ErrorCode.E2030_INCOMPLETE_SUBMISSION:
            ...
"""
from .types import (
    # Core types
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
    # Constructors
    from_exception,
    try_result_async,
    # Combinators
    ensure,
)

from .builders import (
    # External (E1xxx)
    collaborator_failed,
    # Validation (E2xxx)
    validation_error,
    incomplete_submission,
    invalid_target,
    out_of_range,
    curriculum_invalid,
    # Content (E4xxx)
    vocabulary_not_found,
    curriculum_not_found,
    # Business (E5xxx)
    state_conflict,
    # Internal (E9xxx)
    internal_error,
)

from .boundaries import (
    ErrorMapper,
    ValidationErrorMapper,
    EngineErrorMapper,
)

__all__ = [
    # Core types
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    # Constructors
    "from_exception",
    "try_result_async",
    # Combinators
    "ensure",
    # External (E1xxx)
    "collaborator_failed",
    # Validation (E2xxx)
    "validation_error",
    "incomplete_submission",
    "invalid_target",
    "out_of_range",
    "curriculum_invalid",
    # Content (E4xxx)
    "vocabulary_not_found",
    "curriculum_not_found",
    # Business (E5xxx)
    "state_conflict",
    # Internal (E9xxx)
    "internal_error",
    # Boundary Mappers
    "ErrorMapper",
    "ValidationErrorMapper",
    "EngineErrorMapper",
]
