"""Domain-Specific Error Builders

Ergonomic constructors for the engine's typed errors.
Each builder creates AppError with appropriate code and context.
"""
from .types import AppError, ErrorCode, ErrorContext, Err


# =============================================================================
# External Collaborator Errors (E1xxx)
# =============================================================================

def collaborator_failed(
    collaborator: str,
    *,
    code: ErrorCode = ErrorCode.E1000_EXTERNAL_GENERIC,
    reason: str = "",
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create error for a failing reward ledger or mastery tracker."""
    msg = f"Collaborator '{collaborator}' failed"
    if reason:
        msg += f": {reason}"
    return Err(AppError(
        code=code,
        message=msg,
        context=ErrorContext(origin=origin),
        metadata={"collaborator": collaborator, **metadata},
        cause=cause,
    ))


# =============================================================================
# Validation Errors (E2xxx)
# =============================================================================

def validation_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC,
    field: str | None = None,
    value: str | None = None,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Create validation error."""
    meta = {"field": field, "value": value, **metadata}
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in meta.items() if v is not None},
    ))


def incomplete_submission(
    submitted: int, expected: int, origin: str = ""
) -> Err[AppError]:
    """The learner has not placed a tile for every unit yet.

    Not an incorrect answer: callers neither advance nor penalise.
    """
    return validation_error(
        f"Submission not ready: {submitted} of {expected} units placed",
        code=ErrorCode.E2030_INCOMPLETE_SUBMISSION,
        origin=origin,
        submitted=submitted,
        expected=expected,
    )


def invalid_target(reason: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        f"Invalid exercise target: {reason}",
        code=ErrorCode.E2010_INVALID_TARGET,
        origin=origin,
    )


def out_of_range(
    field: str,
    value: int | float,
    min_val: int | float | None = None,
    max_val: int | float | None = None,
    origin: str = "",
) -> Err[AppError]:
    bounds = []
    if min_val is not None:
        bounds.append(f">= {min_val}")
    if max_val is not None:
        bounds.append(f"<= {max_val}")
    msg = f"Value {value} for '{field}' out of range ({', '.join(bounds)})"
    return validation_error(
        msg,
        code=ErrorCode.E2003_OUT_OF_RANGE,
        field=field,
        value=str(value),
        min=min_val,
        max=max_val,
        origin=origin,
    )


def curriculum_invalid(
    path: str, problems: list[AppError], origin: str = ""
) -> Err[AppError]:
    return validation_error(
        f"Curriculum document '{path}' is invalid ({len(problems)} problem(s))",
        code=ErrorCode.E2020_INVALID_CURRICULUM,
        origin=origin,
        path=path,
        problems=[p.message for p in problems],
    )


# =============================================================================
# Content Errors (E4xxx)
# =============================================================================

def vocabulary_not_found(
    vocabulary_id: str, origin: str = ""
) -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E4010_VOCABULARY_NOT_FOUND,
        message=f"Vocabulary item not found: {vocabulary_id}",
        context=ErrorContext(origin=origin),
        metadata={"vocabulary_id": vocabulary_id},
    ))


def curriculum_not_found(
    path: str, origin: str = "", cause: Exception | None = None
) -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E4020_CURRICULUM_NOT_FOUND,
        message=f"Curriculum file not found: {path}",
        context=ErrorContext(origin=origin),
        metadata={"path": path},
        cause=cause,
    ))


# =============================================================================
# Business Logic Errors (E5xxx)
# =============================================================================

def state_conflict(
    entity: str, current_state: str, required_state: str, origin: str = ""
) -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E5002_STATE_CONFLICT,
        message=f"{entity} is in '{current_state}' state, requires '{required_state}'",
        context=ErrorContext(origin=origin),
        metadata={
            "entity": entity,
            "current_state": current_state,
            "required_state": required_state,
        },
    ))


# =============================================================================
# Internal Errors (E9xxx)
# =============================================================================

def internal_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E9001_UNEXPECTED_ERROR,
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create internal/unexpected error."""
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata=metadata,
        cause=cause,
    ))
