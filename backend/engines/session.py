"""Exercise Session

Glue for one sentence/sequence exercise instance: owns the memoised word
bank, validates submissions, reports per-unit outcomes to the mastery
tracker and passes correct answers through the completion gate.

Lifecycle: created per exercise instance; survives retries; reset by
``change_target`` and ended by ``dispose``.
"""
from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Literal, Protocol, Sequence

from core.config import Settings, get_settings
from core.errors import (
    AppError,
    EngineErrorMapper,
    Err,
    ErrorCode,
    Ok,
    Result,
    ensure,
    invalid_target,
    out_of_range,
    state_conflict,
    try_result_async,
)
from core.logging import bind_context, generate_correlation_id, session_logger, unbind_context
from engines.answer_validator import ValidationResult, validate
from engines.completion import (
    CompletionGate,
    CompletionOutcome,
    RewardLedger,
    idempotency_key,
    step_uid,
)
from engines.vocabulary import SemanticUnit, Target, VocabularyItem, VocabularyScope, as_target
from engines.word_bank import WordBankAssembler, WordBankResult

log = session_logger()

SubmissionStatus = Literal["not_ready", "incorrect", "correct"]


@dataclass(frozen=True, slots=True)
class UnitOutcome:
    vocabulary_id: str | None
    word_text: str
    is_correct: bool
    elapsed_ms: int


class MasteryTracker(Protocol):
    async def record(self, outcomes: list[UnitOutcome]) -> None:
        ...


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    status: SubmissionStatus
    validation: ValidationResult | None = None
    completion: CompletionOutcome | None = None
    tracked: bool = False
    error: AppError | None = None

    @property
    def advance(self) -> bool:
        return self.completion is not None and self.completion.advance


class ExerciseSession:
    """One exercise instance from first render to completion."""

    def __init__(
        self,
        target: Target,
        vocabulary_pool: Iterable[VocabularyItem],
        *,
        ledger: RewardLedger,
        tracker: MasteryTracker | None = None,
        module_id: str = "",
        lesson_id: str = "",
        max_word_bank_size: int | None = None,
        scope_chain: Sequence[VocabularyScope] | None = None,
        pool_version: str = "",
        step_type: str = "sequence",
        settings: Settings | None = None,
        rng: random.Random | None = None,
        seed: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or get_settings()
        self.exercise_id = generate_correlation_id()
        self.ledger = ledger
        self.tracker = tracker
        self.module_id = module_id
        self.lesson_id = lesson_id
        self.max_word_bank_size = max_word_bank_size
        self.step_type = step_type
        self._target = target
        self._pool = list(vocabulary_pool)
        self._scope_chain = scope_chain
        self._pool_version = pool_version
        self._assembler = WordBankAssembler(self.settings, rng=rng, seed=seed)
        self._errors: EngineErrorMapper = EngineErrorMapper("session")
        self._clock = clock
        self._sleep = sleep
        self._started_at = clock()
        self._generation = 0
        self._gate: CompletionGate | None = None
        self._retry_task: asyncio.Task | None = None
        self._disposed = False

    @classmethod
    def from_exercise(
        cls,
        vocabulary_pool: Iterable[VocabularyItem],
        *,
        expected_translation: str | None = None,
        sequence_ids: Iterable[str] | None = None,
        max_word_bank_size: int | None = None,
        **kwargs,
    ) -> Result[ExerciseSession, AppError]:
        """Build a session from raw exercise inputs, validating them first."""
        try:
            target = as_target(expected_translation, sequence_ids)
        except ValueError as e:
            return invalid_target(str(e), origin="engine.session")

        if max_word_bank_size is not None:
            checked = ensure(
                max_word_bank_size >= 1,
                out_of_range(
                    "max_word_bank_size", max_word_bank_size, min_val=1,
                    origin="engine.session",
                ).error,
            )
            if checked.is_err():
                return checked

        return Ok(cls(target, vocabulary_pool, max_word_bank_size=max_word_bank_size, **kwargs))

    # === State ===

    @property
    def target(self) -> Target:
        return self._target

    @property
    def word_bank(self) -> WordBankResult:
        """Generated on first access, then stable until the target changes."""
        return self._assembler.generate(
            self._target,
            self._pool,
            self.max_word_bank_size,
            scope_chain=self._scope_chain,
            pool_version=self._pool_version,
        )

    @property
    def expected_units(self) -> list[SemanticUnit]:
        return self.word_bank.units

    @property
    def gate(self) -> CompletionGate:
        if self._gate is None:
            uid = step_uid(self.step_type, self.word_bank.content_key)
            self._gate = CompletionGate(
                self.ledger,
                idempotency_key(self.module_id, self.lesson_id, uid),
                settings=self.settings,
            )
        return self._gate

    def elapsed_ms(self) -> int:
        return int((self._clock() - self._started_at) * 1000)

    # === Submission ===

    async def submit(self, user_display_keys: Sequence[str]) -> SubmissionOutcome:
        """Validate a submission and run its side effects once."""
        if self._disposed:
            error = state_conflict(
                "ExerciseSession", "disposed", "active", origin="engine.session"
            ).error
            return SubmissionOutcome(status="not_ready", error=error)

        bind_context(exercise_id=self.exercise_id)
        try:
            return await self._submit(list(user_display_keys))
        finally:
            unbind_context("exercise_id")

    async def _submit(self, user_display_keys: list[str]) -> SubmissionOutcome:
        bank = self.word_bank
        match validate(user_display_keys, bank.units, bank):
            case Err(e):
                log.info("submission_not_ready", submitted=len(user_display_keys))
                return SubmissionOutcome(status="not_ready", error=self._errors.map_error(e))
            case Ok(validation):
                pass

        generation = self._generation
        gate = self.gate
        tracked = gate.claim_tracking()
        error = None
        if tracked and self.tracker is not None:
            error = await self._record(validation)

        if generation != self._generation:
            log.info("submission_superseded", exercise_id=self.exercise_id)
            return SubmissionOutcome(
                status="correct" if validation.overall_correct else "incorrect",
                validation=validation,
                tracked=tracked,
                error=error,
            )

        if not validation.overall_correct:
            log.info("submission_incorrect", incorrect=validation.incorrect_positions)
            return SubmissionOutcome(
                status="incorrect", validation=validation, tracked=tracked, error=error
            )

        completion = await gate.complete()
        log.info(
            "submission_correct",
            newly_granted=completion.newly_granted,
            elapsed_ms=self.elapsed_ms(),
        )
        return SubmissionOutcome(
            status="correct",
            validation=validation,
            completion=completion,
            tracked=tracked,
            error=error or completion.error,
        )

    async def _record(self, validation: ValidationResult) -> AppError | None:
        elapsed = self.elapsed_ms()
        outcomes = [
            UnitOutcome(r.vocabulary_id, r.word_text, r.is_correct, elapsed)
            for r in validation.per_unit_results
        ]
        result = await try_result_async(
            lambda: self.tracker.record(outcomes),
            code=ErrorCode.E1011_MASTERY_TRACKER_FAILED,
            origin="engine.session",
        )
        if result.is_err():
            error = self._errors.map_error(result.unwrap_err())
            log.warning("mastery_tracking_failed", error=error.message)
            return error
        return None

    # === Retry & cancellation ===

    async def retry(self) -> bool:
        """Reset for another attempt after the retry delay.

        A no-op (returns False) if the target changed while waiting.
        """
        generation = self._generation
        await self._sleep(self.settings.RETRY_DELAY_SECONDS)
        if generation != self._generation or self._disposed:
            log.debug("retry_discarded", exercise_id=self.exercise_id)
            return False
        self.gate.begin_attempt()
        self._started_at = self._clock()
        log.debug("retry_ready", exercise_id=self.exercise_id)
        return True

    def schedule_retry(self) -> asyncio.Task:
        """Run ``retry`` in the background; cancelled by ``change_target``."""
        self._cancel_retry()
        self._retry_task = asyncio.ensure_future(self.retry())
        return self._retry_task

    def _cancel_retry(self) -> None:
        if self._retry_task is not None and not self._retry_task.done():
            self._retry_task.cancel()
        self._retry_task = None

    def _reset(self) -> None:
        self._generation += 1
        self._cancel_retry()
        self._assembler.invalidate()
        self._gate = None
        self._started_at = self._clock()

    def change_target(
        self,
        target: Target,
        vocabulary_pool: Iterable[VocabularyItem] | None = None,
        *,
        scope_chain: Sequence[VocabularyScope] | None = None,
        pool_version: str = "",
    ) -> None:
        """Switch content: memoised bank, units, flags and pending retry are discarded."""
        self._reset()
        self._target = target
        if vocabulary_pool is not None:
            self._pool = list(vocabulary_pool)
        self._scope_chain = scope_chain
        self._pool_version = pool_version
        log.info("target_changed", exercise_id=self.exercise_id, kind=target.kind)

    def dispose(self) -> None:
        self._reset()
        self._disposed = True
        log.debug("session_disposed", exercise_id=self.exercise_id)
