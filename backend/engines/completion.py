"""Completion Gate

Guards the side effects of finishing an exercise instance:
- mastery tracking at most once per attempt
- reward grant at most once per instance, idempotent at the ledger too

The ledger is an async collaborator. Its failures are reported, never
allowed to block progression.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol

from core.config import Settings, get_settings
from core.errors import (
    AppError,
    Err,
    ErrorCode,
    Ok,
    collaborator_failed,
    try_result_async,
)
from core.logging import reward_logger

log = reward_logger()


class RewardLedger(Protocol):
    async def grant(self, idempotency_key: str, amount: int) -> bool:
        """Grant ``amount`` once per key. True if newly granted."""
        ...


class InMemoryRewardLedger:
    """Idempotent reference ledger keyed by idempotency key."""

    __slots__ = ("_grants",)

    def __init__(self):
        self._grants: dict[str, int] = {}

    async def grant(self, idempotency_key: str, amount: int) -> bool:
        if idempotency_key in self._grants:
            return False
        self._grants[idempotency_key] = amount
        return True

    def total(self) -> int:
        return sum(self._grants.values())

    def __contains__(self, idempotency_key: str) -> bool:
        return idempotency_key in self._grants


def step_uid(step_type: str, content_key: str) -> str:
    """Stable, content-derived identifier of an exercise step."""
    return f"{step_type}-{content_key[:12]}"


def idempotency_key(module_id: str, lesson_id: str, uid: str) -> str:
    return f"{module_id}/{lesson_id}/{uid}"


@dataclass(frozen=True, slots=True)
class CompletionOutcome:
    idempotency_key: str
    newly_granted: bool
    advance: bool = True
    error: AppError | None = None


class CompletionGate:
    """Per-instance completion state. Single event loop, no locks."""

    __slots__ = ("ledger", "key", "amount", "_tracked", "_pending", "_outcome")

    def __init__(
        self,
        ledger: RewardLedger,
        key: str,
        amount: int | None = None,
        settings: Settings | None = None,
    ):
        self.ledger = ledger
        self.key = key
        self.amount = amount if amount is not None else (settings or get_settings()).REWARD_AMOUNT
        self._tracked = False
        self._pending: asyncio.Future[CompletionOutcome] | None = None
        self._outcome: CompletionOutcome | None = None

    @property
    def tracked(self) -> bool:
        return self._tracked

    @property
    def completed(self) -> bool:
        return self._outcome is not None

    def claim_tracking(self) -> bool:
        """Claim this attempt's tracking slot. False if already claimed."""
        if self._tracked:
            return False
        self._tracked = True
        return True

    def begin_attempt(self) -> None:
        """Start a new attempt (after a retry): tracking may happen again."""
        self._tracked = False

    async def complete(self) -> CompletionOutcome:
        """Grant the reward once; concurrent callers share the in-flight grant."""
        if self._outcome is not None:
            return self._outcome
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._grant())
        return await asyncio.shield(self._pending)

    async def _grant(self) -> CompletionOutcome:
        result = await try_result_async(
            lambda: self.ledger.grant(self.key, self.amount),
            code=ErrorCode.E1010_REWARD_LEDGER_FAILED,
            origin="engine.completion",
        )
        match result:
            case Ok(True):
                log.info("reward_granted", key=self.key, amount=self.amount)
                outcome = CompletionOutcome(self.key, newly_granted=True)
            case Ok(_):
                log.info("reward_already_granted", key=self.key)
                outcome = CompletionOutcome(self.key, newly_granted=False)
            case Err(e):
                error = collaborator_failed(
                    "reward_ledger",
                    code=ErrorCode.E1010_REWARD_LEDGER_FAILED,
                    reason=e.message,
                    origin="engine.completion",
                    cause=e.cause,
                    key=self.key,
                ).error
                log.error("reward_grant_failed", key=self.key, error=error.message)
                outcome = CompletionOutcome(self.key, newly_granted=False, error=error)
        self._outcome = outcome
        return outcome
