"""Tests for the exercise session lifecycle."""
from __future__ import annotations

import asyncio

import pytest

from core.errors import Err, ErrorCode, Ok
from engines.session import ExerciseSession
from engines.vocabulary import PhraseTarget, SequenceTarget

from conftest import FakeTracker, no_sleep


def key_for(bank, text: str) -> str:
    return next(k for k, item in bank.display_key_to_item.items() if item.word_text == text)


@pytest.fixture
def make_session(persian_pool, unrelated_pool, ledger, tracker, clock, settings):
    def factory(target=None, **kwargs):
        options = dict(
            ledger=ledger,
            tracker=tracker,
            module_id="module1",
            lesson_id="lesson2",
            max_word_bank_size=7,
            settings=settings,
            seed=42,
            clock=clock,
            sleep=no_sleep,
        )
        options.update(kwargs)
        return ExerciseSession(
            target or SequenceTarget(("man", "hastam", "khoob")),
            persian_pool + unrelated_pool,
            **options,
        )
    return factory


class TestFromExercise:
    def test_builds_from_sequence_ids(self, persian_pool, ledger):
        result = ExerciseSession.from_exercise(
            persian_pool, sequence_ids=["man", "hastam"], ledger=ledger
        )

        assert isinstance(result, Ok)
        assert result.value.target == SequenceTarget(("man", "hastam"))

    def test_missing_target(self, persian_pool, ledger):
        result = ExerciseSession.from_exercise(persian_pool, ledger=ledger)

        assert isinstance(result, Err)
        assert result.error.code is ErrorCode.E2010_INVALID_TARGET

    def test_max_size_out_of_range(self, persian_pool, ledger):
        result = ExerciseSession.from_exercise(
            persian_pool, expected_translation="Good", max_word_bank_size=0, ledger=ledger
        )

        assert isinstance(result, Err)
        assert result.error.code is ErrorCode.E2003_OUT_OF_RANGE


class TestSubmit:
    @pytest.mark.asyncio
    async def test_correct_submission(self, make_session, ledger, tracker, clock):
        session = make_session()
        keys = session.word_bank.correct_display_keys()
        clock.advance(2.5)

        outcome = await session.submit(keys)

        assert outcome.status == "correct"
        assert outcome.advance
        assert outcome.completion.newly_granted
        assert ledger.calls[0][0].startswith("module1/lesson2/sequence-")
        (batch,) = tracker.batches
        assert [o.vocabulary_id for o in batch] == ["man", "hastam", "khoob"]
        assert all(o.is_correct and o.elapsed_ms == 2500 for o in batch)

    @pytest.mark.asyncio
    async def test_wrong_order(self, make_session, ledger):
        session = make_session()
        bank = session.word_bank

        outcome = await session.submit(
            [key_for(bank, "Good"), key_for(bank, "Am"), key_for(bank, "I")]
        )

        assert outcome.status == "incorrect"
        assert not outcome.advance
        assert not outcome.validation.per_unit_results[0].is_correct
        assert ledger.calls == []

    @pytest.mark.asyncio
    async def test_incomplete_is_not_ready(self, make_session, tracker):
        session = make_session()

        outcome = await session.submit(session.word_bank.correct_display_keys()[:1])

        assert outcome.status == "not_ready"
        assert outcome.error.code is ErrorCode.E2030_INCOMPLETE_SUBMISSION
        assert outcome.error.context.origin == "engine.session"
        assert tracker.batches == []

    @pytest.mark.asyncio
    async def test_exercise_without_units_never_completes(self, make_session, ledger, tracker):
        session = make_session(SequenceTarget(("ghost1", "ghost2")))
        assert session.expected_units == []

        outcome = await session.submit([])

        assert outcome.status == "not_ready"
        assert not outcome.advance
        assert outcome.error.code is ErrorCode.E2030_INCOMPLETE_SUBMISSION
        assert ledger.calls == []
        assert tracker.batches == []

    @pytest.mark.asyncio
    async def test_double_submit_side_effects_once(self, make_session, ledger, tracker):
        session = make_session()
        keys = session.word_bank.correct_display_keys()

        first, second = await asyncio.gather(session.submit(keys), session.submit(keys))

        assert first.completion is second.completion
        assert len(ledger.calls) == 1
        assert len(tracker.batches) == 1
        assert first.tracked != second.tracked

    @pytest.mark.asyncio
    async def test_tracker_failure_reported(self, make_session, ledger):
        session = make_session(tracker=FakeTracker(fail=True))

        outcome = await session.submit(session.word_bank.correct_display_keys())

        assert outcome.status == "correct"
        assert outcome.advance
        assert outcome.error.code is ErrorCode.E1011_MASTERY_TRACKER_FAILED
        assert len(ledger.calls) == 1

    @pytest.mark.asyncio
    async def test_disposed_session(self, make_session):
        session = make_session()
        keys = session.word_bank.correct_display_keys()
        session.dispose()

        outcome = await session.submit(keys)

        assert outcome.error.code is ErrorCode.E5002_STATE_CONFLICT


class TestRetry:
    @pytest.mark.asyncio
    async def test_bank_stable_across_retry(self, make_session, tracker):
        session = make_session()
        bank = session.word_bank

        await session.submit([key_for(bank, "Good"), key_for(bank, "Am"), key_for(bank, "I")])
        assert await session.retry() is True
        outcome = await session.submit(session.word_bank.correct_display_keys())

        assert session.word_bank is bank
        assert outcome.status == "correct"
        assert len(tracker.batches) == 2

    @pytest.mark.asyncio
    async def test_without_retry_tracking_not_repeated(self, make_session, tracker):
        session = make_session()
        bank = session.word_bank
        wrong = [key_for(bank, "Good"), key_for(bank, "Am"), key_for(bank, "I")]

        await session.submit(wrong)
        await session.submit(wrong)

        assert len(tracker.batches) == 1

    @pytest.mark.asyncio
    async def test_retry_uses_configured_delay(self, make_session, settings):
        delays = []

        async def recording_sleep(delay):
            delays.append(delay)

        session = make_session(sleep=recording_sleep)

        await session.retry()

        assert delays == [settings.RETRY_DELAY_SECONDS]

    @pytest.mark.asyncio
    async def test_retry_for_old_content_is_noop(self, make_session):
        holder = {}

        async def sleep_then_change(delay):
            holder["session"].change_target(PhraseTarget("Thank you"))

        session = make_session(sleep=sleep_then_change)
        holder["session"] = session

        assert await session.retry() is False

    @pytest.mark.asyncio
    async def test_change_target_cancels_scheduled_retry(self, make_session):
        gate = asyncio.Event()

        async def blocking_sleep(delay):
            await gate.wait()

        session = make_session(sleep=blocking_sleep)
        task = session.schedule_retry()
        await asyncio.sleep(0)

        session.change_target(PhraseTarget("Thank you"))

        with pytest.raises(asyncio.CancelledError):
            await task


class TestChangeTarget:
    @pytest.mark.asyncio
    async def test_new_content_new_bank_and_gate(self, make_session, ledger):
        session = make_session()
        old_bank = session.word_bank
        await session.submit(old_bank.correct_display_keys())

        session.change_target(PhraseTarget("Thank you"))
        new_bank = session.word_bank
        outcome = await session.submit(new_bank.correct_display_keys())

        assert new_bank is not old_bank
        assert [u.vocabulary_id for u in session.expected_units] == ["merci"]
        assert outcome.completion.newly_granted
        assert len({call[0] for call in ledger.calls}) == 2
