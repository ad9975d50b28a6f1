"""Answer Validator

Judges an ordered selection of tiles against the expected semantic units.
Order-sensitive and exact, except that any member of a unit's equivalence
class is accepted ("Hello" for "Hi"). A submission with the wrong number of
tiles is "not ready", which is distinct from wrong.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from core.errors import AppError, Ok, Result, incomplete_submission
from core.logging import engine_logger
from engines.vocabulary import SemanticUnit
from engines.word_bank import WordBankResult, word_text_from_display_key

log = engine_logger()


@dataclass(frozen=True, slots=True)
class UnitResult:
    position: int
    vocabulary_id: str | None
    word_text: str
    expected_text: str
    is_correct: bool


@dataclass(frozen=True, slots=True)
class ValidationResult:
    overall_correct: bool
    per_unit_results: tuple[UnitResult, ...]

    @property
    def incorrect_positions(self) -> list[int]:
        return [r.position for r in self.per_unit_results if not r.is_correct]


def _matches(tile_key: str, tile_equivalents: frozenset[str], unit: SemanticUnit) -> bool:
    if tile_key and tile_key == unit.key:
        return True
    return bool((tile_equivalents | {tile_key}) & unit.equivalents)


def validate(
    user_display_keys: Sequence[str],
    expected_units: Sequence[SemanticUnit],
    word_bank: WordBankResult,
) -> Result[ValidationResult, AppError]:
    """Check the learner's tile order position by position.

    Returns Err(E2030_INCOMPLETE_SUBMISSION) when the number of tiles differs
    from the number of expected units, or when there are no expected units at
    all: an exercise with nothing to place can never be answered.
    Otherwise per-unit results, always.
    """
    if not expected_units:
        log.warning("validation_without_units", submitted=len(user_display_keys))
        return incomplete_submission(
            len(user_display_keys), 0, origin="engine.answer_validator"
        )

    if len(user_display_keys) != len(expected_units):
        log.debug(
            "submission_incomplete",
            submitted=len(user_display_keys),
            expected=len(expected_units),
        )
        return incomplete_submission(
            len(user_display_keys), len(expected_units), origin="engine.answer_validator"
        )

    results = []
    for position, (display_key, unit) in enumerate(zip(user_display_keys, expected_units)):
        item = word_bank.item_for(display_key)
        if item is None:
            # Unknown tile: recover its text, never treat it as a match
            word_text = word_text_from_display_key(display_key)
            is_correct = False
        else:
            word_text = item.word_text
            is_correct = _matches(item.key, item.equivalents, unit)
        results.append(UnitResult(
            position=position,
            vocabulary_id=unit.vocabulary_id,
            word_text=word_text,
            expected_text=unit.display,
            is_correct=is_correct,
        ))

    overall = all(r.is_correct for r in results)
    log.debug(
        "submission_validated",
        overall_correct=overall,
        incorrect=[r.position for r in results if not r.is_correct],
    )
    return Ok(ValidationResult(overall_correct=overall, per_unit_results=tuple(results)))
