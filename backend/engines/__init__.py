from engines.vocabulary import (
    VocabularyItem,
    PhraseTarget,
    SequenceTarget,
    SemanticUnit,
    VocabularyScope,
    as_target,
)
from engines.semantic_units import resolve, count_semantic_units
from engines.distractors import select_distractors, iter_distractors
from engines.word_bank import WordBankAssembler, WordBankItem, WordBankResult
from engines.answer_validator import validate, ValidationResult, UnitResult
from engines.completion import CompletionGate, InMemoryRewardLedger, RewardLedger
from engines.session import ExerciseSession, MasteryTracker, UnitOutcome
from engines.lexicon import CurriculumLexicon, load_curriculum

__all__ = [
    "VocabularyItem",
    "PhraseTarget",
    "SequenceTarget",
    "SemanticUnit",
    "VocabularyScope",
    "as_target",
    "resolve",
    "count_semantic_units",
    "select_distractors",
    "iter_distractors",
    "WordBankAssembler",
    "WordBankItem",
    "WordBankResult",
    "validate",
    "ValidationResult",
    "UnitResult",
    "CompletionGate",
    "InMemoryRewardLedger",
    "RewardLedger",
    "ExerciseSession",
    "MasteryTracker",
    "UnitOutcome",
    "CurriculumLexicon",
    "load_curriculum",
]
