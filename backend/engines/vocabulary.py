"""Vocabulary Value Types

Shared, read-only value types flowing through the word bank engine:
vocabulary items, exercise targets and the semantic units a target
resolves into.
"""
from dataclasses import dataclass, field
from typing import Iterable, Literal, Union

TargetKind = Literal["phrase", "sequence"]


@dataclass(frozen=True, slots=True)
class VocabularyItem:
    """A learnable item. ``meaning`` may hold ``/``-delimited synonyms."""
    id: str
    meaning: str
    transliteration: str = ""
    phonetic: str = ""
    lesson_id: str = ""
    module_id: str = ""
    semantic_group: str | None = None


@dataclass(frozen=True, slots=True)
class PhraseTarget:
    """Target given as an expected translation, e.g. ``"Nice to meet you"``."""
    text: str
    kind: TargetKind = field(default="phrase", init=False)

    def identity(self) -> str:
        return f"phrase:{self.text}"


@dataclass(frozen=True, slots=True)
class SequenceTarget:
    """Target given as an ordered list of vocabulary ids."""
    ids: tuple[str, ...]
    kind: TargetKind = field(default="sequence", init=False)

    def identity(self) -> str:
        return "sequence:" + "|".join(self.ids)


Target = Union[PhraseTarget, SequenceTarget]


def as_target(
    expected_translation: str | None = None,
    sequence_ids: Iterable[str] | None = None,
) -> Target:
    """Build a target from exercise inputs. An explicit sequence wins."""
    if sequence_ids is not None:
        ids = tuple(sequence_ids)
        if ids:
            return SequenceTarget(ids)
    if expected_translation and expected_translation.strip():
        return PhraseTarget(expected_translation)
    raise ValueError("exercise needs expected_translation or sequence_ids")


@dataclass(frozen=True, slots=True)
class SemanticUnit:
    """One meaning the learner must place, possibly spanning several words."""
    key: str
    display: str
    equivalents: frozenset[str]
    vocabulary_id: str | None = None
    semantic_group: str | None = None
    is_phrase: bool = False


@dataclass(frozen=True, slots=True)
class VocabularyScope:
    """A named slice of vocabulary used for tiered distractor lookup."""
    name: str
    items: tuple[VocabularyItem, ...]

    def __len__(self) -> int:
        return len(self.items)
