"""Semantic Unit Resolver

Splits an exercise target into the ordered units a learner must place.
A unit is either a single word or a multi-word phrase that exists as one
vocabulary item ("Nice to meet you"); each unit carries its equivalence
class so synonyms ("Hi" / "Hello" / "Salam") are accepted downstream.
"""
from __future__ import annotations

from typing import Iterable

from core.config import Settings, get_settings
from core.logging import engine_logger
from engines import normalizer
from engines.vocabulary import (
    PhraseTarget,
    SemanticUnit,
    SequenceTarget,
    Target,
    VocabularyItem,
)

log = engine_logger()


def synonym_classes(settings: Settings) -> list[frozenset[str]]:
    """Configured synonym groups as sets of comparison keys."""
    classes = []
    for group in settings.SYNONYM_GROUPS:
        keys = frozenset(k for k in (normalizer.comparison_key(w) for w in group) if k)
        if keys:
            classes.append(keys)
    return classes


def expand_synonyms(keys: Iterable[str], classes: list[frozenset[str]]) -> frozenset[str]:
    """Close a set of keys over every synonym group it touches."""
    result = set(keys)
    for group in classes:
        if result & group:
            result |= group
    return frozenset(result)


def item_equivalents(item: VocabularyItem, classes: list[frozenset[str]]) -> frozenset[str]:
    """All comparison keys that mean the same as ``item``."""
    keys = normalizer.normalize(item.meaning) + normalizer.normalize(item.transliteration)
    return expand_synonyms(keys, classes)


def _unit_from_item(
    item: VocabularyItem,
    classes: list[frozenset[str]],
    *,
    key: str | None = None,
    display: str | None = None,
) -> SemanticUnit:
    key = key or normalizer.comparison_key(item.meaning)
    return SemanticUnit(
        key=key,
        display=display or normalizer.display_text(item.meaning),
        equivalents=item_equivalents(item, classes) | {key},
        vocabulary_id=item.id,
        semantic_group=item.semantic_group,
        is_phrase=" " in key,
    )


class _PoolIndex:
    """Lookup tables over a vocabulary pool, built once per resolution."""

    __slots__ = ("by_id", "by_key", "by_transliteration", "longest")

    def __init__(self, pool: Iterable[VocabularyItem]):
        self.by_id: dict[str, VocabularyItem] = {}
        self.by_key: dict[str, VocabularyItem] = {}
        self.by_transliteration: dict[str, VocabularyItem] = {}
        self.longest = 1
        for item in pool:
            self.by_id.setdefault(item.id, item)
            for key in normalizer.normalize(item.meaning):
                self.by_key.setdefault(key, item)
                self.longest = max(self.longest, len(key.split()))
            translit = normalizer.comparison_key(item.transliteration)
            if translit:
                self.by_transliteration.setdefault(translit, item)

    def alias(self, word: str, aliases: dict[str, str]) -> VocabularyItem | None:
        """Contextual alias: ``my`` -> the item for ``man``."""
        target = aliases.get(word)
        if not target:
            return None
        return self.by_id.get(target) or self.by_transliteration.get(
            normalizer.comparison_key(target)
        )


def _resolve_sequence(
    target: SequenceTarget,
    index: _PoolIndex,
    classes: list[frozenset[str]],
) -> list[SemanticUnit]:
    units = []
    for position, vocab_id in enumerate(target.ids):
        item = index.by_id.get(vocab_id)
        if item is None:
            log.warning("vocabulary_missing", vocabulary_id=vocab_id, position=position)
            continue
        if not normalizer.comparison_key(item.meaning):
            log.warning("vocabulary_empty_meaning", vocabulary_id=vocab_id)
            continue
        units.append(_unit_from_item(item, classes))
    return units


def _resolve_phrase(
    target: PhraseTarget,
    index: _PoolIndex,
    classes: list[frozenset[str]],
    aliases: dict[str, str],
) -> list[SemanticUnit]:
    # Tokens keep their surface form for display; keys are contraction-expanded
    surface = normalizer.surface_words(target.text)
    keys = [normalizer.expand_contractions(w.lower()) for w in surface]

    units: list[SemanticUnit] = []
    i = 0
    while i < len(keys):
        matched = None
        for span in range(min(index.longest, len(keys) - i), 0, -1):
            key = " ".join(keys[i:i + span])
            item = index.by_key.get(key)
            if item is not None:
                matched = (span, key, item)
                break

        if matched is not None:
            span, key, item = matched
            display = normalizer.sentence_case(" ".join(surface[i:i + span]))
            units.append(_unit_from_item(item, classes, key=key, display=display))
            i += span
            continue

        key = keys[i]
        display = normalizer.sentence_case(surface[i])
        item = index.alias(key, aliases)
        if item is not None:
            units.append(_unit_from_item(item, classes, key=key, display=display))
        else:
            units.append(SemanticUnit(
                key=key,
                display=display,
                equivalents=expand_synonyms([key], classes),
                is_phrase=" " in key,
            ))
        i += 1
    return units


def resolve(
    target: Target,
    vocabulary_pool: Iterable[VocabularyItem],
    *,
    settings: Settings | None = None,
) -> list[SemanticUnit]:
    """Resolve a target into its ordered semantic units.

    Sequence targets map each id to exactly one unit; ids missing from the
    pool are dropped with a warning. Phrase targets use greedy longest
    multi-word matching against the pool, left to right.
    """
    settings = settings or get_settings()
    classes = synonym_classes(settings)
    index = _PoolIndex(vocabulary_pool)

    match target:
        case SequenceTarget():
            units = _resolve_sequence(target, index, classes)
        case PhraseTarget():
            aliases = {
                normalizer.comparison_key(k): v for k, v in settings.CONTEXTUAL_VOCAB.items()
            }
            units = _resolve_phrase(target, index, classes, aliases)
        case _:
            raise TypeError(f"unsupported target: {target!r}")

    log.debug("units_resolved", kind=target.kind, count=len(units))
    return units


def count_semantic_units(
    target: Target,
    vocabulary_pool: Iterable[VocabularyItem],
    *,
    settings: Settings | None = None,
) -> int:
    """Number of units a complete submission must contain."""
    return len(resolve(target, vocabulary_pool, settings=settings))
