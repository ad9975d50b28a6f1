"""Distractor Selector

Picks wrong-but-plausible tiles for a word bank. A distractor must never be
another way of writing the answer: synonyms, near-identical phrases and
affix variants of expected words ("meet" / "meets") are rejected.

Candidates come from a chain of vocabulary scopes (lesson -> module ->
global); wider scopes are only consulted once narrower ones run dry.
"""
from __future__ import annotations

import random
from itertools import islice
from typing import Iterable, Iterator, Literal, Sequence

from core.config import Settings, get_settings
from core.logging import engine_logger
from engines import normalizer
from engines.semantic_units import item_equivalents, synonym_classes
from engines.vocabulary import SemanticUnit, VocabularyItem, VocabularyScope

log = engine_logger()

Strategy = Literal["random", "semantic"]


def lexical_overlap(a: str, b: str) -> float:
    """Shared distinct words over the larger word set (0.0 - 1.0)."""
    words_a = set(normalizer.split_words(a))
    words_b = set(normalizer.split_words(b))
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / max(len(words_a), len(words_b))


def _affix_match(a: str, b: str, leniency: int, min_length: int) -> bool:
    shorter, longer = sorted((a, b), key=len)
    if len(shorter) < min_length or len(longer) - len(shorter) > leniency:
        return False
    return longer.startswith(shorter) or longer.endswith(shorter)


def leaks_answer(
    candidate: str,
    expected_words: Iterable[str],
    *,
    leniency: int = 2,
    min_length: int = 3,
) -> bool:
    """True if any candidate word equals or is an affix variant of an expected word."""
    expected = set(expected_words)
    for word in normalizer.split_words(candidate):
        if word in expected:
            return True
        if any(_affix_match(word, e, leniency, min_length) for e in expected):
            return True
    return False


def _affinity_rank(
    item: VocabularyItem, groups: set[str], related: set[str]
) -> int:
    if item.semantic_group in groups:
        return 0
    if item.semantic_group in related:
        return 1
    return 2


def iter_distractors(
    correct_units: Sequence[SemanticUnit],
    vocabulary_pool: Iterable[VocabularyItem],
    scope_chain: Sequence[VocabularyScope] | None = None,
    *,
    rng: random.Random,
    settings: Settings | None = None,
    strategy: Strategy | None = None,
) -> Iterator[VocabularyItem]:
    """Lazily yield acceptable distractors, narrowest scope first.

    Each yielded item is counted as accepted: later candidates are checked
    against it for collisions and lexical overlap.
    """
    settings = settings or get_settings()
    strategy = strategy or settings.DISTRACTOR_STRATEGY
    classes = synonym_classes(settings)
    threshold = settings.LEXICAL_OVERLAP_THRESHOLD

    excluded: set[str] = set()
    for unit in correct_units:
        excluded |= unit.equivalents
    correct_ids = {u.vocabulary_id for u in correct_units if u.vocabulary_id}
    expected_words = {w for u in correct_units for w in u.key.split()}
    accepted_texts = [u.key for u in correct_units]

    groups = {u.semantic_group for u in correct_units if u.semantic_group}
    related = {r for g in groups for r in settings.RELATED_GROUPS.get(g, [])}

    tiers = list(scope_chain) if scope_chain else [
        VocabularyScope("pool", tuple(vocabulary_pool))
    ]
    seen_ids: set[str] = set(correct_ids)
    yielded = 0

    for depth, scope in enumerate(tiers):
        if depth > 0:
            log.debug("distractor_scope_widened", scope=scope.name, accepted=yielded)

        candidates = [item for item in scope.items if item.id not in seen_ids]
        rng.shuffle(candidates)
        if strategy == "semantic":
            candidates.sort(key=lambda item: _affinity_rank(item, groups, related))

        for item in candidates:
            if item.id in seen_ids:
                continue
            seen_ids.add(item.id)

            key = normalizer.comparison_key(item.meaning)
            if not key:
                continue
            if item_equivalents(item, classes) & excluded:
                continue
            if any(lexical_overlap(key, text) > threshold for text in accepted_texts):
                continue
            if leaks_answer(
                key,
                expected_words,
                leniency=settings.AFFIX_LENIENCY_CHARS,
                min_length=settings.AFFIX_MIN_WORD_LENGTH,
            ):
                continue

            excluded |= set(normalizer.normalize(item.meaning))
            accepted_texts.append(key)
            yielded += 1
            yield item


def select_distractors(
    correct_units: Sequence[SemanticUnit],
    vocabulary_pool: Iterable[VocabularyItem],
    max_count: int,
    scope_chain: Sequence[VocabularyScope] | None = None,
    *,
    rng: random.Random,
    settings: Settings | None = None,
    strategy: Strategy | None = None,
) -> list[VocabularyItem]:
    """Up to ``max_count`` distractors. Fewer is acceptable when content runs out."""
    if max_count <= 0:
        return []
    chosen = list(islice(
        iter_distractors(
            correct_units,
            vocabulary_pool,
            scope_chain,
            rng=rng,
            settings=settings,
            strategy=strategy,
        ),
        max_count,
    ))
    if len(chosen) < max_count:
        log.info("distractors_exhausted", wanted=max_count, found=len(chosen))
    return chosen
