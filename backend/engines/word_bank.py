"""Word Bank Assembler

Builds the tile set for a sentence/sequence exercise: one correct tile per
semantic unit plus filtered distractors, shuffled exactly once. The result
is memoised per content identity so re-renders and retries never reshuffle.
"""
from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from core.config import Settings, get_settings
from core.logging import engine_logger
from engines import normalizer
from engines.distractors import Strategy, iter_distractors
from engines.semantic_units import item_equivalents, resolve, synonym_classes
from engines.vocabulary import SemanticUnit, Target, VocabularyItem, VocabularyScope

log = engine_logger()


@dataclass(slots=True, eq=False)
class WordBankItem:
    """A selectable tile. Identity matters: duplicate correct tiles are distinct."""
    word_text: str
    vocabulary_id: str | None
    is_correct: bool
    origin_order: int | None = None
    equivalents: frozenset[str] = field(default_factory=frozenset)
    semantic_group: str | None = None

    @property
    def key(self) -> str:
        return normalizer.comparison_key(self.word_text)


@dataclass(slots=True)
class WordBankResult:
    items: list[WordBankItem]
    display_options: list[str]
    display_key_to_item: dict[str, WordBankItem]
    content_key: str
    units: list[SemanticUnit]

    @property
    def display_keys(self) -> list[str]:
        """Display keys in tile order."""
        return list(self.display_key_to_item)

    @property
    def correct_items(self) -> list[WordBankItem]:
        return [i for i in self.items if i.is_correct]

    @property
    def distractor_items(self) -> list[WordBankItem]:
        return [i for i in self.items if not i.is_correct]

    def item_for(self, display_key: str) -> WordBankItem | None:
        return self.display_key_to_item.get(display_key)

    def correct_display_keys(self) -> list[str]:
        """Display keys of the correct tiles, in answer order."""
        by_identity = {id(item): key for key, item in self.display_key_to_item.items()}
        return [by_identity[id(item)] for item in self.correct_items]


def calculate_word_bank_size(
    correct_count: int, settings: Settings | None = None
) -> int:
    """Dynamic bank size: ``2n + 3`` clamped to the configured bounds."""
    settings = settings or get_settings()
    size = correct_count * 2 + 3
    return max(settings.WORD_BANK_MIN_SIZE, min(settings.WORD_BANK_MAX_SIZE, size))


def content_identity(target: Target, pool_version: str = "") -> str:
    """Stable identity of exercise content, independent of object identity."""
    raw = f"{target.identity()}#{pool_version}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def _scope_signature(scope_chain: Sequence[VocabularyScope] | None) -> tuple | None:
    if scope_chain is None:
        return None
    return tuple((scope.name, tuple(item.id for item in scope.items)) for scope in scope_chain)


def make_display_key(word_text: str, index: int) -> str:
    return f"{word_text}-{index}"


def word_text_from_display_key(display_key: str) -> str:
    """Recover the tile text from a display key (``"Hello-3"`` -> ``"Hello"``)."""
    text, sep, index = display_key.rpartition("-")
    return text if sep and index.isdigit() else display_key


class WordBankAssembler:
    """Generates and memoises the word bank of one exercise instance."""

    def __init__(
        self,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        seed: int | None = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(seed)
        self._cache: dict[tuple, WordBankResult] = {}

    def invalidate(self) -> None:
        """Discard memoised results (target changed or instance disposed)."""
        self._cache.clear()

    def generate(
        self,
        target: Target,
        vocabulary_pool: Iterable[VocabularyItem],
        max_size: int | None = None,
        *,
        scope_chain: Sequence[VocabularyScope] | None = None,
        pool_version: str = "",
        strategy: Strategy | None = None,
    ) -> WordBankResult:
        """Word bank for ``target``; identical calls return the identical object.

        The memo is keyed by content identity together with ``max_size``, the
        scope chain and the strategy, so changing any of them regenerates.
        """
        content_key = content_identity(target, pool_version)
        memo_key = (content_key, max_size, _scope_signature(scope_chain), strategy)
        cached = self._cache.get(memo_key)
        if cached is not None:
            return cached

        pool = list(vocabulary_pool)
        units = resolve(target, pool, settings=self.settings)
        classes = synonym_classes(self.settings)

        correct = [
            WordBankItem(
                word_text=unit.display,
                vocabulary_id=unit.vocabulary_id,
                is_correct=True,
                origin_order=position,
                equivalents=unit.equivalents,
                semantic_group=unit.semantic_group,
            )
            for position, unit in enumerate(units)
        ]

        size = max_size if max_size is not None else calculate_word_bank_size(
            len(units), self.settings
        )
        wanted = max(size, len(units)) - len(units)

        seen_keys = {item.key for item in correct}
        distractors: list[WordBankItem] = []
        if units and wanted > 0:
            for vocab in iter_distractors(
                units,
                pool,
                scope_chain,
                rng=self.rng,
                settings=self.settings,
                strategy=strategy,
            ):
                text = normalizer.display_text(vocab.meaning)
                key = normalizer.comparison_key(text)
                if not key or key in seen_keys:
                    log.debug("distractor_duplicate_replaced", word_text=text)
                    continue
                seen_keys.add(key)
                distractors.append(WordBankItem(
                    word_text=text,
                    vocabulary_id=vocab.id,
                    is_correct=False,
                    equivalents=item_equivalents(vocab, classes),
                    semantic_group=vocab.semantic_group,
                ))
                if len(distractors) >= wanted:
                    break

        if not units:
            log.warning("word_bank_empty", content_key=content_key, kind=target.kind)

        items = correct + distractors
        shuffled = list(items)
        self.rng.shuffle(shuffled)

        result = WordBankResult(
            items=items,
            display_options=[item.word_text for item in shuffled],
            display_key_to_item={
                make_display_key(item.word_text, i): item for i, item in enumerate(shuffled)
            },
            content_key=content_key,
            units=units,
        )
        self._cache[memo_key] = result

        log.info(
            "word_bank_generated",
            content_key=content_key[:12],
            units=len(units),
            distractors=len(distractors),
            wanted=wanted,
        )
        return result
