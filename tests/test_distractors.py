"""Tests for distractor selection."""
from __future__ import annotations

import random

import pytest

from engines.distractors import (
    iter_distractors,
    leaks_answer,
    lexical_overlap,
    select_distractors,
)
from engines.semantic_units import resolve
from engines.vocabulary import PhraseTarget, SequenceTarget, VocabularyScope

from conftest import vocab


class TestLexicalOverlap:
    def test_half_shared(self):
        assert lexical_overlap("good morning", "good night") == 0.5

    def test_longer_side_is_denominator(self):
        assert lexical_overlap("nice to meet you", "nice to see you") == 0.75
        assert lexical_overlap("you", "nice to meet you") == 0.25

    def test_repeated_words_counted_once(self):
        assert lexical_overlap("very very good", "very good") == 1.0
        assert lexical_overlap("no no no", "no thanks") == 0.5

    def test_disjoint_and_empty(self):
        assert lexical_overlap("apple", "river") == 0.0
        assert lexical_overlap("", "river") == 0.0


class TestLeaksAnswer:
    def test_equal_word(self):
        assert leaks_answer("you", ["you"])

    def test_suffix_variant_within_leniency(self):
        assert leaks_answer("meets", ["meet"])
        assert leaks_answer("yours", ["you"])

    def test_beyond_leniency(self):
        assert not leaks_answer("meeting", ["meet"])

    def test_short_words_need_exact_match(self):
        assert not leaks_answer("at", ["a"])
        assert not leaks_answer("tom", ["to"])

    def test_any_word_of_phrase(self):
        assert leaks_answer("see you later", ["nice", "to", "meet", "you"])


class TestSelectDistractors:
    def test_nice_to_meet_you(self, persian_pool, unrelated_pool, settings, rng):
        pool = [v for v in persian_pool if v.id == "khoshbakhtam"] + unrelated_pool
        units = resolve(PhraseTarget("Nice to meet you"), pool, settings=settings)

        chosen = select_distractors(units, pool, 7, rng=rng, settings=settings)

        assert len(chosen) == 7
        assert all(v.id.startswith("w") for v in chosen)
        for v in chosen:
            assert lexical_overlap(v.meaning, "Nice to meet you") <= 0.5

    def test_synonyms_never_offered(self, settings, rng):
        pool = [
            vocab("salam", "Hello/Hi", "greetings", "Salam"),
            vocab("hi2", "Hi", "greetings"),
            vocab("hey", "Salam"),
            vocab("apple", "Apple"),
        ]
        units = resolve(SequenceTarget(("salam",)), pool, settings=settings)

        chosen = select_distractors(units, pool, 5, rng=rng, settings=settings)

        assert [v.id for v in chosen] == ["apple"]

    def test_same_meaning_offered_once(self, settings, rng):
        pool = [vocab("a1", "Apple"), vocab("a2", "apple!"), vocab("r", "River")]
        units = resolve(PhraseTarget("Good"), [], settings=settings)

        chosen = select_distractors(units, pool, 5, rng=rng, settings=settings)

        assert sorted(v.id for v in chosen if v.id.startswith("a")) in (["a1"], ["a2"])
        assert len(chosen) == 2

    def test_overlap_between_distractors_rejected(self, settings, rng):
        pool = [vocab("d1", "Green tea"), vocab("d2", "Green tea please")]
        units = resolve(PhraseTarget("Good"), [], settings=settings)

        chosen = select_distractors(units, pool, 5, rng=rng, settings=settings)

        assert len(chosen) == 1

    def test_fewer_is_acceptable(self, settings, rng):
        pool = [vocab("r", "River")]
        units = resolve(PhraseTarget("Good"), [], settings=settings)

        assert len(select_distractors(units, pool, 6, rng=rng, settings=settings)) == 1

    def test_zero_requested(self, unrelated_pool, settings, rng):
        units = resolve(PhraseTarget("Good"), [], settings=settings)

        assert select_distractors(units, unrelated_pool, 0, rng=rng, settings=settings) == []

    def test_deterministic_with_seed(self, unrelated_pool, settings):
        units = resolve(PhraseTarget("Good"), [], settings=settings)

        first = select_distractors(units, unrelated_pool, 5, rng=random.Random(7), settings=settings)
        second = select_distractors(units, unrelated_pool, 5, rng=random.Random(7), settings=settings)

        assert first == second


class TestScopeChain:
    def test_narrow_scope_first(self, unrelated_pool, settings, rng):
        lesson = VocabularyScope("lesson", tuple(unrelated_pool[:3]))
        wide = VocabularyScope("global", tuple(unrelated_pool))
        units = resolve(PhraseTarget("Good"), [], settings=settings)

        chosen = select_distractors(units, [], 3, [lesson, wide], rng=rng, settings=settings)

        assert {v.id for v in chosen} == {v.id for v in unrelated_pool[:3]}

    def test_widens_when_exhausted(self, unrelated_pool, settings, rng):
        lesson = VocabularyScope("lesson", tuple(unrelated_pool[:2]))
        wide = VocabularyScope("global", tuple(unrelated_pool))
        units = resolve(PhraseTarget("Good"), [], settings=settings)

        chosen = select_distractors(units, [], 5, [lesson, wide], rng=rng, settings=settings)

        assert len(chosen) == 5
        assert {v.id for v in unrelated_pool[:2]} <= {v.id for v in chosen}
        assert len({v.id for v in chosen}) == 5

    def test_lazy_iteration(self, unrelated_pool, settings, rng):
        units = resolve(PhraseTarget("Good"), [], settings=settings)
        it = iter_distractors(units, unrelated_pool, rng=rng, settings=settings)

        first = next(it)
        rest = list(it)

        assert first not in rest
        assert len(rest) == len(unrelated_pool) - 1


class TestSemanticStrategy:
    @pytest.fixture
    def grouped_pool(self):
        return [
            vocab("salam", "Hello/Hi", "greetings", "Salam"),
            vocab("khodafez", "Goodbye", "greetings"),
            vocab("khosh_amadid", "Welcome", "greetings"),
            vocab("merci", "Thank You", "responses"),
            vocab("baleh", "Yes", "responses"),
            vocab("sib", "Apple", "nouns"),
            vocab("rood", "River", "nouns"),
            vocab("kooh", "Mountain", "nouns"),
        ]

    def test_same_group_first(self, grouped_pool, settings, rng):
        units = resolve(SequenceTarget(("salam",)), grouped_pool, settings=settings)

        chosen = select_distractors(
            units, grouped_pool, 2, rng=rng, settings=settings, strategy="semantic"
        )

        assert {v.id for v in chosen} == {"khodafez", "khosh_amadid"}

    def test_related_group_next(self, grouped_pool, settings, rng):
        units = resolve(SequenceTarget(("salam",)), grouped_pool, settings=settings)

        chosen = select_distractors(
            units, grouped_pool, 4, rng=rng, settings=settings, strategy="semantic"
        )

        assert {v.id for v in chosen[2:]} == {"merci", "baleh"}
