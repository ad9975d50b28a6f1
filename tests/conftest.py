"""Shared test fixtures."""
from __future__ import annotations

import random

import pytest

from core.config import Settings
from engines.vocabulary import VocabularyItem


def vocab(id: str, meaning: str, group: str | None = None, translit: str = "") -> VocabularyItem:
    return VocabularyItem(
        id=id,
        meaning=meaning,
        transliteration=translit,
        lesson_id="lesson1",
        module_id="module1",
        semantic_group=group,
    )


UNRELATED_WORDS = [
    "apple", "river", "mountain", "window", "pencil",
    "garden", "orange", "bicycle", "castle", "forest",
    "hammer", "island", "jacket", "ladder", "marble",
    "needle", "ocean", "pillow", "rocket", "tunnel",
]


class FakeLedger:
    """Idempotent ledger that counts calls."""

    def __init__(self):
        self.calls: list[tuple[str, int]] = []
        self.granted: set[str] = set()

    async def grant(self, idempotency_key: str, amount: int) -> bool:
        self.calls.append((idempotency_key, amount))
        if idempotency_key in self.granted:
            return False
        self.granted.add(idempotency_key)
        return True


class BrokenLedger:
    async def grant(self, idempotency_key: str, amount: int) -> bool:
        raise ConnectionError("ledger offline")


class FakeTracker:
    def __init__(self, fail: bool = False):
        self.batches: list[list] = []
        self.fail = fail

    async def record(self, outcomes) -> None:
        self.batches.append(list(outcomes))
        if self.fail:
            raise RuntimeError("tracker offline")


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def settings():
    """Default settings, isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def persian_pool():
    """A small Persian starter vocabulary."""
    return [
        vocab("salam", "Hello/Hi", "greetings", "Salam"),
        vocab("khodafez", "Goodbye", "greetings", "Khodafez"),
        vocab("chetori", "How Are You?", "questions", "Chetori"),
        vocab("khoob", "Good", "adjectives", "Khoob"),
        vocab("khoobam", "I'm Good", "responses", "Khoobam"),
        vocab("merci", "Thank You", "responses", "Merci"),
        vocab("man", "I / Me", "pronouns", "Man"),
        vocab("shoma", "You", "pronouns", "Shoma"),
        vocab("hastam", "Am", "verbs", "Hastam"),
        vocab("esm", "Name", "nouns", "Esm"),
        vocab("kheily", "Very", "adjectives", "Kheily"),
        vocab("khoshbakhtam", "Nice to Meet You", "responses", "Khoshbakhtam"),
    ]


@pytest.fixture
def unrelated_pool():
    """Twenty single words sharing nothing with the test sentences."""
    return [vocab(f"w{i}", word, "nouns") for i, word in enumerate(UNRELATED_WORDS)]


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def tracker():
    return FakeTracker()


@pytest.fixture
def clock():
    return FakeClock()
