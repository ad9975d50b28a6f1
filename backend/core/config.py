from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    # Word bank sizing (used when an exercise gives no explicit maximum)
    WORD_BANK_MIN_SIZE: int = 7
    WORD_BANK_MAX_SIZE: int = 13

    # Distractor filtering. Empirically tuned, pending product confirmation.
    LEXICAL_OVERLAP_THRESHOLD: float = 0.5
    AFFIX_LENIENCY_CHARS: int = 2
    AFFIX_MIN_WORD_LENGTH: int = 3
    DISTRACTOR_STRATEGY: Literal["random", "semantic"] = "random"

    # Equivalence and lookup tables
    SYNONYM_GROUPS: list[list[str]] = [["hi", "hello", "salam"]]
    RELATED_GROUPS: dict[str, list[str]] = {
        "greetings": ["responses"],
        "responses": ["greetings"],
        "pronouns": ["verbs"],
        "verbs": ["pronouns"],
        "questions": ["responses"],
        "adjectives": ["verbs"],
        "nouns": ["possessives"],
        "prepositions": ["nouns"],
        "connectors": ["verbs"],
        "possessives": ["nouns"],
    }
    CONTEXTUAL_VOCAB: dict[str, str] = {}

    # Exercise flow
    RETRY_DELAY_SECONDS: float = 1.5
    REWARD_AMOUNT: int = 10

    # Content
    CURRICULUM_PATH: str = "data/content/curriculum.yaml"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
