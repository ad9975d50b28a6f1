"""Curriculum Lexicon

Loads modules -> lessons -> vocabulary from a YAML curriculum and builds the
vocabulary scopes used for distractor fallback:
- lesson vocabulary
- module vocabulary (learned items first)
- global vocabulary (learned items first)
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

import yaml
from pydantic import BaseModel, ValidationError, model_validator

from core.config import Settings, get_settings
from core.errors import (
    AppError,
    ErrorCode,
    Ok,
    Result,
    ValidationErrorMapper,
    curriculum_invalid,
    curriculum_not_found,
    validation_error,
    vocabulary_not_found,
)
from core.logging import content_logger
from engines.vocabulary import VocabularyItem, VocabularyScope

log = content_logger()

PROJECT_ROOT = Path(__file__).parent.parent.parent

_TRAILING_NUMBER = re.compile(r"(\d+)$")


# === Document Models ===

class VocabularyEntry(BaseModel):
    id: str
    meaning: str
    transliteration: str = ""
    phonetic: str = ""
    semantic_group: str | None = None


class LessonDocument(BaseModel):
    id: str
    title: str = ""
    vocabulary: list[VocabularyEntry] = []


class ModuleDocument(BaseModel):
    id: str
    title: str = ""
    lessons: list[LessonDocument] = []


class CurriculumDocument(BaseModel):
    modules: list[ModuleDocument]

    @model_validator(mode="after")
    def unique_vocabulary_ids(self) -> CurriculumDocument:
        seen: set[str] = set()
        for module in self.modules:
            for lesson in module.lessons:
                for entry in lesson.vocabulary:
                    if entry.id in seen:
                        raise ValueError(f"duplicate vocabulary id '{entry.id}'")
                    seen.add(entry.id)
        return self


def _ordinal(identifier: str, fallback: int) -> int:
    """``module3`` -> 3, ``lesson12`` -> 12; document order when unnumbered."""
    m = _TRAILING_NUMBER.search(identifier)
    return int(m.group(1)) if m else fallback


class CurriculumLexicon:
    """Read-only index over a validated curriculum."""

    __slots__ = ("_items", "_modules", "_module_order", "_lesson_order")

    def __init__(self, document: CurriculumDocument):
        self._items: dict[str, VocabularyItem] = {}
        # module_id -> lesson_id -> items, in document order
        self._modules: dict[str, dict[str, list[VocabularyItem]]] = {}
        self._module_order: dict[str, int] = {}
        self._lesson_order: dict[tuple[str, str], int] = {}

        for m_index, module in enumerate(document.modules):
            self._module_order[module.id] = _ordinal(module.id, m_index)
            lessons = self._modules.setdefault(module.id, {})
            for l_index, lesson in enumerate(module.lessons):
                self._lesson_order[(module.id, lesson.id)] = _ordinal(lesson.id, l_index)
                bucket = lessons.setdefault(lesson.id, [])
                for entry in lesson.vocabulary:
                    item = VocabularyItem(
                        id=entry.id,
                        meaning=entry.meaning,
                        transliteration=entry.transliteration,
                        phonetic=entry.phonetic,
                        lesson_id=lesson.id,
                        module_id=module.id,
                        semantic_group=entry.semantic_group,
                    )
                    self._items[item.id] = item
                    bucket.append(item)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def module_ids(self) -> list[str]:
        return list(self._modules)

    def vocabulary(self, vocabulary_id: str) -> Result[VocabularyItem, AppError]:
        item = self._items.get(vocabulary_id)
        if item is None:
            return vocabulary_not_found(vocabulary_id, origin="engine.lexicon")
        return Ok(item)

    def all_vocabulary(self) -> list[VocabularyItem]:
        return list(self._items.values())

    def module_vocabulary(self, module_id: str) -> list[VocabularyItem]:
        lessons = self._modules.get(module_id, {})
        return [item for items in lessons.values() for item in items]

    def lesson_vocabulary(self, module_id: str, lesson_id: str) -> list[VocabularyItem]:
        return list(self._modules.get(module_id, {}).get(lesson_id, []))

    def learned_before(self, module_id: str, lesson_id: str) -> list[VocabularyItem]:
        """Vocabulary of every earlier module and every earlier lesson of this module."""
        current_module = self._module_order.get(module_id)
        if current_module is None:
            log.warning("module_unknown", module_id=module_id)
            return []
        current_lesson = self._lesson_order.get((module_id, lesson_id))

        learned: list[VocabularyItem] = []
        for mod_id, lessons in self._modules.items():
            order = self._module_order[mod_id]
            if order < current_module:
                learned.extend(item for items in lessons.values() for item in items)
            elif mod_id == module_id and current_lesson is not None:
                for les_id, items in lessons.items():
                    if self._lesson_order[(mod_id, les_id)] < current_lesson:
                        learned.extend(items)
        return learned

    def scope_chain(
        self,
        module_id: str,
        lesson_id: str,
        learned_ids: Iterable[str] | None = None,
    ) -> list[VocabularyScope]:
        """Distractor scopes, narrowest first. Empty scopes are skipped."""
        learned = set(learned_ids) if learned_ids is not None else None
        lesson = self.lesson_vocabulary(module_id, lesson_id)
        module = self.module_vocabulary(module_id)
        everything = self.all_vocabulary()

        if not lesson:
            log.warning("lesson_scope_empty", module_id=module_id, lesson_id=lesson_id)

        chain = [VocabularyScope("lesson", tuple(lesson))]
        for name, items in (("module", module), ("global", everything)):
            if learned is not None:
                known = tuple(i for i in items if i.id in learned)
                chain.append(VocabularyScope(f"{name}_learned", known))
            chain.append(VocabularyScope(name, tuple(items)))
        return [scope for scope in chain if scope.items]


def _resolve_path(path: str | Path) -> Path:
    p = Path(path)
    return p if p.is_absolute() else PROJECT_ROOT / p


def load_curriculum(
    path: str | Path | None = None,
    settings: Settings | None = None,
) -> Result[CurriculumLexicon, AppError]:
    """Load and validate a curriculum YAML file."""
    settings = settings or get_settings()
    resolved = _resolve_path(path if path is not None else settings.CURRICULUM_PATH)
    origin = "engine.lexicon"

    try:
        with open(resolved, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        log.error("curriculum_missing", path=str(resolved))
        return curriculum_not_found(str(resolved), origin=origin, cause=e)
    except yaml.YAMLError as e:
        problem = validation_error(
            f"YAML syntax error: {e}", code=ErrorCode.E2002_INVALID_FORMAT, origin=origin
        ).error
        log.error("curriculum_unparseable", path=str(resolved))
        return curriculum_invalid(str(resolved), [problem], origin=origin)

    try:
        document = CurriculumDocument.model_validate(data or {})
    except ValidationError as e:
        problems = ValidationErrorMapper(origin).map_pydantic_errors(e.errors())
        log.error("curriculum_invalid", path=str(resolved), problems=len(problems))
        return curriculum_invalid(str(resolved), problems, origin=origin)

    lexicon = CurriculumLexicon(document)
    log.info(
        "curriculum_loaded",
        path=str(resolved),
        modules=len(lexicon.module_ids),
        vocabulary=len(lexicon),
    )
    return Ok(lexicon)
