"""Text Normalizer

Canonical comparable forms for vocabulary meanings, target phrases and tiles.
Every comparison in the engine goes through this module, so contractions,
punctuation and case are treated identically on both sides.

Conventions:
- ``/`` separates alternatives; the first is canonical and used for display
- terminal punctuation (. , ! ? ; :) is stripped at word edges, internal
  apostrophes and hyphens are kept
- contractions are expanded ("I'm" -> "i am")

Deterministic, pure.
"""
from __future__ import annotations

import re
import unicodedata

ALTERNATIVE_SEPARATOR = "/"
EDGE_PUNCTUATION = ".,!?;:"

_CONTRACTIONS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\bdon't\b"), "do not"),
    (re.compile(r"\bdoesn't\b"), "does not"),
    (re.compile(r"\bdidn't\b"), "did not"),
    (re.compile(r"\bwon't\b"), "will not"),
    (re.compile(r"\bwouldn't\b"), "would not"),
    (re.compile(r"\bcan't\b"), "can not"),
    (re.compile(r"\bcouldn't\b"), "could not"),
    (re.compile(r"\bshouldn't\b"), "should not"),
    (re.compile(r"\bisn't\b"), "is not"),
    (re.compile(r"\baren't\b"), "are not"),
    (re.compile(r"\bwasn't\b"), "was not"),
    (re.compile(r"\bweren't\b"), "were not"),
    (re.compile(r"\bhaven't\b"), "have not"),
    (re.compile(r"\bhasn't\b"), "has not"),
    (re.compile(r"\bi'm\b"), "i am"),
    (re.compile(r"\bit's\b"), "it is"),
    (re.compile(r"\bhe's\b"), "he is"),
    (re.compile(r"\bshe's\b"), "she is"),
    (re.compile(r"\bthat's\b"), "that is"),
    (re.compile(r"\bwhat's\b"), "what is"),
    (re.compile(r"\bwhere's\b"), "where is"),
    (re.compile(r"\bhow's\b"), "how is"),
    (re.compile(r"\byou're\b"), "you are"),
    (re.compile(r"\bwe're\b"), "we are"),
    (re.compile(r"\bthey're\b"), "they are"),
    (re.compile(r"\bi've\b"), "i have"),
    (re.compile(r"\byou've\b"), "you have"),
    (re.compile(r"\bwe've\b"), "we have"),
    (re.compile(r"\bthey've\b"), "they have"),
    (re.compile(r"\bi'll\b"), "i will"),
    (re.compile(r"\byou'll\b"), "you will"),
    (re.compile(r"\bwe'll\b"), "we will"),
    (re.compile(r"\bthey'll\b"), "they will"),
    (re.compile(r"\bi'd\b"), "i would"),
    (re.compile(r"\blet's\b"), "let us"),
]


def _unify(text: str) -> str:
    """NFKC, ASCII apostrophes and hyphens, collapsed whitespace."""
    s = unicodedata.normalize("NFKC", text)
    s = s.replace("’", "'").replace("‘", "'").replace("′", "'")
    s = s.replace("—", "-").replace("–", "-")
    return " ".join(s.split())


def _strip_edges(word: str) -> str:
    return word.strip(EDGE_PUNCTUATION)


def surface_words(text: str) -> list[str]:
    """Words as written (case kept), unified, edge punctuation stripped."""
    if not text:
        return []
    words = (_strip_edges(w) for w in _unify(text).split())
    return [w for w in words if w]


def clean(text: str) -> str:
    """Lower-case, unify and strip edge punctuation from every word."""
    return " ".join(surface_words(text)).lower()


def expand_contractions(text: str) -> str:
    """Expand common English contractions. Expects lower-cased input."""
    s = text
    for pat, repl in _CONTRACTIONS:
        s = pat.sub(repl, s)
    return s


def split_words(text: str) -> list[str]:
    """Comparable words of a single (non-alternative) text."""
    return expand_contractions(clean(text)).split()


def alternatives(text: str) -> list[str]:
    """Raw ``/``-delimited alternatives, trimmed, empty ones dropped."""
    if not text:
        return []
    parts = (p.strip() for p in text.split(ALTERNATIVE_SEPARATOR))
    return [p for p in parts if p]


def normalize(text: str) -> list[str]:
    """One comparable token per alternative, canonical first, no duplicates.

    >>> normalize("Hi/Hello!")
    ['hi', 'hello']
    >>> normalize("I'm good.")
    ['i am good']
    """
    seen: list[str] = []
    for alt in alternatives(text):
        key = " ".join(split_words(alt))
        if key and key not in seen:
            seen.append(key)
    return seen


def comparison_key(text: str) -> str:
    """Normalized canonical (first) alternative, or ``""`` for empty text."""
    keys = normalize(text)
    return keys[0] if keys else ""


def sentence_case(text: str) -> str:
    """Capitalise the first word, lower-case the rest, keep ``I`` upper-case."""
    words = text.split(" ")
    out = []
    for i, word in enumerate(words):
        lowered = word.lower()
        if lowered == "i" or lowered.startswith("i'"):
            out.append("I" + lowered[1:])
        elif i == 0:
            out.append(lowered[:1].upper() + lowered[1:])
        else:
            out.append(lowered)
    return " ".join(out)


def display_text(text: str) -> str:
    """Tile text: first alternative, terminal punctuation removed, sentence case."""
    alts = alternatives(text)
    if not alts:
        return ""
    return sentence_case(" ".join(surface_words(alts[0])))
