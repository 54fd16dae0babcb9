"""
Cheap English/Spanish detection used to reject sentences in the wrong language.

Word lists only contain words that are unambiguous between the two languages
("no", "a", "me" and similar are left out). No NLP, no external models.
"""

from __future__ import annotations

import re

_WORD_RE = re.compile(r"[a-záéíóúñü']+")

_SPANISH_CHARS = frozenset("áéíóúñü¿¡")

_SPANISH_WORDS = frozenset(
    {
        "el", "la", "los", "las", "un", "una", "unos", "unas", "del", "al",
        "de", "que", "y", "en", "es", "está", "estás", "están", "esta",
        "este", "estoy", "soy", "eres", "por", "para", "con", "pero",
        "muy", "también", "yo", "tú", "usted", "nosotros", "ellos", "ella",
        "mi", "mis", "tu", "tus", "su", "sus", "hola", "gracias", "cómo",
        "qué", "dónde", "cuando", "porque", "hoy", "ayer", "mañana", "tengo",
        "tiene", "quiero", "puedo", "hay", "bien", "bueno", "buenos", "buenas",
    }
)

_ENGLISH_WORDS = frozenset(
    {
        "the", "is", "are", "was", "were", "and", "you", "i", "to", "of",
        "in", "it", "this", "that", "with", "for", "have", "had",
        "be", "been", "do", "does", "did", "what", "where", "when", "how",
        "my", "your", "she", "they", "we", "hello", "thanks", "today",
        "yesterday", "tomorrow", "want", "can", "will", "would", "not", "an",
        "at", "on", "from", "there", "here", "i'm", "it's", "don't",
    }
)


def _words(text: str) -> list[str]:
    return _WORD_RE.findall(text.lower())


def looks_spanish(text: str) -> bool:
    lowered = text.lower()
    if any(ch in _SPANISH_CHARS for ch in lowered):
        return True
    return any(word in _SPANISH_WORDS for word in _words(lowered))


def looks_english(text: str) -> bool:
    return any(word in _ENGLISH_WORDS for word in _words(text))


def is_language_mismatch(sentence: str, language: str, *, min_length: int = 10) -> bool:
    """
    True when `sentence` clearly is not in `language`.

    Short sentences (<= `min_length` characters) and sentences where both or
    neither heuristic fires are always accepted.
    """

    if len(sentence.strip()) <= min_length:
        return False

    spanish = looks_spanish(sentence)
    english = looks_english(sentence)

    if language == "Spanish":
        return english and not spanish
    if language == "English":
        return spanish and not english
    return False
