"""Laravel string helpers used to derive table names, keys and accessor names."""

from __future__ import annotations

import re

_UNCOUNTABLE = frozenset(
    {
        "audio", "data", "equipment", "feedback", "fish", "information", "media",
        "metadata", "money", "news", "rice", "series", "sheep", "species", "staff",
    }
)  # fmt: skip

_IRREGULAR = {
    "child": "children",
    "foot": "feet",
    "goose": "geese",
    "man": "men",
    "mouse": "mice",
    "ox": "oxen",
    "person": "people",
    "tooth": "teeth",
    "woman": "women",
}

_F_TO_VES = frozenset({"calf", "half", "knife", "leaf", "life", "loaf", "self", "shelf", "thief", "wife", "wolf"})

_SNAKE_BOUNDARY = re.compile(r"(.)(?=[A-Z])")
_WORD_SPLIT = re.compile(r"[-_\s]+")
_STUDLY_WORDS = re.compile(r"[A-Z][^A-Z]*|[^A-Z]+")


def lcfirst(value: str) -> str:
    return value[:1].lower() + value[1:]


def ucfirst(value: str) -> str:
    return value[:1].upper() + value[1:]


def class_basename(class_name: str) -> str:
    return class_name.rstrip("\\").rsplit("\\", 1)[-1]


def snake(value: str) -> str:
    """``UserProfile`` -> ``user_profile``, ``fullName`` -> ``full_name``."""
    if value.islower():
        return value
    value = "".join(ucfirst(word) for word in value.split())
    return _SNAKE_BOUNDARY.sub(r"\1_", value).lower()


def studly(value: str) -> str:
    """``user_profile`` -> ``UserProfile``."""
    return "".join(ucfirst(word) for word in _WORD_SPLIT.split(value) if word)


def _match_case(word: str, plural: str) -> str:
    if word.isupper():
        return plural.upper()
    if word[:1].isupper():
        return ucfirst(plural)
    return plural


def plural(word: str) -> str:
    """English plural of a single word."""
    lower = word.lower()
    if not lower or lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR:
        return _match_case(word, _IRREGULAR[lower])
    if lower in _F_TO_VES:
        stem = lower[:-2] if lower.endswith("fe") else lower[:-1]
        return _match_case(word, stem + "ves")
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        if lower.endswith("is"):
            return word[:-2] + "es"
        return word + "es"
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


def plural_studly(value: str) -> str:
    """Pluralize only the last word of a StudlyCase name."""
    words = _STUDLY_WORDS.findall(value)
    if not words:
        return value
    return "".join(words[:-1]) + plural(words[-1])


def table_name_for(class_name: str) -> str:
    """Default Eloquent table name: ``App\\Models\\UserProfile`` -> ``user_profiles``."""
    return snake(plural_studly(class_basename(class_name)))
