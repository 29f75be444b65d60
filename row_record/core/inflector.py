"""Naming conventions: class names to table names, association names to classes.

Only the last underscore-separated word of a name is inflected, so
``angry_person`` pluralizes to ``angry_people``.
"""

from __future__ import annotations

import re

_UNCOUNTABLE = frozenset(
    {"equipment", "information", "rice", "money", "species", "series", "fish", "sheep", "news"}
)

_IRREGULAR = {
    "person": "people",
    "man": "men",
    "child": "children",
    "sex": "sexes",
    "move": "moves",
}

# First match wins, so specific rules precede the catch-all ones.
_PLURAL_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(p, re.IGNORECASE), r)
    for p, r in [
        (r"(quiz)$", r"\1zes"),
        (r"^(ox)$", r"\1en"),
        (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
        (r"(x|ch|ss|sh)$", r"\1es"),
        (r"([^aeiouy]|qu)y$", r"\1ies"),
        (r"(hive)$", r"\1s"),
        (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
        (r"sis$", "ses"),
        (r"([ti])um$", r"\1a"),
        (r"(buffal|tomat)o$", r"\1oes"),
        (r"(bu)s$", r"\1ses"),
        (r"(alias|status)$", r"\1es"),
        (r"(octop|vir)us$", r"\1i"),
        (r"(ax|test)is$", r"\1es"),
        (r"s$", "s"),
        (r"$", "s"),
    ]
]

_SINGULAR_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(p, re.IGNORECASE), r)
    for p, r in [
        (r"(quiz)zes$", r"\1"),
        (r"(matr)ices$", r"\1ix"),
        (r"(vert|ind)ices$", r"\1ex"),
        (r"^(ox)en$", r"\1"),
        (r"(alias|status)es$", r"\1"),
        (r"(octop|vir)i$", r"\1us"),
        (r"(ax|test)es$", r"\1is"),
        (r"(cris|ax|test)is$", r"\1is"),
        (r"(shoe)s$", r"\1"),
        (r"(o)es$", r"\1"),
        (r"(bus)es$", r"\1"),
        (r"(m)ovies$", r"\1ovie"),
        (r"(x|ch|ss|sh)es$", r"\1"),
        (r"([^aeiouy]|qu)ies$", r"\1y"),
        (r"(tive|hive)s$", r"\1"),
        (r"([lr])ves$", r"\1f"),
        (r"([^f])ves$", r"\1fe"),
        (r"(analy|ba|diagno|parenthe|progno|synop|the)ses$", r"\1sis"),
        (r"([ti])a$", r"\1um"),
        (r"ss$", "ss"),
        (r"us$", "us"),
        (r"s$", ""),
    ]
]


def _inflect_last_word(
    name: str,
    rules: list[tuple[re.Pattern[str], str]],
    irregular: dict[str, str],
) -> str:
    head, sep, word = name.rpartition("_")
    lower = word.lower()
    if lower in _UNCOUNTABLE:
        return name
    if lower in irregular:
        return head + sep + irregular[lower]
    for pattern, replacement in rules:
        if pattern.search(word):
            return head + sep + pattern.sub(replacement, word, count=1)
    return name


def pluralize(name: str) -> str:
    return _inflect_last_word(name, _PLURAL_RULES, _IRREGULAR)


def singularize(name: str) -> str:
    return _inflect_last_word(
        name, _SINGULAR_RULES, {plural: single for single, plural in _IRREGULAR.items()}
    )


def underscorify(name: str) -> str:
    """Insert an underscore at each lower-to-upper case boundary.

    ``OneTwoThree`` -> ``One_Two_Three``.
    """
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)


def uncamelize(name: str) -> str:
    """``AngryPerson`` -> ``angry_person``."""
    return underscorify(name).lower()


def variablize(name: str) -> str:
    """Collapse every run of non-word characters into a single underscore."""
    return re.sub(r"\W+", "_", name.strip()).lower()


def tableize(class_name: str) -> str:
    """``AngryPerson`` -> ``angry_people``."""
    return pluralize(uncamelize(class_name))


def classify(name: str) -> str:
    """``book_authors`` -> ``BookAuthor``."""
    return "".join(part.capitalize() for part in singularize(name).split("_"))


def foreign_key(class_name: str) -> str:
    """``BookAuthor`` -> ``book_author_id``."""
    return f"{uncamelize(class_name)}_id"
