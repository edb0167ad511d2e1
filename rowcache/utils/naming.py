"""
Name derivation helpers: table names from class names and filesystem-safe
slugs from entity identities.
"""

from __future__ import annotations

import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")
_VOWELS = "aeiou"


def snake_case(name: str) -> str:
    """`ModelWithHTTPKeys` -> `model_with_http_keys`."""
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    return name.replace("-", "_").lower()


def _pluralize(word: str) -> str:
    if not word or word.endswith("s"):
        return word
    if word.endswith("y") and len(word) > 1 and word[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if word.endswith(("x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def table_name_for(class_name: str) -> str:
    """
    Default table name for an entity class: snake case with the last word
    pluralized (`Category` -> `categories`, `ModelWithNonStandardKeys` ->
    `model_with_non_standard_keys`).
    """
    words = snake_case(class_name).split("_")
    words[-1] = _pluralize(words[-1])
    return "_".join(words)


def kebab_slug(identity: str) -> str:
    """
    Stable, filesystem-safe slug for a dotted identity.

    `tests.integration.test_entities.Foo` -> `tests-integration-test-entities-foo`
    """
    parts = [snake_case(part) for part in _NON_ALNUM.split(identity) if part]
    slug = "-".join(parts).replace("_", "-")
    return re.sub(r"-{2,}", "-", slug).strip("-")


__all__ = ["kebab_slug", "snake_case", "table_name_for"]
