"""Name inflection for item keys and inferred partial paths.

Covers the regular English forms that entity class names use. Irregular
plurals can be added to ``_PLURAL_FORMS``.
"""

from __future__ import annotations

import re

_PLURAL_FORMS: dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "datum": "data",
    "index": "indices",
}

_UNCOUNTABLE: frozenset[str] = frozenset({"equipment", "information", "news", "series", "species"})


def demodulize(name: str) -> str:
    """Drop the namespace from a qualified type name.

    Examples:
        >>> demodulize("Shop::LineItem")
        'LineItem'
        >>> demodulize("blog.models.Post")
        'Post'
    """
    return re.split(r"::|\.", name)[-1]


def underscore(name: str) -> str:
    """Convert a class name to snake_case.

    Examples:
        >>> underscore("ActionItem")
        'action_item'
        >>> underscore("HTTPRequest")
        'http_request'
        >>> underscore("blog.Post")
        'blog_post'
    """
    text = re.sub(r"[.:]+", "_", name)
    text = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", text)
    text = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", text)
    return text.replace("-", "_").lower()


def pluralize(word: str) -> str:
    """Pluralize the last segment of a snake_case word.

    Examples:
        >>> pluralize("post")
        'posts'
        >>> pluralize("action_item")
        'action_items'
        >>> pluralize("category")
        'categories'
    """
    head, sep, last = word.rpartition("_")
    if last in _UNCOUNTABLE:
        plural = last
    elif last in _PLURAL_FORMS:
        plural = _PLURAL_FORMS[last]
    elif re.search(r"[^aeiou]y$", last):
        plural = last[:-1] + "ies"
    elif re.search(r"(s|x|z|ch|sh)$", last):
        plural = last + "es"
    else:
        plural = last + "s"
    return f"{head}{sep}{plural}"
