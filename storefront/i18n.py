"""Translation tables for the two storefront locales.

Each locale is a nested JSON object whose leaves are strings. Keys are
addressed with dots, e.g. ``categories.animals``. Lookups never raise:
a key missing from the requested locale is looked up in the default
locale, and a key missing there too comes back unchanged so that the
gap is visible on the page.
"""
from __future__ import annotations

import json
import os
from functools import partial
from typing import Any, Callable, Dict, Mapping, Optional

from .errors import DataFileError

DEFAULT_LOCALE = "bg"
SUPPORTED_LOCALES = ("bg", "en")

Tree = Mapping[str, Any]


def is_supported(value: Optional[str]) -> bool:
    return value in SUPPORTED_LOCALES


def resolve_locale(query_value: Optional[str], cookie_value: Optional[str]) -> str:
    """Pick the request locale: explicit ``?lang=`` first, then the cookie, then the default."""
    if is_supported(query_value):
        return query_value
    if is_supported(cookie_value):
        return cookie_value
    return DEFAULT_LOCALE


def _walk(tree: Optional[Tree], parts) -> Optional[str]:
    node: Any = tree
    for part in parts:
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    # empty leaves count as missing so the gap stays visible
    return node if isinstance(node, str) and node else None


class Translations:
    def __init__(self, tables: Dict[str, Tree]) -> None:
        self._tables = dict(tables)

    @property
    def locales(self):
        return tuple(self._tables)

    def translate(self, locale: str, key: str) -> str:
        parts = key.split(".")
        value = _walk(self._tables.get(locale), parts)
        if value is None and locale != DEFAULT_LOCALE:
            value = _walk(self._tables.get(DEFAULT_LOCALE), parts)
        return key if value is None else value

    def for_locale(self, locale: str) -> Callable[[str], str]:
        """Bind ``translate`` to one locale, for use as ``t(key)`` in templates."""
        return partial(self.translate, locale)


def _check_tree(tree: Any, path: str, prefix: str = "") -> None:
    if not isinstance(tree, dict):
        raise DataFileError(path, f"expected an object at '{prefix or '<root>'}'")
    for key, value in tree.items():
        dotted = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            _check_tree(value, path, dotted)
        elif not isinstance(value, str):
            raise DataFileError(path, f"'{dotted}' must be a string or an object")


def load_translation_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            tree = json.load(f)
    except FileNotFoundError:
        raise DataFileError(path, "file not found")
    except (OSError, ValueError) as exc:
        raise DataFileError(path, f"unreadable translation document ({exc})")
    _check_tree(tree, path)
    return tree


def load_translations(directory: str) -> Translations:
    """Load ``<locale>.json`` for every supported locale from ``directory``."""
    tables = {
        code: load_translation_file(os.path.join(directory, f"{code}.json"))
        for code in SUPPORTED_LOCALES
    }
    return Translations(tables)
