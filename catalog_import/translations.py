"""Display labels for categories and lighting types per language."""

import re
from typing import Dict, Optional

from catalog_import.config import CATEGORY_TRANSLATIONS, LIGHTING_TYPE_TRANSLATIONS

__all__ = ["TranslationRegistry", "fallback_translation"]

TranslationMap = Dict[str, Dict[str, str]]

# Arabic generic noun used when a label has no curated translation
ARABIC_COLLECTION_PREFIX = "مجموعة"


def fallback_translation(text: str, language: str) -> str:
    """Best-effort label for keys missing from the registry.

    Example:
        >>> fallback_translation("flood-light", "en")
        'Flood Light'
    """
    if language == "ar":
        return f"{ARABIC_COLLECTION_PREFIX} {text}"
    spaced = re.sub(r"[-_]", " ", text)
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), spaced)


class TranslationRegistry:
    """Mutable label registry owned by one import run.

    Starts from the defaults in config; additions stay local to the instance.
    """

    def __init__(
        self,
        categories: Optional[TranslationMap] = None,
        lighting_types: Optional[TranslationMap] = None,
    ):
        source_categories = CATEGORY_TRANSLATIONS if categories is None else categories
        source_lighting = LIGHTING_TYPE_TRANSLATIONS if lighting_types is None else lighting_types
        self._categories: TranslationMap = {k: dict(v) for k, v in source_categories.items()}
        self._lighting_types: TranslationMap = {k: dict(v) for k, v in source_lighting.items()}

    @staticmethod
    def _lookup(table: TranslationMap, key: str, language: str) -> str:
        entry = table.get(key) or {}
        return entry.get(language) or fallback_translation(key, language)

    def get_category_translation(self, category: str, language: str) -> str:
        return self._lookup(self._categories, category, language)

    def get_lighting_type_translation(self, lighting_type: str, language: str) -> str:
        return self._lookup(self._lighting_types, lighting_type, language)

    def add_category_translation(self, key: str, en: str, ar: str) -> None:
        self._categories[key] = {"en": en, "ar": ar}

    def add_lighting_type_translation(self, key: str, en: str, ar: str) -> None:
        self._lighting_types[key] = {"en": en, "ar": ar}

    def get_all_translations(self) -> Dict[str, TranslationMap]:
        """Copies of both tables, for debugging."""
        return {
            "categories": {k: dict(v) for k, v in self._categories.items()},
            "lighting_types": {k: dict(v) for k, v in self._lighting_types.items()},
        }
