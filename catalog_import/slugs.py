"""URL slug generation with per-scope collision handling.

Slugs are unique within a (language, context) scope only. Arabic labels are
kept in Arabic script unless a curated English token exists for them.
"""

import hashlib
import re
from typing import Dict, Optional, Tuple

from catalog_import.config import ARABIC_SLUG_MAP, SLUG_MAX_LENGTH
from catalog_import.logging_config import get_logger

__all__ = ["SlugGenerator", "sanitize_slug_text", "generate_hash_slug"]

logger = get_logger("slugs")

ARABIC_DIACRITICS_RE = re.compile(r"[\u064B-\u065F\u0670\u06D6-\u06ED]")
DISALLOWED_CHARS_RE = re.compile(r"[^\w\s\u0600-\u06FF-]")
SEPARATOR_RE = re.compile(r"[\s_\u00A0]+")


def sanitize_slug_text(text: str) -> str:
    """Turn arbitrary text into a URL-safe slug body.

    May return an empty string (e.g. for pure punctuation).

    Example:
        >>> sanitize_slug_text("  Track Light / 3000K ")
        'track-light-3000k'
    """
    slug = text.lower().strip()
    slug = ARABIC_DIACRITICS_RE.sub("", slug)
    slug = DISALLOWED_CHARS_RE.sub("", slug)
    slug = SEPARATOR_RE.sub("-", slug)
    slug = slug.strip("-")
    slug = slug[:SLUG_MAX_LENGTH]
    return slug.rstrip("-")


def generate_hash_slug(text: str, context: str) -> str:
    """Deterministic fallback slug: 'item-' + 8 hex chars of md5(text + context)."""
    digest = hashlib.md5(f"{text}{context}".encode("utf-8")).hexdigest()
    return f"item-{digest[:8]}"


class SlugGenerator:
    """Issues slugs unique within their (language, context) scope.

    Each scope maps issued slug -> owner. An owner (e.g. a category name) may
    be given so that a slug seeded from the store for that same owner is
    reissued to it instead of being treated as a collision.
    """

    def __init__(self, direct_map: Optional[Dict[str, str]] = None):
        self.direct_map = dict(ARABIC_SLUG_MAP if direct_map is None else direct_map)
        self._scopes: Dict[Tuple[str, str], Dict[str, Optional[str]]] = {}

    def _scope(self, language: str, context: str) -> Dict[str, Optional[str]]:
        return self._scopes.setdefault((language, context), {})

    def base_slug(self, text: str, language: str, context: str = "global") -> str:
        """Slug body before collision handling."""
        if language == "ar":
            mapped = self.direct_map.get(text) or self.direct_map.get(text.strip())
            if mapped:
                return mapped

        slug = sanitize_slug_text(text)
        if not slug or slug.isdigit():
            fallback = generate_hash_slug(text, context)
            logger.warning(f"Slug for {text!r} sanitized to {slug!r}, using fallback {fallback}")
            return fallback
        return slug

    def generate_unique_slug(
        self,
        text: str,
        language: str,
        context: str = "global",
        owner: Optional[str] = None,
    ) -> str:
        """Issue a slug for text that is unused in its (language, context) scope.

        Collisions get the smallest free numeric suffix: base, base-1, base-2...

        Args:
            text: Display label to derive the slug from
            language: Language code of the label
            context: Scope name, e.g. 'category-base' or 'category-12'
            owner: Optional identity of the entity the slug is for

        Returns:
            The issued slug, already recorded in the scope
        """
        base = self.base_slug(text, language, context)
        issued = self._scope(language, context)

        candidate = base
        counter = 1
        while not self._is_free(issued, candidate, owner):
            candidate = f"{base}-{counter}"
            counter += 1

        issued[candidate] = owner
        return candidate

    @staticmethod
    def _is_free(issued: Dict[str, Optional[str]], slug: str, owner: Optional[str]) -> bool:
        if slug not in issued:
            return True
        return owner is not None and issued[slug] == owner

    def reserve(self, slug: str, language: str, context: str, owner: Optional[str] = None) -> None:
        """Mark an already persisted slug as taken in its scope."""
        self._scope(language, context)[slug] = owner

    def issued(self, language: str, context: str) -> Dict[str, Optional[str]]:
        """Copy of the slugs recorded for one scope."""
        return dict(self._scopes.get((language, context), {}))

    def generate_hash_slug(self, text: str, context: str) -> str:
        return generate_hash_slug(text, context)

    def clear(self) -> None:
        """Forget every issued slug."""
        self._scopes.clear()
