"""Tests for the translation registry."""

from catalog_import.config import CATEGORY_TRANSLATIONS
from catalog_import.translations import TranslationRegistry, fallback_translation


class TestFallbackTranslation:

    def test_english_title_cases_words(self):
        assert fallback_translation("flood-light", "en") == "Flood Light"
        assert fallback_translation("wall_washer", "en") == "Wall Washer"

    def test_arabic_prefixes_collection(self):
        assert fallback_translation("spots", "ar") == "مجموعة spots"


class TestTranslationRegistry:
    """Tests for lookups, fallbacks and instance-local additions."""

    def test_known_category(self):
        registry = TranslationRegistry()
        assert registry.get_category_translation("indoor", "en") == "Indoor Lighting"
        assert registry.get_category_translation("indoor", "ar") == "إضاءة داخلية"

    def test_known_lighting_type(self):
        registry = TranslationRegistry()
        assert registry.get_lighting_type_translation("track-light", "en") == "Track light"

    def test_unknown_key_uses_fallback(self):
        registry = TranslationRegistry()
        assert registry.get_category_translation("garden-spots", "en") == "Garden Spots"
        assert registry.get_lighting_type_translation("garden-spots", "ar") == "مجموعة garden-spots"

    def test_unknown_language_uses_fallback(self):
        registry = TranslationRegistry()
        assert registry.get_category_translation("indoor", "fr") == "Indoor"

    def test_additions_are_instance_local(self):
        first = TranslationRegistry()
        second = TranslationRegistry()

        first.add_category_translation("garden", "Garden Lighting", "إضاءة الحدائق")

        assert first.get_category_translation("garden", "en") == "Garden Lighting"
        assert second.get_category_translation("garden", "en") == "Garden"
        assert "garden" not in CATEGORY_TRANSLATIONS

    def test_add_lighting_type_translation(self):
        registry = TranslationRegistry()
        registry.add_lighting_type_translation("cob", "COB Spots", "سبوت COB")
        assert registry.get_lighting_type_translation("cob", "ar") == "سبوت COB"

    def test_get_all_translations_returns_copies(self):
        registry = TranslationRegistry()
        snapshot = registry.get_all_translations()
        snapshot["categories"]["indoor"]["en"] = "changed"

        assert registry.get_category_translation("indoor", "en") == "Indoor Lighting"
        assert set(snapshot) == {"categories", "lighting_types"}

    def test_custom_tables(self):
        registry = TranslationRegistry(categories={"x": {"en": "Ex", "ar": "إكس"}}, lighting_types={})
        assert registry.get_category_translation("x", "en") == "Ex"
        assert registry.get_category_translation("indoor", "en") == "Indoor"
