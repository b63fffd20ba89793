"""Unit tests for translation lookup."""

import pytest

from bookingform.i18n import (
    Translator,
    format_label,
    language_name,
    localized_label,
    lookup,
    translate,
    translation_key,
)


class TestTranslate:
    """Test lookup with English fallback."""

    def test_translated_key(self):
        assert translate("back_button", "fr") == "Retour"

    def test_missing_language_falls_back_to_english(self):
        """Should use English when the language has no entry."""
        assert translate("try_again", "de") == "Try Again"

    def test_missing_key_uses_default(self):
        assert translate("no_such_key", "es", "Default text") == "Default text"

    def test_missing_key_without_default_is_title_cased(self):
        assert translate("flight_number", "en") == "Flight Number"

    def test_key_normalized(self):
        assert translation_key("Trip Details") == "trip_details"
        assert translate("Trip Details", "es") == "Detalles del viaje"

    def test_empty_key(self):
        assert translate("", "en") == ""

    def test_lookup_without_fallback(self):
        assert lookup("promo_code", "fr") == "Code promo"
        assert lookup("made_up", "fr") is None


class TestLabels:
    """Test configured label localization."""

    def test_english_keeps_configured_label(self):
        """Should never replace the configured label in English."""
        assert localized_label("pickup_location", "en", "Pickup Address") == "Pickup Address"

    def test_other_language_uses_table(self):
        assert localized_label("email", "es", "Email") == "Correo electrónico"

    def test_other_language_without_entry_keeps_label(self):
        assert localized_label("flight_number", "fr", "Flight Number") == "Flight Number"

    def test_empty_label_formats_key(self):
        assert localized_label("rental_hours", "en", "") == "Rental Hours"

    @pytest.mark.parametrize("key,expected", [("rental_hours", "Rental Hours"), ("email", "Email")])
    def test_format_label(self, key, expected):
        assert format_label(key) == expected


class TestTranslator:
    """Test the language-bound translator."""

    def test_call_and_label(self):
        t = Translator("es")
        assert t("next_button") == "Siguiente"
        assert t.label("full_name", "Full Name") == "Nombre completo"

    def test_language_names(self):
        assert language_name("fr") == "Français"
        assert language_name("xx") == "xx"
