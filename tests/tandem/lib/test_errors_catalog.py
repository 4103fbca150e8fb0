"""Tests for the transient message catalog."""

from tandem.lib import errors


class TestGetMessage:
    def test_english_default(self):
        assert errors.get_message(errors.TITLE_REQUIRED) == "Task title cannot be empty."

    def test_german_translation(self):
        assert errors.get_message(errors.RATING_REQUIRED, "de") == "Bitte waehle eine Bewertung."

    def test_unknown_language_falls_back_to_english(self):
        assert errors.get_message(errors.DISCUSS_DEFERRED, "fr") == "Discuss feature coming soon."

    def test_unknown_code_has_generic_message(self):
        assert errors.get_message("NOPE") == "Something went wrong."

    def test_every_code_has_english(self):
        codes = [name for name in errors.__all__ if name != "get_message"]
        for code in codes:
            assert errors.get_message(getattr(errors, code)) != "Something went wrong."
