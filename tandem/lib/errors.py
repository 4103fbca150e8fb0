"""
Transient message catalog for Tandem.

Error codes are constants that map to translatable message strings. The
wizards surface store failures and local validation problems as one-shot
``ShowMessage`` side effects built from this catalog.
"""

from __future__ import annotations

# =============================================================================
# Error Code Constants
# =============================================================================

LOAD_FAILED = "LOAD_FAILED"
TASK_CREATE_FAILED = "TASK_CREATE_FAILED"
REQUEST_ACCEPT_FAILED = "REQUEST_ACCEPT_FAILED"
PLANNING_COMPLETE_FAILED = "PLANNING_COMPLETE_FAILED"
RATING_SAVE_FAILED = "RATING_SAVE_FAILED"
OUTCOME_SAVE_FAILED = "OUTCOME_SAVE_FAILED"
REVIEW_COMPLETE_FAILED = "REVIEW_COMPLETE_FAILED"
RATING_REQUIRED = "RATING_REQUIRED"
TITLE_REQUIRED = "TITLE_REQUIRED"
DISCUSS_DEFERRED = "DISCUSS_DEFERRED"

# =============================================================================
# i18n Message Registry
#
# Maps (error_code, language) -> message string. Falls back to "en" if a
# translation is missing for the requested language.
# =============================================================================

_MESSAGES: dict[str, dict[str, str]] = {
    LOAD_FAILED: {
        "en": "Could not load your week. Please try again.",
        "de": "Deine Woche konnte nicht geladen werden. Bitte versuche es erneut.",
    },
    TASK_CREATE_FAILED: {
        "en": "Failed to add task. Please try again.",
        "de": "Aufgabe konnte nicht hinzugefuegt werden. Bitte erneut versuchen.",
    },
    REQUEST_ACCEPT_FAILED: {
        "en": "Failed to accept request. Please try again.",
        "de": "Anfrage konnte nicht angenommen werden. Bitte erneut versuchen.",
    },
    PLANNING_COMPLETE_FAILED: {
        "en": "Failed to complete planning. Please try again.",
        "de": "Planung konnte nicht abgeschlossen werden. Bitte erneut versuchen.",
    },
    RATING_SAVE_FAILED: {
        "en": "Failed to save rating. Please try again.",
        "de": "Bewertung konnte nicht gespeichert werden. Bitte erneut versuchen.",
    },
    OUTCOME_SAVE_FAILED: {
        "en": "Failed to save outcome. Please try again.",
        "de": "Ergebnis konnte nicht gespeichert werden. Bitte erneut versuchen.",
    },
    REVIEW_COMPLETE_FAILED: {
        "en": "Failed to complete review. Please try again.",
        "de": "Rueckblick konnte nicht abgeschlossen werden. Bitte erneut versuchen.",
    },
    RATING_REQUIRED: {
        "en": "Please select a rating.",
        "de": "Bitte waehle eine Bewertung.",
    },
    TITLE_REQUIRED: {
        "en": "Task title cannot be empty.",
        "de": "Der Aufgabentitel darf nicht leer sein.",
    },
    DISCUSS_DEFERRED: {
        "en": "Discuss feature coming soon.",
        "de": "Die Diskussionsfunktion kommt bald.",
    },
}

_DEFAULT_LANG = "en"


def get_message(code: str, lang: str = _DEFAULT_LANG) -> str:
    """
    Get a translated message for a given code.

    Falls back to English if the requested language is not available, and
    to a generic message if the code is unknown.

    Args:
        code: Error code constant (e.g. TASK_CREATE_FAILED)
        lang: ISO 639-1 language code ("en", "de")

    Returns:
        Message string
    """
    messages = _MESSAGES.get(code, {})
    return messages.get(lang, messages.get(_DEFAULT_LANG, "Something went wrong."))


__all__ = [
    "LOAD_FAILED",
    "TASK_CREATE_FAILED",
    "REQUEST_ACCEPT_FAILED",
    "PLANNING_COMPLETE_FAILED",
    "RATING_SAVE_FAILED",
    "OUTCOME_SAVE_FAILED",
    "REVIEW_COMPLETE_FAILED",
    "RATING_REQUIRED",
    "TITLE_REQUIRED",
    "DISCUSS_DEFERRED",
    "get_message",
]
