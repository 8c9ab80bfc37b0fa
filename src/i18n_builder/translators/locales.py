# SPDX-License-Identifier: Apache-2.0
"""Locale codes and provider language preferences."""

from __future__ import annotations

# Languages DeepL translates into with high quality.
DEEPL_LANGUAGES: frozenset[str] = frozenset(
    {
        "bg", "cs", "da", "de", "el", "en", "es", "et", "fi", "fr", "hu",
        "id", "it", "ja", "ko", "lt", "lv", "nb", "nl", "pl", "pt", "ro", "ru",
        "sk", "sl", "sv", "tr", "uk", "zh",
    }
)

# Languages better served by Google (broader coverage).
GOOGLE_PREFERRED: frozenset[str] = frozenset({"ar", "th", "vi", "hi"})

# Language code to full name mapping for prompts
LANGUAGE_NAMES: dict[str, str] = {
    "ar": "Arabic",
    "cs": "Czech",
    "da": "Danish",
    "de": "German",
    "en": "English",
    "es": "Spanish",
    "fi": "Finnish",
    "fr": "French",
    "he": "Hebrew",
    "hi": "Hindi",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "nl": "Dutch",
    "no": "Norwegian",
    "pl": "Polish",
    "pt": "Portuguese",
    "ru": "Russian",
    "sr": "Serbian",
    "sv": "Swedish",
    "th": "Thai",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "vi": "Vietnamese",
    "zh": "Chinese",
}


def primary_language(locale: str) -> str:
    """Return the primary language subtag ("pt-BR" -> "pt", "zh_CN" -> "zh")."""
    return locale.replace("_", "-").split("-", 1)[0].lower()


def language_name(locale: str) -> str:
    """Return a human-readable language name for prompts."""
    normalized = locale.replace("_", "-")
    name = LANGUAGE_NAMES.get(primary_language(normalized))
    if name is None:
        return locale
    if "-" in normalized:
        return f"{name} ({normalized.split('-', 1)[1]})"
    return name


def deepl_target_code(locale: str) -> str:
    """Convert a locale into a DeepL ``target_lang`` value."""
    normalized = locale.replace("_", "-").upper()
    if normalized == "EN":
        return "EN-US"
    if normalized == "PT":
        return "PT-BR"
    # Only English, Portuguese and Chinese have regional variants.
    if normalized.split("-", 1)[0] in ("EN", "PT", "ZH"):
        return normalized
    return normalized.split("-", 1)[0]


def matches_locale(preferred: frozenset[str] | set[str] | list[str], locale: str) -> bool:
    """Return True if a preference list names the locale or its language."""
    candidates = {locale, locale.replace("_", "-"), primary_language(locale)}
    return any(code in candidates for code in preferred)
