# SPDX-License-Identifier: Apache-2.0
"""Translation backend modules.

This module provides translation backends in four tiers:

1. Systran (requires API key)
2. DeepL (requires API key)
3. Google Translate (always available, no API key required)
4. OpenAI (requires the ``openai`` extra and an API key)

Usage:
    from i18n_builder.translators import GoogleTranslator
    translator = GoogleTranslator()
    result = await translator.translate_batch({"greeting": "Hello"}, "fi")

    # OpenAI needs the openai extra, so it is imported from its module
    from i18n_builder.translators.openai import OpenAITranslator
"""

from i18n_builder.translators.base import (
    ApiError,
    ArrayLengthMismatchError,
    AuthenticationFailed,
    ConfigurationError,
    InvalidResponse,
    NetworkError,
    NotSupported,
    RateLimitExceeded,
    TranslationError,
    TranslatorBackend,
    TranslatorError,
    is_transient,
)
from i18n_builder.translators.deepl import DeepLTranslator
from i18n_builder.translators.google import GoogleTranslator
from i18n_builder.translators.systran import SystranTranslator

__all__ = [
    # Protocol and exceptions
    "TranslatorBackend",
    "TranslatorError",
    "TranslationError",
    "NetworkError",
    "RateLimitExceeded",
    "InvalidResponse",
    "ArrayLengthMismatchError",
    "ApiError",
    "ConfigurationError",
    "AuthenticationFailed",
    "NotSupported",
    "is_transient",
    # Backends
    "SystranTranslator",
    "DeepLTranslator",
    "GoogleTranslator",
]
