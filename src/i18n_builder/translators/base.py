# SPDX-License-Identifier: Apache-2.0
"""Base classes and protocols for translation backends."""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


class TranslatorError(Exception):
    """Base exception for translator module."""

    pass


class TranslationError(TranslatorError):
    """Error during translation (network failure, rate limit, bad payload).

    This error type is potentially retryable.
    """

    pass


class NetworkError(TranslationError):
    """Connection failure or request timeout."""

    pass


class RateLimitExceeded(TranslationError):
    """Provider rejected the request because of its rate limit or quota."""

    def __init__(self, message: str, reset_after: float | None = None) -> None:
        super().__init__(message)
        self.reset_after = reset_after


class InvalidResponse(TranslationError):
    """Provider answered with a payload that could not be interpreted."""

    pass


class ArrayLengthMismatchError(InvalidResponse):
    """Positional response carried a different number of translations."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Expected {expected} translations but got {actual}")
        self.expected = expected
        self.actual = actual


class ApiError(TranslatorError):
    """Provider answered with a non-2xx status.

    Request timeouts (408) and server errors (5xx) are retryable, other
    client errors are not.
    """

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"API error (status {status}): {message}")
        self.status = status
        self.message = message

    @property
    def transient(self) -> bool:
        return self.status == 408 or self.status >= 500


class ConfigurationError(TranslatorError):
    """Configuration error (missing API key, invalid parameters, etc.).

    This error type is NOT retryable - fix the configuration first.
    """

    pass


class AuthenticationFailed(ConfigurationError):
    """Credentials were rejected by the provider."""

    pass


class NotSupported(ConfigurationError):
    """Target locale or feature is not available from the provider."""

    pass


def is_transient(error: BaseException) -> bool:
    """Classify a provider error as transient (retry) or permanent (escalate)."""
    if isinstance(error, ApiError):
        return error.transient
    return isinstance(error, TranslationError)


def error_for_status(
    provider: str,
    status: int,
    body: str,
    retry_after: str | None = None,
) -> TranslatorError:
    """Map a non-2xx HTTP status to the provider error taxonomy.

    Args:
        provider: Provider name for messages.
        status: HTTP status code.
        body: Response body (truncated in messages).
        retry_after: Value of the Retry-After header, if any.

    Returns:
        Error instance to raise.
    """
    detail = body.strip()[:200]
    if status in (401, 403):
        return AuthenticationFailed(f"{provider} rejected the API key ({status})")
    if status in (429, 456):
        return RateLimitExceeded(
            f"{provider} rate limit exceeded ({status})",
            reset_after=parse_retry_after(retry_after),
        )
    return ApiError(status, f"{provider}: {detail}" if detail else provider)


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header given in seconds."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def sorted_items(items: Mapping[str, str]) -> list[tuple[str, str]]:
    """Return request items in lexical key order.

    Positional providers map response arrays back to keys by index, so the
    outgoing order must be stable.
    """
    return sorted(items.items())


@runtime_checkable
class TranslatorBackend(Protocol):
    """Protocol definition for translation backends.

    All translator implementations must conform to this protocol.
    """

    @property
    def name(self) -> str:
        """Backend name ("systran", "deepl", "google", "openai")."""
        ...

    @property
    def tier(self) -> int:
        """Default priority, 1 (highest) to 4."""
        ...

    async def translate_batch(
        self,
        items: Mapping[str, str],
        target_locale: str,
    ) -> dict[str, str]:
        """Translate a batch of keyed texts.

        Args:
            items: Mapping of key to source text.
            target_locale: Target locale code ("fi", "pt-BR").

        Returns:
            Mapping of key to translated text. May hold fewer entries than
            requested; absent keys are untranslated.

        Raises:
            TranslatorError: On failure of the whole call.
        """
        ...

    async def validate_credentials(self) -> None:
        """Check that the configured credentials are accepted.

        Raises:
            AuthenticationFailed: If the provider rejects them.
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
