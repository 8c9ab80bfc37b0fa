# SPDX-License-Identifier: Apache-2.0
"""Tiered fallback router.

For one ``(namespace, target_locale)`` batch the router partitions keys into
cache hits and pending keys, then walks the provider tiers. Every transition
of the walk is computed by :func:`next_state`, a pure function over
``FallbackState`` that can be tested without any provider.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Mapping, Sequence, Union

from i18n_builder.cache import FileCache
from i18n_builder.config import ProviderSettings, TranslationConfig
from i18n_builder.translators.base import (
    AuthenticationFailed,
    ConfigurationError,
    RateLimitExceeded,
    TranslatorBackend,
    TranslatorError,
    is_transient,
    sorted_items,
)
from i18n_builder.translators.locales import matches_locale

logger = logging.getLogger(__name__)

CACHE_PROVIDER = "cache"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for transient failures within one tier.

    Attributes:
        max_retries: Attempts allowed per tier (including the first).
        retry_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound for any delay.
        backoff_multiplier: Growth factor between consecutive retries.
    """

    max_retries: int = 3
    retry_delay: float = 1.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0

    @classmethod
    def from_settings(cls, settings: ProviderSettings) -> RetryPolicy:
        return cls(
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
            max_delay=settings.max_delay,
            backoff_multiplier=settings.backoff_multiplier,
        )

    def delay(self, retry_count: int, reset_after: float | None = None) -> float:
        """Return the wait before retry number ``retry_count + 1``.

        A provider-supplied ``reset_after`` raises the floor but never the cap.
        """
        delay = self.retry_delay * (self.backoff_multiplier**retry_count)
        if reset_after is not None:
            delay = max(delay, reset_after)
        return max(0.0, min(delay, self.max_delay))


@dataclass(frozen=True)
class Translated:
    """A provider call that returned (possibly fewer) translations."""

    entries: Mapping[str, str]


@dataclass(frozen=True)
class Failed:
    """A provider call that raised."""

    error: TranslatorError


Outcome = Union[Translated, Failed]


@dataclass(frozen=True)
class FallbackState:
    """Position of one batch in the tier walk."""

    tier_index: int
    remaining: frozenset[str]
    retry_count: int = 0

    def is_finished(self, tier_count: int) -> bool:
        return not self.remaining or self.tier_index >= tier_count


def next_state(
    state: FallbackState,
    outcome: Outcome,
    *,
    max_retries: int,
    tier_count: int,
    no_fallback: bool = False,
) -> FallbackState:
    """Compute the state following one provider call.

    Args:
        state: State the call was made in.
        outcome: Result of the call.
        max_retries: Attempts allowed on the current tier.
        tier_count: Number of tiers in the walk.
        no_fallback: Finish instead of moving past the first tier.

    Returns:
        The next state. Use ``is_finished`` to detect termination.
    """
    last_tier = tier_count if no_fallback else state.tier_index + 1

    if isinstance(outcome, Translated):
        remaining = state.remaining - frozenset(outcome.entries)
        if not remaining:
            return FallbackState(state.tier_index, remaining, 0)
        # Partial success: hand the rest to the next tier.
        return FallbackState(last_tier, remaining, 0)

    if is_transient(outcome.error) and state.retry_count + 1 < max_retries:
        return FallbackState(state.tier_index, state.remaining, state.retry_count + 1)
    return FallbackState(last_tier, state.remaining, 0)


@dataclass
class TierAttempt:
    """Diagnostics for one tier touched by a batch."""

    provider: str
    tier: int
    attempts: int = 0
    translated: int = 0
    error: str | None = None


@dataclass
class RouterResult:
    """Outcome of routing one batch.

    Attributes:
        translations: Translated text per key (cache hits included).
        providers: Provider that produced each translation ("cache" for hits).
        untranslated: Keys no tier translated, sorted.
        diagnostics: One entry per tier touched, in walk order.
        cache_hits: Number of keys served from the cache.
    """

    translations: dict[str, str] = field(default_factory=dict)
    providers: dict[str, str] = field(default_factory=dict)
    untranslated: list[str] = field(default_factory=list)
    diagnostics: list[TierAttempt] = field(default_factory=list)
    cache_hits: int = 0

    @property
    def provider_calls(self) -> int:
        return sum(attempt.attempts for attempt in self.diagnostics)


class FallbackRouter:
    """Resolve batches through the cache and an ordered list of providers."""

    def __init__(
        self,
        providers: Sequence[TranslatorBackend],
        cache: FileCache | None = None,
        config: TranslationConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        """Initialize FallbackRouter.

        Args:
            providers: Available providers, in any order.
            cache: Persistent cache (None disables caching).
            config: Engine configuration (provider settings, strategy).
            sleep: Awaitable used for backoff delays.

        Raises:
            ConfigurationError: If no provider is given.
        """
        if not providers:
            raise ConfigurationError("No translation providers configured")
        self._providers = sorted(providers, key=lambda p: p.tier)
        self._cache = cache
        self._config = config or TranslationConfig()
        self._sleep = sleep

    async def __aenter__(self) -> FallbackRouter:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    @property
    def providers(self) -> list[TranslatorBackend]:
        return list(self._providers)

    @property
    def cache(self) -> FileCache | None:
        return self._cache

    def settings_for(self, provider: TranslatorBackend) -> ProviderSettings:
        return self._config.providers.get(provider.name) or ProviderSettings()

    def select_tiers(self, target_locale: str) -> list[TranslatorBackend]:
        """Return the tier order used for a target locale.

        "priority" keeps tier-number order. "smart" moves providers whose
        preferred locales match the target ahead of the rest, keeping tier
        order inside both groups.
        """
        tiers = list(self._providers)
        if self._config.fallback.strategy == "smart":
            preferred = [
                p
                for p in tiers
                if matches_locale(self.settings_for(p).preferred_locales, target_locale)
            ]
            tiers = preferred + [p for p in tiers if p not in preferred]
        if self._config.fallback.no_fallback:
            tiers = tiers[:1]
        return tiers

    async def translate(
        self,
        namespace: str,
        items: Mapping[str, str],
        target_locale: str,
    ) -> RouterResult:
        """Translate a batch of keyed texts.

        Partial failure is reported through ``RouterResult.untranslated``,
        never raised.

        Raises:
            CacheError: If a successful result cannot be written to the cache.
        """
        result = RouterResult()
        pending: dict[str, str] = {}

        cached: dict[str, str] = {}
        if self._cache is not None:
            cached = await asyncio.to_thread(
                self._cache.get_many, target_locale, namespace, items
            )

        for key, text in sorted_items(items):
            if key in cached:
                result.translations[key] = cached[key]
                result.providers[key] = CACHE_PROVIDER
            else:
                pending[key] = text
        result.cache_hits = len(result.translations)

        if not pending:
            return result

        tiers = self.select_tiers(target_locale)
        state = FallbackState(0, frozenset(pending))
        attempts: dict[int, TierAttempt] = {}

        while not state.is_finished(len(tiers)):
            provider = tiers[state.tier_index]
            settings = self.settings_for(provider)
            policy = RetryPolicy.from_settings(settings)

            diag = attempts.get(state.tier_index)
            if diag is None:
                diag = TierAttempt(provider=provider.name, tier=provider.tier)
                attempts[state.tier_index] = diag
                result.diagnostics.append(diag)
            diag.attempts += 1

            request = {key: pending[key] for key in sorted(state.remaining)}
            outcome = await self._call(provider, request, target_locale)

            if isinstance(outcome, Translated):
                diag.translated += len(outcome.entries)
                await self._record(result, namespace, target_locale, provider.name, request, outcome)
                logger.info(
                    "%s (Tier %d) translated %d/%d key(s) for %s/%s",
                    provider.name,
                    provider.tier,
                    len(outcome.entries),
                    len(request),
                    target_locale,
                    namespace,
                )
            else:
                diag.error = str(outcome.error)
                logger.warning(
                    "%s (Tier %d) failed: %s", provider.name, provider.tier, outcome.error
                )

            new_state = next_state(
                state,
                outcome,
                max_retries=policy.max_retries,
                tier_count=len(tiers),
                no_fallback=self._config.fallback.no_fallback,
            )

            if isinstance(outcome, Failed) and new_state.tier_index == state.tier_index:
                reset_after = (
                    outcome.error.reset_after
                    if isinstance(outcome.error, RateLimitExceeded)
                    else None
                )
                delay = policy.delay(state.retry_count, reset_after)
                logger.debug("Retrying %s in %.1fs", provider.name, delay)
                await self._sleep(delay)
            elif not new_state.is_finished(len(tiers)):
                logger.warning(
                    "Falling back from %s to %s for %d key(s)",
                    provider.name,
                    tiers[new_state.tier_index].name,
                    len(new_state.remaining),
                )
            state = new_state

        result.untranslated = sorted(state.remaining)
        if result.untranslated:
            logger.warning(
                "%d key(s) left untranslated for %s/%s",
                len(result.untranslated),
                target_locale,
                namespace,
            )
        return result

    async def _call(
        self,
        provider: TranslatorBackend,
        request: dict[str, str],
        target_locale: str,
    ) -> Outcome:
        # Providers time out per request inside translate_batch.
        try:
            translated = await provider.translate_batch(request, target_locale)
        except TranslatorError as e:
            return Failed(e)

        # Only keys that were asked for count.
        accepted = {
            key: text
            for key, text in translated.items()
            if key in request and isinstance(text, str)
        }
        return Translated(accepted)

    async def _record(
        self,
        result: RouterResult,
        namespace: str,
        target_locale: str,
        provider_name: str,
        request: Mapping[str, str],
        outcome: Translated,
    ) -> None:
        if not outcome.entries:
            return
        for key, text in outcome.entries.items():
            result.translations[key] = text
            result.providers[key] = provider_name
        if self._cache is not None:
            await asyncio.to_thread(
                self._cache.set_batch,
                target_locale,
                namespace,
                [(key, request[key], text) for key, text in sorted(outcome.entries.items())],
                provider_name,
            )

    async def verify_credentials(self) -> None:
        """Check every provider's credentials.

        Raises:
            ConfigurationError: If a provider rejects its credentials.
        """
        for provider in self._providers:
            try:
                await provider.validate_credentials()
            except AuthenticationFailed as e:
                raise ConfigurationError(
                    f"{provider.name} rejected its credentials: {e}"
                ) from e
            except TranslatorError as e:
                logger.warning("Could not verify %s credentials: %s", provider.name, e)
            else:
                logger.info("%s credentials verified", provider.name)

    async def close(self) -> None:
        """Close every provider."""
        for provider in self._providers:
            await provider.close()
