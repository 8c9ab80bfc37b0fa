# SPDX-License-Identifier: Apache-2.0
"""
i18n-builder - CLI Tool

Fills in missing translations of locale catalogs through a cache and tiered
translation providers, then validates the result.

Usage:
    i18n-builder <command> [options]

Examples:
    i18n-builder translate --lang fi                 # Translate missing keys
    i18n-builder translate --lang fi --dry-run       # Preview only
    i18n-builder validate --all --min-coverage 90    # Validate every locale
    i18n-builder coverage                            # Coverage table
    i18n-builder cache-stats --lang fi
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Sequence

from i18n_builder.cache import CacheError, FileCache
from i18n_builder.config import (
    DEFAULT_CONFIG_FILE,
    PROVIDER_NAMES,
    STRATEGIES,
    TranslationConfig,
    apply_overrides,
    load_config,
)
from i18n_builder.formats import FormatError
from i18n_builder.pipeline import CatalogStore, PipelineError, TranslationWorkflow, WorkflowReport
from i18n_builder.router import FallbackRouter
from i18n_builder.translators.base import ConfigurationError
from i18n_builder.translators.factory import build_providers
from i18n_builder.validation import ValidationReport, calculate_coverage, run_validators

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments (default: ``sys.argv[1:]``).

    Returns:
        Parsed argument Namespace.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path(DEFAULT_CONFIG_FILE),
        help=f"Config file (default: {DEFAULT_CONFIG_FILE})",
    )
    common.add_argument(
        "--translation-dir",
        type=Path,
        help="Translation root holding one directory per locale",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser = argparse.ArgumentParser(
        prog="i18n-builder",
        description="Localization tool - translates and validates locale catalogs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  SYSTRAN_API_KEY  Systran API key (Tier 1)
  DEEPL_API_KEY    DeepL API key (Tier 2)
  GOOGLE_API_KEY   Google API key (Tier 3, optional)
  OPENAI_API_KEY   OpenAI API key (Tier 4)
""",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # translate
    translate = subparsers.add_parser(
        "translate", parents=[common], help="Translate missing keys for a locale"
    )
    translate.add_argument("-l", "--lang", required=True, help="Target locale code")
    translate.add_argument("-n", "--namespace", help="Only translate this namespace")
    translate.add_argument(
        "--dry-run",
        action="store_true",
        help="Translate without writing catalogs",
    )
    translate.add_argument("--timeout", type=float, help="Request timeout in seconds")
    translate.add_argument("--batch-size", type=int, help="Keys per provider request")
    translate.add_argument("--max-retries", type=int, help="Attempts per provider tier")
    translate.add_argument(
        "--disable-provider",
        action="append",
        default=[],
        choices=list(PROVIDER_NAMES),
        metavar="PROVIDER",
        help="Disable a provider (repeatable)",
    )
    translate.add_argument(
        "--no-fallback",
        action="store_true",
        help="Use only the first provider tier",
    )
    translate.add_argument(
        "--force",
        action="store_true",
        help="Retranslate every key",
    )
    translate.add_argument(
        "--detect-untranslated",
        action="store_true",
        help="Retranslate keys whose text equals the source",
    )
    translate.add_argument(
        "--strategy",
        choices=list(STRATEGIES),
        help="Provider selection strategy",
    )

    # validate
    validate = subparsers.add_parser(
        "validate", parents=[common], help="Validate translated catalogs"
    )
    target = validate.add_mutually_exclusive_group(required=True)
    target.add_argument("-l", "--lang", help="Locale to validate")
    target.add_argument("--all", action="store_true", help="Validate every locale")
    validate.add_argument("--min-coverage", type=float, help="Coverage floor in percent")

    # coverage
    coverage = subparsers.add_parser(
        "coverage", parents=[common], help="Show translation coverage"
    )
    coverage.add_argument("-l", "--lang", help="Locale (default: every locale)")
    coverage.add_argument("--min-coverage", type=float, help="Coverage floor in percent")

    # cache
    cache_stats = subparsers.add_parser(
        "cache-stats", parents=[common], help="Show cache statistics"
    )
    cache_stats.add_argument("-l", "--lang", required=True, help="Locale")

    cache_clear = subparsers.add_parser(
        "cache-clear", parents=[common], help="Clear cached translations"
    )
    cache_clear.add_argument("-l", "--lang", required=True, help="Locale")
    cache_clear.add_argument("-n", "--namespace", help="Only clear this namespace")

    return parser.parse_args(argv)


def load_runtime_config(args: argparse.Namespace) -> TranslationConfig:
    """Load the config file and inject API keys from the environment.

    Keys already set in the config file take precedence.
    """
    config = load_config(args.config)
    for name, env_var in TranslationConfig.API_KEY_ENV_VARS.items():
        value = os.environ.get(env_var, "")
        settings = config.provider(name)
        if value and not settings.api_key:
            settings.api_key = value
    if args.translation_dir is not None:
        config.translation_dir = args.translation_dir
    return config


def print_progress(stage: str, current: int, total: int, message: str = "") -> None:
    suffix = f" {message}" if message else ""
    print(f"  [{stage}] {current}/{total}{suffix}")


async def cmd_translate(args: argparse.Namespace, config: TranslationConfig) -> int:
    config = apply_overrides(
        config,
        timeout=args.timeout,
        batch_size=args.batch_size,
        max_retries=args.max_retries,
        disabled_providers=args.disable_provider,
        no_fallback=args.no_fallback,
        strategy=args.strategy,
    )
    providers = build_providers(config)
    router = FallbackRouter(providers, FileCache(config.cache_dir), config)
    workflow = TranslationWorkflow(
        router,
        config,
        progress_callback=print_progress if args.verbose else None,
        force=args.force,
        detect_untranslated=args.detect_untranslated,
    )

    print(f"Translation: {config.source_locale.upper()} -> {args.lang.upper()}")
    print(f"Providers: {', '.join(p.name for p in router.select_tiers(args.lang))}")
    if args.dry_run:
        print("Dry run: enabled")
    print()

    async with router:
        report = await workflow.run(args.lang, namespace=args.namespace, dry_run=args.dry_run)

    print_translate_report(report)
    return report.exit_code


def print_translate_report(report: WorkflowReport) -> None:
    result = report.result
    print(f"Complete: {report.locale}")
    print(f"  Translated: {result.translated_count}")
    print(f"  Cache hits: {result.cache_hits}")
    print(f"  Provider calls: {result.provider_calls}")
    for provider, count in result.providers.items():
        print(f"    {provider}: {count}")
    if report.dry_run:
        print("  Written: none (dry run)")
    else:
        print(f"  Written: {', '.join(report.persisted) or 'none'}")

    if report.untranslated:
        print()
        print("Warning: untranslated keys")
        for namespace, keys in report.untranslated.items():
            for key in keys:
                print(f"  {namespace}.{key}")

    print_validation_report(report.validation)


def print_validation_report(report: ValidationReport) -> None:
    for _, warning in report.warnings():
        print(f"Warning: {warning}")
    for validator_name, error in report.errors():
        print(f"Error [{validator_name}]: {error}")
    print(
        f"Validation: {report.total_errors} error(s), {report.total_warnings} warning(s)"
    )


def target_locales(store: CatalogStore, config: TranslationConfig, lang: str | None) -> list[str]:
    if lang:
        return [lang]
    return [locale for locale in store.locales() if locale != config.source_locale]


async def cmd_validate(args: argparse.Namespace, config: TranslationConfig) -> int:
    store = CatalogStore(config.translation_dir, config.format)
    names = store.namespaces(config.source_locale)
    source = store.load_all(config.source_locale, names)
    min_coverage = args.min_coverage if args.min_coverage is not None else config.min_coverage

    exit_code = 0
    for locale in target_locales(store, config, None if args.all else args.lang):
        target = store.load_all(locale, names)
        key_streams = {name: store.scan_keys(locale, name) for name in names}
        report = run_validators(
            source, target, min_coverage=min_coverage, key_streams=key_streams
        )
        print(f"Locale: {locale}")
        print_validation_report(report)
        print()
        if not report.is_valid:
            exit_code = 1
    return exit_code


async def cmd_coverage(args: argparse.Namespace, config: TranslationConfig) -> int:
    store = CatalogStore(config.translation_dir, config.format)
    names = store.namespaces(config.source_locale)
    source = store.load_all(config.source_locale, names)
    min_coverage = args.min_coverage if args.min_coverage is not None else config.min_coverage

    exit_code = 0
    for locale in target_locales(store, config, args.lang):
        target = store.load_all(locale, names)
        print(f"Locale: {locale}")
        for name in names:
            percent = calculate_coverage(source[name], target.get(name) or {})
            marker = ""
            if min_coverage is not None and percent < min_coverage:
                marker = f"  (below {min_coverage:.1f}%)"
                exit_code = 1
            print(f"  {name}: {percent:.1f}%{marker}")
    return exit_code


async def cmd_cache_stats(args: argparse.Namespace, config: TranslationConfig) -> int:
    stats = FileCache(config.cache_dir).stats(args.lang)
    print(f"Cache: {config.cache_dir / args.lang}")
    print(f"  Entries: {stats.total_entries}")
    print(f"  Namespaces: {stats.total_namespaces}")
    for provider, count in stats.providers.items():
        print(f"    {provider}: {count}")
    return 0


async def cmd_cache_clear(args: argparse.Namespace, config: TranslationConfig) -> int:
    cache = FileCache(config.cache_dir)
    if args.namespace:
        cache.clear(args.lang, args.namespace)
        print(f"Cleared cache: {args.lang}/{args.namespace}")
    else:
        cache.clear_locale(args.lang)
        print(f"Cleared cache: {args.lang}")
    return 0


COMMANDS = {
    "translate": cmd_translate,
    "validate": cmd_validate,
    "coverage": cmd_coverage,
    "cache-stats": cmd_cache_stats,
    "cache-clear": cmd_cache_clear,
}


async def run(args: argparse.Namespace) -> int:
    """Execute the selected command.

    Args:
        args: Command line arguments.

    Returns:
        Exit code (0: success, 1: failure).
    """
    try:
        config = load_runtime_config(args)
        return await COMMANDS[args.command](args, config)
    except (ConfigurationError, CacheError, FormatError, PipelineError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


def main() -> NoReturn:
    """Main entry point."""
    args = parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    exit_code = asyncio.run(run(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
