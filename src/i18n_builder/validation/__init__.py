# SPDX-License-Identifier: Apache-2.0
"""Catalog validation.

Usage:
    from i18n_builder.validation import run_validators
    report = run_validators({"common": source_tree}, {"common": target_tree})
    if not report.is_valid:
        for validator_name, error in report.errors():
            print(validator_name, error)
"""

from __future__ import annotations

from typing import Mapping, Sequence

from i18n_builder.validation.base import (
    CoverageWarning,
    DuplicateKey,
    InsufficientCoverage,
    MissingKey,
    Namespaces,
    ValidationIssue,
    ValidationReport,
    ValidationResult,
    Validator,
    VariableMismatch,
)
from i18n_builder.validation.coverage import CoverageValidator, calculate_coverage
from i18n_builder.validation.duplicates import DuplicateKeysValidator
from i18n_builder.validation.missing import MissingKeysValidator
from i18n_builder.validation.variables import VariableValidator

__all__ = [
    "CoverageValidator",
    "CoverageWarning",
    "DuplicateKey",
    "DuplicateKeysValidator",
    "InsufficientCoverage",
    "MissingKey",
    "MissingKeysValidator",
    "Namespaces",
    "ValidationIssue",
    "ValidationReport",
    "ValidationResult",
    "Validator",
    "VariableMismatch",
    "VariableValidator",
    "calculate_coverage",
    "default_validators",
    "run_validators",
]


def default_validators(
    min_coverage: float | None = None,
    key_streams: Mapping[str, Sequence[str]] | None = None,
) -> list[Validator]:
    """Return the standard validator set."""
    return [
        MissingKeysValidator(),
        DuplicateKeysValidator(key_streams),
        VariableValidator(),
        CoverageValidator(min_coverage),
    ]


def run_validators(
    source: Namespaces,
    target: Namespaces,
    validators: Sequence[Validator] | None = None,
    *,
    min_coverage: float | None = None,
    key_streams: Mapping[str, Sequence[str]] | None = None,
) -> ValidationReport:
    """Run validators over the same inputs and aggregate their results.

    Args:
        source: Source-locale trees by namespace.
        target: Target-locale trees by namespace; absent namespaces are
            validated as empty.
        validators: Validators to run (default: ``default_validators``).
        min_coverage: Coverage floor for the default coverage validator.
        key_streams: Raw target key streams for duplicate detection.

    Returns:
        Aggregated report.
    """
    if validators is None:
        validators = default_validators(min_coverage, key_streams)

    report = ValidationReport()
    for validator in validators:
        report.add(validator.validate(source, target))
    return report
