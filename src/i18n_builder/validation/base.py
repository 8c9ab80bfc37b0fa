# SPDX-License-Identifier: Apache-2.0
"""Validation results and the validator protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol, Union, runtime_checkable

from i18n_builder.core.models import TranslationTree

Namespaces = Mapping[str, TranslationTree]


@dataclass(frozen=True)
class MissingKey:
    """A source leaf with no counterpart in the target."""

    namespace: str
    key: str

    def __str__(self) -> str:
        return f"Missing key: {self.namespace}.{self.key}"


@dataclass(frozen=True)
class DuplicateKey:
    """A key that occurs more than once in a raw catalog."""

    namespace: str
    key: str
    occurrences: int = 2

    def __str__(self) -> str:
        return f"Duplicate key: {self.namespace}.{self.key} ({self.occurrences} occurrences)"


@dataclass(frozen=True)
class VariableMismatch:
    """Source and translation use different placeholder variables."""

    namespace: str
    key: str
    source_vars: tuple[str, ...]
    translation_vars: tuple[str, ...]

    def __str__(self) -> str:
        return (
            f"Variable mismatch in key '{self.namespace}.{self.key}': "
            f"source has {list(self.source_vars)}, "
            f"translation has {list(self.translation_vars)}"
        )


@dataclass(frozen=True)
class InsufficientCoverage:
    """Namespace coverage below the configured floor.

    ``key`` is empty: the issue applies to the whole namespace.
    """

    namespace: str
    actual: float
    threshold: float
    key: str = ""

    def __str__(self) -> str:
        return (
            f"Coverage below threshold in {self.namespace}: "
            f"{self.actual:.1f}% < {self.threshold:.1f}%"
        )


@dataclass(frozen=True)
class CoverageWarning:
    """Namespace not fully translated."""

    namespace: str
    coverage: float

    @property
    def message(self) -> str:
        return f"{self.namespace}: {self.coverage:.1f}% coverage ({100.0 - self.coverage:.1f}% missing)"

    def __str__(self) -> str:
        return self.message


ValidationIssue = Union[MissingKey, DuplicateKey, VariableMismatch, InsufficientCoverage]


@dataclass
class ValidationResult:
    """Errors and warnings produced by one validator."""

    validator_name: str
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[CoverageWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class ValidationReport:
    """Results of several validators, with per-namespace attribution."""

    results: list[ValidationResult] = field(default_factory=list)

    def add(self, result: ValidationResult) -> None:
        self.results.append(result)

    @property
    def is_valid(self) -> bool:
        return all(result.is_valid for result in self.results)

    @property
    def total_errors(self) -> int:
        return sum(len(result.errors) for result in self.results)

    @property
    def total_warnings(self) -> int:
        return sum(len(result.warnings) for result in self.results)

    def result(self, validator_name: str) -> ValidationResult | None:
        for result in self.results:
            if result.validator_name == validator_name:
                return result
        return None

    def errors(self) -> list[tuple[str, ValidationIssue]]:
        """Return ``(validator_name, issue)`` pairs in report order."""
        return [
            (result.validator_name, error)
            for result in self.results
            for error in result.errors
        ]

    def warnings(self) -> list[tuple[str, CoverageWarning]]:
        return [
            (result.validator_name, warning)
            for result in self.results
            for warning in result.warnings
        ]

    def errors_for(self, namespace: str) -> list[ValidationIssue]:
        return [error for _, error in self.errors() if error.namespace == namespace]

    def warnings_for(self, namespace: str) -> list[CoverageWarning]:
        return [warning for _, warning in self.warnings() if warning.namespace == namespace]

    def merge(self, other: ValidationReport) -> None:
        """Append another report's results, keeping validator attribution."""
        self.results.extend(other.results)


@runtime_checkable
class Validator(Protocol):
    """A check over source and target namespaces."""

    @property
    def name(self) -> str: ...

    def validate(self, source: Namespaces, target: Namespaces) -> ValidationResult: ...
