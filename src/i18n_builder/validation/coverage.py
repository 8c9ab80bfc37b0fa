# SPDX-License-Identifier: Apache-2.0
"""Translation coverage per namespace."""

from __future__ import annotations

from i18n_builder.core.models import (
    PluralForms,
    TranslationTree,
    get_path,
    is_translated,
    iter_leaf_keys,
)
from i18n_builder.validation.base import (
    CoverageWarning,
    InsufficientCoverage,
    Namespaces,
    ValidationResult,
)


def calculate_coverage(source: TranslationTree, target: TranslationTree) -> float:
    """Return the percentage of source leaves translated in the target.

    A target leaf counts when it is the same kind as the source leaf (text or
    plural) and is non-empty (``other`` for plurals). An empty source is
    fully covered.
    """
    total = 0
    translated = 0
    for keys, source_leaf in iter_leaf_keys(source):
        total += 1
        target_leaf = get_path(target, keys)
        same_kind = isinstance(source_leaf, PluralForms) == isinstance(
            target_leaf, PluralForms
        )
        if same_kind and is_translated(target_leaf):
            translated += 1
    if total == 0:
        return 100.0
    return translated / total * 100.0


class CoverageValidator:
    """Warn about incomplete namespaces; fail those below ``min_coverage``."""

    name = "coverage_validator"

    def __init__(self, min_coverage: float | None = None) -> None:
        self.min_coverage = min_coverage

    def validate(self, source: Namespaces, target: Namespaces) -> ValidationResult:
        result = ValidationResult(self.name)
        for namespace, source_tree in source.items():
            coverage = calculate_coverage(source_tree, target.get(namespace) or {})
            if coverage < 100.0:
                result.warnings.append(CoverageWarning(namespace, coverage))
            if self.min_coverage is not None and coverage < self.min_coverage:
                result.errors.append(
                    InsufficientCoverage(
                        namespace=namespace,
                        actual=coverage,
                        threshold=self.min_coverage,
                    )
                )
        return result
