# SPDX-License-Identifier: Apache-2.0
"""Placeholder variable parity between source and translation."""

from __future__ import annotations

from i18n_builder.core.models import (
    PluralForms,
    format_path,
    get_path,
    iter_leaf_keys,
    join_path,
)
from i18n_builder.core.placeholders import extract_variables
from i18n_builder.validation.base import Namespaces, ValidationResult, VariableMismatch


class VariableValidator:
    """Report leaves whose placeholder sets differ between source and target.

    Every leaf present in both trees is checked, empty translations
    included. Order and repetition are ignored. Plural forms are compared
    one category at a time, for categories populated on both sides, with the
    category appended to the key (``items.one``).
    """

    name = "variable_validator"

    def validate(self, source: Namespaces, target: Namespaces) -> ValidationResult:
        result = ValidationResult(self.name)
        for namespace, source_tree in source.items():
            target_tree = target.get(namespace) or {}
            for keys, source_leaf in iter_leaf_keys(source_tree):
                path = format_path(keys)
                target_leaf = get_path(target_tree, keys)
                if isinstance(source_leaf, str) and isinstance(target_leaf, str):
                    pairs = [(path, source_leaf, target_leaf)]
                elif isinstance(source_leaf, PluralForms) and isinstance(
                    target_leaf, PluralForms
                ):
                    pairs = [
                        (join_path(path, category), text, target_leaf.get(category))
                        for category, text in source_leaf.forms()
                    ]
                else:
                    continue

                for key, source_text, target_text in pairs:
                    if target_text is None:
                        continue
                    mismatch = _check(namespace, key, source_text, target_text)
                    if mismatch is not None:
                        result.errors.append(mismatch)
        return result


def _check(
    namespace: str, key: str, source_text: str, target_text: str
) -> VariableMismatch | None:
    source_vars = extract_variables(source_text)
    translation_vars = extract_variables(target_text)
    if set(source_vars) == set(translation_vars):
        return None
    return VariableMismatch(
        namespace=namespace,
        key=key,
        source_vars=tuple(source_vars),
        translation_vars=tuple(translation_vars),
    )
