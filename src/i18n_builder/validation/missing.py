# SPDX-License-Identifier: Apache-2.0
"""Missing key detection."""

from __future__ import annotations

from i18n_builder.core.models import format_path, get_path, is_leaf, iter_leaf_keys
from i18n_builder.validation.base import MissingKey, Namespaces, ValidationResult


class MissingKeysValidator:
    """Report every source leaf that has no leaf at the same target path.

    A subtree missing from the target yields one error per source leaf below
    it, each carrying the leaf's full path. Keys only present in the target
    are not reported.
    """

    name = "missing_keys"

    def validate(self, source: Namespaces, target: Namespaces) -> ValidationResult:
        result = ValidationResult(self.name)
        for namespace, source_tree in source.items():
            target_tree = target.get(namespace) or {}
            for keys, _ in iter_leaf_keys(source_tree):
                if not is_leaf(get_path(target_tree, keys)):
                    result.errors.append(MissingKey(namespace, format_path(keys)))
        return result
