# SPDX-License-Identifier: Apache-2.0
"""Core translation catalog modules."""

from .models import (
    PLURAL_CATEGORIES,
    KeyPath,
    Leaf,
    PluralForms,
    TranslationTree,
    TranslationValue,
    copy_tree,
    format_path,
    from_raw,
    get_path,
    is_leaf,
    is_translated,
    iter_leaf_keys,
    iter_leaves,
    join_path,
    leaf_count,
    set_path,
    to_raw,
)
from .placeholders import extract_variables, same_variables, variable_set

__all__ = [
    "PLURAL_CATEGORIES",
    "KeyPath",
    "Leaf",
    "PluralForms",
    "TranslationTree",
    "TranslationValue",
    "copy_tree",
    "extract_variables",
    "format_path",
    "from_raw",
    "get_path",
    "is_leaf",
    "is_translated",
    "iter_leaf_keys",
    "iter_leaves",
    "join_path",
    "leaf_count",
    "same_variables",
    "set_path",
    "to_raw",
    "variable_set",
]
