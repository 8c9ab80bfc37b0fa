# SPDX-License-Identifier: Apache-2.0
"""Tree diffing and merging between a source catalog and its translation.

Trees are walked key by key; dotted paths only name leaves in requests and
results, so catalog keys that themselves contain dots keep their shape.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from i18n_builder.core.models import (
    PluralForms,
    TranslationTree,
    format_path,
    get_path,
    is_leaf,
    is_translated,
    iter_leaf_keys,
    iter_leaves,
    join_path,
    set_path,
)


def find_missing_keys(
    source: TranslationTree,
    target: TranslationTree,
    force: bool = False,
    detect_untranslated: bool = False,
) -> list[str]:
    """Return source leaf paths that need a translation.

    A path needs one when the target has no leaf there, the target leaf is a
    different kind (text vs. plural), or it is empty. With
    ``detect_untranslated`` a target equal to the source text also counts.

    Args:
        source: Source-locale tree.
        target: Target-locale tree.
        force: Return every source leaf.
        detect_untranslated: Treat copies of the source text as missing.

    Returns:
        Dotted paths in source order.
    """
    missing: list[str] = []
    for keys, source_leaf in iter_leaf_keys(source):
        path = format_path(keys)
        if force:
            missing.append(path)
            continue

        target_leaf = get_path(target, keys)
        if not is_leaf(target_leaf):
            missing.append(path)
        elif isinstance(source_leaf, PluralForms) != isinstance(target_leaf, PluralForms):
            missing.append(path)
        elif not is_translated(target_leaf):
            missing.append(path)
        elif detect_untranslated and target_leaf == source_leaf:
            missing.append(path)
    return missing


def build_requests(source: TranslationTree, paths: Iterable[str]) -> dict[str, str]:
    """Flatten source leaves into provider request items.

    Plural leaves contribute one item per populated form, keyed
    ``<path>.<category>``. Empty source texts are not requested.
    """
    leaves = dict(iter_leaves(source))
    items: dict[str, str] = {}
    for path in paths:
        leaf = leaves.get(path)
        if isinstance(leaf, str):
            if leaf:
                items[path] = leaf
        elif isinstance(leaf, PluralForms):
            for category, text in leaf.forms():
                if text:
                    items[join_path(path, category)] = text
    return items


def merge_translations(
    target: TranslationTree,
    source: TranslationTree,
    translations: Mapping[str, str],
) -> list[str]:
    """Write translated items back into the target tree.

    Each leaf is written under the same keys it has in the source. A plural
    is written only when its ``other`` form was translated; forms without a
    translation keep the target's previous text, if any.

    Returns:
        Dotted paths of the leaves that were written.
    """
    written: list[str] = []
    for keys, source_leaf in iter_leaf_keys(source):
        path = format_path(keys)
        if isinstance(source_leaf, str):
            if path in translations:
                set_path(target, keys, translations[path])
                written.append(path)
            continue

        if join_path(path, "other") not in translations:
            continue
        existing = get_path(target, keys)
        forms = existing.to_dict() if isinstance(existing, PluralForms) else {}
        for category, _ in source_leaf.forms():
            translated = translations.get(join_path(path, category))
            if translated is not None:
                forms[category] = translated
        set_path(target, keys, PluralForms.from_dict(forms))
        written.append(path)
    return written
