# SPDX-License-Identifier: Apache-2.0
"""Data models for translation catalogs.

A catalog namespace is a tree of translation values:

- ``str``: a literal translatable text, possibly embedding placeholders.
- ``PluralForms``: a bundle of CLDR plural categories (``other`` is mandatory).
- ``dict``: a nested namespace mapping keys to further values.

Leaves are addressed by key tuples (``("settings", "profile", "title")``);
the dotted string form is used for display, requests and cache identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Sequence, Union

PLURAL_CATEGORIES: tuple[str, ...] = ("zero", "one", "two", "few", "many", "other")

PATH_SEPARATOR = "."


@dataclass(frozen=True)
class PluralForms:
    """CLDR plural forms for a single message.

    Attributes:
        other: Fallback category, always present.
        zero, one, two, few, many: Optional categories.
    """

    other: str
    zero: str | None = None
    one: str | None = None
    two: str | None = None
    few: str | None = None
    many: str | None = None

    def forms(self) -> Iterator[tuple[str, str]]:
        """Yield populated (category, text) pairs in CLDR order."""
        for category in PLURAL_CATEGORIES:
            text = getattr(self, category)
            if text is not None:
                yield category, text

    def get(self, category: str) -> str | None:
        """Return the text for a category, or None if it is not populated."""
        if category not in PLURAL_CATEGORIES:
            return None
        value: str | None = getattr(self, category)
        return value

    @property
    def is_translated(self) -> bool:
        """A plural counts as translated once ``other`` is non-empty."""
        return bool(self.other)

    def to_dict(self) -> dict[str, str]:
        """Convert to a plain mapping of populated categories."""
        return dict(self.forms())

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> PluralForms:
        """Create from a mapping of categories.

        Raises:
            ValueError: If ``other`` is missing or a category is unknown.
        """
        unknown = set(data) - set(PLURAL_CATEGORIES)
        if unknown:
            raise ValueError(f"Unknown plural categories: {sorted(unknown)}")
        if "other" not in data:
            raise ValueError("Plural forms require an 'other' category")
        return cls(**data)


TranslationValue = Union[str, PluralForms, "TranslationTree"]
TranslationTree = dict[str, TranslationValue]
Leaf = Union[str, PluralForms]


def is_leaf(value: Any) -> bool:
    """Return True for Text and Plural values."""
    return isinstance(value, (str, PluralForms))


def is_translated(value: Any) -> bool:
    """Return True if a leaf carries a usable translation."""
    if isinstance(value, str):
        return bool(value)
    if isinstance(value, PluralForms):
        return value.is_translated
    return False


KeyPath = tuple[str, ...]


def join_path(prefix: str, key: str) -> str:
    """Join a key onto a dotted prefix."""
    return f"{prefix}{PATH_SEPARATOR}{key}" if prefix else key


def split_path(path: str) -> list[str]:
    """Split a dotted path into its keys.

    Only valid for trees whose keys contain no separator; code that walks
    real catalogs should use the key tuples from ``iter_leaf_keys``.
    """
    return path.split(PATH_SEPARATOR) if path else []


def format_path(keys: Sequence[str]) -> str:
    """Render a key tuple as a dotted path for display and identity."""
    return PATH_SEPARATOR.join(keys)


def iter_leaf_keys(tree: TranslationTree) -> Iterator[tuple[KeyPath, Leaf]]:
    """Yield (keys, leaf) pairs in insertion order.

    Keys are the literal mapping keys from the root down, so a flat key such
    as ``"errors.notFound"`` stays a single element. Walks the tree with an
    explicit stack carrying the keys of each subtree.
    """
    stack: list[tuple[KeyPath, Iterator[tuple[str, TranslationValue]]]] = [
        ((), iter(tree.items()))
    ]
    while stack:
        keys, items = stack[-1]
        for key, value in items:
            child_keys = keys + (key,)
            if isinstance(value, dict):
                stack.append((child_keys, iter(value.items())))
                break
            yield child_keys, value
        else:
            stack.pop()


def iter_leaves(tree: TranslationTree, prefix: str = "") -> Iterator[tuple[str, Leaf]]:
    """Yield (dotted_path, leaf) pairs in insertion order."""
    for keys, leaf in iter_leaf_keys(tree):
        yield join_path(prefix, format_path(keys)), leaf


def leaf_count(tree: TranslationTree) -> int:
    """Count Text and Plural leaves in a tree."""
    return sum(1 for _ in iter_leaf_keys(tree))


def _as_keys(path: str | Sequence[str]) -> Sequence[str]:
    return split_path(path) if isinstance(path, str) else path


def get_path(tree: TranslationTree, path: str | Sequence[str]) -> TranslationValue | None:
    """Return the value at a path, or None if absent.

    ``path`` is either a key sequence (walked one level at a time) or a
    dotted string.
    """
    current: TranslationValue = tree
    for key in _as_keys(path):
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def set_path(
    tree: TranslationTree, path: str | Sequence[str], value: TranslationValue
) -> None:
    """Set the value at a path, creating intermediate trees.

    A leaf sitting where a subtree is needed is replaced by an empty tree.
    """
    keys = list(_as_keys(path))
    if not keys:
        raise ValueError("Cannot set an empty path")
    current = tree
    for key in keys[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[keys[-1]] = value


def copy_tree(tree: TranslationTree) -> TranslationTree:
    """Deep-copy the tree structure (leaves are immutable)."""
    return {
        key: copy_tree(value) if isinstance(value, dict) else value
        for key, value in tree.items()
    }


def from_raw(data: Any, path: str = "") -> TranslationValue:
    """Convert a decoded JSON/YAML document into a translation value.

    Raises:
        ValueError: On values that cannot be represented (lists, null).
    """
    if isinstance(data, dict):
        if _looks_like_plural(data):
            return PluralForms.from_dict({k: str(v) for k, v in data.items()})
        return {
            str(key): from_raw(value, join_path(path, str(key)))
            for key, value in data.items()
        }
    if isinstance(data, bool):
        return "true" if data else "false"
    if isinstance(data, (str, int, float)):
        return str(data)
    raise ValueError(
        f"Unsupported value at '{path or '<root>'}': {type(data).__name__}"
    )


def to_raw(value: TranslationValue) -> Any:
    """Convert a translation value into plain JSON/YAML-serializable data."""
    if isinstance(value, PluralForms):
        return value.to_dict()
    if isinstance(value, dict):
        return {key: to_raw(child) for key, child in value.items()}
    return value


def _looks_like_plural(data: dict[Any, Any]) -> bool:
    return (
        "other" in data
        and all(key in PLURAL_CATEGORIES for key in data)
        and all(isinstance(value, str) for value in data.values())
    )
