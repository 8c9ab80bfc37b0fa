# SPDX-License-Identifier: Apache-2.0
"""Base classes and protocols for catalog formats."""

from __future__ import annotations

from typing import Any, Iterator, Protocol, runtime_checkable

from i18n_builder.core.models import TranslationTree, from_raw, join_path


class FormatError(Exception):
    """A catalog document could not be parsed or written.

    Parse failures are fatal for a run: nothing is persisted.
    """

    pass


@runtime_checkable
class CatalogFormat(Protocol):
    """Protocol definition for catalog serializations."""

    @property
    def name(self) -> str:
        """Format name ("json", "yaml")."""
        ...

    @property
    def extensions(self) -> tuple[str, ...]:
        """File suffixes handled by this format, with leading dot."""
        ...

    def parse(self, content: str) -> TranslationTree:
        """Parse a document into a translation tree.

        Raises:
            FormatError: On malformed input.
        """
        ...

    def write(self, tree: TranslationTree) -> str:
        """Serialize a translation tree."""
        ...

    def scan_keys(self, content: str) -> list[str]:
        """Return every dotted key path in document order, duplicates included."""
        ...


def tree_from_document(data: Any) -> TranslationTree:
    """Convert a decoded document root into a translation tree.

    Raises:
        FormatError: If the root is not a mapping or holds unsupported values.
    """
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FormatError(
            f"Catalog root must be a mapping, got {type(data).__name__}"
        )
    # The root is always a namespace, even if its keys look like plural categories.
    try:
        return {str(key): from_raw(value, str(key)) for key, value in data.items()}
    except ValueError as e:
        raise FormatError(str(e)) from e


class KeyPairs(list):  # type: ignore[type-arg]
    """Ordered (key, value) pairs of one mapping, duplicates preserved."""


def walk_key_pairs(node: Any, prefix: str = "") -> Iterator[str]:
    """Yield dotted paths from nested ``KeyPairs`` in document order."""
    if not isinstance(node, KeyPairs):
        return
    for key, value in node:
        path = join_path(prefix, str(key))
        yield path
        yield from walk_key_pairs(value, path)
