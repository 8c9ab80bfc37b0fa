# SPDX-License-Identifier: Apache-2.0
"""JSON catalog format."""

from __future__ import annotations

import json

from i18n_builder.core.models import TranslationTree, to_raw
from i18n_builder.formats.base import (
    FormatError,
    KeyPairs,
    tree_from_document,
    walk_key_pairs,
)


class JsonFormat:
    """JSON catalogs (i18next style).

    Output is pretty-printed with two-space indentation and keeps
    non-ASCII characters unescaped.
    """

    @property
    def name(self) -> str:
        """Return format name."""
        return "json"

    @property
    def extensions(self) -> tuple[str, ...]:
        """Return handled file suffixes."""
        return (".json",)

    def parse(self, content: str) -> TranslationTree:
        """Parse JSON text into a translation tree.

        Raises:
            FormatError: On invalid JSON or unsupported values.
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise FormatError(f"Invalid JSON: {e}") from e
        return tree_from_document(data)

    def write(self, tree: TranslationTree) -> str:
        """Serialize a translation tree as JSON."""
        return json.dumps(to_raw(tree), ensure_ascii=False, indent=2) + "\n"

    def scan_keys(self, content: str) -> list[str]:
        """Return every key path before duplicate keys are folded.

        Raises:
            FormatError: On invalid JSON.
        """
        try:
            document = json.loads(content, object_pairs_hook=KeyPairs)
        except json.JSONDecodeError as e:
            raise FormatError(f"Invalid JSON: {e}") from e
        return list(walk_key_pairs(document))
