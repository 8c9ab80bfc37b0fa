# SPDX-License-Identifier: Apache-2.0
"""Duplicate key detection on raw catalog key streams."""

from __future__ import annotations

from collections import Counter
from typing import Mapping, Sequence

from i18n_builder.validation.base import DuplicateKey, Namespaces, ValidationResult


class DuplicateKeysValidator:
    """Report keys that occur more than once in a raw catalog.

    Parsed trees cannot hold duplicates, so this validator reads the key
    streams produced by ``CatalogFormat.scan_keys`` instead; the trees passed
    to ``validate`` are ignored. Without streams it reports nothing.
    """

    name = "duplicate_keys"

    def __init__(self, key_streams: Mapping[str, Sequence[str]] | None = None) -> None:
        self.key_streams = dict(key_streams or {})

    def validate(self, source: Namespaces, target: Namespaces) -> ValidationResult:
        result = ValidationResult(self.name)
        for namespace, keys in self.key_streams.items():
            counts = Counter(keys)
            reported: set[str] = set()
            for key in keys:
                if counts[key] > 1 and key not in reported:
                    reported.add(key)
                    result.errors.append(DuplicateKey(namespace, key, counts[key]))
        return result
