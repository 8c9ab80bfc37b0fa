# SPDX-License-Identifier: Apache-2.0
"""On-disk catalog access: ``<translation_dir>/<locale>/<namespace>.<ext>``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from i18n_builder.cache import atomic_write
from i18n_builder.core.models import TranslationTree
from i18n_builder.formats import CatalogFormat, FormatError, get_format
from i18n_builder.pipeline.errors import LoadError, PersistError

logger = logging.getLogger(__name__)


class CatalogStore:
    """Read and write the namespace files of each locale."""

    def __init__(
        self,
        translation_dir: Path | str,
        catalog_format: CatalogFormat | str = "json",
    ) -> None:
        self._root = Path(translation_dir)
        self._format = (
            get_format(catalog_format)
            if isinstance(catalog_format, str)
            else catalog_format
        )

    @property
    def root(self) -> Path:
        return self._root

    @property
    def format(self) -> CatalogFormat:
        return self._format

    def path(self, locale: str, namespace: str) -> Path:
        return self._root / locale / f"{namespace}{self._format.extensions[0]}"

    def locales(self) -> list[str]:
        """Return locale directories under the translation root."""
        if not self._root.is_dir():
            return []
        return sorted(p.name for p in self._root.iterdir() if p.is_dir())

    def namespaces(self, locale: str) -> list[str]:
        """Return namespace names present for a locale, sorted."""
        locale_dir = self._root / locale
        if not locale_dir.is_dir():
            return []
        names = {
            p.stem
            for p in locale_dir.iterdir()
            if p.is_file() and p.suffix in self._format.extensions
        }
        return sorted(names)

    def load(self, locale: str, namespace: str) -> TranslationTree:
        """Load one namespace; a missing file is an empty tree.

        Raises:
            LoadError: If the file cannot be read or parsed.
        """
        path = self._find(locale, namespace)
        if path is None:
            return {}
        try:
            return self._format.parse(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, FormatError) as e:
            raise LoadError(f"Cannot load {path}", cause=e) from e

    def load_all(
        self, locale: str, namespaces: Iterable[str] | None = None
    ) -> dict[str, TranslationTree]:
        """Load several namespaces (default: all present for the locale)."""
        names = self.namespaces(locale) if namespaces is None else list(namespaces)
        return {name: self.load(locale, name) for name in names}

    def scan_keys(self, locale: str, namespace: str) -> list[str]:
        """Return the raw key stream of a namespace file (empty if absent).

        Raises:
            LoadError: If the file cannot be read or parsed.
        """
        path = self._find(locale, namespace)
        if path is None:
            return []
        try:
            return self._format.scan_keys(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, FormatError) as e:
            raise LoadError(f"Cannot scan {path}", cause=e) from e

    def write(self, locale: str, namespace: str, tree: TranslationTree) -> Path:
        """Atomically write one namespace.

        Raises:
            PersistError: If serialization or the write fails.
        """
        path = self._find(locale, namespace) or self.path(locale, namespace)
        try:
            content = self._format.write(tree)
            with atomic_write(path) as handle:
                handle.write(content)
        except (OSError, FormatError) as e:
            raise PersistError(f"Cannot write {path}", cause=e) from e
        logger.info("Wrote %s", path)
        return path

    def _find(self, locale: str, namespace: str) -> Path | None:
        for extension in self._format.extensions:
            candidate = self._root / locale / f"{namespace}{extension}"
            if candidate.is_file():
                return candidate
        return None
