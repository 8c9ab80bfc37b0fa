# SPDX-License-Identifier: Apache-2.0
"""Catalog serialization formats.

Usage:
    from i18n_builder.formats import get_format
    fmt = get_format("json")
    tree = fmt.parse(path.read_text(encoding="utf-8"))
"""

from i18n_builder.formats.base import CatalogFormat, FormatError
from i18n_builder.formats.json_format import JsonFormat
from i18n_builder.formats.yaml_format import YamlFormat

__all__ = [
    "CatalogFormat",
    "FormatError",
    "JsonFormat",
    "YamlFormat",
    "get_format",
]


def get_format(name: str) -> CatalogFormat:
    """Resolve a format by name or file suffix.

    Args:
        name: "json", "yaml", "yml", or a suffix such as ".json".

    Returns:
        Format instance.

    Raises:
        FormatError: If the format is unknown.
    """
    key = name.lower().lstrip(".")
    if key == "json":
        return JsonFormat()
    if key in ("yaml", "yml"):
        return YamlFormat()
    raise FormatError(f"Unsupported catalog format: {name}")
