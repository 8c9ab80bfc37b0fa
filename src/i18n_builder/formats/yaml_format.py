# SPDX-License-Identifier: Apache-2.0
"""YAML catalog format (Rails i18n style)."""

from __future__ import annotations

from typing import Iterator

import yaml

from i18n_builder.core.models import TranslationTree, join_path, to_raw
from i18n_builder.formats.base import FormatError, tree_from_document


class YamlFormat:
    """YAML catalogs.

    Parsing uses ``yaml.safe_load``; key order of the tree is kept on output.
    """

    @property
    def name(self) -> str:
        """Return format name."""
        return "yaml"

    @property
    def extensions(self) -> tuple[str, ...]:
        """Return handled file suffixes."""
        return (".yaml", ".yml")

    def parse(self, content: str) -> TranslationTree:
        """Parse YAML text into a translation tree.

        Raises:
            FormatError: On invalid YAML or unsupported values.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise FormatError(f"Invalid YAML: {e}") from e
        return tree_from_document(data)

    def write(self, tree: TranslationTree) -> str:
        """Serialize a translation tree as YAML."""
        return yaml.safe_dump(
            to_raw(tree),
            allow_unicode=True,
            sort_keys=False,
            default_flow_style=False,
        )

    def scan_keys(self, content: str) -> list[str]:
        """Return every key path from the node graph, duplicates included.

        Raises:
            FormatError: On invalid YAML.
        """
        try:
            root = yaml.compose(content, Loader=yaml.SafeLoader)
        except yaml.YAMLError as e:
            raise FormatError(f"Invalid YAML: {e}") from e
        return list(_walk_nodes(root, ""))


def _walk_nodes(node: yaml.Node | None, prefix: str) -> Iterator[str]:
    if not isinstance(node, yaml.MappingNode):
        return
    for key_node, value_node in node.value:
        path = join_path(prefix, str(key_node.value))
        yield path
        yield from _walk_nodes(value_node, path)
