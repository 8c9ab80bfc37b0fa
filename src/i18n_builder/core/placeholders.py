# SPDX-License-Identifier: Apache-2.0
"""Placeholder variable extraction.

Three interpolation syntaxes are recognized:

- ``{{name}}`` (i18next, Handlebars)
- ``%{name}`` (Ruby i18n)
- ``{name}`` (ICU / Python format)
"""

from __future__ import annotations

import re

DOUBLE_BRACE_PATTERN = re.compile(r"\{\{(\w+)\}\}")
PERCENT_BRACE_PATTERN = re.compile(r"%\{(\w+)\}")
SINGLE_BRACE_PATTERN = re.compile(r"\{(\w+)\}")

_PATTERNS = (DOUBLE_BRACE_PATTERN, PERCENT_BRACE_PATTERN, SINGLE_BRACE_PATTERN)


def extract_variables(text: str) -> list[str]:
    """Return placeholder names in order of first appearance, without repeats.

    Args:
        text: Text that may contain placeholders.

    Returns:
        Unique variable names.
    """
    found: list[str] = []
    for pattern in _PATTERNS:
        for match in pattern.finditer(text):
            name = match.group(1)
            if name not in found:
                found.append(name)
    return found


def variable_set(text: str) -> frozenset[str]:
    """Return the placeholder names of a text as a set."""
    return frozenset(extract_variables(text))


def same_variables(source: str, translation: str) -> bool:
    """Return True if both texts use the same placeholder set."""
    return variable_set(source) == variable_set(translation)
