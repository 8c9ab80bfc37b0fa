# SPDX-License-Identifier: Apache-2.0
"""Localization engine: tiered translation, persistent cache, validation."""

__version__ = "0.1.0"
