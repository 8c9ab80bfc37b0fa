# SPDX-License-Identifier: Apache-2.0
"""Translation workflow package."""

from .catalog import CatalogStore
from .diff import build_requests, find_missing_keys, merge_translations
from .errors import LoadError, PersistError, PipelineError
from .progress import ProgressCallback
from .workflow import LocaleResult, TranslationWorkflow, WorkflowReport

__all__ = [
    "CatalogStore",
    "LoadError",
    "LocaleResult",
    "PersistError",
    "PipelineError",
    "ProgressCallback",
    "TranslationWorkflow",
    "WorkflowReport",
    "build_requests",
    "find_missing_keys",
    "merge_translations",
]
