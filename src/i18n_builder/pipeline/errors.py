# SPDX-License-Identifier: Apache-2.0
"""Pipeline error definitions."""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    def __init__(
        self,
        message: str,
        stage: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.cause = cause

    def __str__(self) -> str:
        text = f"[{self.stage}] {self.message}"
        if self.cause is not None:
            text += f" (caused by {type(self.cause).__name__}: {self.cause})"
        return text


class LoadError(PipelineError):
    """Catalog loading error."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message, stage="load", cause=cause)


class PersistError(PipelineError):
    """Catalog writing error."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message, stage="persist", cause=cause)
