"""Custom exceptions for anydiff operations."""

from __future__ import annotations

from typing import Any


class AnyDiffError(Exception):
    """Base exception for anydiff operations."""

    def __init__(self, message: str, error_details: dict[str, Any] | None = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            error_details: Optional dictionary with detailed error information
        """
        super().__init__(message)
        self.error_details = error_details


class UnsupportedOperation(AnyDiffError):
    """Raised when an entry does not support the requested operation (e.g. accepting an error block)."""


class ContentError(AnyDiffError):
    """Raised when a content source cannot be read."""


class ScriptError(AnyDiffError):
    """Raised when a filter script cannot be parsed or evaluated."""
