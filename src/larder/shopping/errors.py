"""Shopping list error types."""

from __future__ import annotations

from typing import Optional


class ShoppingListValidationError(ValueError):
    """Input rejected before any persistence call; the message is user-facing."""


class ShoppingListError(Exception):
    """Failure surfaced to list consumers, tagged with a stable code."""

    def __init__(self, code: str, message: str, original_error: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.original_error = original_error


__all__ = ["ShoppingListValidationError", "ShoppingListError"]
