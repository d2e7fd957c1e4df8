"""Shared cross-layer types and exceptions."""

from tripvoice.shared.exceptions import (
    ExternalServiceError,
    KeyMissingError,
    MalformedResponseError,
    ToolError,
)

__all__ = ["ToolError", "ExternalServiceError", "KeyMissingError", "MalformedResponseError"]
