"""Exceptions raised by the import and render pipeline.

Severity:
  - DocumentError    -> fatal for one document; the import moves on to the next file.
  - TemplateError    -> a block's template and fields disagree at build time.
  - BatchUpdateError -> an editing batch failed; nothing from the batch was written.
"""

from typing import Optional
from uuid import UUID


class BlockpressError(Exception):
    """Base exception for all blockpress errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DocumentError(BlockpressError):
    """Raised when an HTML document cannot be imported (e.g. it has no <body>)."""

    def __init__(self, message: str, path: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, details)
        self.path = path


class TemplateError(BlockpressError):
    """Raised when a block template cannot be built from its fields."""


class BatchUpdateError(BlockpressError):
    """Raised when an atomic block/field batch update is rejected or fails."""

    def __init__(self, message: str, block_id: Optional[UUID] = None, details: Optional[dict] = None):
        super().__init__(message, details)
        self.block_id = block_id


class ReorderError(BatchUpdateError):
    """Raised when proposed block orders break the 1..N or draggable rules."""
