"""
Error Handling - Centralized error policies and custom exceptions.

This module defines how different error types should be handled throughout
the recipe pipeline. Failures while reading a single document never stop a
load pass; only losing the corpus root itself aborts it.
"""

import logging
from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional
from pathlib import Path


logger = logging.getLogger(__name__)


class ErrorAction(Enum):
    """What to do when an error occurs."""
    SKIP = auto()           # Drop this item, continue processing
    ABORT = auto()          # Stop the entire pass


@dataclass
class ErrorPolicy:
    """Policy for handling a specific error type."""
    action: ErrorAction
    log_level: int
    message_template: str = "{file}: {error}"


class RecipeCardError(Exception):
    """Base exception for recipe pipeline errors."""
    pass


class MalformedContainer(RecipeCardError):
    """The document archive cannot be opened or its content stream read."""
    pass


class MalformedContentStream(MalformedContainer):
    """The content stream is not well-formed markup."""
    pass


class MissingDocumentBody(RecipeCardError):
    """The archive has no textual content stream."""
    def __init__(self, entry_name: str):
        self.entry_name = entry_name
        super().__init__(f"Unable to find {entry_name} in container")


class CacheUnavailable(RecipeCardError):
    """The fingerprint cache is missing or corrupt."""
    pass


class IndexOperationFailed(RecipeCardError):
    """The search index rejected an insert or delete."""
    def __init__(self, operation: str, key: str, reason: str = ""):
        self.operation = operation
        self.key = key
        message = f"{operation} failed for {key!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PersistenceFailed(RecipeCardError):
    """The fingerprint cache could not be written."""
    pass


class CorpusUnavailable(RecipeCardError):
    """The corpus root cannot be enumerated."""
    pass


# Error type to policy mapping (first isinstance match wins, so order matters)
ERROR_POLICIES: dict[type, ErrorPolicy] = {
    CorpusUnavailable: ErrorPolicy(
        action=ErrorAction.ABORT,
        log_level=logging.ERROR,
        message_template="Cannot read recipe directory: {file} - {error}"
    ),
    MissingDocumentBody: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="Document has no text body: {file}"
    ),
    MalformedContainer: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="Malformed document: {file} - {error}"
    ),
    IndexOperationFailed: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.ERROR,
        message_template="Search index error: {error}"
    ),
    PersistenceFailed: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="Failed to update index data: {file} - {error}"
    ),
    CacheUnavailable: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="Failed to open previous item index: {file} - {error}"
    ),
    PermissionError: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="Permission denied: {file}"
    ),
    FileNotFoundError: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.DEBUG,
        message_template="File not found (possibly deleted): {file}"
    ),
    OSError: ErrorPolicy(
        action=ErrorAction.SKIP,
        log_level=logging.WARNING,
        message_template="OS error reading file: {file} - {error}"
    ),
}


def handle_error(
    error: Exception,
    file_path: Optional[Path] = None,
    context: str = ""
) -> ErrorAction:
    """
    Handle an error according to the defined policies.

    Args:
        error: The exception that occurred
        file_path: Path to the file being processed (if applicable)
        context: Additional context for logging

    Returns:
        The action to take (SKIP or ABORT)
    """
    policy = None
    for error_type, p in ERROR_POLICIES.items():
        if isinstance(error, error_type):
            policy = p
            break

    # Default policy for unknown errors
    if policy is None:
        policy = ErrorPolicy(
            action=ErrorAction.SKIP,
            log_level=logging.ERROR,
            message_template="Unexpected error: {file} - {error}"
        )

    file_str = str(file_path) if file_path else "<unknown>"
    message = policy.message_template.format(file=file_str, error=str(error))
    if context:
        message = f"[{context}] {message}"

    logger.log(policy.log_level, message)

    return policy.action


@dataclass
class ProcessingResult:
    """Result of processing a single item."""
    success: bool
    path: Optional[Path] = None
    error: Optional[Exception] = None
    action_taken: Optional[ErrorAction] = None

    @classmethod
    def ok(cls, path: Path) -> "ProcessingResult":
        return cls(success=True, path=path)

    @classmethod
    def failed(cls, path: Path, error: Exception, action: ErrorAction) -> "ProcessingResult":
        return cls(success=False, path=path, error=error, action_taken=action)
