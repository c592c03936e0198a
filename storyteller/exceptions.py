#!/usr/bin/env python3
"""
Storyteller - Custom Exception Hierarchy

Structured error types for the beautification pipeline.

Usage:
    from storyteller.exceptions import RecordValidationError

    try:
        story = RawStoryInput.from_record(record)
    except RecordValidationError as e:
        log.error("story_rejected", record_id=e.record_id, field=e.field)

Exception Hierarchy:
    StorytellerError (base)
    ├── ConfigurationError
    ├── RecordValidationError
    └── EnhancementError
"""

from typing import Any, Dict, Optional


class StorytellerError(Exception):
    """
    Base exception for all Storyteller errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(StorytellerError):
    """
    Invalid or missing configuration.

    Raised when a rules file cannot be read or does not have the
    expected shape.

    Attributes:
        config_key: The configuration key that caused the error
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        details = {"config_key": config_key} if config_key else None
        super().__init__(message, details)


class RecordValidationError(StorytellerError):
    """
    A content-store record cannot be turned into a story input.

    Attributes:
        record_id: Identifier of the offending record, when known
        field: Name of the field that failed validation
    """

    def __init__(
        self,
        message: str,
        record_id: Optional[Any] = None,
        field: Optional[str] = None,
    ):
        self.record_id = record_id
        self.field = field
        details: Dict[str, Any] = {}
        if record_id is not None:
            details["record_id"] = record_id
        if field:
            details["field"] = field
        super().__init__(message, details or None)


class EnhancementError(StorytellerError):
    """
    Heuristic analysis could not complete.

    Always recovered inside the enhancer; never reaches pipeline callers.
    """
