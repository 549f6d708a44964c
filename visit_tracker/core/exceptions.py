"""
Custom Exceptions

This module defines custom exceptions for better error handling
and more specific error messages.

Benefits:
- More specific error types for different failure scenarios
- Endpoints map each type to one HTTP status code
- Easier error handling and logging
"""


class VisitTrackerException(Exception):
    """Base exception for the visit tracker service."""
    pass


class InvalidEntryError(VisitTrackerException):
    """Raised when a mute payload lacks a required field."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required field: {field}")


class StorageError(VisitTrackerException):
    """Raised when a log document cannot be written."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Storage error: {message}")


class RateLimitExceededError(VisitTrackerException):
    """Raised when a caller has used up its quota for the current window."""

    def __init__(self, key: str, limit: str):
        self.key = key
        self.limit = limit
        super().__init__(f"Rate limit of {limit} exceeded for {key}")
