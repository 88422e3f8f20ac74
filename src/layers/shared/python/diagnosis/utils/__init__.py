"""Utility functions and helpers."""

from diagnosis.utils.exceptions import (
    ConflictError,
    DiagnosisError,
    ExternalServiceError,
    InvalidTransitionError,
    NotificationError,
    SubmissionError,
    ValidationError,
)
from diagnosis.utils.responses import envelope, error, no_content, redirect, success

__all__ = [
    # Response helpers
    "envelope",
    "error",
    "no_content",
    "redirect",
    "success",
    # Exceptions
    "ConflictError",
    "DiagnosisError",
    "ExternalServiceError",
    "InvalidTransitionError",
    "NotificationError",
    "SubmissionError",
    "ValidationError",
]
