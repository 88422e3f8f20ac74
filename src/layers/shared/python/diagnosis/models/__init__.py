"""Pydantic models for the diagnosis form and intake."""

from diagnosis.models.base import BaseModel
from diagnosis.models.form import (
    Confirmation,
    FormField,
    FormInput,
    SubmissionState,
    SubmissionStatus,
    TouchedState,
    ValidationResult,
)
from diagnosis.models.request import (
    DiagnosisRequest,
    IntakeAck,
    RequestStatus,
    SheetHeader,
    SubmitDiagnosisRequest,
)

__all__ = [
    # Base
    "BaseModel",
    # Form
    "Confirmation",
    "FormField",
    "FormInput",
    "SubmissionState",
    "SubmissionStatus",
    "TouchedState",
    "ValidationResult",
    # Request
    "DiagnosisRequest",
    "IntakeAck",
    "RequestStatus",
    "SheetHeader",
    "SubmitDiagnosisRequest",
]
