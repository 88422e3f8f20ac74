"""Client-side form models for the diagnosis landing form."""

from enum import Enum

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field


class FormField(str, Enum):
    """Fields of the diagnosis form."""

    URL = "url"
    EMAIL = "email"


class FormInput(PydanticBaseModel):
    """Raw text entered by the user."""

    model_config = ConfigDict(validate_assignment=True)

    url: str = Field(default="", description="Website URL as typed")
    email: str = Field(default="", description="Email address as typed")


class TouchedState(PydanticBaseModel):
    """Which fields the user has focused and left."""

    model_config = ConfigDict(validate_assignment=True)

    url: bool = False
    email: bool = False

    @property
    def all_touched(self) -> bool:
        return self.url and self.email


class ValidationResult(PydanticBaseModel):
    """Per-field error messages derived from a FormInput.

    An empty string means the field is valid.
    """

    model_config = ConfigDict(frozen=True)

    url_error: str = ""
    email_error: str = ""

    @property
    def has_errors(self) -> bool:
        """True when any field has an error."""
        return bool(self.url_error or self.email_error)

    def error_for(self, field: FormField | str) -> str:
        """Get the error message for a field."""
        if FormField(field) == FormField.URL:
            return self.url_error
        return self.email_error

    def to_errors(self) -> list[dict]:
        """List the errors in the field/message shape used by API responses."""
        errors = []
        if self.url_error:
            errors.append({"field": FormField.URL.value, "message": self.url_error})
        if self.email_error:
            errors.append({"field": FormField.EMAIL.value, "message": self.email_error})
        return errors


class SubmissionStatus(str, Enum):
    """Submission lifecycle states."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"


# Allowed status changes; anything else is a programming error
ALLOWED_TRANSITIONS: dict[SubmissionStatus, frozenset[SubmissionStatus]] = {
    SubmissionStatus.IDLE: frozenset({SubmissionStatus.SUBMITTING, SubmissionStatus.SUBMITTED}),
    SubmissionStatus.SUBMITTING: frozenset({SubmissionStatus.SUBMITTED, SubmissionStatus.FAILED}),
    SubmissionStatus.SUBMITTED: frozenset({SubmissionStatus.IDLE}),
    SubmissionStatus.FAILED: frozenset({SubmissionStatus.SUBMITTING, SubmissionStatus.IDLE}),
}


class SubmissionState(PydanticBaseModel):
    """Current submission status and, when failed, the reason shown to the user."""

    model_config = ConfigDict(frozen=True)

    status: SubmissionStatus = SubmissionStatus.IDLE
    error: str | None = Field(None, description="User-facing failure message")
    detail: str | None = Field(None, description="Underlying error, for logs")

    @classmethod
    def idle(cls) -> "SubmissionState":
        return cls(status=SubmissionStatus.IDLE)

    @classmethod
    def submitting(cls) -> "SubmissionState":
        return cls(status=SubmissionStatus.SUBMITTING)

    @classmethod
    def submitted(cls) -> "SubmissionState":
        return cls(status=SubmissionStatus.SUBMITTED)

    @classmethod
    def failed(cls, error: str, detail: str | None = None) -> "SubmissionState":
        return cls(status=SubmissionStatus.FAILED, error=error, detail=detail)

    def can_transition_to(self, target: SubmissionStatus) -> bool:
        """Check whether moving to target is allowed."""
        return target in ALLOWED_TRANSITIONS[self.status]


class Confirmation(PydanticBaseModel):
    """What the confirmation panel shows after a successful submission."""

    email: str
    url: str
