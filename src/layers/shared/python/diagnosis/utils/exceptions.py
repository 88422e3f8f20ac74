"""Custom exception classes for the diagnosis intake."""


class DiagnosisError(Exception):
    """Base exception for all diagnosis errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int = 500,
        details: dict | None = None,
    ):
        """Initialize DiagnosisError.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            status_code: HTTP status code for API responses.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API response."""
        result = {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(DiagnosisError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        errors: list[dict] | None = None,
    ):
        """Initialize ValidationError.

        Args:
            message: Error message.
            errors: List of validation errors with field and message.
        """
        self.errors = errors or []
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details={"errors": self.errors},
        )

    @classmethod
    def from_pydantic(cls, exc: Exception) -> "ValidationError":
        """Create ValidationError from Pydantic ValidationError."""
        errors = []
        if hasattr(exc, "errors"):
            for error in exc.errors():
                errors.append(
                    {
                        "field": ".".join(str(loc) for loc in error.get("loc", [])),
                        "message": error.get("msg", "Invalid value"),
                        "type": error.get("type", "unknown"),
                    }
                )
        return cls(message="Validation failed", errors=errors)


class ConflictError(DiagnosisError):
    """Raised when there's a conflict (e.g., item already exists)."""

    def __init__(
        self,
        message: str = "Resource conflict",
        conflict_type: str | None = None,
    ):
        """Initialize ConflictError."""
        super().__init__(
            message=message,
            error_code="CONFLICT",
            status_code=409,
            details={"conflict_type": conflict_type} if conflict_type else None,
        )


class InvalidTransitionError(DiagnosisError):
    """Raised when a submission state change is not allowed."""

    def __init__(self, current: str, target: str):
        """Initialize InvalidTransitionError.

        Args:
            current: Current submission status.
            target: Requested submission status.
        """
        self.current = current
        self.target = target
        super().__init__(
            message=f"Cannot move submission from '{current}' to '{target}'",
            error_code="INVALID_TRANSITION",
            status_code=409,
            details={"current": current, "target": target},
        )


class ExternalServiceError(DiagnosisError):
    """Raised when an external service call fails."""

    def __init__(
        self,
        service: str,
        message: str | None = None,
        original_error: str | None = None,
    ):
        """Initialize ExternalServiceError."""
        self.service = service
        self.original_error = original_error
        super().__init__(
            message=message or f"External service '{service}' returned an error",
            error_code="EXTERNAL_SERVICE_ERROR",
            status_code=502,
            details={
                "service": service,
                "original_error": original_error,
            },
        )


class SubmissionError(ExternalServiceError):
    """Raised when the diagnosis request could not be delivered."""

    def __init__(self, message: str | None = None, original_error: str | None = None):
        """Initialize SubmissionError."""
        super().__init__(
            service="intake",
            message=message or "Diagnosis request could not be delivered",
            original_error=original_error,
        )


class NotificationError(DiagnosisError):
    """Raised when the new-request notification email fails."""

    def __init__(self, message: str, code: str | None = None, details: dict | None = None):
        """Initialize NotificationError.

        Args:
            message: Error message.
            code: SES or local error code.
            details: Additional error details.
        """
        self.code = code
        super().__init__(
            message=message,
            error_code="NOTIFICATION_ERROR",
            status_code=502,
            details=details,
        )
