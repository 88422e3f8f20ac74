"""Form, submission and notification services."""

from diagnosis.services.form_controller import DiagnosisFormController, sample_report_url
from diagnosis.services.notification_service import NotificationService
from diagnosis.services.submission_client import AckMode, SubmissionClient

__all__ = [
    "AckMode",
    "DiagnosisFormController",
    "NotificationService",
    "SubmissionClient",
    "sample_report_url",
]
