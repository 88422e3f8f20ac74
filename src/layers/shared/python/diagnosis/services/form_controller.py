"""Submission controller for the diagnosis landing form.

Owns the field values, touched flags, derived validation and the submission
lifecycle of one form instance:

    idle -> submitting -> submitted | failed
    failed -> submitting (retry) | idle (banner dismissed)
    submitted -> idle (reset)
    idle -> submitted (no endpoint configured)

Validation is recomputed explicitly on every field change. At most one
request is in flight per controller.
"""

import os

import structlog

from diagnosis.models.form import (
    Confirmation,
    FormField,
    FormInput,
    SubmissionState,
    SubmissionStatus,
    TouchedState,
    ValidationResult,
)
from diagnosis.services.submission_client import AckMode, SubmissionClient, ack_mode_from_env
from diagnosis.utils.exceptions import InvalidTransitionError, SubmissionError
from diagnosis.validation import validate_form

logger = structlog.get_logger()

SUBMIT_FAILED_MESSAGE = "送信に失敗しました。もう一度お試しください。"
EMPTY_PLACEHOLDER = "（未入力）"
SAMPLE_REPORT_FILENAME = "SEO_Report_sample.pdf"
DEFAULT_ASSET_BASE_URL = "/ai_syukyaku_diagnosis/"


def sample_report_url(base_url: str | None = None) -> str:
    """Location of the static sample report.

    Args:
        base_url: Asset base URL. Defaults to ASSET_BASE_URL env var.
    """
    base = base_url or os.environ.get("ASSET_BASE_URL") or DEFAULT_ASSET_BASE_URL
    if not base.endswith("/"):
        base = f"{base}/"
    return f"{base}{SAMPLE_REPORT_FILENAME}"


class DiagnosisFormController:
    """State holder for one rendered diagnosis form."""

    def __init__(
        self,
        endpoint_url: str | None = None,
        ack_mode: AckMode | str | None = None,
        client: SubmissionClient | None = None,
        asset_base_url: str | None = None,
    ):
        """Initialize the controller.

        Args:
            endpoint_url: Intake endpoint. Defaults to DIAGNOSIS_ENDPOINT_URL;
                an empty value puts the form in degraded mode.
            ack_mode: Acknowledgment mode. Defaults to DIAGNOSIS_ACK_MODE.
            client: Pre-built submission client.
            asset_base_url: Base URL for static assets.
        """
        if endpoint_url is None:
            endpoint_url = os.environ.get("DIAGNOSIS_ENDPOINT_URL", "")
        self.endpoint_url = endpoint_url.strip()

        if client is None and self.endpoint_url:
            client = SubmissionClient(
                self.endpoint_url,
                ack_mode=AckMode(ack_mode) if ack_mode else ack_mode_from_env(),
            )
        self.client = client

        self.asset_base_url = asset_base_url
        self.form = FormInput()
        self.touched = TouchedState()
        self.validation: ValidationResult = validate_form(self.form)
        self.state = SubmissionState.idle()
        self.history: list[SubmissionStatus] = [self.state.status]
        self.confirmation: Confirmation | None = None

    # Derived values

    @property
    def status(self) -> SubmissionStatus:
        return self.state.status

    @property
    def degraded(self) -> bool:
        """True when no endpoint is configured."""
        return self.client is None

    @property
    def has_errors(self) -> bool:
        return self.validation.has_errors

    @property
    def submit_disabled(self) -> bool:
        """Submit is blocked while in flight, or once both fields are touched and one is invalid."""
        if self.state.status == SubmissionStatus.SUBMITTING:
            return True
        return self.touched.all_touched and self.has_errors

    @property
    def error_banner(self) -> str | None:
        """Submission failure message, shown until dismissed or retried."""
        if self.state.status == SubmissionStatus.FAILED:
            return self.state.error
        return None

    @property
    def sample_report_url(self) -> str:
        return sample_report_url(self.asset_base_url)

    def visible_error(self, field: FormField | str) -> str:
        """Field error, but only once the field has been touched."""
        field = FormField(field)
        if not getattr(self.touched, field.value):
            return ""
        return self.validation.error_for(field)

    # Field events

    def set_url(self, value: str) -> ValidationResult:
        """Update the URL text and recompute validation."""
        self.form.url = value
        return self._revalidate()

    def set_email(self, value: str) -> ValidationResult:
        """Update the email text and recompute validation."""
        self.form.email = value
        return self._revalidate()

    def blur(self, field: FormField | str) -> None:
        """Mark a field as touched when the user leaves it."""
        field = FormField(field)
        setattr(self.touched, field.value, True)

    def _revalidate(self) -> ValidationResult:
        self.validation = validate_form(self.form)
        return self.validation

    # Submission lifecycle

    def _transition(self, new_state: SubmissionState) -> None:
        """Move to a new submission state.

        Raises:
            InvalidTransitionError: If the move is not part of the lifecycle.
        """
        current = self.state.status
        if not self.state.can_transition_to(new_state.status):
            raise InvalidTransitionError(current.value, new_state.status.value)

        self.state = new_state
        self.history.append(new_state.status)
        logger.debug("Submission state changed", previous=current.value, status=new_state.status.value)

    async def submit(self) -> SubmissionState:
        """Handle the submit action.

        Returns:
            The submission state after this attempt.
        """
        if self.state.status == SubmissionStatus.SUBMITTING:
            logger.debug("Submit ignored, request already in flight")
            return self.state
        if self.state.status == SubmissionStatus.SUBMITTED:
            return self.state

        self.touched = TouchedState(url=True, email=True)
        self._revalidate()

        if self.has_errors:
            if self.state.status == SubmissionStatus.FAILED:
                self._transition(SubmissionState.idle())
            logger.info("Submit blocked by validation", errors=self.validation.to_errors())
            return self.state

        url = self.form.url.strip()
        email = self.form.email.strip()

        if self.degraded:
            logger.warning("Diagnosis endpoint is not set, request will not be saved")
            self._complete(url, email)
            return self.state

        self._transition(SubmissionState.submitting())

        try:
            await self.client.submit(url, email)
        except SubmissionError as e:
            logger.error("Submit error", error=e.message, original_error=e.original_error)
            self._transition(SubmissionState.failed(SUBMIT_FAILED_MESSAGE, detail=e.original_error or e.message))
            return self.state
        except Exception as e:
            logger.exception("Unexpected submit error", error=str(e))
            self._transition(SubmissionState.failed(SUBMIT_FAILED_MESSAGE, detail=str(e)))
            return self.state

        self._complete(url, email)
        return self.state

    def _complete(self, url: str, email: str) -> None:
        self.confirmation = Confirmation(
            email=email or EMPTY_PLACEHOLDER,
            url=url or EMPTY_PLACEHOLDER,
        )
        self._transition(SubmissionState.submitted())
        logger.info("Diagnosis request submitted", email=email, url=url, degraded=self.degraded)

    def dismiss_error(self) -> None:
        """Close the failure banner without retrying."""
        if self.state.status == SubmissionStatus.FAILED:
            self._transition(SubmissionState.idle())

    def reset(self) -> None:
        """Return to an empty form.

        Raises:
            InvalidTransitionError: If a request is still in flight.
        """
        if self.state.status != SubmissionStatus.IDLE:
            self._transition(SubmissionState.idle())
        self.form = FormInput()
        self.touched = TouchedState()
        self.confirmation = None
        self._revalidate()
