"""Tests for the diagnosis form submission controller."""

import asyncio
import json

import httpx
import pytest
from unittest.mock import AsyncMock

from diagnosis.models.form import FormField, SubmissionStatus
from diagnosis.services.form_controller import (
    EMPTY_PLACEHOLDER,
    SUBMIT_FAILED_MESSAGE,
    DiagnosisFormController,
    sample_report_url,
)
from diagnosis.services.submission_client import AckMode, SubmissionClient
from diagnosis.utils.exceptions import InvalidTransitionError, SubmissionError
from diagnosis.validation import EMAIL_INVALID_MESSAGE, URL_REQUIRED_MESSAGE

ENDPOINT = "https://intake.example.com/intake"


def recording_client(requests: list, status_code: int = 200) -> SubmissionClient:
    """Build a client whose transport records requests instead of sending them."""
    def _handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json={"success": True, "message": "登録完了"})

    return SubmissionClient(ENDPOINT, transport=httpx.MockTransport(_handler))


def failing_client() -> SubmissionClient:
    """Build a client whose transport always fails to connect."""
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return SubmissionClient(ENDPOINT, transport=httpx.MockTransport(_handler))


def fill(controller: DiagnosisFormController, url: str = "example.com", email: str = "a@b.co"):
    controller.set_url(url)
    controller.blur(FormField.URL)
    controller.set_email(email)
    controller.blur(FormField.EMAIL)


class TestFieldState:
    """Tests for field values, touched flags and derived validity."""

    def test_initial_state(self):
        """Test a new controller starts idle with empty untouched fields."""
        controller = DiagnosisFormController(endpoint_url="")

        assert controller.status == SubmissionStatus.IDLE
        assert controller.form.url == ""
        assert controller.touched.url is False
        assert controller.touched.email is False
        assert controller.has_errors
        assert controller.submit_disabled is False

    def test_validation_recomputed_on_change(self):
        """Test every field change produces a fresh validation result."""
        controller = DiagnosisFormController(endpoint_url="")

        first = controller.set_url("example.com")
        assert first.url_error == ""

        second = controller.set_url("")
        assert second.url_error == URL_REQUIRED_MESSAGE
        assert controller.validation is second

    def test_errors_hidden_until_touched(self):
        """Test field errors are only visible after blur."""
        controller = DiagnosisFormController(endpoint_url="")
        controller.set_email("not-an-email")

        assert controller.visible_error("email") == ""

        controller.blur("email")

        assert controller.visible_error("email") == EMAIL_INVALID_MESSAGE
        assert controller.visible_error("url") == ""

    def test_submit_disabled_only_when_both_touched_and_invalid(self):
        """Test the submit control gating rule."""
        controller = DiagnosisFormController(endpoint_url="")

        controller.set_email("bad")
        controller.blur("email")
        assert controller.submit_disabled is False

        controller.blur("url")
        assert controller.submit_disabled is True

        controller.set_url("example.com")
        controller.set_email("a@b.co")
        assert controller.submit_disabled is False

    def test_sample_report_url(self):
        """Test the sample report location."""
        assert sample_report_url("/ai_syukyaku_diagnosis/") == "/ai_syukyaku_diagnosis/SEO_Report_sample.pdf"
        assert sample_report_url("https://cdn.example.com/lp") == "https://cdn.example.com/lp/SEO_Report_sample.pdf"

        controller = DiagnosisFormController(endpoint_url="", asset_base_url="/assets/")
        assert controller.sample_report_url == "/assets/SEO_Report_sample.pdf"


class TestSubmission:
    """Tests for the submission lifecycle."""

    @pytest.mark.asyncio
    async def test_submit_with_endpoint(self):
        """Test idle -> submitting -> submitted with one JSON POST."""
        requests = []
        controller = DiagnosisFormController(endpoint_url=ENDPOINT, client=recording_client(requests))
        fill(controller, url="  example.com ", email=" a@b.co ")

        state = await controller.submit()

        assert state.status == SubmissionStatus.SUBMITTED
        assert controller.history == [
            SubmissionStatus.IDLE,
            SubmissionStatus.SUBMITTING,
            SubmissionStatus.SUBMITTED,
        ]
        assert controller.confirmation.email == "a@b.co"
        assert controller.confirmation.url == "example.com"

        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"url": "example.com", "email": "a@b.co"}

    @pytest.mark.asyncio
    async def test_fire_and_forget_ignores_response(self):
        """Test an error status still counts as delivered when the response is not read."""
        requests = []
        controller = DiagnosisFormController(
            endpoint_url=ENDPOINT, client=recording_client(requests, status_code=500)
        )
        fill(controller)

        state = await controller.submit()

        assert state.status == SubmissionStatus.SUBMITTED
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_submit_without_endpoint(self):
        """Test degraded mode goes straight to submitted without a request."""
        controller = DiagnosisFormController(endpoint_url="")
        fill(controller)

        state = await controller.submit()

        assert controller.degraded
        assert controller.client is None
        assert state.status == SubmissionStatus.SUBMITTED
        assert controller.history == [SubmissionStatus.IDLE, SubmissionStatus.SUBMITTED]
        assert controller.confirmation.email == "a@b.co"

    def test_endpoint_from_environment(self, monkeypatch):
        """Test the endpoint and ack mode are read from the environment."""
        monkeypatch.setenv("DIAGNOSIS_ENDPOINT_URL", ENDPOINT)
        monkeypatch.setenv("DIAGNOSIS_ACK_MODE", "acknowledged")

        controller = DiagnosisFormController()

        assert controller.degraded is False
        assert controller.client.endpoint_url == ENDPOINT
        assert controller.client.ack_mode == AckMode.ACKNOWLEDGED

    @pytest.mark.asyncio
    async def test_invalid_submit_stays_idle(self):
        """Test validation failure marks fields touched and sends nothing."""
        client = AsyncMock(spec=SubmissionClient)
        controller = DiagnosisFormController(endpoint_url=ENDPOINT, client=client)
        controller.set_url("example.com")

        state = await controller.submit()

        assert state.status == SubmissionStatus.IDLE
        assert controller.touched.url and controller.touched.email
        assert controller.submit_disabled is True
        assert controller.history == [SubmissionStatus.IDLE]
        client.submit.assert_not_called()

    @pytest.mark.asyncio
    async def test_network_error_then_retry(self):
        """Test idle -> submitting -> failed, then retry re-enters submitting."""
        controller = DiagnosisFormController(endpoint_url=ENDPOINT, client=failing_client())
        fill(controller)

        state = await controller.submit()

        assert state.status == SubmissionStatus.FAILED
        assert controller.error_banner == SUBMIT_FAILED_MESSAGE
        assert "connection refused" in state.detail
        assert controller.history == [
            SubmissionStatus.IDLE,
            SubmissionStatus.SUBMITTING,
            SubmissionStatus.FAILED,
        ]

        requests = []
        controller.client = recording_client(requests)

        state = await controller.submit()

        assert state.status == SubmissionStatus.SUBMITTED
        assert controller.error_banner is None
        assert controller.history[-2:] == [SubmissionStatus.SUBMITTING, SubmissionStatus.SUBMITTED]
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_dismiss_error(self):
        """Test closing the failure banner returns to idle."""
        controller = DiagnosisFormController(endpoint_url=ENDPOINT, client=failing_client())
        fill(controller)
        await controller.submit()

        controller.dismiss_error()

        assert controller.status == SubmissionStatus.IDLE
        assert controller.error_banner is None
        assert controller.form.email == "a@b.co"

    @pytest.mark.asyncio
    async def test_invalid_submit_after_failure_returns_to_idle(self):
        """Test an invalid retry from failed clears the banner without sending."""
        controller = DiagnosisFormController(endpoint_url=ENDPOINT, client=failing_client())
        fill(controller)
        await controller.submit()
        assert controller.status == SubmissionStatus.FAILED

        requests = []
        controller.client = recording_client(requests)
        controller.set_email("")

        state = await controller.submit()

        assert state.status == SubmissionStatus.IDLE
        assert controller.error_banner is None
        assert controller.history[-2:] == [SubmissionStatus.FAILED, SubmissionStatus.IDLE]
        assert requests == []

    @pytest.mark.asyncio
    async def test_malformed_endpoint_fails_and_recovers(self):
        """Test a malformed endpoint URL ends in failed rather than submitting."""
        controller = DiagnosisFormController(endpoint_url="http://[::1")
        fill(controller)

        state = await controller.submit()

        assert state.status == SubmissionStatus.FAILED
        assert controller.error_banner == SUBMIT_FAILED_MESSAGE
        assert controller.submit_disabled is False

        controller.reset()
        assert controller.status == SubmissionStatus.IDLE

    @pytest.mark.asyncio
    async def test_unexpected_client_error_fails(self):
        """Test any error raised while sending moves the form to failed."""
        client = AsyncMock(spec=SubmissionClient)
        client.submit.side_effect = RuntimeError("event loop closed")
        controller = DiagnosisFormController(endpoint_url=ENDPOINT, client=client)
        fill(controller)

        state = await controller.submit()

        assert state.status == SubmissionStatus.FAILED
        assert state.detail == "event loop closed"
        assert controller.history == [
            SubmissionStatus.IDLE,
            SubmissionStatus.SUBMITTING,
            SubmissionStatus.FAILED,
        ]

    @pytest.mark.asyncio
    async def test_single_request_in_flight(self):
        """Test a second submit while the first is pending is ignored."""
        release = asyncio.Event()
        calls = []

        async def slow_submit(url, email):
            calls.append((url, email))
            await release.wait()

        client = AsyncMock(spec=SubmissionClient)
        client.submit.side_effect = slow_submit
        controller = DiagnosisFormController(endpoint_url=ENDPOINT, client=client)
        fill(controller)

        first = asyncio.create_task(controller.submit())
        await asyncio.sleep(0)

        assert controller.status == SubmissionStatus.SUBMITTING
        assert controller.submit_disabled is True

        second = await controller.submit()
        assert second.status == SubmissionStatus.SUBMITTING

        release.set()
        state = await first

        assert state.status == SubmissionStatus.SUBMITTED
        assert calls == [("example.com", "a@b.co")]

    @pytest.mark.asyncio
    async def test_acknowledged_rejection_fails(self):
        """Test a negative acknowledgment is treated as a failure."""
        def _handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"success": False, "message": "email: invalid"})

        client = SubmissionClient(
            ENDPOINT,
            ack_mode=AckMode.ACKNOWLEDGED,
            transport=httpx.MockTransport(_handler),
        )
        controller = DiagnosisFormController(endpoint_url=ENDPOINT, client=client)
        fill(controller)

        state = await controller.submit()

        assert state.status == SubmissionStatus.FAILED
        assert state.detail == "HTTP 400"


class TestReset:
    """Tests for resetting the form."""

    @pytest.mark.asyncio
    async def test_reset_after_submitted(self):
        """Test reset clears input and touched flags and returns to idle."""
        controller = DiagnosisFormController(endpoint_url="")
        fill(controller)
        await controller.submit()

        controller.reset()

        assert controller.status == SubmissionStatus.IDLE
        assert controller.form.url == ""
        assert controller.form.email == ""
        assert controller.touched.url is False
        assert controller.touched.email is False
        assert controller.confirmation is None
        assert controller.submit_disabled is False

    @pytest.mark.asyncio
    async def test_submitted_is_terminal_until_reset(self):
        """Test submitting again after success does nothing."""
        requests = []
        controller = DiagnosisFormController(endpoint_url=ENDPOINT, client=recording_client(requests))
        fill(controller)
        await controller.submit()

        state = await controller.submit()

        assert state.status == SubmissionStatus.SUBMITTED
        assert len(requests) == 1

    def test_confirmation_placeholder(self):
        """Test empty values show the placeholder in the confirmation."""
        controller = DiagnosisFormController(endpoint_url="")
        controller._complete("", "")

        assert controller.confirmation.email == EMPTY_PLACEHOLDER
        assert controller.confirmation.url == EMPTY_PLACEHOLDER

    def test_illegal_transition_raises(self):
        """Test moving from idle to failed is rejected."""
        from diagnosis.models.form import SubmissionState

        controller = DiagnosisFormController(endpoint_url="")

        with pytest.raises(InvalidTransitionError) as exc_info:
            controller._transition(SubmissionState.failed("boom"))

        assert exc_info.value.status_code == 409
        assert controller.status == SubmissionStatus.IDLE

    def test_submission_error_is_external_error(self):
        """Test SubmissionError carries the external-service shape."""
        exc = SubmissionError(original_error="timeout")

        assert exc.status_code == 502
        assert exc.to_dict()["details"]["service"] == "intake"
