"""Outbound client that posts diagnosis requests to the intake endpoint."""

import os
from enum import Enum

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from diagnosis.models.request import IntakeAck, SubmitDiagnosisRequest
from diagnosis.utils.exceptions import SubmissionError

logger = structlog.get_logger()


class AckMode(str, Enum):
    """How the client decides a submission succeeded."""

    # Response is never read; only transport failures count
    FIRE_AND_FORGET = "fire_and_forget"
    # Response must be 2xx with {"success": true}
    ACKNOWLEDGED = "acknowledged"


def ack_mode_from_env() -> AckMode:
    """Read DIAGNOSIS_ACK_MODE, defaulting to fire-and-forget."""
    raw = os.environ.get("DIAGNOSIS_ACK_MODE", "").strip().lower()
    if not raw:
        return AckMode.FIRE_AND_FORGET
    try:
        return AckMode(raw)
    except ValueError:
        logger.warning("Unknown DIAGNOSIS_ACK_MODE, using fire_and_forget", value=raw)
        return AckMode.FIRE_AND_FORGET


class SubmissionClient:
    """Posts {url, email} to the configured intake endpoint."""

    def __init__(
        self,
        endpoint_url: str,
        ack_mode: AckMode = AckMode.FIRE_AND_FORGET,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the submission client.

        Args:
            endpoint_url: Intake endpoint URL.
            ack_mode: Whether to read the response envelope.
            timeout: Request timeout in seconds. None waits indefinitely.
            transport: Optional httpx transport (used by tests).
        """
        self.endpoint_url = endpoint_url
        self.ack_mode = AckMode(ack_mode)
        self.timeout = timeout
        self.transport = transport

    async def submit(self, url: str, email: str) -> IntakeAck | None:
        """Send one diagnosis request.

        Args:
            url: Website URL (trimmed before sending).
            email: Email address (trimmed before sending).

        Returns:
            The parsed acknowledgment in acknowledged mode, otherwise None.

        Raises:
            SubmissionError: If the request could not be delivered, or was
                rejected in acknowledged mode.
        """
        payload = SubmitDiagnosisRequest(url=url, email=email)

        logger.info(
            "Posting diagnosis request",
            endpoint=self.endpoint_url,
            ack_mode=self.ack_mode.value,
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.endpoint_url,
                    json=payload.model_dump(),
                    headers={"Content-Type": "application/json"},
                )
        # InvalidURL is raised for a malformed endpoint and is not an HTTPError
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Diagnosis request failed", error=str(e), error_type=type(e).__name__)
            raise SubmissionError(
                message="Diagnosis request could not be delivered",
                original_error=str(e),
            ) from e

        if self.ack_mode == AckMode.FIRE_AND_FORGET:
            return None

        return self._read_ack(response)

    def _read_ack(self, response: httpx.Response) -> IntakeAck:
        """Parse and check the intake response envelope."""
        try:
            ack = IntakeAck.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise SubmissionError(
                message=f"Intake returned an unreadable response ({response.status_code})",
                original_error=str(e),
            ) from e

        if not response.is_success or not ack.success:
            logger.warning(
                "Diagnosis request rejected",
                status_code=response.status_code,
                message=ack.message,
            )
            raise SubmissionError(
                message=ack.message or f"Intake returned {response.status_code}",
                original_error=f"HTTP {response.status_code}",
            )

        return ack
