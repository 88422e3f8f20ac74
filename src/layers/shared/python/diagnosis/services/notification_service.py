"""New-request notification emails using Amazon SES.

Notifications go to a single fixed recipient (NOTIFY_EMAIL). When that is
not set the service is disabled and notify() does nothing.
"""

import os
from typing import Any

import boto3
import structlog
from botocore.exceptions import ClientError

from diagnosis.models.request import DiagnosisRequest
from diagnosis.utils.exceptions import NotificationError

logger = structlog.get_logger()

NOTIFICATION_SUBJECT = "【AI集客診断】新規診断依頼"

NOTIFICATION_BODY = """新しい診断依頼がありました。

■ サイトURL
{url}

■ メールアドレス
{email}

■ 受付日時
{received_at}

スプレッドシートで確認してください。
"""


class NotificationService:
    """Sends a plain-text email for each new diagnosis request."""

    def __init__(
        self,
        recipient: str | None = None,
        from_email: str | None = None,
        region_name: str | None = None,
        configuration_set: str | None = None,
    ):
        """Initialize notification service.

        Args:
            recipient: Fixed recipient. Falls back to NOTIFY_EMAIL env var.
            from_email: Sender. Falls back to SES_FROM_EMAIL, then the recipient.
            region_name: AWS region for SES. Falls back to AWS_REGION env var.
            configuration_set: Optional SES configuration set for tracking.
        """
        self.recipient = recipient or os.environ.get("NOTIFY_EMAIL")
        self.from_email = from_email or os.environ.get("SES_FROM_EMAIL") or self.recipient
        self.region_name = region_name or os.environ.get("AWS_REGION", "us-east-1")
        self.configuration_set = configuration_set or os.environ.get("SES_CONFIGURATION_SET")
        self._client = None

    @property
    def enabled(self) -> bool:
        return bool(self.recipient)

    @property
    def client(self):
        """Get SES client (lazy initialization)."""
        if self._client is None:
            self._client = boto3.client("ses", region_name=self.region_name)
        return self._client

    def render(self, request: DiagnosisRequest) -> tuple[str, str]:
        """Build the subject and body for a request."""
        body = NOTIFICATION_BODY.format(
            url=request.url,
            email=request.email,
            received_at=request.received_at_display,
        )
        return NOTIFICATION_SUBJECT, body

    def notify(self, request: DiagnosisRequest) -> dict[str, Any] | None:
        """Email the fixed recipient about a new request.

        Args:
            request: The stored diagnosis request.

        Returns:
            Dict with message_id and status, or None when disabled.

        Raises:
            NotificationError: If sending fails.
        """
        if not self.enabled:
            logger.debug("Notification skipped, NOTIFY_EMAIL not set", request_id=request.id)
            return None

        subject, body = self.render(request)
        return self.send_email(to=self.recipient, subject=subject, body_text=body)

    def send_email(self, to: str, subject: str, body_text: str) -> dict[str, Any]:
        """Send a plain-text email.

        Args:
            to: Recipient email address.
            subject: Email subject.
            body_text: Plain text body.

        Returns:
            Dict with message_id and status.

        Raises:
            NotificationError: If sending fails.
        """
        if not self.from_email:
            raise NotificationError("Sender email address is required", code="SENDER_MISSING")

        logger.info("Sending notification", to=to, from_email=self.from_email, subject=subject)

        kwargs: dict[str, Any] = {
            "Source": self.from_email,
            "Destination": {"ToAddresses": [to]},
            "Message": {
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {"Text": {"Data": body_text, "Charset": "UTF-8"}},
            },
        }
        if self.configuration_set:
            kwargs["ConfigurationSetName"] = self.configuration_set

        try:
            response = self.client.send_email(**kwargs)
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            error_message = e.response["Error"]["Message"]

            logger.error(
                "SES send failed",
                error_code=error_code,
                error_message=error_message,
                to=to,
            )

            raise NotificationError(
                f"Failed to send email: {error_message}",
                code=error_code,
                details={"aws_error": error_message},
            ) from e

        logger.info("Notification sent", message_id=response["MessageId"])

        return {
            "message_id": response["MessageId"],
            "status": "sent",
            "to": to,
        }
