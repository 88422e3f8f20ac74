"""Diagnosis request models: wire payloads and sheet rows."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel as PydanticBaseModel, Field, field_validator

from diagnosis.models.base import BaseModel, utc_now

JST = timezone(timedelta(hours=9), "JST")

DEFAULT_SHEET_NAME = "診断依頼"
SHEET_COLUMNS = ["受付日時", "サイトURL", "メールアドレス", "ステータス"]


def format_received_at(value: datetime) -> str:
    """Render a timestamp the way the sheet shows it, e.g. 2025/1/5 9:03:07."""
    local = value.astimezone(JST)
    return f"{local.year}/{local.month}/{local.day} {local.hour}:{local.minute:02d}:{local.second:02d}"


class RequestStatus(str, Enum):
    """Handling status of a diagnosis request."""

    PENDING = "未対応"


class SubmitDiagnosisRequest(PydanticBaseModel):
    """Request body posted by the landing form.

    Missing values read as empty strings; values are trimmed.
    """

    url: str = Field(default="", description="Website URL to diagnose")
    email: str = Field(default="", description="Where to send the report")

    @field_validator("url", "email", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value


class IntakeAck(PydanticBaseModel):
    """Response envelope returned by the intake endpoint."""

    success: bool
    message: str = ""


class SheetHeader(BaseModel):
    """Header item created the first time a sheet is used.

    Key Pattern:
        PK: SHEET#{sheet_name}
        SK: #HEADER
    """

    sheet_name: str = Field(..., min_length=1, description="Sheet name")
    columns: list[str] = Field(default_factory=lambda: list(SHEET_COLUMNS))

    def get_pk(self) -> str:
        """Get partition key: SHEET#{sheet_name}."""
        return f"SHEET#{self.sheet_name}"

    def get_sk(self) -> str:
        """Get sort key: #HEADER."""
        return "#HEADER"


class DiagnosisRequest(BaseModel):
    """One row of the diagnosis sheet.

    Key Pattern:
        PK: SHEET#{sheet_name}
        SK: ROW#{received_at}#{id}
    """

    sheet_name: str = Field(default=DEFAULT_SHEET_NAME, min_length=1)
    url: str = Field(default="", description="Website URL to diagnose")
    email: str = Field(default="", description="Where to send the report")
    status: RequestStatus = Field(default=RequestStatus.PENDING)
    received_at: datetime = Field(default_factory=utc_now)

    @property
    def received_at_display(self) -> str:
        """Receipt time in Tokyo local time."""
        return format_received_at(self.received_at)

    def get_pk(self) -> str:
        """Get partition key: SHEET#{sheet_name}."""
        return f"SHEET#{self.sheet_name}"

    def get_sk(self) -> str:
        """Get sort key: ROW#{received_at}#{id}."""
        return f"ROW#{self.received_at.isoformat()}#{self.id}"

    def to_row(self) -> list[str]:
        """Values in sheet column order."""
        status = self.status.value if isinstance(self.status, RequestStatus) else self.status
        return [self.received_at_display, self.url, self.email, status]
