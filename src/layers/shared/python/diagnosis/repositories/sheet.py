"""Diagnosis sheet repository for DynamoDB operations.

A sheet is a partition holding one header item and one item per row.
"""

import os

import structlog

from diagnosis.models.request import DEFAULT_SHEET_NAME, DiagnosisRequest, SheetHeader
from diagnosis.repositories.base import BaseRepository
from diagnosis.utils.exceptions import ConflictError

logger = structlog.get_logger()


def default_sheet_name() -> str:
    """Sheet name from SHEET_NAME, falling back to 診断依頼."""
    return os.environ.get("SHEET_NAME") or DEFAULT_SHEET_NAME


class SheetHeaderRepository(BaseRepository[SheetHeader]):
    """Repository for sheet header items."""

    def __init__(self, table_name: str | None = None):
        """Initialize sheet header repository."""
        super().__init__(SheetHeader, table_name)

    def get_header(self, sheet_name: str) -> SheetHeader | None:
        """Get the header of a sheet, or None if the sheet was never used."""
        return self.get(pk=f"SHEET#{sheet_name}", sk="#HEADER")

    def ensure_sheet(self, sheet_name: str) -> SheetHeader:
        """Create the sheet header unless it already exists.

        Args:
            sheet_name: Sheet to prepare.

        Returns:
            The existing or newly created header.
        """
        header = SheetHeader(sheet_name=sheet_name)
        try:
            self.create(header)
        except ConflictError:
            return self.get_header(sheet_name) or header

        logger.info("Sheet created", sheet_name=sheet_name, columns=header.columns)
        return header


class SheetRepository(BaseRepository[DiagnosisRequest]):
    """Repository for diagnosis request rows."""

    def __init__(self, table_name: str | None = None, sheet_name: str | None = None):
        """Initialize sheet repository.

        Args:
            table_name: DynamoDB table name.
            sheet_name: Sheet to write to. Defaults to SHEET_NAME env var.
        """
        super().__init__(DiagnosisRequest, table_name)
        self.sheet_name = sheet_name or default_sheet_name()
        self.headers = SheetHeaderRepository(table_name=self.table_name)

    def ensure_sheet(self) -> SheetHeader:
        """Create the sheet header on first use."""
        return self.headers.ensure_sheet(self.sheet_name)

    def append_row(self, url: str, email: str) -> DiagnosisRequest:
        """Append a new pending row.

        Args:
            url: Website URL to diagnose.
            email: Where to send the report.

        Returns:
            The stored row.
        """
        self.ensure_sheet()

        row = DiagnosisRequest(sheet_name=self.sheet_name, url=url, email=email)
        row = self.create(row)

        logger.info(
            "Row appended",
            sheet_name=self.sheet_name,
            request_id=row.id,
            received_at=row.received_at_display,
        )
        return row

    def list_rows(
        self,
        limit: int = 100,
        last_key: dict | None = None,
    ) -> tuple[list[DiagnosisRequest], dict | None]:
        """List rows in receipt order.

        Args:
            limit: Maximum rows to return.
            last_key: Pagination cursor.

        Returns:
            Tuple of (rows, next_page_key).
        """
        return self.query(
            pk=f"SHEET#{self.sheet_name}",
            sk_begins_with="ROW#",
            limit=limit,
            last_key=last_key,
        )
