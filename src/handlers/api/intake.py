"""Diagnosis intake API handler (no authentication required)."""

import json
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from diagnosis.models.form import FormInput
from diagnosis.models.request import SubmitDiagnosisRequest
from diagnosis.repositories.sheet import SheetRepository
from diagnosis.services.form_controller import sample_report_url
from diagnosis.services.notification_service import NotificationService
from diagnosis.utils.exceptions import NotificationError, ValidationError
from diagnosis.utils.responses import envelope, error, no_content, redirect, success
from diagnosis.validation import validate_form

logger = structlog.get_logger()

HEALTH_MESSAGE = "AI集客診断 API is running"
ACCEPTED_MESSAGE = "登録完了"


def handler(event: dict[str, Any], context: Any) -> dict:
    """Handle diagnosis intake requests.

    Routes:
        POST    /  (or /intake)    - Append a diagnosis request to the sheet
        GET     /  (or /intake)    - Health check
        GET     /sample-report     - Redirect to the sample report PDF
        OPTIONS *                  - CORS preflight
    """
    http_method = event.get("httpMethod", "").upper()
    path = (event.get("path") or "/").rstrip("/") or "/"
    headers = event.get("headers", {}) or {}
    origin = headers.get("Origin") or headers.get("origin")

    try:
        if http_method == "OPTIONS":
            return no_content(request_origin=origin)
        elif http_method == "GET" and path.endswith("/sample-report"):
            return redirect(sample_report_url())
        elif http_method == "GET" and path in ("/", "/intake"):
            return success({"status": "ok", "message": HEALTH_MESSAGE}, request_origin=origin)
        elif http_method == "POST" and path in ("/", "/intake"):
            return submit_request(event, origin)
        else:
            return error("Not found", 404)

    except Exception as e:
        logger.exception("Intake handler error", error=str(e))
        return envelope(False, str(e), status_code=500, request_origin=origin)


def submit_request(event: dict, origin: str | None = None) -> dict:
    """Validate, store and announce one diagnosis request."""
    try:
        body = json.loads(event.get("body") or "{}")
        if not isinstance(body, dict):
            raise ValueError("Request body must be a JSON object")
        request = SubmitDiagnosisRequest.model_validate(body)
    except json.JSONDecodeError:
        return envelope(False, "Invalid JSON body", status_code=400, request_origin=origin)
    except PydanticValidationError as e:
        exc = ValidationError.from_pydantic(e)
        logger.info("Intake payload rejected", errors=exc.errors)
        return envelope(False, _summarize(exc.errors), status_code=400, request_origin=origin)
    except ValueError as e:
        return envelope(False, str(e), status_code=400, request_origin=origin)

    result = validate_form(FormInput(url=request.url, email=request.email))
    if result.has_errors:
        logger.info("Intake validation failed", errors=result.to_errors())
        return envelope(False, _summarize(result.to_errors()), status_code=400, request_origin=origin)

    repo = SheetRepository()
    row = repo.append_row(url=request.url, email=request.email)

    notifier = NotificationService()
    try:
        notifier.notify(row)
    except NotificationError as e:
        # The row is stored; a failed email must not reject the request
        logger.warning("Notification failed", request_id=row.id, error=e.message, code=e.code)

    logger.info(
        "Diagnosis request received",
        request_id=row.id,
        sheet_name=row.sheet_name,
        email=row.email,
        url=row.url,
    )

    return envelope(True, ACCEPTED_MESSAGE, request_origin=origin)


def _summarize(errors: list[dict]) -> str:
    """Join field errors into one envelope message."""
    return " / ".join(f"{err['field']}: {err['message']}" for err in errors) or "Validation failed"
