#!/usr/bin/env python3
"""Manual check for a deployed diagnosis intake endpoint.

Drives the same form controller the landing page uses, so validation,
degraded mode and the acknowledgment setting behave as they do for users.

Usage:
    export DIAGNOSIS_ENDPOINT_URL="https://your-api-url.execute-api.us-east-1.amazonaws.com/dev/intake"

    # Health check only
    python scripts/submit_diagnosis.py --health

    # Submit a request and read the acknowledgment
    python scripts/submit_diagnosis.py --url example.com --email you@example.com --ack
"""

import argparse
import asyncio
import os
import sys

import httpx

from diagnosis.models.form import FormField, SubmissionStatus
from diagnosis.services.form_controller import DiagnosisFormController
from diagnosis.services.submission_client import AckMode


class Colors:
    """ANSI color codes for terminal output."""

    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    RESET = "\033[0m"


def print_success(msg: str) -> None:
    """Print success message in green."""
    print(f"{Colors.GREEN}[OK]{Colors.RESET} {msg}")


def print_error(msg: str) -> None:
    """Print error message in red."""
    print(f"{Colors.RED}[ERROR]{Colors.RESET} {msg}")


def print_info(msg: str) -> None:
    """Print info message in blue."""
    print(f"{Colors.BLUE}[INFO]{Colors.RESET} {msg}")


def print_warning(msg: str) -> None:
    """Print warning message in yellow."""
    print(f"{Colors.YELLOW}[WARN]{Colors.RESET} {msg}")


def check_health(endpoint_url: str) -> bool:
    """GET the endpoint and print its status message."""
    try:
        response = httpx.get(endpoint_url, timeout=10.0)
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        print_error(f"Health check failed: {e}")
        return False

    if response.is_success and data.get("status") == "ok":
        print_success(data.get("message", "ok"))
        return True

    print_error(f"Unexpected health response {response.status_code}: {data}")
    return False


async def submit(endpoint_url: str, url: str, email: str, acknowledged: bool) -> bool:
    """Fill in and submit the form once."""
    controller = DiagnosisFormController(
        endpoint_url=endpoint_url,
        ack_mode=AckMode.ACKNOWLEDGED if acknowledged else AckMode.FIRE_AND_FORGET,
    )
    if controller.degraded:
        print_warning("DIAGNOSIS_ENDPOINT_URL is not set, nothing will be sent")

    controller.set_url(url)
    controller.blur(FormField.URL)
    controller.set_email(email)
    controller.blur(FormField.EMAIL)

    for field in FormField:
        message = controller.visible_error(field)
        if message:
            print_error(f"{field.value}: {message}")

    state = await controller.submit()
    print_info(" -> ".join(status.value for status in controller.history))

    if state.status == SubmissionStatus.SUBMITTED:
        print_success(f"送付先：{controller.confirmation.email}")
        print_success(f"対象URL：{controller.confirmation.url}")
        return True

    if state.status == SubmissionStatus.FAILED:
        print_error(f"{state.error} ({state.detail})")
    return False


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Diagnosis intake check")
    parser.add_argument("--endpoint", default=os.environ.get("DIAGNOSIS_ENDPOINT_URL", ""))
    parser.add_argument("--url", default="example.com", help="Website URL to submit")
    parser.add_argument("--email", default="test@example.com", help="Email address to submit")
    parser.add_argument("--ack", action="store_true", help="Require a success acknowledgment")
    parser.add_argument("--health", action="store_true", help="Only run the health check")
    args = parser.parse_args()

    if args.health:
        if not args.endpoint:
            print_error("--endpoint or DIAGNOSIS_ENDPOINT_URL is required for --health")
            sys.exit(1)
        sys.exit(0 if check_health(args.endpoint) else 1)

    ok = asyncio.run(submit(args.endpoint, args.url, args.email, args.ack))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
