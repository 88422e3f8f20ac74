"""Pytest configuration and fixtures."""

import json
import os

import pytest

# Set environment variables before imports
os.environ["TABLE_NAME"] = "diagnosis-test"
os.environ["STAGE"] = "test"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ.pop("DIAGNOSIS_ENDPOINT_URL", None)
os.environ.pop("DIAGNOSIS_ACK_MODE", None)
os.environ.pop("NOTIFY_EMAIL", None)
os.environ.pop("SES_FROM_EMAIL", None)
os.environ.pop("SHEET_NAME", None)


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def mocked_aws(aws_credentials):
    """Run the test inside moto's AWS mock."""
    from moto import mock_aws

    with mock_aws():
        yield


@pytest.fixture
def dynamodb_table(mocked_aws):
    """Create mocked DynamoDB table."""
    import boto3

    dynamodb = boto3.resource("dynamodb", region_name="us-east-1")

    table = dynamodb.create_table(
        TableName="diagnosis-test",
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )

    table.wait_until_exists()

    yield table


@pytest.fixture
def ses_client(mocked_aws):
    """Mocked SES client with a verified sender."""
    import boto3

    client = boto3.client("ses", region_name="us-east-1")
    client.verify_email_identity(EmailAddress="owner@example.com")
    return client


@pytest.fixture
def api_gateway_event():
    """Create a sample API Gateway event."""
    def _create_event(
        method: str = "POST",
        path: str = "/intake",
        body: dict | str | None = None,
        headers: dict | None = None,
    ):
        return {
            "httpMethod": method,
            "path": path,
            "pathParameters": {},
            "queryStringParameters": {},
            "body": body if isinstance(body, str) else (
                json.dumps(body) if body is not None else None
            ),
            "headers": headers or {"Content-Type": "application/json"},
            "requestContext": {
                "identity": {"sourceIp": "1.2.3.4"},
            },
        }

    return _create_event


class LambdaContext:
    """Mock Lambda context."""

    def __init__(self):
        self.function_name = "test-function"
        self.memory_limit_in_mb = 128
        self.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789:function:test"
        self.aws_request_id = "test-request-id"

    def get_remaining_time_in_millis(self):
        return 30000


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context."""
    return LambdaContext()
