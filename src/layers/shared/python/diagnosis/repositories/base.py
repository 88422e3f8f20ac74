"""Base repository class for DynamoDB operations."""

import os
from typing import Any, Generic, TypeVar

import boto3
import structlog
from botocore.exceptions import ClientError

from diagnosis.models.base import BaseModel
from diagnosis.utils.exceptions import ConflictError

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Base repository for DynamoDB single-table design."""

    def __init__(
        self,
        model_class: type[T],
        table_name: str | None = None,
    ):
        """Initialize repository.

        Args:
            model_class: The Pydantic model class for this repository.
            table_name: DynamoDB table name. Defaults to TABLE_NAME env var.
        """
        self.model_class = model_class
        self.table_name = table_name or os.environ.get("TABLE_NAME", "diagnosis-dev")
        self._dynamodb = None
        self._table = None

    @property
    def dynamodb(self):
        """Get DynamoDB resource (lazy initialization)."""
        if self._dynamodb is None:
            self._dynamodb = boto3.resource("dynamodb")
        return self._dynamodb

    @property
    def table(self):
        """Get DynamoDB table (lazy initialization)."""
        if self._table is None:
            self._table = self.dynamodb.Table(self.table_name)
        return self._table

    def _build_key(self, pk: str, sk: str) -> dict[str, str]:
        """Build key dictionary for DynamoDB operations."""
        return {"PK": pk, "SK": sk}

    def get(self, pk: str, sk: str) -> T | None:
        """Get an item by its primary key.

        Args:
            pk: Partition key value.
            sk: Sort key value.

        Returns:
            Model instance or None if not found.
        """
        try:
            response = self.table.get_item(Key=self._build_key(pk, sk))
            item = response.get("Item")

            if not item:
                return None

            return self.model_class.from_dynamodb(item)

        except ClientError as e:
            logger.error("DynamoDB get_item failed", error=str(e), pk=pk, sk=sk)
            raise

    def put(self, item: T, condition_expression: str | None = None) -> T:
        """Put an item into DynamoDB.

        Args:
            item: Model instance to save.
            condition_expression: Optional condition expression.

        Returns:
            The saved model instance.

        Raises:
            ConflictError: If the condition expression fails.
        """
        try:
            db_item = item.to_dynamodb()
            db_item.update(item.get_keys())

            kwargs: dict[str, Any] = {"Item": db_item}
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression

            self.table.put_item(**kwargs)

            logger.debug(
                "Item saved",
                pk=db_item["PK"],
                sk=db_item["SK"],
                model=self.model_class.__name__,
            )

            return item

        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise ConflictError("Item already exists", conflict_type="exists")
            logger.error("DynamoDB put_item failed", error=str(e))
            raise

    def create(self, item: T) -> T:
        """Create a new item (fails if exists).

        Raises:
            ConflictError: If item already exists.
        """
        return self.put(item, condition_expression="attribute_not_exists(PK)")

    def query(
        self,
        pk: str,
        sk_begins_with: str,
        limit: int | None = None,
        last_key: dict | None = None,
    ) -> tuple[list[T], dict | None]:
        """Query items by partition key and sort key prefix.

        Args:
            pk: Partition key value.
            sk_begins_with: Sort key prefix for begins_with condition.
            limit: Maximum items to return.
            last_key: Last evaluated key for pagination.

        Returns:
            Tuple of (items, last_evaluated_key).
        """
        try:
            kwargs: dict[str, Any] = {
                "KeyConditionExpression": "PK = :pk AND begins_with(SK, :sk_prefix)",
                "ExpressionAttributeValues": {":pk": pk, ":sk_prefix": sk_begins_with},
            }

            if limit:
                kwargs["Limit"] = limit
            if last_key:
                kwargs["ExclusiveStartKey"] = last_key

            response = self.table.query(**kwargs)

            items = [self.model_class.from_dynamodb(item) for item in response.get("Items", [])]
            last_evaluated_key = response.get("LastEvaluatedKey")

            return items, last_evaluated_key

        except ClientError as e:
            logger.error("DynamoDB query failed", error=str(e), pk=pk)
            raise
