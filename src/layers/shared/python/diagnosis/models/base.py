"""Base Pydantic models with DynamoDB serialization."""

from datetime import datetime, timezone
from typing import Any, Self

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field
from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


class BaseModel(PydanticBaseModel):
    """Base model for stored items.

    Stored entities inherit from this class and provide their key pattern.
    """

    model_config = ConfigDict(
        use_enum_values=True,
        validate_assignment=True,
    )

    id: str = Field(default_factory=generate_ulid)
    created_at: datetime = Field(default_factory=utc_now)

    def to_dynamodb(self) -> dict[str, Any]:
        """Serialize model to DynamoDB item format (datetimes become ISO strings)."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dynamodb(cls, item: dict[str, Any]) -> Self:
        """Deserialize DynamoDB item to model instance.

        Key attributes (PK, SK) are ignored by validation.
        """
        return cls.model_validate(item)

    def get_pk(self) -> str:
        """Get the partition key for this entity."""
        raise NotImplementedError("Subclasses must implement get_pk()")

    def get_sk(self) -> str:
        """Get the sort key for this entity."""
        raise NotImplementedError("Subclasses must implement get_sk()")

    def get_keys(self) -> dict[str, str]:
        """Get both PK and SK as a dictionary."""
        return {"PK": self.get_pk(), "SK": self.get_sk()}
