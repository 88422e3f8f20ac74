"""DynamoDB repositories for data access."""

from diagnosis.repositories.base import BaseRepository
from diagnosis.repositories.sheet import SheetHeaderRepository, SheetRepository

__all__ = [
    "BaseRepository",
    "SheetHeaderRepository",
    "SheetRepository",
]
