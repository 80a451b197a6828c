"""
API models and schemas for the Bookshelf API.
"""

import math
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


# Keys that are managed by the store and never accepted from a client payload
RESERVED_KEYS = ("id", "_id")

# BSON stores integers as signed 64-bit values
MIN_INT64 = -2 ** 63
MAX_INT64 = 2 ** 63 - 1


def generate_book_id() -> str:
    """
    Generate a new book identifier.

    A random UUID4 with its five groups concatenated, i.e. 32 lowercase
    hexadecimal characters and no separators.
    """
    return uuid.uuid4().hex


class BookIn(BaseModel):
    """
    Book payload accepted on create and edit.

    Besides the declared fields any top-level field is accepted, provided
    its value is a scalar.
    """
    title: str = Field("", description="Book title")
    author: str = Field("", description="Book author")

    model_config = {
        "extra": "allow",
        "json_schema_extra": {
            "example": {
                "title": "A Light in the Attic",
                "author": "Shel Silverstein",
                "year": 1981
            }
        }
    }

    @model_validator(mode="before")
    @classmethod
    def validate_scalar_fields(cls, data: Any) -> Any:
        """Reject non-object payloads, values the store cannot hold and reserved keys."""
        if not isinstance(data, dict):
            raise ValueError("Book payload must be a JSON object")

        cleaned = {}
        for key, value in data.items():
            if key in RESERVED_KEYS and key not in cls.model_fields:
                continue
            if key.startswith("$"):
                raise ValueError(f"Field name '{key}' must not start with '$'")
            if value is not None and not isinstance(value, (str, int, float, bool)):
                raise ValueError(f"Field '{key}' must be a scalar value")
            if isinstance(value, float) and not math.isfinite(value):
                raise ValueError(f"Field '{key}' must be a finite number")
            if isinstance(value, int) and not isinstance(value, bool):
                if not MIN_INT64 <= value <= MAX_INT64:
                    raise ValueError(f"Field '{key}' is outside the 64-bit integer range")
            cleaned[key] = value
        return cleaned


class Book(BookIn):
    """A stored book record."""
    id: str = Field(..., description="Unique book identifier")

    def to_document(self) -> Dict[str, Any]:
        """Render the record as a store document keyed by its identifier."""
        document = self.model_dump()
        document["_id"] = document.pop("id")
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Book":
        """Build a record from a store document."""
        data = dict(document)
        data["id"] = str(data.pop("_id"))
        return cls(**data)


class MessageResponse(BaseModel):
    """Plain success message."""
    message: str = Field(..., description="Outcome of the operation")


class CreateBookResponse(MessageResponse):
    """Success message for a created book."""
    id: str = Field(..., description="Identifier assigned to the new book")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
