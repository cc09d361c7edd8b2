"""
Standard operating procedures: stored document and input schemas.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from kushl.tasks.models import StoredModel


class StandardOperatingProcedure(StoredModel):
    """Written procedure students follow for one task category."""

    id: str
    category: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    created_by: str
    creator_name: str


class SopCreate(BaseModel):
    category: str = Field(..., min_length=1, max_length=255)
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    created_by: str = Field(..., min_length=1)
    creator_name: str = Field(..., min_length=1)


class SopUpdate(BaseModel):
    """Partial update; fields left unset keep their stored value."""

    category: str | None = Field(default=None, min_length=1, max_length=255)
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)

    @field_validator("category", "title", "content")
    @classmethod
    def reject_null(cls, value: str | None) -> str | None:
        if value is None:
            raise ValueError("field may be omitted but not set to null")
        return value
