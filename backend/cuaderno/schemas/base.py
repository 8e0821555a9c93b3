"""
Building blocks shared by every request/response schema.
"""

from datetime import datetime
from typing import ClassVar, Tuple
from pydantic import BaseModel, Field, ConfigDict, model_validator

class BaseSchema(BaseModel):
    """
    - extra fields are ignored
    - surrounding whitespace is stripped from strings
    - assignments are validated
    - instances can be built straight from ORM rows
    """

    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
        validate_assignment=True,
        from_attributes=True,
    )

class TimestampSchema(BaseSchema):
    created_at: datetime = Field(..., description="When the row was created")
    updated_at: datetime = Field(..., description="When the row was last updated")

class IDSchema(BaseSchema):
    id: int = Field(..., description="Row id")

class BaseResponseSchema(TimestampSchema, IDSchema):
    """id + timestamps; the shape every stored row is returned with."""
    pass

class OwnedResponseSchema(BaseResponseSchema):
    """A row that belongs to one user (programs, subjects, materials, plan data)."""
    user_id: int

class UpdateSchema(BaseSchema):
    """
    Partial update: omitted fields are left alone. Fields listed in not_null
    back NOT NULL columns, so an explicit null for them is a validation error.
    """
    not_null: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_nulls(self):
        nulled = [f for f in self.not_null if f in self.model_fields_set and getattr(self, f) is None]
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self
