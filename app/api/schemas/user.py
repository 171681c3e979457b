"""
Pydantic schemas for User API operations.

These schemas define the request/response structure for the user endpoints.
Documents are read straight from the store, so response schemas accept the
store's field names (``_id``, ``createdAt``) and expose ``id`` to callers.
"""

from datetime import datetime
from typing import Any

from bson import ObjectId
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserBase(BaseModel):
    """Base schema with fields common to all User operations."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name of the user",
        examples=["Ada Lovelace"],
    )
    email: str = Field(
        ...,
        max_length=254,
        pattern=EMAIL_PATTERN,
        description="Contact e-mail address",
        examples=["ada@example.com"],
    )
    age: int | None = Field(
        default=None,
        ge=0,
        le=150,
        description="Age in whole years",
        examples=[36],
    )
    phone: str | None = Field(
        default=None,
        max_length=32,
        description="Contact phone number",
        examples=["+44 20 7946 0000"],
    )

    @field_validator("name")
    @classmethod
    def validate_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserCreate(UserBase):
    """Schema for creating a new User."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Ada Lovelace",
                    "email": "ada@example.com",
                    "age": 36,
                    "phone": "+44 20 7946 0000",
                }
            ]
        }
    }


class UserUpdate(BaseModel):
    """
    Schema for updating an existing User.

    All fields are optional to support partial updates. Only fields present
    in the request body are applied; ``name`` and ``email`` cannot be
    cleared.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, max_length=254, pattern=EMAIL_PATTERN)
    age: int | None = Field(default=None, ge=0, le=150)
    phone: str | None = Field(default=None, max_length=32)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if v is not None else v

    @model_validator(mode="after")
    def validate_required_fields_not_cleared(self) -> "UserUpdate":
        for name in ("name", "email"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be set to null")
        return self

    def changes(self) -> dict[str, Any]:
        """Field values that were explicitly provided."""
        return self.model_dump(exclude_unset=True)


class UserResponse(UserBase):
    """Schema for User responses."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(
        ...,
        validation_alias=AliasChoices("_id", "id"),
        description="Hex ObjectId of the user",
        examples=["665f1c2ab3e4a1d2c3b4a5f6"],
    )
    # Stored documents may predate the current validation rules
    email: str = Field(..., description="Contact e-mail address")
    created_at: datetime | None = Field(
        default=None,
        alias="createdAt",
        description="Timestamp when the user was created",
    )
    updated_at: datetime | None = Field(
        default=None,
        alias="updatedAt",
        description="Timestamp when the user was last updated",
    )

    @field_validator("id", mode="before")
    @classmethod
    def stringify_object_id(cls, v: Any) -> Any:
        if isinstance(v, ObjectId):
            return str(v)
        return v
