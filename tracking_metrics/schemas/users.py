from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateUserRequest(BaseModel):
    name: Annotated[str, Field(
        min_length=1,
        max_length=60,
        description="Unique display name.",
        examples=["John_Doe_123"],
    )]

    @field_validator("name", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v: str) -> str:
        stripped = v.strip() if isinstance(v, str) else v
        if not stripped:
            raise ValueError("name must not be empty after stripping whitespace")
        return stripped


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DeleteUserResponse(BaseModel):
    name: str
    deleted_metrics: int = Field(description="Metrics soft-deleted along with the user.")
