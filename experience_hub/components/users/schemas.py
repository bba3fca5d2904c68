from typing import Optional
from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

USERNAME_PATTERN = r"^[A-Za-z0-9_-]+$"


class UserUpdate(BaseModel):
    """Partial profile update"""

    username: Optional[str] = Field(
        None, min_length=3, max_length=30, pattern=USERNAME_PATTERN
    )
    email: Optional[EmailStr] = Field(None, max_length=255)
    bio: Optional[str] = Field(None, max_length=500)
    avatar_url: Optional[str] = Field(
        None,
        max_length=500,
        validation_alias=AliasChoices("avatar_url", "avatarUrl"),
    )

    @field_validator("username", "bio", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("avatar_url")
    @classmethod
    def validate_avatar_url(cls, value):
        if value is None:
            return None
        if not value.startswith(("https://", "http://")):
            raise ValueError("Invalid avatar URL")
        return value
