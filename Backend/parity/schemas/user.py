from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

class UserBase(BaseModel):
    email: EmailStr

class RegisterUserRequest(UserBase):
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("Password must be at least 8 characters long")
        if len(value.encode()) > 72:
            raise ValueError("Password must be at most 72 bytes long")
        if not any(c.isupper() for c in value):
            raise ValueError("Password must contain at least one uppercase letter")
        if not any(c.isdigit() for c in value):
            raise ValueError("Password must contain at least one digit")
        return value


class UserResponse(UserBase):
    id: UUID
    email_is_verified: bool
    email_verified: datetime | None = None
    created_at: datetime

    model_config= ConfigDict(from_attributes=True)
