"""Authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.validators import PhoneNumber


class Token(BaseModel):
    """JWT token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    """Refresh token request."""

    refresh_token: str


class LoginRequest(BaseModel):
    """Login request schema."""

    phone_number: PhoneNumber
    password: str = Field(..., min_length=6)


class UserResponse(BaseModel):
    """Signed-in user."""

    id: int
    phone_number: str
    first_name: str
    last_name: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
