"""Pydantic schemas."""

from app.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    Token,
    UserResponse,
)
from app.schemas.common import (
    DataResponse,
    ListResponse,
    MessageResponse,
    PageMeta,
)

__all__ = [
    # Auth
    "LoginRequest",
    "RefreshRequest",
    "Token",
    "UserResponse",
    # Envelopes
    "DataResponse",
    "ListResponse",
    "MessageResponse",
    "PageMeta",
]
