from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.base import CamelModel


class UserUpsert(CamelModel):
    email: Optional[str] = Field(None, max_length=255)
    name: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=10)


class UserUpdate(CamelModel):
    name: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=10)


class UserResponse(CamelModel):
    id: int
    email: str
    name: Optional[str] = None
    country: Optional[str] = None
    created_at: datetime
    updated_at: datetime
