from datetime import datetime
from typing import Optional

from billsplit.models.user import User
from billsplit.schemas.base import CamelModel


class UserCreate(CamelModel):
    """User creation schema. Both fields are checked for blanks by the route."""
    name: Optional[str] = None
    phone: Optional[str] = None


class UserUpdate(CamelModel):
    """Partial update; empty or missing fields are left unchanged."""
    name: Optional[str] = None
    phone: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    name: str
    phone: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            name=user.name,
            phone=user.phone,
            created_at=user.created_at,
            updated_at=user.updated_at
        )
