from datetime import datetime
from typing import Dict, Optional

from bson import ObjectId

from billsplit.models.settlement import Settlement, SettlementStatus
from billsplit.models.user import User
from billsplit.schemas.base import CamelModel
from billsplit.schemas.user import UserResponse


def populated_user(users: Dict[ObjectId, User], user_id: ObjectId) -> Optional[UserResponse]:
    """Resolve a referenced user, or None when it no longer exists."""
    user = users.get(user_id)
    return UserResponse.from_user(user) if user else None


class SettlementStatusUpdate(CamelModel):
    """Request body to mark a settlement paid or pending."""
    settlement_id: Optional[str] = None
    status: Optional[str] = None


class SettlementResponse(CamelModel):
    id: str
    bill_id: str
    from_user_id: str
    to_user_id: str
    amount: float
    status: SettlementStatus
    from_user: Optional[UserResponse] = None
    to_user: Optional[UserResponse] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_settlement(cls, settlement: Settlement, users: Dict[ObjectId, User], **extra):
        return cls(
            id=str(settlement.id),
            bill_id=str(settlement.bill_id),
            from_user_id=str(settlement.from_user_id),
            to_user_id=str(settlement.to_user_id),
            amount=settlement.amount,
            status=settlement.status,
            from_user=populated_user(users, settlement.from_user_id),
            to_user=populated_user(users, settlement.to_user_id),
            created_at=settlement.created_at,
            updated_at=settlement.updated_at,
            **extra
        )
