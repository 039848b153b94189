from datetime import datetime
from typing import Dict, List, Optional

from bson import ObjectId

from billsplit.models.bill import Bill, BillItem
from billsplit.models.settlement import Settlement
from billsplit.models.user import User
from billsplit.schemas.base import CamelModel
from billsplit.schemas.settlement import SettlementResponse, populated_user
from billsplit.schemas.user import UserResponse


class BillItemIn(CamelModel):
    description: Optional[str] = ""
    amount: Optional[float] = None
    assigned_user_id: Optional[str] = None


class BillIn(CamelModel):
    """
    Body of both create and update. Presence and id checks are done by
    validate_bill so every caller gets the same messages.
    """
    title: Optional[str] = None
    date: Optional[datetime] = None
    payer_id: Optional[str] = None
    items: Optional[List[BillItemIn]] = None


class BillItemResponse(CamelModel):
    id: str
    bill_id: str
    description: str
    amount: float
    assigned_user_id: str
    assigned_user: Optional[UserResponse] = None

    @classmethod
    def from_item(cls, item: BillItem, users: Dict[ObjectId, User]) -> "BillItemResponse":
        return cls(
            id=str(item.id),
            bill_id=str(item.bill_id),
            description=item.description,
            amount=item.amount,
            assigned_user_id=str(item.assigned_user_id),
            assigned_user=populated_user(users, item.assigned_user_id)
        )


class BillResponse(CamelModel):
    id: str
    title: str
    date: datetime
    payer_id: str
    payer: Optional[UserResponse] = None
    items: List[BillItemResponse] = []
    settlements: List[SettlementResponse] = []
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_bill(
        cls,
        bill: Bill,
        items: List[BillItem],
        settlements: List[Settlement],
        users: Dict[ObjectId, User],
        **extra
    ):
        return cls(
            id=str(bill.id),
            title=bill.title,
            date=bill.date,
            payer_id=str(bill.payer_id),
            payer=populated_user(users, bill.payer_id),
            items=[BillItemResponse.from_item(item, users) for item in items],
            settlements=[SettlementResponse.from_settlement(s, users) for s in settlements],
            created_at=bill.created_at,
            updated_at=bill.updated_at,
            **extra
        )


class BillSummaryResponse(BillResponse):
    """Bill as listed, with totals computed at read time."""
    total: float = 0.0
    outstanding: float = 0.0
    paid: float = 0.0
