"""
Settlement model - what a bill participant owes the bill's payer.

Invariants:
- Derived from the bill's items, never authored directly
- One settlement per (bill, non-payer assignee) with a non-zero total
- to_user_id is always the bill's payer, never equal to from_user_id
- Status: pending -> paid (and back); reset to pending when the bill is edited
"""

from enum import Enum

from pydantic import ConfigDict, Field

from billsplit.models.base import MongoModel, PyObjectId


class SettlementStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class Settlement(MongoModel):
    bill_id: PyObjectId
    from_user_id: PyObjectId
    to_user_id: PyObjectId
    amount: float
    status: SettlementStatus = Field(default=SettlementStatus.PENDING, validate_default=True)

    # Stored as the plain string value
    model_config = ConfigDict(use_enum_values=True)
