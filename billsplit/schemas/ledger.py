from datetime import datetime
from typing import Optional

from billsplit.schemas.base import CamelModel
from billsplit.schemas.settlement import SettlementResponse


class UserBalanceResponse(CamelModel):
    """A user's position across every bill they take part in."""
    user_id: str
    owes: float = 0.0        # pending, user is the debtor
    is_owed: float = 0.0     # pending, user is the payer
    paid_out: float = 0.0    # paid, user was the debtor
    received: float = 0.0    # paid, user was the payer
    net: float = 0.0         # is_owed - owes


class BillRef(CamelModel):
    id: str
    title: str
    date: datetime


class UserSettlementResponse(SettlementResponse):
    """Settlement listed from one user's point of view, with its bill."""
    bill: Optional[BillRef] = None
