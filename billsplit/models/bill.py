"""
Bill models.

A bill lives in the `bills` collection; its items live in `bill_items`,
one document per item, keyed by bill_id. Items are replaced as a whole
whenever the bill is edited.
"""

from datetime import datetime

from billsplit.models.base import MongoModel, PyObjectId


class Bill(MongoModel):
    title: str
    date: datetime
    payer_id: PyObjectId


class BillItem(MongoModel):
    bill_id: PyObjectId
    description: str = ""
    amount: float  # non-negative
    assigned_user_id: PyObjectId
