"""
BillRepository - bills and their items.

Items are stored one document per item in `bill_items` so an edit can
replace them with delete_many + insert_many inside the caller's
transaction. Every write takes an optional session for that purpose.
"""

from typing import Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from billsplit.models.base import utcnow
from billsplit.models.bill import Bill, BillItem


class BillRepository:
    """Repository for bills and bill items."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.bills
        self.items = db.bill_items

    async def insert_bill(self, bill: Bill, session=None) -> Bill:
        await self.collection.insert_one(bill.to_document(), session=session)
        return bill

    async def get_bill(self, bill_id: ObjectId, session=None) -> Optional[Bill]:
        doc = await self.collection.find_one({"_id": bill_id}, session=session)
        if doc:
            return Bill(**doc)
        return None

    async def list_bills(self) -> List[Bill]:
        """All bills, most recent date first."""
        docs = await self.collection.find({}).sort("date", -1).to_list(None)
        return [Bill(**doc) for doc in docs]

    async def get_bills_by_ids(self, bill_ids: Iterable[ObjectId]) -> List[Bill]:
        ids = list(set(bill_ids))
        if not ids:
            return []
        docs = await self.collection.find({"_id": {"$in": ids}}).to_list(None)
        return [Bill(**doc) for doc in docs]

    async def update_bill(self, bill_id: ObjectId, update_data: dict, session=None) -> bool:
        """Set scalar fields on a bill. Returns False if the bill is gone."""
        update_data["updated_at"] = utcnow()
        result = await self.collection.update_one(
            {"_id": bill_id},
            {"$set": update_data},
            session=session
        )
        return result.matched_count > 0

    async def delete_bill(self, bill_id: ObjectId, session=None) -> bool:
        result = await self.collection.delete_one({"_id": bill_id}, session=session)
        return result.deleted_count > 0

    # ===== ITEMS =====

    async def insert_items(self, items: List[BillItem], session=None) -> List[BillItem]:
        if not items:
            return []
        await self.items.insert_many([item.to_document() for item in items], session=session)
        return items

    async def delete_items(self, bill_id: ObjectId, session=None) -> int:
        result = await self.items.delete_many({"bill_id": bill_id}, session=session)
        return result.deleted_count

    async def get_items_for_bills(self, bill_ids: Iterable[ObjectId]) -> List[BillItem]:
        """Items of the given bills in insertion order."""
        ids = list(bill_ids)
        if not ids:
            return []
        docs = await self.items.find({"bill_id": {"$in": ids}}).sort("_id", 1).to_list(None)
        return [BillItem(**doc) for doc in docs]
