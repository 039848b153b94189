"""
SettlementRepository - obligations derived from bills.

Settlements are written only as a replaceable set per bill; the one
in-place change allowed afterwards is the status flip, which is matched
on both settlement and bill so a foreign bill id can never update it.
"""

from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from billsplit.models.base import utcnow
from billsplit.models.settlement import Settlement


class SettlementRepository:
    """Repository for settlements."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.settlements

    async def insert_settlements(self, settlements: List[Settlement], session=None) -> List[Settlement]:
        if not settlements:
            return []
        await self.collection.insert_many(
            [settlement.to_document() for settlement in settlements],
            session=session
        )
        return settlements

    async def delete_for_bill(self, bill_id: ObjectId, session=None) -> int:
        result = await self.collection.delete_many({"bill_id": bill_id}, session=session)
        return result.deleted_count

    async def get_for_bills(self, bill_ids: Iterable[ObjectId]) -> List[Settlement]:
        ids = list(bill_ids)
        if not ids:
            return []
        docs = await self.collection.find({"bill_id": {"$in": ids}}).sort("_id", 1).to_list(None)
        return [Settlement(**doc) for doc in docs]

    async def get_settlement(self, settlement_id: ObjectId) -> Optional[Settlement]:
        doc = await self.collection.find_one({"_id": settlement_id})
        if doc:
            return Settlement(**doc)
        return None

    async def update_status_for_bill(
        self,
        settlement_id: ObjectId,
        bill_id: ObjectId,
        status: str
    ) -> Optional[Settlement]:
        """
        Set the status of a settlement that belongs to bill_id.

        Returns the updated settlement, or None when no settlement with that
        id belongs to the bill (nothing is written in that case).
        """
        result = await self.collection.find_one_and_update(
            {"_id": settlement_id, "bill_id": bill_id},
            {"$set": {"status": status, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return Settlement(**result)
        return None

    async def list_for_user(self, user_id: ObjectId) -> List[Settlement]:
        """Settlements where the user is either the debtor or the payer."""
        docs = await self.collection.find({
            "$or": [
                {"from_user_id": user_id},
                {"to_user_id": user_id}
            ]
        }).sort("_id", -1).to_list(None)
        return [Settlement(**doc) for doc in docs]

    async def sum_by_status(self, role_field: str, user_id: ObjectId) -> Dict[str, float]:
        """
        Sum settlement amounts per status for one side of the obligation.

        role_field is "from_user_id" (user owes) or "to_user_id" (user is owed).
        Returns e.g. {"pending": 30.0, "paid": 12.5}.
        """
        pipeline = [
            {"$match": {role_field: user_id}},
            {"$group": {"_id": "$status", "total": {"$sum": "$amount"}}}
        ]
        results = await self.collection.aggregate(pipeline).to_list(None)
        return {row["_id"]: row["total"] for row in results}
