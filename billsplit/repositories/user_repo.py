from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from billsplit.models.base import parse_object_id, utcnow
from billsplit.models.user import User
from billsplit.schemas.user import UserCreate

class UserRepository:
    """User database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["users"]

    async def create_user(self, user_data: UserCreate) -> User:
        """
        Create a new user.

        Raises pymongo.errors.DuplicateKeyError when the phone is taken.
        """
        user = User(name=user_data.name.strip(), phone=user_data.phone.strip())
        await self.collection.insert_one(user.to_document())
        return user

    async def list_users(self) -> List[User]:
        """List live users, newest first."""
        docs = await self.collection.find({"is_deleted": False}).sort("created_at", -1).to_list(None)
        return [User(**doc) for doc in docs]

    async def get_user_by_id(self, user_id) -> Optional[User]:
        """Get a live user by ID."""
        oid = parse_object_id(user_id)
        if oid is None:
            return None

        doc = await self.collection.find_one({"_id": oid, "is_deleted": False})
        if doc:
            return User(**doc)
        return None

    async def get_users_by_ids(self, user_ids: Iterable[ObjectId]) -> Dict[ObjectId, User]:
        """
        Resolve referenced users in one query.

        Soft-deleted users are included: bills keep pointing at them.
        """
        ids = list(set(user_ids))
        if not ids:
            return {}

        docs = await self.collection.find({"_id": {"$in": ids}}).to_list(None)
        users = [User(**doc) for doc in docs]
        return {user.id: user for user in users}

    async def update_user(self, user_id, update_data: dict) -> Optional[User]:
        """
        Update a live user.

        Raises pymongo.errors.DuplicateKeyError when the new phone is taken.
        """
        oid = parse_object_id(user_id)
        if oid is None:
            return None

        update_data["updated_at"] = utcnow()
        result = await self.collection.find_one_and_update(
            {"_id": oid, "is_deleted": False},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return User(**result)
        return None

    async def soft_delete_user(self, user_id) -> bool:
        """Soft delete user."""
        oid = parse_object_id(user_id)
        if oid is None:
            return False

        result = await self.collection.update_one(
            {"_id": oid, "is_deleted": False},
            {"$set": {
                "is_deleted": True,
                "updated_at": utcnow()
            }}
        )
        return result.modified_count > 0
