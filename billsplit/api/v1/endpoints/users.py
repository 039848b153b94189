import logging
from typing import List

from fastapi import APIRouter, HTTPException, Depends, status
from pymongo.errors import DuplicateKeyError

from billsplit.api.deps import check_object_id
from billsplit.db.mongo import get_db
from billsplit.repositories.user_repo import UserRepository
from billsplit.schemas.user import UserCreate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

DUPLICATE_PHONE = "Phone number already exists"


@router.get("", response_model=List[UserResponse])
async def list_users(db = Depends(get_db)):
    """List users, newest first"""
    users = await UserRepository(db).list_users()
    return [UserResponse.from_user(user) for user in users]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(user_in: UserCreate, db = Depends(get_db)):
    """Create a user with a unique phone number"""
    if not (user_in.name or "").strip() or not (user_in.phone or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name and phone number are required"
        )

    try:
        user = await UserRepository(db).create_user(user_in)
    except DuplicateKeyError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_PHONE)

    logger.info("Created user %s", user.id)
    return UserResponse.from_user(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, db = Depends(get_db)):
    """Get user by ID"""
    check_object_id(user_id)

    user = await UserRepository(db).get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.from_user(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, user_update: UserUpdate, db = Depends(get_db)):
    """Update name and/or phone; fields left out or empty keep their value"""
    check_object_id(user_id)
    user_repo = UserRepository(db)

    update_data = {}
    if user_update.name and user_update.name.strip():
        update_data["name"] = user_update.name.strip()
    if user_update.phone and user_update.phone.strip():
        update_data["phone"] = user_update.phone.strip()

    if not update_data:
        user = await user_repo.get_user_by_id(user_id)
    else:
        try:
            user = await user_repo.update_user(user_id, update_data)
        except DuplicateKeyError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_PHONE)

    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.from_user(user)


@router.delete("/{user_id}")
async def delete_user(user_id: str, db = Depends(get_db)):
    """Delete a user; bills that reference the user keep showing them"""
    check_object_id(user_id)

    deleted = await UserRepository(db).soft_delete_user(user_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    logger.info("Deleted user %s", user_id)
    return {"message": "User deleted successfully"}
