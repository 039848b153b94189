from bson import ObjectId
from fastapi import HTTPException, status


def check_object_id(value: str) -> None:
    """Reject a path id that is not a valid ObjectId with 400."""
    if not ObjectId.is_valid(value):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid id")
