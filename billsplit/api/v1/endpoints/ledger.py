from typing import List

from fastapi import APIRouter, HTTPException, status

from billsplit.api.deps import check_object_id
from billsplit.schemas.ledger import UserBalanceResponse, UserSettlementResponse
from billsplit.services.ledger_service import LedgerService

router = APIRouter()


@router.get("/balance/{user_id}", response_model=UserBalanceResponse)
async def get_balance(user_id: str):
    """Get what a user owes, is owed, has paid and has received"""
    check_object_id(user_id)

    balance = await LedgerService.get_user_balance(user_id)
    if not balance:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return balance


@router.get("/settlements/{user_id}", response_model=List[UserSettlementResponse])
async def get_user_settlements(user_id: str):
    """List settlements a user pays or receives, with their bills"""
    check_object_id(user_id)

    settlements = await LedgerService.list_user_settlements(user_id)
    if settlements is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return settlements
