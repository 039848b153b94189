from typing import List

from fastapi import APIRouter, HTTPException, Response, status

from billsplit.api.deps import check_object_id
from billsplit.schemas.bill import BillIn, BillResponse, BillSummaryResponse
from billsplit.schemas.settlement import SettlementResponse, SettlementStatusUpdate
from billsplit.services.bill_service import BillService
from billsplit.services.settlement_service import SettlementService
from billsplit.utils.bill_validation import BillValidationError

router = APIRouter()


@router.get("", response_model=List[BillSummaryResponse])
async def list_bills():
    """List bills with total, outstanding and paid amounts"""
    return await BillService.list_all()


@router.post("", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
async def create_bill(bill_in: BillIn):
    """Create a bill; settlements are derived from its items"""
    try:
        return await BillService.create(bill_in)
    except BillValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/{bill_id}", response_model=BillResponse)
async def get_bill(bill_id: str):
    """Get a bill by ID"""
    check_object_id(bill_id)

    bill = await BillService.get(bill_id)
    if not bill:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return bill


@router.put("/{bill_id}", response_model=BillResponse)
async def update_bill(bill_id: str, bill_in: BillIn):
    """Replace a bill's fields and items; all settlements return to pending"""
    check_object_id(bill_id)

    try:
        bill = await BillService.update(bill_id, bill_in)
    except BillValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    if not bill:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return bill


@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_bill(bill_id: str):
    """Delete a bill with its items and settlements"""
    check_object_id(bill_id)

    deleted = await BillService.delete(bill_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{bill_id}/settlements", response_model=SettlementResponse)
async def update_settlement_status(bill_id: str, payload: SettlementStatusUpdate):
    """Mark one of the bill's settlements paid or pending"""
    check_object_id(bill_id)

    try:
        settlement = await SettlementService.set_status(bill_id, payload.settlement_id, payload.status)
    except BillValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    if not settlement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Settlement not found")
    return settlement
