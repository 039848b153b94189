"""Bill validation and totals utilities."""
import math
from typing import Iterable, List, Optional, Tuple

from billsplit.models.base import parse_object_id
from billsplit.models.settlement import SettlementStatus
from billsplit.schemas.bill import BillIn, BillItemIn


class BillValidationError(Exception):
    """Custom exception for bill and settlement validation errors."""
    pass


STATUS_VALUES = {status.value for status in SettlementStatus}


def validate_bill(bill_in: BillIn) -> None:
    """
    Validate a bill create/update request before anything is written.

    Rules:
    - title, date and payerId are present, and there is at least one item
    - payerId is a well-formed id
    - every item passes validate_items
    """
    title = (bill_in.title or "").strip()
    if not title or not bill_in.date or not bill_in.payer_id or not bill_in.items:
        raise BillValidationError(
            "title, date, payerId, and at least one item are required"
        )

    if parse_object_id(bill_in.payer_id) is None:
        raise BillValidationError(f"Invalid payerId: {bill_in.payer_id}")

    validate_items(bill_in.items)


def validate_items(items: List[BillItemIn]) -> None:
    """
    Validate bill items.

    Rules:
    - amount is a finite, non-negative number (zero is allowed and ignored
      when settlements are derived)
    - assignedUserId is a well-formed id
    """
    for index, item in enumerate(items, start=1):
        if item.amount is None or not math.isfinite(item.amount):
            raise BillValidationError(f"Item {index} has an invalid amount")

        if item.amount < 0:
            raise BillValidationError(
                f"Item {index} has negative amount: {item.amount}"
            )

        if parse_object_id(item.assigned_user_id) is None:
            raise BillValidationError(
                f"Item {index} has an invalid assignedUserId: {item.assigned_user_id}"
            )


def validate_status_update(settlement_id: Optional[str], status: Optional[str]) -> None:
    """Validate a settlement status change: an id and a known status."""
    if not settlement_id or status not in STATUS_VALUES:
        raise BillValidationError("settlementId and valid status are required")

    if parse_object_id(settlement_id) is None:
        raise BillValidationError(f"Invalid settlementId: {settlement_id}")


def calculate_bill_totals(items: Iterable, settlements: Iterable) -> Tuple[float, float, float]:
    """
    Compute (total, outstanding, paid) for a bill.

    total is the sum of item amounts; outstanding and paid are the sums of
    pending and paid settlement amounts.
    """
    total = sum(item.amount or 0.0 for item in items)
    outstanding = 0.0
    paid = 0.0
    for settlement in settlements:
        if settlement.status == SettlementStatus.PENDING:
            outstanding += settlement.amount or 0.0
        elif settlement.status == SettlementStatus.PAID:
            paid += settlement.amount or 0.0
    return float(total), outstanding, paid
