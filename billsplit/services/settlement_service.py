import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional

from billsplit.db.session import get_database
from billsplit.models.base import parse_object_id
from billsplit.models.settlement import SettlementStatus
from billsplit.repositories.settlement_repo import SettlementRepository
from billsplit.repositories.user_repo import UserRepository
from billsplit.schemas.settlement import SettlementResponse
from billsplit.utils.bill_validation import BillValidationError, validate_status_update

logger = logging.getLogger(__name__)


def _item_field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def derive_settlements(items: Iterable[Any], payer_id: Any) -> List[Dict[str, Any]]:
    """
    Derive what each assignee owes the payer of a bill.

    1. Sum item amounts per assigned user, skipping items without an
       assignee or with a zero/missing amount
    2. Emit one pending settlement per user other than the payer, in the
       order users were first seen

    Items may be mappings or objects with `assigned_user_id` and `amount`.
    A user whose items add up to zero gets no row at all.
    """
    totals: Dict[Any, float] = {}
    for item in items:
        user_id = _item_field(item, "assigned_user_id")
        amount = _item_field(item, "amount")
        if not user_id or not amount:
            continue
        totals[user_id] = totals.get(user_id, 0.0) + amount

    return [
        {
            "from_user_id": user_id,
            "to_user_id": payer_id,
            "amount": total,
            "status": SettlementStatus.PENDING.value,
        }
        for user_id, total in totals.items()
        if user_id != payer_id and total
    ]


class SettlementService:
    @staticmethod
    async def set_status(
        bill_id: str,
        settlement_id: Optional[str],
        status: Optional[str]
    ) -> Optional[SettlementResponse]:
        """
        Mark a settlement of a bill paid or pending.

        The bill match is part of the update filter, so a settlement of
        another bill is rejected without being touched. Returns None when the
        settlement does not exist.
        """
        validate_status_update(settlement_id, status)

        bill_oid = parse_object_id(bill_id)
        if bill_oid is None:
            raise BillValidationError("Invalid bill id")
        settlement_oid = parse_object_id(settlement_id)

        db = await get_database()
        settlement_repo = SettlementRepository(db)

        settlement = await settlement_repo.update_status_for_bill(settlement_oid, bill_oid, status)
        if settlement is None:
            existing = await settlement_repo.get_settlement(settlement_oid)
            if existing is None:
                return None
            raise BillValidationError("Settlement does not belong to bill")

        logger.info("Settlement %s of bill %s marked %s", settlement_id, bill_id, status)

        users = await UserRepository(db).get_users_by_ids(
            [settlement.from_user_id, settlement.to_user_id]
        )
        return SettlementResponse.from_settlement(settlement, users)
