import logging
from typing import Dict, List, Optional

from bson import ObjectId

from billsplit.db.session import get_database
from billsplit.models.base import parse_object_id
from billsplit.models.bill import Bill, BillItem
from billsplit.models.settlement import Settlement
from billsplit.repositories.bill_repo import BillRepository
from billsplit.repositories.settlement_repo import SettlementRepository
from billsplit.repositories.user_repo import UserRepository
from billsplit.schemas.bill import BillIn, BillResponse, BillSummaryResponse
from billsplit.services.settlement_service import derive_settlements
from billsplit.utils.bill_validation import (
    BillValidationError,
    calculate_bill_totals,
    validate_bill,
)

logger = logging.getLogger(__name__)


class BillNotFoundError(Exception):
    """The bill disappeared while its transaction was running."""
    pass


def _build_items(bill_id: ObjectId, bill_in: BillIn) -> List[BillItem]:
    return [
        BillItem(
            bill_id=bill_id,
            description=item.description or "",
            amount=item.amount,
            assigned_user_id=item.assigned_user_id,
        )
        for item in bill_in.items
    ]


def _build_settlements(bill_id: ObjectId, payer_id: ObjectId, items: List[BillItem]) -> List[Settlement]:
    return [
        Settlement(bill_id=bill_id, **intent)
        for intent in derive_settlements(items, payer_id)
    ]


async def _ensure_users_exist(db, bill_in: BillIn) -> None:
    """Reject payer/assignee ids that do not resolve to a live user."""
    wanted = {ObjectId(bill_in.payer_id)}
    wanted.update(ObjectId(item.assigned_user_id) for item in bill_in.items)

    users = await UserRepository(db).get_users_by_ids(wanted)
    missing = sorted(
        str(user_id) for user_id in wanted
        if user_id not in users or users[user_id].is_deleted
    )
    if missing:
        raise BillValidationError(f"Unknown user id(s): {', '.join(missing)}")


async def _assemble(db, bills: List[Bill], with_totals: bool = False) -> List[BillResponse]:
    """Populate payer, items and settlements for a batch of bills."""
    if not bills:
        return []

    bill_ids = [bill.id for bill in bills]
    items = await BillRepository(db).get_items_for_bills(bill_ids)
    settlements = await SettlementRepository(db).get_for_bills(bill_ids)

    user_ids = {bill.payer_id for bill in bills}
    user_ids.update(item.assigned_user_id for item in items)
    for settlement in settlements:
        user_ids.add(settlement.from_user_id)
        user_ids.add(settlement.to_user_id)
    users = await UserRepository(db).get_users_by_ids(user_ids)

    items_by_bill: Dict[ObjectId, List[BillItem]] = {bill_id: [] for bill_id in bill_ids}
    for item in items:
        items_by_bill.setdefault(item.bill_id, []).append(item)
    settlements_by_bill: Dict[ObjectId, List[Settlement]] = {bill_id: [] for bill_id in bill_ids}
    for settlement in settlements:
        settlements_by_bill.setdefault(settlement.bill_id, []).append(settlement)

    responses = []
    for bill in bills:
        bill_items = items_by_bill[bill.id]
        bill_settlements = settlements_by_bill[bill.id]
        if with_totals:
            total, outstanding, paid = calculate_bill_totals(bill_items, bill_settlements)
            responses.append(BillSummaryResponse.from_bill(
                bill, bill_items, bill_settlements, users,
                total=total, outstanding=outstanding, paid=paid
            ))
        else:
            responses.append(BillResponse.from_bill(bill, bill_items, bill_settlements, users))
    return responses


class BillService:
    @staticmethod
    async def list_all() -> List[BillSummaryResponse]:
        """All bills, newest date first, with total/outstanding/paid."""
        db = await get_database()
        bills = await BillRepository(db).list_bills()
        return await _assemble(db, bills, with_totals=True)

    @staticmethod
    async def get(bill_id: str) -> Optional[BillResponse]:
        db = await get_database()
        oid = parse_object_id(bill_id)
        if oid is None:
            return None

        bill = await BillRepository(db).get_bill(oid)
        if not bill:
            return None

        responses = await _assemble(db, [bill])
        return responses[0]

    @staticmethod
    async def create(bill_in: BillIn) -> BillResponse:
        """
        Create a bill with its items and derived settlements.

        The three inserts run in one transaction; nothing is written when
        validation fails.
        """
        validate_bill(bill_in)

        db = await get_database()
        await _ensure_users_exist(db, bill_in)

        bill = Bill(
            title=bill_in.title.strip(),
            date=bill_in.date,
            payer_id=bill_in.payer_id,
        )
        items = _build_items(bill.id, bill_in)
        settlements = _build_settlements(bill.id, bill.payer_id, items)

        bill_repo = BillRepository(db)
        settlement_repo = SettlementRepository(db)

        async with await db.client.start_session() as session:
            async with session.start_transaction():
                await bill_repo.insert_bill(bill, session=session)
                await bill_repo.insert_items(items, session=session)
                await settlement_repo.insert_settlements(settlements, session=session)

        logger.info(
            "Created bill %s with %d item(s) and %d settlement(s)",
            bill.id, len(items), len(settlements)
        )
        return await BillService.get(str(bill.id))

    @staticmethod
    async def update(bill_id: str, bill_in: BillIn) -> Optional[BillResponse]:
        """
        Replace a bill's fields, items and settlements.

        Items and settlements are deleted and recreated rather than merged,
        so every settlement comes back as pending, including ones that had
        been marked paid. Returns None when the bill does not exist.
        """
        validate_bill(bill_in)

        oid = parse_object_id(bill_id)
        if oid is None:
            return None

        db = await get_database()
        bill_repo = BillRepository(db)
        settlement_repo = SettlementRepository(db)

        existing = await bill_repo.get_bill(oid)
        if not existing:
            return None

        await _ensure_users_exist(db, bill_in)

        payer_id = ObjectId(bill_in.payer_id)
        items = _build_items(oid, bill_in)
        settlements = _build_settlements(oid, payer_id, items)

        try:
            async with await db.client.start_session() as session:
                async with session.start_transaction():
                    await settlement_repo.delete_for_bill(oid, session=session)
                    await bill_repo.delete_items(oid, session=session)
                    updated = await bill_repo.update_bill(
                        oid,
                        {
                            "title": bill_in.title.strip(),
                            "date": bill_in.date,
                            "payer_id": payer_id,
                        },
                        session=session
                    )
                    if not updated:
                        # Gone since the lookup: abort the whole replace
                        raise BillNotFoundError(bill_id)
                    await bill_repo.insert_items(items, session=session)
                    await settlement_repo.insert_settlements(settlements, session=session)
        except BillNotFoundError:
            logger.warning("Bill %s was deleted during update", bill_id)
            return None

        logger.info(
            "Replaced bill %s: %d item(s), %d settlement(s) reset to pending",
            bill_id, len(items), len(settlements)
        )
        return await BillService.get(bill_id)

    @staticmethod
    async def delete(bill_id: str) -> bool:
        """Delete a bill together with its items and settlements."""
        oid = parse_object_id(bill_id)
        if oid is None:
            return False

        db = await get_database()
        bill_repo = BillRepository(db)
        settlement_repo = SettlementRepository(db)

        existing = await bill_repo.get_bill(oid)
        if not existing:
            return False

        async with await db.client.start_session() as session:
            async with session.start_transaction():
                await settlement_repo.delete_for_bill(oid, session=session)
                await bill_repo.delete_items(oid, session=session)
                await bill_repo.delete_bill(oid, session=session)

        logger.info("Deleted bill %s", bill_id)
        return True
