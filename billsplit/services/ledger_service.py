from typing import List, Optional

from billsplit.db.session import get_database
from billsplit.models.settlement import SettlementStatus
from billsplit.repositories.bill_repo import BillRepository
from billsplit.repositories.settlement_repo import SettlementRepository
from billsplit.repositories.user_repo import UserRepository
from billsplit.schemas.ledger import BillRef, UserBalanceResponse, UserSettlementResponse

class LedgerService:
    @staticmethod
    async def get_user_balance(user_id: str) -> Optional[UserBalanceResponse]:
        """
        Aggregate a user's settlements across all bills.

        Returns None for an unknown user.
        """
        db = await get_database()
        user = await UserRepository(db).get_user_by_id(user_id)
        if not user:
            return None

        settlement_repo = SettlementRepository(db)
        as_debtor = await settlement_repo.sum_by_status("from_user_id", user.id)
        as_creditor = await settlement_repo.sum_by_status("to_user_id", user.id)

        owes = as_debtor.get(SettlementStatus.PENDING.value, 0.0)
        is_owed = as_creditor.get(SettlementStatus.PENDING.value, 0.0)

        return UserBalanceResponse(
            user_id=str(user.id),
            owes=owes,
            is_owed=is_owed,
            paid_out=as_debtor.get(SettlementStatus.PAID.value, 0.0),
            received=as_creditor.get(SettlementStatus.PAID.value, 0.0),
            net=is_owed - owes
        )

    @staticmethod
    async def list_user_settlements(user_id: str) -> Optional[List[UserSettlementResponse]]:
        """
        Every settlement the user is on either end of, newest bill first.

        Returns None for an unknown user.
        """
        db = await get_database()
        user = await UserRepository(db).get_user_by_id(user_id)
        if not user:
            return None

        settlements = await SettlementRepository(db).list_for_user(user.id)
        if not settlements:
            return []

        bills = await BillRepository(db).get_bills_by_ids(s.bill_id for s in settlements)
        bills_by_id = {bill.id: bill for bill in bills}

        user_ids = set()
        for settlement in settlements:
            user_ids.add(settlement.from_user_id)
            user_ids.add(settlement.to_user_id)
        users = await UserRepository(db).get_users_by_ids(user_ids)

        responses = []
        for settlement in settlements:
            bill = bills_by_id.get(settlement.bill_id)
            bill_ref = BillRef(id=str(bill.id), title=bill.title, date=bill.date) if bill else None
            responses.append(UserSettlementResponse.from_settlement(settlement, users, bill=bill_ref))

        # Settlements of the same bill keep their stored order
        responses.sort(
            key=lambda r: r.bill.date.timestamp() if r.bill else float("-inf"),
            reverse=True
        )
        return responses
