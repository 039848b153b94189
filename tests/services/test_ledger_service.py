import pytest
from unittest.mock import AsyncMock, patch
from datetime import datetime
from bson import ObjectId

from billsplit.models.bill import Bill
from billsplit.models.settlement import Settlement
from billsplit.services.ledger_service import LedgerService


@pytest.fixture
def repos(mock_db):
    with patch("billsplit.services.ledger_service.get_database", return_value=mock_db), \
         patch("billsplit.services.ledger_service.BillRepository") as bill_repo_cls, \
         patch("billsplit.services.ledger_service.SettlementRepository") as settlement_repo_cls, \
         patch("billsplit.services.ledger_service.UserRepository") as user_repo_cls:
        bill_repo_cls.return_value = AsyncMock()
        settlement_repo_cls.return_value = AsyncMock()
        user_repo_cls.return_value = AsyncMock()
        yield (
            bill_repo_cls.return_value,
            settlement_repo_cls.return_value,
            user_repo_cls.return_value,
        )


@pytest.mark.asyncio
async def test_get_user_balance(repos, bob):
    _, settlement_repo, user_repo = repos
    user_repo.get_user_by_id.return_value = bob

    async def sum_by_status(role_field, user_id):
        assert user_id == bob.id
        if role_field == "from_user_id":
            return {"pending": 30.0, "paid": 12.0}
        return {"pending": 5.0}

    settlement_repo.sum_by_status.side_effect = sum_by_status

    balance = await LedgerService.get_user_balance(str(bob.id))

    assert balance.user_id == str(bob.id)
    assert balance.owes == 30.0
    assert balance.is_owed == 5.0
    assert balance.paid_out == 12.0
    assert balance.received == 0.0
    assert balance.net == -25.0


@pytest.mark.asyncio
async def test_get_user_balance_unknown_user(repos):
    _, settlement_repo, user_repo = repos
    user_repo.get_user_by_id.return_value = None

    assert await LedgerService.get_user_balance(str(ObjectId())) is None
    settlement_repo.sum_by_status.assert_not_called()


@pytest.mark.asyncio
async def test_list_user_settlements_newest_bill_first(repos, alice, bob, carol, users_by_id):
    bill_repo, settlement_repo, user_repo = repos
    older = Bill(title="Breakfast", date=datetime(2024, 5, 1), payer_id=alice.id)
    newer = Bill(title="Dinner", date=datetime(2024, 5, 9), payer_id=bob.id)

    user_repo.get_user_by_id.return_value = bob
    user_repo.get_users_by_ids.return_value = users_by_id
    settlement_repo.list_for_user.return_value = [
        Settlement(bill_id=older.id, from_user_id=bob.id, to_user_id=alice.id, amount=7.0),
        Settlement(bill_id=newer.id, from_user_id=carol.id, to_user_id=bob.id, amount=15.0, status="paid"),
    ]
    bill_repo.get_bills_by_ids.return_value = [older, newer]

    settlements = await LedgerService.list_user_settlements(str(bob.id))

    assert [s.bill.title for s in settlements] == ["Dinner", "Breakfast"]
    assert settlements[0].from_user.name == "Carol"
    assert settlements[0].to_user.name == "Bob"
    assert settlements[1].amount == 7.0


@pytest.mark.asyncio
async def test_list_user_settlements_none(repos, bob):
    bill_repo, settlement_repo, user_repo = repos
    user_repo.get_user_by_id.return_value = bob
    settlement_repo.list_for_user.return_value = []

    assert await LedgerService.list_user_settlements(str(bob.id)) == []
    bill_repo.get_bills_by_ids.assert_not_called()
