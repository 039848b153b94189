from fastapi import APIRouter
from billsplit.api.v1.endpoints import users, bills, ledger

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(bills.router, prefix="/bills", tags=["bills"])
api_router.include_router(ledger.router, prefix="/ledger", tags=["ledger"])
