"""
Routers FastAPI del libro de saldos (solo lectura)
"""

from fastapi import APIRouter, Query
from typing import Optional

from app.dependencies.dbDependecies import db_dependency
from app.modules.ledger.service import LedgerService
from app.modules.ledger.schemas import AllocationCeiling, AllocationCheck, AllocationCheckResult

ledger_router = APIRouter(prefix="/ledger", tags=["Ledger"])


@ledger_router.get("/expenses/{expense_id}/ceiling", response_model=AllocationCeiling)
def get_expense_ceiling(
    expense_id: int,
    db: db_dependency,
    commitment_id: Optional[int] = Query(None, description="Empeño en edición")
):
    """Máximo que puede tomar un empeño nuevo (o el empeño en edición) de este gasto"""
    return LedgerService(db).get_expense_ceiling(expense_id, commitment_id)


@ledger_router.get("/commitments/{commitment_id}/ceiling", response_model=AllocationCeiling)
def get_commitment_ceiling(
    commitment_id: int,
    db: db_dependency,
    payment_id: Optional[int] = Query(None, description="Pago en edición")
):
    """Máximo que puede tomar un pago nuevo (o el pago en edición) de este empeño"""
    return LedgerService(db).get_commitment_ceiling(commitment_id, payment_id)


@ledger_router.post("/validate", response_model=AllocationCheckResult)
def validate_amount(check: AllocationCheck, db: db_dependency):
    return LedgerService(db).check_allocation(check.amount, check.ceiling)
