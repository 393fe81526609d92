"""
Servicio del libro de saldos

Carga el registro padre y delega el cálculo a las funciones puras de
`calculator`.
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import Any, Optional
import logging

from app.core.config import settings
from app.modules.ledger import calculator
from app.modules.ledger.calculator import InvalidAmount
from app.modules.ledger.schemas import AllocationCeiling, AllocationCheckResult
from app.modules.expenses.service import ExpenseService
from app.modules.commitments.service import CommitmentService
from app.modules.payments.service import PaymentService

logger = logging.getLogger(__name__)


class LedgerService:
    """Techos y validación de montos para los formularios de empeño y pago"""

    def __init__(self, db: Session):
        self.db = db

    def get_expense_ceiling(self, expense_id: int, commitment_id: Optional[int] = None) -> AllocationCeiling:
        """
        Techo para un empeño del gasto

        Sin commitment_id: alta (saldo del gasto).
        Con commitment_id: edición (saldo + monto actual del empeño).
        """
        expense = ExpenseService(self.db).get_expense_by_id(expense_id)

        commitment = None
        if commitment_id is not None:
            commitment = CommitmentService(self.db).get_commitment_by_id(commitment_id)
            if commitment.expense_id != expense.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Commitment {commitment_id} does not belong to expense {expense_id}"
                )

        return self._build_ceiling(expense, commitment)

    def get_commitment_ceiling(self, commitment_id: int, payment_id: Optional[int] = None) -> AllocationCeiling:
        """Techo para un pago del empeño (misma regla, un nivel abajo)"""
        commitment = CommitmentService(self.db).get_commitment_by_id(commitment_id)

        payment = None
        if payment_id is not None:
            payment = PaymentService(self.db).get_payment_by_id(payment_id)
            if payment.commitment_id != commitment.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Payment {payment_id} does not belong to commitment {commitment_id}"
                )

        return self._build_ceiling(commitment, payment)

    def check_allocation(self, amount: Any, ceiling: Any) -> AllocationCheckResult:
        """Validar un monto propuesto. Un monto inválido no es un error HTTP"""
        try:
            limit = calculator.max_allocatable(ceiling)
        except ValueError:
            # Techo fuera de rango: nada cabe
            limit = calculator.ZERO
        formatted = calculator.format_currency(limit, settings.CURRENCY_SYMBOL)

        try:
            value = calculator.validate_allocation(amount, limit, settings.CURRENCY_SYMBOL)
        except InvalidAmount as e:
            logger.debug(f"Allocation check failed: {amount!r} ({e.reason}, ceiling={limit})")
            return AllocationCheckResult(
                valid=False,
                ceiling=limit,
                formatted_ceiling=formatted,
                reason=e.reason,
                message=e.message
            )

        return AllocationCheckResult(valid=True, amount=value, ceiling=limit, formatted_ceiling=formatted)

    def _build_ceiling(self, parent, child=None) -> AllocationCeiling:
        ceiling = calculator.max_allocatable(parent, child)
        return AllocationCeiling(
            parent_id=parent.id,
            parent_amount=parent.amount,
            remaining_amount=parent.remaining_amount,
            current_amount=child.amount if child is not None else None,
            ceiling=ceiling,
            formatted_ceiling=calculator.format_currency(ceiling, settings.CURRENCY_SYMBOL)
        )
