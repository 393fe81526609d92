"""
Servicios de negocio para el módulo de Pagos (Payments)

Mismas reglas que los empeños, un nivel más abajo: el techo es el saldo
del empeño y cada cambio recalcula el estado del gasto dueño.
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from datetime import date
import logging

from app.core.config import settings
from app.common.validators import validate_payment_number, normalize_business_key
from app.modules.payments.models import Payment
from app.modules.payments.schemas import PaymentCreate, PaymentUpdate, PaymentList
from app.modules.commitments.models import Commitment
from app.modules.commitments.service import CommitmentService
from app.modules.expenses.service import ExpenseService
from app.modules.ledger import calculator
from app.modules.ledger.calculator import InvalidAmount

logger = logging.getLogger(__name__)


class PaymentService:
    """Servicio para gestión de pagos"""

    def __init__(self, db: Session):
        self.db = db

    def create_payment(self, payment_data: PaymentCreate) -> Payment:
        """Registrar pago contra el saldo del empeño"""
        try:
            self._require_valid_number(payment_data.payment_number)

            if self._number_exists(payment_data.payment_number):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"A payment with payment number {payment_data.payment_number} already exists"
                )

            commitment = CommitmentService(self.db).get_commitment_by_id(payment_data.commitment_id)
            expense = commitment.expense

            ceiling = calculator.max_allocatable(commitment)
            amount = self._validate_amount(payment_data.amount, ceiling)

            payment = Payment(
                payment_number=payment_data.payment_number,
                payment_date=payment_data.payment_date,
                amount=amount,
                notes=payment_data.notes,
                commitment_id=commitment.id
            )

            self.db.add(payment)
            ExpenseService(self.db).refresh_status(expense)

            self.db.commit()
            self.db.refresh(payment)

            logger.info(
                f"Payment {payment.payment_number} created for commitment "
                f"{payment.commitment_number} (amount={payment.amount})"
            )
            return payment

        except HTTPException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"A payment with payment number {payment_data.payment_number} already exists"
            )
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating payment: {str(e)}"
            )

    def get_payments(
        self,
        limit: int = 100,
        offset: int = 0,
        commitment_id: Optional[int] = None,
        expense_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> PaymentList:
        """Listar pagos con filtros"""
        query = self.db.query(Payment)

        if commitment_id:
            query = query.filter(Payment.commitment_id == commitment_id)
        if expense_id:
            query = query.join(Commitment, Payment.commitment_id == Commitment.id).filter(
                Commitment.expense_id == expense_id
            )
        if date_from:
            query = query.filter(Payment.payment_date >= date_from)
        if date_to:
            query = query.filter(Payment.payment_date <= date_to)

        total = query.count()
        payments = query.order_by(Payment.id.asc()).offset(offset).limit(limit).all()

        return PaymentList(items=payments, total=total, limit=limit, offset=offset)

    def get_payments_by_commitment(self, commitment_id: int) -> List[Payment]:
        commitment = CommitmentService(self.db).get_commitment_by_id(commitment_id)
        return list(commitment.payments)

    def get_payment_by_id(self, payment_id: int) -> Payment:
        payment = self.db.query(Payment).filter(Payment.id == payment_id).first()

        if not payment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Payment not found with id: {payment_id}"
            )

        return payment

    def get_payment_by_number(self, payment_number: str) -> Payment:
        payment = self.db.query(Payment).filter(
            Payment.payment_number == normalize_business_key(payment_number)
        ).first()

        if not payment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Payment not found with payment number: {payment_number}"
            )

        return payment

    def update_payment(self, payment_id: int, payment_update: PaymentUpdate) -> Payment:
        """Actualizar pago. Número y empeño quedan fijos"""
        try:
            payment = self.get_payment_by_id(payment_id)
            commitment = payment.commitment
            expense = commitment.expense

            if payment_update.payment_number is not None and payment_update.payment_number != payment.payment_number:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot change the payment number of a payment"
                )

            if payment_update.commitment_id is not None and payment_update.commitment_id != payment.commitment_id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot change the commitment associated with a payment"
                )

            if payment_update.amount is not None:
                ceiling = calculator.max_allocatable(commitment, payment)
                payment.amount = self._validate_amount(payment_update.amount, ceiling)

            if payment_update.payment_date is not None:
                payment.payment_date = payment_update.payment_date
            if "notes" in payment_update.model_fields_set:
                payment.notes = payment_update.notes

            ExpenseService(self.db).refresh_status(expense)
            self.db.commit()
            self.db.refresh(payment)

            logger.info(f"Payment {payment.payment_number} updated (amount={payment.amount})")
            return payment

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error updating payment: {str(e)}"
            )

    def delete_payment(self, payment_id: int) -> None:
        try:
            payment = self.get_payment_by_id(payment_id)

            expense = payment.commitment.expense
            payment_number = payment.payment_number

            self.db.delete(payment)
            ExpenseService(self.db).refresh_status(expense)
            self.db.commit()

            logger.info(f"Payment {payment_number} deleted")

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error deleting payment: {str(e)}"
            )

    def _validate_amount(self, amount, ceiling):
        try:
            return calculator.validate_allocation(amount, ceiling, settings.CURRENCY_SYMBOL)
        except InvalidAmount as e:
            logger.warning(f"Payment amount rejected: {amount} ({e.reason}, ceiling={e.ceiling})")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    def _number_exists(self, payment_number: str) -> bool:
        return self.db.query(Payment.id).filter(Payment.payment_number == payment_number).first() is not None

    def _require_valid_number(self, payment_number: str) -> None:
        if not validate_payment_number(payment_number):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid payment number. Expected format ####NP#### starting with the current year: {date.today().year}"
            )
