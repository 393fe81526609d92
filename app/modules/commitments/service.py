"""
Servicios de negocio para el módulo de Empeños (Commitments)

Reglas:
- Número AAAANE#### único, con el año vigente; no se edita
- El gasto asociado no cambia
- El monto se valida contra el techo del libro de saldos:
  saldo del gasto (+ monto actual del empeño al editar)
- El monto no puede quedar por debajo de lo ya pagado
- Solo se eliminan empeños sin pagos
- Cada alta/edición/baja recalcula el estado del gasto
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from datetime import date
import logging

from app.core.config import settings
from app.common.validators import validate_commitment_number, normalize_business_key
from app.modules.commitments.models import Commitment
from app.modules.commitments.schemas import CommitmentCreate, CommitmentUpdate, CommitmentList
from app.modules.expenses.service import ExpenseService
from app.modules.ledger import calculator
from app.modules.ledger.calculator import InvalidAmount

logger = logging.getLogger(__name__)


class CommitmentService:
    """Servicio para gestión de empeños"""

    def __init__(self, db: Session):
        self.db = db

    def create_commitment(self, commitment_data: CommitmentCreate) -> Commitment:
        """Registrar empeño contra el saldo del gasto"""
        try:
            self._require_valid_number(commitment_data.commitment_number)

            if self._number_exists(commitment_data.commitment_number):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"A commitment with commitment number {commitment_data.commitment_number} already exists"
                )

            expense_service = ExpenseService(self.db)
            expense = expense_service.get_expense_by_id(commitment_data.expense_id)

            ceiling = calculator.max_allocatable(expense)
            amount = self._validate_amount(commitment_data.amount, ceiling)

            commitment = Commitment(
                commitment_number=commitment_data.commitment_number,
                commitment_date=commitment_data.commitment_date,
                amount=amount,
                notes=commitment_data.notes,
                expense_id=expense.id
            )

            self.db.add(commitment)
            expense_service.refresh_status(expense)

            self.db.commit()
            self.db.refresh(commitment)

            logger.info(
                f"Commitment {commitment.commitment_number} created for expense "
                f"{commitment.expense_protocol_number} (amount={commitment.amount})"
            )
            return commitment

        except HTTPException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"A commitment with commitment number {commitment_data.commitment_number} already exists"
            )
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating commitment: {str(e)}"
            )

    def get_commitments(
        self,
        limit: int = 100,
        offset: int = 0,
        expense_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> CommitmentList:
        """Listar empeños con filtros"""
        query = self.db.query(Commitment)

        if expense_id:
            query = query.filter(Commitment.expense_id == expense_id)
        if date_from:
            query = query.filter(Commitment.commitment_date >= date_from)
        if date_to:
            query = query.filter(Commitment.commitment_date <= date_to)

        total = query.count()
        commitments = query.order_by(Commitment.id.asc()).offset(offset).limit(limit).all()

        return CommitmentList(items=commitments, total=total, limit=limit, offset=offset)

    def get_commitments_by_expense(self, expense_id: int) -> List[Commitment]:
        """Empeños de un gasto (404 si el gasto no existe)"""
        expense = ExpenseService(self.db).get_expense_by_id(expense_id)
        return list(expense.commitments)

    def get_commitment_by_id(self, commitment_id: int) -> Commitment:
        commitment = self.db.query(Commitment).filter(Commitment.id == commitment_id).first()

        if not commitment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Commitment not found with id: {commitment_id}"
            )

        return commitment

    def get_commitment_by_number(self, commitment_number: str) -> Commitment:
        commitment = self.db.query(Commitment).filter(
            Commitment.commitment_number == normalize_business_key(commitment_number)
        ).first()

        if not commitment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Commitment not found with commitment number: {commitment_number}"
            )

        return commitment

    def update_commitment(self, commitment_id: int, commitment_update: CommitmentUpdate) -> Commitment:
        """Actualizar empeño. Número y gasto quedan fijos"""
        try:
            commitment = self.get_commitment_by_id(commitment_id)
            expense = commitment.expense

            if commitment_update.commitment_number is not None and commitment_update.commitment_number != commitment.commitment_number:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot change the commitment number of a commitment"
                )

            if commitment_update.expense_id is not None and commitment_update.expense_id != commitment.expense_id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot change the expense associated with a commitment"
                )

            if commitment_update.amount is not None:
                total_paid = commitment.total_paid_amount
                if commitment_update.amount < total_paid:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Cannot reduce commitment amount below the total paid amount: {total_paid}"
                    )

                # El monto actual ya está descontado del saldo del gasto
                ceiling = calculator.max_allocatable(expense, commitment)
                commitment.amount = self._validate_amount(commitment_update.amount, ceiling)

            if commitment_update.commitment_date is not None:
                commitment.commitment_date = commitment_update.commitment_date
            if "notes" in commitment_update.model_fields_set:
                commitment.notes = commitment_update.notes

            ExpenseService(self.db).refresh_status(expense)
            self.db.commit()
            self.db.refresh(commitment)

            logger.info(f"Commitment {commitment.commitment_number} updated (amount={commitment.amount})")
            return commitment

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error updating commitment: {str(e)}"
            )

    def delete_commitment(self, commitment_id: int) -> None:
        """Eliminar empeño sin pagos"""
        try:
            commitment = self.get_commitment_by_id(commitment_id)

            if commitment.payments:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot delete commitment with associated payments"
                )

            expense = commitment.expense
            commitment_number = commitment.commitment_number

            self.db.delete(commitment)
            ExpenseService(self.db).refresh_status(expense)
            self.db.commit()

            logger.info(f"Commitment {commitment_number} deleted")

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error deleting commitment: {str(e)}"
            )

    def _validate_amount(self, amount, ceiling):
        try:
            return calculator.validate_allocation(amount, ceiling, settings.CURRENCY_SYMBOL)
        except InvalidAmount as e:
            logger.warning(f"Commitment amount rejected: {amount} ({e.reason}, ceiling={e.ceiling})")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    def _number_exists(self, commitment_number: str) -> bool:
        return self.db.query(Commitment.id).filter(Commitment.commitment_number == commitment_number).first() is not None

    def _require_valid_number(self, commitment_number: str) -> None:
        if not validate_commitment_number(commitment_number):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid commitment number. Expected format ####NE#### starting with the current year: {date.today().year}"
            )
