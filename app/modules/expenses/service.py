"""
Servicios de negocio para el módulo de Gastos (Expenses)

Reglas:
- El número de protocolo es único, con formato #####.######/####-##, y no se edita
- El monto no puede quedar por debajo del total empeñado
- El estado se recalcula con el libro de saldos, nunca se recibe del cliente
- Solo se eliminan gastos sin empeños (estado AWAITING_COMMITMENT)
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from datetime import date
import logging

from app.common.validators import validate_protocol_number
from app.modules.expenses.models import Expense, ExpenseType
from app.modules.expenses.schemas import ExpenseCreate, ExpenseUpdate, ExpenseList
from app.modules.ledger import calculator
from app.modules.ledger.calculator import ExpenseStatus

logger = logging.getLogger(__name__)


class ExpenseService:
    """Servicio para gestión de gastos"""

    def __init__(self, db: Session):
        self.db = db

    def create_expense(self, expense_data: ExpenseCreate) -> Expense:
        """Crear nuevo gasto en estado AWAITING_COMMITMENT"""
        try:
            self._require_valid_protocol(expense_data.protocol_number)

            if self._protocol_exists(expense_data.protocol_number):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"An expense with protocol number {expense_data.protocol_number} already exists"
                )

            expense = Expense(
                protocol_number=expense_data.protocol_number,
                expense_type=expense_data.expense_type,
                due_date=expense_data.due_date,
                creditor=expense_data.creditor,
                description=expense_data.description,
                amount=expense_data.amount,
                notes=expense_data.notes,
                status=ExpenseStatus.AWAITING_COMMITMENT
            )
            if expense_data.protocol_date is not None:
                expense.protocol_date = expense_data.protocol_date

            self.db.add(expense)
            self.db.commit()
            self.db.refresh(expense)

            logger.info(f"Expense {expense.protocol_number} created (amount={expense.amount})")
            return expense

        except HTTPException:
            raise
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"An expense with protocol number {expense_data.protocol_number} already exists"
            )
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating expense: {str(e)}"
            )

    def get_expenses(
        self,
        limit: int = 100,
        offset: int = 0,
        status: Optional[ExpenseStatus] = None,
        expense_type: Optional[ExpenseType] = None,
        creditor: Optional[str] = None,
        due_from: Optional[date] = None,
        due_to: Optional[date] = None
    ) -> ExpenseList:
        """Listar gastos con filtros"""
        query = self.db.query(Expense)

        if status:
            query = query.filter(Expense.status == status)
        if expense_type:
            query = query.filter(Expense.expense_type == expense_type)
        if creditor:
            query = query.filter(Expense.creditor.ilike(f"%{creditor.strip()}%"))
        if due_from:
            query = query.filter(Expense.due_date >= due_from)
        if due_to:
            query = query.filter(Expense.due_date <= due_to)

        total = query.count()
        expenses = query.order_by(Expense.due_date.asc(), Expense.id.asc()).offset(offset).limit(limit).all()

        return ExpenseList(items=expenses, total=total, limit=limit, offset=offset)

    def get_expenses_by_status(self, expense_status: ExpenseStatus) -> List[Expense]:
        return self.db.query(Expense).filter(Expense.status == expense_status).order_by(Expense.id.asc()).all()

    def get_expense_by_id(self, expense_id: int) -> Expense:
        """Obtener gasto por ID"""
        expense = self.db.query(Expense).filter(Expense.id == expense_id).first()

        if not expense:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Expense not found with id: {expense_id}"
            )

        return expense

    def get_expense_by_protocol_number(self, protocol_number: str) -> Expense:
        """Obtener gasto por número de protocolo"""
        expense = self.db.query(Expense).filter(Expense.protocol_number == protocol_number.strip()).first()

        if not expense:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Expense not found with protocol number: {protocol_number}"
            )

        return expense

    def update_expense(self, expense_id: int, expense_update: ExpenseUpdate) -> Expense:
        """Actualizar gasto. El protocolo no se modifica y el monto no baja del total empeñado"""
        try:
            expense = self.get_expense_by_id(expense_id)

            if expense_update.protocol_number is not None and expense_update.protocol_number.strip() != expense.protocol_number:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot change the protocol number of an expense"
                )

            if expense_update.amount is not None:
                committed = expense.total_committed_amount
                if expense_update.amount < committed:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Cannot reduce expense amount below the total committed amount: {committed}"
                    )

            update_dict = expense_update.model_dump(exclude_unset=True, exclude={"protocol_number"})
            for field, value in update_dict.items():
                if value is None:
                    # Los campos obligatorios no se pueden vaciar
                    if field == "notes":
                        expense.notes = None
                    continue
                setattr(expense, field, value)

            self.refresh_status(expense)
            self.db.commit()
            self.db.refresh(expense)

            logger.info(f"Expense {expense.protocol_number} updated (status={expense.status.value})")
            return expense

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error updating expense: {str(e)}"
            )

    def delete_expense(self, expense_id: int) -> None:
        """Eliminar gasto sin empeños"""
        try:
            expense = self.get_expense_by_id(expense_id)

            if expense.commitments:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot delete expense with associated commitments"
                )

            protocol_number = expense.protocol_number
            self.db.delete(expense)
            self.db.commit()

            logger.info(f"Expense {protocol_number} deleted")

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error deleting expense: {str(e)}"
            )

    def refresh_status(self, expense: Expense) -> ExpenseStatus:
        """
        Recalcular el estado del gasto a partir de sus empeños y pagos

        Vacía los cambios pendientes y expira la sesión para que las relaciones
        reflejen las altas/bajas recién hechas. No hace commit.
        """
        self.db.flush()
        self.db.expire_all()

        new_status = calculator.derive_expense_status(
            expense.amount,
            expense.total_committed_amount,
            expense.total_paid_amount
        )
        if expense.status != new_status:
            logger.debug(f"Expense {expense.protocol_number}: {expense.status} -> {new_status}")
        expense.status = new_status
        return new_status

    def _protocol_exists(self, protocol_number: str) -> bool:
        return self.db.query(Expense.id).filter(Expense.protocol_number == protocol_number).first() is not None

    def _require_valid_protocol(self, protocol_number: str) -> None:
        if not validate_protocol_number(protocol_number):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid protocol number format. Expected format: #####.######/####-##"
            )
