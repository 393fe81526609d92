"""
Modelos SQLAlchemy para el módulo de Gastos (Expenses)

Un gasto es la obligación presupuestaria con un acreedor. Se financia con
empeños (Commitments) que a su vez se liquidan con pagos (Payments).

Los campos derivados (saldo restante, totales) se calculan a partir de las
relaciones; `status` se persiste pero solo lo recalcula el servicio.
"""

from app.database.database import Base
from sqlalchemy import Column, Integer, String, DateTime, Numeric, Enum, Date, Text, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from decimal import Decimal
from app.common.mixins import TimestampMixin
from app.modules.ledger import calculator
from app.modules.ledger.calculator import ExpenseStatus
import enum


class ExpenseType(str, enum.Enum):
    """Tipos de gasto"""
    SERVICES = "SERVICES"       # Servicios
    MATERIALS = "MATERIALS"     # Materiales
    EQUIPMENT = "EQUIPMENT"     # Equipos
    TRAVEL = "TRAVEL"           # Viáticos
    OTHER = "OTHER"             # Otros


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Expense(Base, TimestampMixin):
    """
    Gasto registrado por número de protocolo

    El protocolo es la clave de negocio: único y no editable.
    """
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    protocol_number = Column(String(20), nullable=False, unique=True, index=True)
    expense_type = Column(Enum(ExpenseType), nullable=False)
    protocol_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    due_date = Column(Date, nullable=False)
    creditor = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(Enum(ExpenseStatus), nullable=False, default=ExpenseStatus.AWAITING_COMMITMENT, index=True)

    # Relationships
    commitments = relationship("Commitment", back_populates="expense", order_by="Commitment.id")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
    )

    @property
    def total_committed_amount(self) -> Decimal:
        return sum((commitment.amount for commitment in self.commitments), Decimal('0.00'))

    @property
    def total_paid_amount(self) -> Decimal:
        return sum((commitment.total_paid_amount for commitment in self.commitments), Decimal('0.00'))

    @property
    def remaining_amount(self) -> Decimal:
        return calculator.remaining_amount(self.amount, self.total_committed_amount)

    @property
    def commitment_count(self) -> int:
        return len(self.commitments)

    def __repr__(self):
        return f"<Expense {self.protocol_number} {self.status}>"
