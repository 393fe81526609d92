"""
Modelos SQLAlchemy para el módulo de Empeños (Commitments)

Un empeño reserva parte (o todo) el monto de un gasto. Su gasto es fijo
desde la creación y su monto nunca supera el saldo del gasto.
"""

from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, Text, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import date
from decimal import Decimal
from app.common.mixins import TimestampMixin
from app.modules.ledger import calculator


class Commitment(Base, TimestampMixin):
    """Empeño (nota de empeño AAAANE####) de un gasto"""
    __tablename__ = "commitments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    commitment_number = Column(String(10), nullable=False, unique=True, index=True)
    commitment_date = Column(Date, nullable=False, default=date.today)
    amount = Column(Numeric(15, 2), nullable=False)
    notes = Column(Text, nullable=True)
    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False, index=True)

    # Relationships
    expense = relationship("Expense", back_populates="commitments")
    payments = relationship("Payment", back_populates="commitment", order_by="Payment.id")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_commitments_amount_positive"),
    )

    @property
    def total_paid_amount(self) -> Decimal:
        return sum((payment.amount for payment in self.payments), Decimal('0.00'))

    @property
    def remaining_amount(self) -> Decimal:
        return calculator.remaining_amount(self.amount, self.total_paid_amount)

    @property
    def payment_count(self) -> int:
        return len(self.payments)

    # Datos de referencia del gasto para listados
    @property
    def expense_protocol_number(self) -> str:
        return self.expense.protocol_number

    @property
    def expense_amount(self) -> Decimal:
        return self.expense.amount

    def __repr__(self):
        return f"<Commitment {self.commitment_number} amount={self.amount}>"
