"""
Modelos SQLAlchemy para el módulo de Pagos (Payments)
"""

from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, Text, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import date
from app.common.mixins import TimestampMixin


class Payment(Base, TimestampMixin):
    """Pago (nota de pago AAAANP####) contra un empeño"""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    payment_number = Column(String(10), nullable=False, unique=True, index=True)
    payment_date = Column(Date, nullable=False, default=date.today)
    amount = Column(Numeric(15, 2), nullable=False)
    notes = Column(Text, nullable=True)
    commitment_id = Column(Integer, ForeignKey("commitments.id"), nullable=False, index=True)

    # Relationships
    commitment = relationship("Commitment", back_populates="payments")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )

    @property
    def commitment_number(self) -> str:
        return self.commitment.commitment_number

    @property
    def expense_id(self) -> int:
        return self.commitment.expense_id

    @property
    def expense_protocol_number(self) -> str:
        return self.commitment.expense.protocol_number

    def __repr__(self):
        return f"<Payment {self.payment_number} amount={self.amount}>"
