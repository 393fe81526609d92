"""
Esquemas Pydantic para el módulo de Pagos (Payments)
"""

from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from datetime import date, datetime

from app.modules.ledger import calculator
from app.common.validators import normalize_business_key


class PaymentBase(BaseModel):
    payment_number: str = Field(..., min_length=1, max_length=10, description="Número de pago (AAAANP####)")
    payment_date: date = Field(default_factory=date.today, description="Fecha del pago")
    amount: Decimal = Field(..., gt=0, max_digits=15, description="Monto pagado")
    notes: Optional[str] = Field(None, description="Notas adicionales")
    commitment_id: int = Field(..., description="ID del empeño")

    @field_validator('payment_number')
    @classmethod
    def normalize_number(cls, v):
        return normalize_business_key(v)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return calculator.positive_money(v)


class PaymentCreate(PaymentBase):
    pass


class PaymentUpdate(BaseModel):
    payment_number: Optional[str] = Field(None, max_length=10)
    payment_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=15)
    notes: Optional[str] = None
    commitment_id: Optional[int] = None

    @field_validator('payment_number')
    @classmethod
    def normalize_number(cls, v):
        if v is not None:
            return normalize_business_key(v)
        return v

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v is not None:
            return calculator.positive_money(v)
        return v


class PaymentOut(PaymentBase):
    id: int
    commitment_number: str
    expense_id: int
    expense_protocol_number: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PaymentList(BaseModel):
    items: List[PaymentOut]
    total: int
    limit: int
    offset: int
