"""
Esquemas Pydantic para el módulo de Empeños (Commitments)
"""

from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from datetime import date, datetime

from app.modules.ledger import calculator
from app.common.validators import normalize_business_key


class CommitmentBase(BaseModel):
    commitment_number: str = Field(..., min_length=1, max_length=10, description="Número de empeño (AAAANE####)")
    commitment_date: date = Field(default_factory=date.today, description="Fecha del empeño")
    amount: Decimal = Field(..., gt=0, max_digits=15, description="Monto empeñado")
    notes: Optional[str] = Field(None, description="Notas adicionales")
    expense_id: int = Field(..., description="ID del gasto")

    @field_validator('commitment_number')
    @classmethod
    def normalize_number(cls, v):
        return normalize_business_key(v)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return calculator.positive_money(v)


class CommitmentCreate(CommitmentBase):
    pass


class CommitmentUpdate(BaseModel):
    # commitment_number y expense_id solo se aceptan si coinciden con los actuales
    commitment_number: Optional[str] = Field(None, max_length=10)
    commitment_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=15)
    notes: Optional[str] = None
    expense_id: Optional[int] = None

    @field_validator('commitment_number')
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


class CommitmentOut(CommitmentBase):
    id: int
    expense_protocol_number: str
    expense_amount: Decimal
    total_paid_amount: Decimal
    remaining_amount: Decimal
    payment_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CommitmentList(BaseModel):
    items: List[CommitmentOut]
    total: int
    limit: int
    offset: int
