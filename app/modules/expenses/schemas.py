"""
Esquemas Pydantic para el módulo de Gastos (Expenses)

`status` y los totales son de solo lectura: no forman parte de ningún
esquema de entrada.
"""

from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional, List
from datetime import date, datetime

from app.modules.ledger import calculator
from app.modules.expenses.models import ExpenseType
from app.modules.ledger.calculator import ExpenseStatus


class ExpenseBase(BaseModel):
    protocol_number: str = Field(..., min_length=1, max_length=20, description="Número de protocolo (#####.######/####-##)")
    expense_type: ExpenseType = Field(..., description="Tipo de gasto")
    due_date: date = Field(..., description="Fecha de vencimiento")
    creditor: str = Field(..., min_length=1, max_length=200, description="Acreedor")
    description: str = Field(..., min_length=1, description="Descripción del gasto")
    amount: Decimal = Field(..., gt=0, max_digits=15, description="Monto del gasto")
    notes: Optional[str] = Field(None, description="Notas adicionales")

    @field_validator('protocol_number', 'creditor', 'description')
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Field cannot be blank')
        return v

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return calculator.positive_money(v)


class ExpenseCreate(ExpenseBase):
    protocol_date: Optional[datetime] = Field(None, description="Fecha de registro del protocolo (por defecto, ahora)")


class ExpenseUpdate(BaseModel):
    # protocol_number solo se acepta si coincide con el actual
    protocol_number: Optional[str] = Field(None, max_length=20)
    expense_type: Optional[ExpenseType] = None
    protocol_date: Optional[datetime] = None
    due_date: Optional[date] = None
    creditor: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=15)
    notes: Optional[str] = None

    @field_validator('creditor', 'description')
    @classmethod
    def strip_text(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError('Field cannot be blank')
        return v

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v is not None:
            return calculator.positive_money(v)
        return v


class ExpenseOut(ExpenseBase):
    id: int
    protocol_date: datetime
    status: ExpenseStatus
    total_committed_amount: Decimal
    total_paid_amount: Decimal
    remaining_amount: Decimal
    commitment_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ExpenseList(BaseModel):
    items: List[ExpenseOut]
    total: int
    limit: int
    offset: int
