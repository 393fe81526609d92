"""
Esquemas Pydantic para el libro de saldos
"""

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, Union


class AllocationCeiling(BaseModel):
    """Techo de asignación para un empeño o pago"""
    parent_id: int
    parent_amount: Decimal
    remaining_amount: Decimal = Field(..., description="Saldo del padre")
    current_amount: Optional[Decimal] = Field(None, description="Monto actual del hijo en edición")
    ceiling: Decimal = Field(..., description="Máximo permitido")
    formatted_ceiling: str


class AllocationCheck(BaseModel):
    # amount se acepta como texto para responder con valid=False en vez de 422
    amount: Optional[Union[Decimal, str]] = None
    ceiling: Decimal = Field(..., ge=0)


class AllocationCheckResult(BaseModel):
    valid: bool
    amount: Optional[Decimal] = None
    ceiling: Decimal
    formatted_ceiling: str
    reason: Optional[str] = None
    message: Optional[str] = None
