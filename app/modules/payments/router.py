"""
Routers FastAPI para el módulo de Pagos (Payments)
"""

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.database.database import get_db
from app.core.config import settings
from app.modules.payments.service import PaymentService
from app.modules.payments.schemas import PaymentCreate, PaymentUpdate, PaymentOut, PaymentList

payments_router = APIRouter(prefix="/payments", tags=["Payments"])


@payments_router.post("/", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def create_payment(
    payment_data: PaymentCreate,
    db: Session = Depends(get_db)
):
    """
    Registrar un pago

    El monto debe ser positivo y no superar el saldo del empeño.
    """
    service = PaymentService(db)
    return service.create_payment(payment_data)


@payments_router.get("/", response_model=PaymentList)
def list_payments(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    commitment_id: Optional[int] = Query(None, description="Filtrar por empeño"),
    expense_id: Optional[int] = Query(None, description="Filtrar por gasto"),
    date_from: Optional[date] = Query(None, description="Fecha desde (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Fecha hasta (YYYY-MM-DD)"),
    db: Session = Depends(get_db)
):
    service = PaymentService(db)
    return service.get_payments(
        limit=limit,
        offset=offset,
        commitment_id=commitment_id,
        expense_id=expense_id,
        date_from=date_from,
        date_to=date_to
    )


@payments_router.get("/number/{payment_number}", response_model=PaymentOut)
def get_payment_by_number(
    payment_number: str,
    db: Session = Depends(get_db)
):
    service = PaymentService(db)
    return service.get_payment_by_number(payment_number)


@payments_router.get("/commitment/{commitment_id}", response_model=List[PaymentOut])
def list_payments_by_commitment(
    commitment_id: int,
    db: Session = Depends(get_db)
):
    service = PaymentService(db)
    return service.get_payments_by_commitment(commitment_id)


@payments_router.get("/{payment_id}", response_model=PaymentOut)
def get_payment(
    payment_id: int,
    db: Session = Depends(get_db)
):
    service = PaymentService(db)
    return service.get_payment_by_id(payment_id)


@payments_router.put("/{payment_id}", response_model=PaymentOut)
def update_payment(
    payment_id: int,
    payment_update: PaymentUpdate,
    db: Session = Depends(get_db)
):
    """Actualizar un pago (techo: saldo del empeño + monto actual del pago)"""
    service = PaymentService(db)
    return service.update_payment(payment_id, payment_update)


@payments_router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db)
):
    service = PaymentService(db)
    service.delete_payment(payment_id)
