"""
Routers FastAPI para el módulo de Empeños (Commitments)
"""

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.database.database import get_db
from app.core.config import settings
from app.modules.commitments.service import CommitmentService
from app.modules.commitments.schemas import CommitmentCreate, CommitmentUpdate, CommitmentOut, CommitmentList

commitments_router = APIRouter(prefix="/commitments", tags=["Commitments"])


@commitments_router.post("/", response_model=CommitmentOut, status_code=status.HTTP_201_CREATED)
def create_commitment(
    commitment_data: CommitmentCreate,
    db: Session = Depends(get_db)
):
    """
    Registrar un empeño

    El monto debe ser positivo y no superar el saldo del gasto.
    Recalcula el estado del gasto.
    """
    service = CommitmentService(db)
    return service.create_commitment(commitment_data)


@commitments_router.get("/", response_model=CommitmentList)
def list_commitments(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    expense_id: Optional[int] = Query(None, description="Filtrar por gasto"),
    date_from: Optional[date] = Query(None, description="Fecha desde (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Fecha hasta (YYYY-MM-DD)"),
    db: Session = Depends(get_db)
):
    service = CommitmentService(db)
    return service.get_commitments(
        limit=limit,
        offset=offset,
        expense_id=expense_id,
        date_from=date_from,
        date_to=date_to
    )


@commitments_router.get("/number/{commitment_number}", response_model=CommitmentOut)
def get_commitment_by_number(
    commitment_number: str,
    db: Session = Depends(get_db)
):
    service = CommitmentService(db)
    return service.get_commitment_by_number(commitment_number)


@commitments_router.get("/expense/{expense_id}", response_model=List[CommitmentOut])
def list_commitments_by_expense(
    expense_id: int,
    db: Session = Depends(get_db)
):
    """Empeños de un gasto"""
    service = CommitmentService(db)
    return service.get_commitments_by_expense(expense_id)


@commitments_router.get("/{commitment_id}", response_model=CommitmentOut)
def get_commitment(
    commitment_id: int,
    db: Session = Depends(get_db)
):
    service = CommitmentService(db)
    return service.get_commitment_by_id(commitment_id)


@commitments_router.put("/{commitment_id}", response_model=CommitmentOut)
def update_commitment(
    commitment_id: int,
    commitment_update: CommitmentUpdate,
    db: Session = Depends(get_db)
):
    """
    Actualizar un empeño

    El techo es el saldo del gasto más el monto actual del empeño, y el
    nuevo monto no puede quedar por debajo de lo ya pagado.
    """
    service = CommitmentService(db)
    return service.update_commitment(commitment_id, commitment_update)


@commitments_router.delete("/{commitment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_commitment(
    commitment_id: int,
    db: Session = Depends(get_db)
):
    """Eliminar un empeño sin pagos"""
    service = CommitmentService(db)
    service.delete_commitment(commitment_id)
