"""
Routers FastAPI para el módulo de Gastos (Expenses)
"""

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.database.database import get_db
from app.core.config import settings
from app.modules.expenses.models import ExpenseType
from app.modules.expenses.service import ExpenseService
from app.modules.expenses.schemas import ExpenseCreate, ExpenseUpdate, ExpenseOut, ExpenseList
from app.modules.ledger.calculator import ExpenseStatus

expenses_router = APIRouter(prefix="/expenses", tags=["Expenses"])


@expenses_router.post("/", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense_data: ExpenseCreate,
    db: Session = Depends(get_db)
):
    """
    Registrar un nuevo gasto

    El gasto nace en estado AWAITING_COMMITMENT.
    """
    service = ExpenseService(db)
    return service.create_expense(expense_data)


@expenses_router.get("/", response_model=ExpenseList)
def list_expenses(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    status: Optional[ExpenseStatus] = Query(None, description="Filtrar por estado"),
    expense_type: Optional[ExpenseType] = Query(None, description="Filtrar por tipo"),
    creditor: Optional[str] = Query(None, description="Buscar por acreedor"),
    due_from: Optional[date] = Query(None, description="Vencimiento desde (YYYY-MM-DD)"),
    due_to: Optional[date] = Query(None, description="Vencimiento hasta (YYYY-MM-DD)"),
    db: Session = Depends(get_db)
):
    """Listar gastos con filtros"""
    service = ExpenseService(db)
    return service.get_expenses(
        limit=limit,
        offset=offset,
        status=status,
        expense_type=expense_type,
        creditor=creditor,
        due_from=due_from,
        due_to=due_to
    )


@expenses_router.get("/status/{expense_status}", response_model=List[ExpenseOut])
def list_expenses_by_status(
    expense_status: ExpenseStatus,
    db: Session = Depends(get_db)
):
    service = ExpenseService(db)
    return service.get_expenses_by_status(expense_status)


@expenses_router.get("/protocol/{protocol_number:path}", response_model=ExpenseOut)
def get_expense_by_protocol_number(
    protocol_number: str,
    db: Session = Depends(get_db)
):
    """Buscar gasto por número de protocolo (contiene '/', de ahí el path converter)"""
    service = ExpenseService(db)
    return service.get_expense_by_protocol_number(protocol_number)


@expenses_router.get("/{expense_id}", response_model=ExpenseOut)
def get_expense(
    expense_id: int,
    db: Session = Depends(get_db)
):
    service = ExpenseService(db)
    return service.get_expense_by_id(expense_id)


@expenses_router.put("/{expense_id}", response_model=ExpenseOut)
def update_expense(
    expense_id: int,
    expense_update: ExpenseUpdate,
    db: Session = Depends(get_db)
):
    """
    Actualizar un gasto

    El número de protocolo no se puede cambiar y el monto no puede
    quedar por debajo del total empeñado.
    """
    service = ExpenseService(db)
    return service.update_expense(expense_id, expense_update)


@expenses_router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db)
):
    """Eliminar un gasto sin empeños"""
    service = ExpenseService(db)
    service.delete_expense(expense_id)
