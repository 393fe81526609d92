"""
Fixtures compartidas: SQLite en memoria y TestClient con get_db sobrescrito
"""
import os

# La configuración se lee al importar app.core.config
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database.database import Base, get_db


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def year():
    return date.today().year


@pytest.fixture
def sample_expense_data():
    """Gasto de ejemplo por R$ 1.000,00"""
    return {
        "protocol_number": "23001.000123/2024-11",
        "expense_type": "SERVICES",
        "due_date": "2030-12-31",
        "creditor": "Companhia de Limpeza Ltda",
        "description": "Serviço de limpeza predial",
        "amount": "1000.00",
        "notes": "Contrato anual"
    }


@pytest.fixture
def create_expense(client, sample_expense_data):
    def _create(**overrides):
        payload = {**sample_expense_data, **overrides}
        response = client.post("/expenses/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def create_commitment(client, year):
    def _create(expense_id, amount, sequence=1):
        payload = {
            "commitment_number": f"{year}NE{sequence:04d}",
            "amount": str(amount),
            "expense_id": expense_id
        }
        response = client.post("/commitments/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def create_payment(client, year):
    def _create(commitment_id, amount, sequence=1):
        payload = {
            "payment_number": f"{year}NP{sequence:04d}",
            "amount": str(amount),
            "commitment_id": commitment_id
        }
        response = client.post("/payments/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _create
