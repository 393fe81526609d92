"""
Tests para el libro de saldos

Cubren:
- Techo de asignación en alta y edición
- Validación de montos (positivos, techo, redondeo a centavos)
- Estado derivado del gasto
- Formato monetario pt-BR
- Endpoints de techo y validación (/ledger)
"""

import pytest
from decimal import Decimal
from types import SimpleNamespace

from app.modules.ledger import calculator
from app.modules.ledger.calculator import (
    ExpenseStatus,
    InvalidAmount,
    max_allocatable,
    validate_allocation,
    is_valid_allocation,
    derive_expense_status,
    format_currency,
)


# ===== TESTS DE TECHO =====

class TestMaxAllocatable:
    """Tests para el techo de asignación"""

    def test_create_uses_parent_remaining(self):
        expense = SimpleNamespace(amount=Decimal("1000.00"), remaining_amount=Decimal("600.00"))
        assert max_allocatable(expense) == Decimal("600.00")

    def test_edit_adds_child_current_amount(self):
        expense = SimpleNamespace(remaining_amount=Decimal("0.00"))
        commitment = SimpleNamespace(amount=Decimal("400.00"))
        assert max_allocatable(expense, commitment) == Decimal("400.00")

    def test_accepts_mappings(self):
        assert max_allocatable({"remaining_amount": 100}, {"amount": "50.5"}) == Decimal("150.50")

    def test_missing_parent_is_zero(self):
        assert max_allocatable(None) == Decimal("0.00")
        assert max_allocatable(None, {"amount": 10}) == Decimal("0.00")

    def test_parent_without_remaining_is_zero(self):
        assert max_allocatable({"amount": 100}) == Decimal("0.00")

    def test_never_negative(self):
        assert max_allocatable({"remaining_amount": "-25.00"}) == Decimal("0.00")

    def test_idempotent(self):
        parent = {"remaining_amount": "123.456"}
        assert max_allocatable(parent) == max_allocatable(parent) == Decimal("123.46")


# ===== TESTS DE REDONDEO =====

class TestMoney:
    """Tests para la conversión de montos a centavos"""

    def test_half_cent_rounds_up(self):
        assert calculator.money("400.005") == Decimal("400.01")
        assert calculator.money("399.995") == Decimal("400.00")

    @pytest.mark.parametrize("value", ["1e30", Decimal("1E+30"), "10000000000000.00"])
    def test_too_many_digits(self, value):
        with pytest.raises(ValueError):
            calculator.money(value)

    def test_largest_column_value(self):
        assert calculator.money("9999999999999.99") == calculator.MAX_AMOUNT

    def test_positive_money_rejects_amounts_rounding_to_zero(self):
        with pytest.raises(ValueError):
            calculator.positive_money("0.004")
        assert calculator.positive_money("0.005") == Decimal("0.01")

    def test_huge_amount_is_invalid_allocation(self):
        with pytest.raises(InvalidAmount) as exc_info:
            validate_allocation("1e30", 10)
        assert exc_info.value.reason == InvalidAmount.NOT_A_NUMBER

    def test_huge_ceiling_is_zero(self):
        assert not is_valid_allocation("1", "1e30")


# ===== TESTS DE VALIDACIÓN =====

class TestValidateAllocation:
    """Tests para la validación de montos contra el techo"""

    def test_amount_equal_to_ceiling_is_valid(self):
        assert validate_allocation(Decimal("600.00"), Decimal("600.00")) == Decimal("600.00")

    def test_float_rounding_compares_equal(self):
        assert validate_allocation(0.1 + 0.2, 0.3) == Decimal("0.30")

    def test_amount_above_ceiling(self):
        with pytest.raises(InvalidAmount) as exc_info:
            validate_allocation("600.01", "600.00")

        assert exc_info.value.reason == InvalidAmount.EXCEEDS_CEILING
        assert exc_info.value.ceiling == Decimal("600.00")
        assert exc_info.value.message == "Valid amount is required (max: R$ 600,00)"

    @pytest.mark.parametrize("amount", [0, "0.00", -1, "-0.01"])
    def test_non_positive_amount(self, amount):
        with pytest.raises(InvalidAmount) as exc_info:
            validate_allocation(amount, 100)
        assert exc_info.value.reason == InvalidAmount.NON_POSITIVE

    @pytest.mark.parametrize("amount", [None, "", "abc", True, float("nan")])
    def test_missing_or_non_numeric_amount(self, amount):
        with pytest.raises(InvalidAmount) as exc_info:
            validate_allocation(amount, 100)
        assert exc_info.value.reason == InvalidAmount.NOT_A_NUMBER

    def test_zero_ceiling_rejects_everything(self):
        assert not is_valid_allocation("0.01", 0)

    def test_invalid_amount_is_value_error(self):
        with pytest.raises(ValueError):
            validate_allocation(5, 1)

    def test_is_valid_allocation(self):
        assert is_valid_allocation("99.99", "100")
        assert not is_valid_allocation("100.01", "100")

    def test_custom_currency_symbol(self):
        with pytest.raises(InvalidAmount) as exc_info:
            validate_allocation(10, 5, symbol="US$")
        assert exc_info.value.message == "Valid amount is required (max: US$ 5,00)"


# ===== TESTS DE ESTADO =====

class TestDeriveExpenseStatus:
    """Tests para la máquina de estados del gasto"""

    @pytest.mark.parametrize("committed, paid, expected", [
        ("0", "0", ExpenseStatus.AWAITING_COMMITMENT),
        ("400", "0", ExpenseStatus.PARTIALLY_COMMITTED),
        ("400", "100", ExpenseStatus.PARTIALLY_COMMITTED),
        ("1000", "0", ExpenseStatus.AWAITING_PAYMENT),
        ("1000", "999.99", ExpenseStatus.PARTIALLY_PAID),
        ("1000", "1000", ExpenseStatus.PAID),
    ])
    def test_status_from_totals(self, committed, paid, expected):
        assert derive_expense_status("1000.00", committed, paid) == expected

    def test_missing_totals_count_as_zero(self):
        assert derive_expense_status(50, None, None) == ExpenseStatus.AWAITING_COMMITMENT


# ===== TESTS DE FORMATO =====

class TestFormatCurrency:
    """Tests para el formato monetario"""

    @pytest.mark.parametrize("value, expected", [
        (Decimal("1234.56"), "R$ 1.234,56"),
        (1234567.8, "R$ 1.234.567,80"),
        ("0.5", "R$ 0,50"),
        (0, "R$ 0,00"),
        (None, "R$ 0,00"),
        (Decimal("-12.3"), "-R$ 12,30"),
    ])
    def test_pt_br_format(self, value, expected):
        assert format_currency(value) == expected

    def test_remaining_amount(self):
        assert calculator.remaining_amount("1000", "400.5") == Decimal("599.50")
        assert calculator.remaining_amount(10, None) == Decimal("10.00")


# ===== TESTS DE ENDPOINTS =====


class TestCeilingEndpoints:

    def test_expense_ceiling_for_new_commitment(self, client, create_expense, create_commitment):
        expense = create_expense()
        create_commitment(expense["id"], "400.00")

        response = client.get(f"/ledger/expenses/{expense['id']}/ceiling")

        assert response.status_code == 200
        data = response.json()
        assert data["parent_id"] == expense["id"]
        assert Decimal(data["parent_amount"]) == Decimal("1000.00")
        assert Decimal(data["remaining_amount"]) == Decimal("600.00")
        assert data["current_amount"] is None
        assert Decimal(data["ceiling"]) == Decimal("600.00")
        assert data["formatted_ceiling"] == "R$ 600,00"

    def test_expense_ceiling_for_edited_commitment(self, client, create_expense, create_commitment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "400.00")
        create_commitment(expense["id"], "600.00", sequence=2)

        response = client.get(
            f"/ledger/expenses/{expense['id']}/ceiling",
            params={"commitment_id": commitment["id"]}
        )

        data = response.json()
        assert Decimal(data["remaining_amount"]) == Decimal("0.00")
        assert Decimal(data["current_amount"]) == Decimal("400.00")
        assert Decimal(data["ceiling"]) == Decimal("400.00")

    def test_commitment_from_other_expense(self, client, create_expense, create_commitment):
        expense = create_expense()
        other = create_expense(protocol_number="23001.000124/2024-11")
        commitment = create_commitment(other["id"], "100.00")

        response = client.get(
            f"/ledger/expenses/{expense['id']}/ceiling",
            params={"commitment_id": commitment["id"]}
        )

        assert response.status_code == 400

    def test_commitment_ceiling_for_payments(self, client, create_expense, create_commitment, create_payment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "800.00")
        payment = create_payment(commitment["id"], "300.00")

        data = client.get(f"/ledger/commitments/{commitment['id']}/ceiling").json()
        assert Decimal(data["ceiling"]) == Decimal("500.00")

        data = client.get(
            f"/ledger/commitments/{commitment['id']}/ceiling",
            params={"payment_id": payment["id"]}
        ).json()
        assert Decimal(data["ceiling"]) == Decimal("800.00")

    def test_missing_parent(self, client):
        assert client.get("/ledger/expenses/999/ceiling").status_code == 404
        assert client.get("/ledger/commitments/999/ceiling").status_code == 404


class TestValidateEndpoint:
    """Un monto inválido se informa en el cuerpo, nunca como error HTTP"""

    def test_valid_amount(self, client):
        response = client.post("/ledger/validate", json={"amount": "150.50", "ceiling": "200"})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert Decimal(data["amount"]) == Decimal("150.50")
        assert data["message"] is None

    def test_amount_above_ceiling(self, client):
        response = client.post("/ledger/validate", json={"amount": 1500, "ceiling": "1234.56"})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["reason"] == "exceeds_ceiling"
        assert data["message"] == "Valid amount is required (max: R$ 1.234,56)"

    def test_non_numeric_and_missing_amount(self, client):
        for payload in ({"amount": "abc", "ceiling": "10"}, {"ceiling": "10"}):
            data = client.post("/ledger/validate", json=payload).json()
            assert data["valid"] is False
            assert data["reason"] == "not_a_number"

    def test_zero_amount(self, client):
        data = client.post("/ledger/validate", json={"amount": "0", "ceiling": "10"}).json()
        assert data["valid"] is False
        assert data["reason"] == "non_positive"

    def test_huge_amount_is_reported_not_raised(self, client):
        response = client.post("/ledger/validate", json={"amount": "1e30", "ceiling": "10"})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["reason"] == "not_a_number"

    def test_huge_ceiling_is_reported_not_raised(self, client):
        response = client.post("/ledger/validate", json={"amount": "5", "ceiling": "1e30"})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["formatted_ceiling"] == "R$ 0,00"

    def test_half_cent_rounds_up(self, client):
        data = client.post("/ledger/validate", json={"amount": "400.005", "ceiling": "400"}).json()
        assert data["valid"] is False
        assert data["reason"] == "exceeds_ceiling"

        data = client.post("/ledger/validate", json={"amount": "399.995", "ceiling": "400"}).json()
        assert data["valid"] is True
        assert Decimal(data["amount"]) == Decimal("400.00")


class TestHealth:

    def test_root_and_health(self, client):
        assert client.get("/").status_code == 200

        response = client.get("/health")
        assert response.json()["status"] == "healthy"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Process-Time" in response.headers
