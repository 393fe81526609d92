"""
Tests para el módulo de Empeños (Commitments)

Cubren:
- Alta contra el saldo del gasto (techo y mensaje con el máximo)
- Número AAAANE#### con el año vigente y unicidad
- Edición con techo saldo + monto actual, y piso en lo pagado
- Eliminación solo sin pagos
"""

from decimal import Decimal


class TestCreateCommitment:

    def test_create_commitment(self, client, create_expense, year):
        expense = create_expense()

        response = client.post("/commitments/", json={
            "commitment_number": f"{year}ne0001",
            "amount": "400.00",
            "expense_id": expense["id"]
        })

        assert response.status_code == 201
        data = response.json()
        assert data["commitment_number"] == f"{year}NE0001"
        assert data["expense_protocol_number"] == expense["protocol_number"]
        assert Decimal(data["remaining_amount"]) == Decimal("400.00")
        assert data["payment_count"] == 0

        expense_data = client.get(f"/expenses/{expense['id']}").json()
        assert Decimal(expense_data["remaining_amount"]) == Decimal("600.00")
        assert expense_data["status"] == "PARTIALLY_COMMITTED"

    def test_amount_above_remaining_rejected(self, client, create_expense, create_commitment, year):
        expense = create_expense()
        create_commitment(expense["id"], "400.00")

        response = client.post("/commitments/", json={
            "commitment_number": f"{year}NE0002",
            "amount": "600.01",
            "expense_id": expense["id"]
        })

        assert response.status_code == 400
        assert response.json()["detail"] == "Valid amount is required (max: R$ 600,00)"

    def test_amount_equal_to_remaining_accepted(self, client, create_expense, create_commitment):
        expense = create_expense()
        create_commitment(expense["id"], "400.00")
        commitment = create_commitment(expense["id"], "600.00", sequence=2)

        assert Decimal(commitment["expense_amount"]) == Decimal("1000.00")
        expense_data = client.get(f"/expenses/{expense['id']}").json()
        assert Decimal(expense_data["remaining_amount"]) == Decimal("0.00")
        assert expense_data["status"] == "AWAITING_PAYMENT"

    def test_fully_committed_expense_rejects_any_amount(self, client, create_expense, create_commitment, year):
        expense = create_expense()
        create_commitment(expense["id"], "1000.00")

        response = client.post("/commitments/", json={
            "commitment_number": f"{year}NE0002",
            "amount": "0.01",
            "expense_id": expense["id"]
        })

        assert response.status_code == 400
        assert response.json()["detail"] == "Valid amount is required (max: R$ 0,00)"

    def test_past_year_number_rejected(self, client, create_expense, year):
        expense = create_expense()

        response = client.post("/commitments/", json={
            "commitment_number": f"{year - 1}NE0001",
            "amount": "10.00",
            "expense_id": expense["id"]
        })

        assert response.status_code == 400

    def test_duplicate_number(self, client, create_expense, create_commitment, year):
        expense = create_expense()
        create_commitment(expense["id"], "100.00")

        response = client.post("/commitments/", json={
            "commitment_number": f"{year}NE0001",
            "amount": "100.00",
            "expense_id": expense["id"]
        })

        assert response.status_code == 409

    def test_missing_expense(self, client, year):
        response = client.post("/commitments/", json={
            "commitment_number": f"{year}NE0001",
            "amount": "100.00",
            "expense_id": 999
        })

        assert response.status_code == 404

    def test_amount_with_too_many_digits_is_422(self, client, create_expense, year):
        expense = create_expense()

        response = client.post("/commitments/", json={
            "commitment_number": f"{year}NE0001",
            "amount": "1e30",
            "expense_id": expense["id"]
        })

        assert response.status_code == 422


class TestHalfCentAmounts:
    """El endpoint de validación y el alta redondean igual (ROUND_HALF_UP)"""

    def _check(self, client, expense_id, amount):
        ceiling = client.get(f"/ledger/expenses/{expense_id}/ceiling").json()["ceiling"]
        return client.post("/ledger/validate", json={"amount": amount, "ceiling": ceiling}).json()

    def test_rounding_up_past_remaining_is_rejected_by_both(self, client, create_expense, create_commitment, year):
        expense = create_expense()
        create_commitment(expense["id"], "600.00")

        check = self._check(client, expense["id"], "400.005")
        response = client.post("/commitments/", json={
            "commitment_number": f"{year}NE0002",
            "amount": "400.005",
            "expense_id": expense["id"]
        })

        assert check["valid"] is False
        assert response.status_code == 400
        assert response.json()["detail"] == check["message"]

    def test_rounding_up_to_remaining_is_accepted_by_both(self, client, create_expense, create_commitment, year):
        expense = create_expense()
        create_commitment(expense["id"], "600.00")

        check = self._check(client, expense["id"], "399.995")
        response = client.post("/commitments/", json={
            "commitment_number": f"{year}NE0002",
            "amount": "399.995",
            "expense_id": expense["id"]
        })

        assert check["valid"] is True
        assert response.status_code == 201
        assert Decimal(response.json()["amount"]) == Decimal(check["amount"]) == Decimal("400.00")


class TestQueryCommitments:

    def test_list_and_lookups(self, client, create_expense, create_commitment, year):
        expense = create_expense()
        other = create_expense(protocol_number="23001.000124/2024-11")
        create_commitment(expense["id"], "100.00")
        create_commitment(other["id"], "200.00", sequence=2)

        data = client.get("/commitments/", params={"expense_id": expense["id"]}).json()
        assert data["total"] == 1

        by_expense = client.get(f"/commitments/expense/{other['id']}").json()
        assert [c["commitment_number"] for c in by_expense] == [f"{year}NE0002"]

        response = client.get(f"/commitments/number/{year}NE0001")
        assert response.status_code == 200
        assert response.json()["expense_id"] == expense["id"]

    def test_by_missing_expense(self, client):
        assert client.get("/commitments/expense/999").status_code == 404

    def test_not_found(self, client):
        response = client.get("/commitments/999")
        assert response.status_code == 404


class TestUpdateCommitment:

    def test_edit_ceiling_includes_current_amount(self, client, create_expense, create_commitment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "400.00")
        create_commitment(expense["id"], "600.00", sequence=2)

        response = client.put(f"/commitments/{commitment['id']}", json={"amount": "400.00"})
        assert response.status_code == 200

        response = client.put(f"/commitments/{commitment['id']}", json={"amount": "400.01"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Valid amount is required (max: R$ 400,00)"

    def test_reducing_amount_recomputes_status(self, client, create_expense, create_commitment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "1000.00")

        response = client.put(f"/commitments/{commitment['id']}", json={"amount": "250.00", "notes": "Reajuste"})

        assert response.status_code == 200
        assert response.json()["notes"] == "Reajuste"
        expense_data = client.get(f"/expenses/{expense['id']}").json()
        assert expense_data["status"] == "PARTIALLY_COMMITTED"
        assert Decimal(expense_data["remaining_amount"]) == Decimal("750.00")

    def test_amount_cannot_drop_below_paid(self, client, create_expense, create_commitment, create_payment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "500.00")
        create_payment(commitment["id"], "300.00")

        response = client.put(f"/commitments/{commitment['id']}", json={"amount": "299.99"})

        assert response.status_code == 400
        assert "below the total paid amount" in response.json()["detail"]

    def test_expense_is_frozen(self, client, create_expense, create_commitment):
        expense = create_expense()
        other = create_expense(protocol_number="23001.000124/2024-11")
        commitment = create_commitment(expense["id"], "100.00")

        response = client.put(f"/commitments/{commitment['id']}", json={"expense_id": other["id"]})

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot change the expense associated with a commitment"

    def test_same_expense_and_number_accepted(self, client, create_expense, create_commitment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "100.00")

        response = client.put(f"/commitments/{commitment['id']}", json={
            "expense_id": expense["id"],
            "commitment_number": commitment["commitment_number"]
        })

        assert response.status_code == 200

    def test_number_is_frozen(self, client, create_expense, create_commitment, year):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "100.00")

        response = client.put(f"/commitments/{commitment['id']}", json={"commitment_number": f"{year}NE0099"})
        assert response.status_code == 400


class TestDeleteCommitment:

    def test_delete_recomputes_status(self, client, create_expense, create_commitment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "100.00")

        assert client.delete(f"/commitments/{commitment['id']}").status_code == 204

        expense_data = client.get(f"/expenses/{expense['id']}").json()
        assert expense_data["status"] == "AWAITING_COMMITMENT"
        assert expense_data["commitment_count"] == 0

    def test_delete_with_payments_rejected(self, client, create_expense, create_commitment, create_payment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "100.00")
        create_payment(commitment["id"], "50.00")

        response = client.delete(f"/commitments/{commitment['id']}")

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot delete commitment with associated payments"
