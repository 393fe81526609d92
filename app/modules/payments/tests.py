"""
Tests para el módulo de Pagos (Payments)

Cubren:
- Alta contra el saldo del empeño
- Recorrido completo de estados del gasto
- Edición, eliminación y vuelta atrás del estado
"""

from decimal import Decimal


def _expense_status(client, expense_id):
    return client.get(f"/expenses/{expense_id}").json()["status"]


class TestCreatePayment:

    def test_create_payment(self, client, create_expense, create_commitment, year):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "1000.00")

        response = client.post("/payments/", json={
            "payment_number": f"{year}NP0001",
            "amount": "250.00",
            "commitment_id": commitment["id"],
            "payment_date": "2030-01-10"
        })

        assert response.status_code == 201
        data = response.json()
        assert data["commitment_number"] == commitment["commitment_number"]
        assert data["expense_id"] == expense["id"]
        assert data["expense_protocol_number"] == expense["protocol_number"]
        assert data["payment_date"] == "2030-01-10"

        commitment_data = client.get(f"/commitments/{commitment['id']}").json()
        assert Decimal(commitment_data["total_paid_amount"]) == Decimal("250.00")
        assert Decimal(commitment_data["remaining_amount"]) == Decimal("750.00")

    def test_amount_above_commitment_remaining(self, client, create_expense, create_commitment, create_payment, year):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "500.00")
        create_payment(commitment["id"], "200.00")

        response = client.post("/payments/", json={
            "payment_number": f"{year}NP0002",
            "amount": "300.01",
            "commitment_id": commitment["id"]
        })

        assert response.status_code == 400
        assert response.json()["detail"] == "Valid amount is required (max: R$ 300,00)"

    def test_invalid_number_format(self, client, create_expense, create_commitment, year):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "500.00")

        response = client.post("/payments/", json={
            "payment_number": f"{year}NE0001",
            "amount": "10.00",
            "commitment_id": commitment["id"]
        })

        assert response.status_code == 400

    def test_duplicate_number(self, client, create_expense, create_commitment, create_payment, year):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "500.00")
        create_payment(commitment["id"], "10.00")

        response = client.post("/payments/", json={
            "payment_number": f"{year}NP0001",
            "amount": "10.00",
            "commitment_id": commitment["id"]
        })

        assert response.status_code == 409

    def test_missing_commitment(self, client, year):
        response = client.post("/payments/", json={
            "payment_number": f"{year}NP0001",
            "amount": "10.00",
            "commitment_id": 999
        })

        assert response.status_code == 404


class TestExpenseStatusFlow:
    """El estado del gasto sigue a empeños y pagos"""

    def test_full_walk_and_back(self, client, create_expense, create_commitment, create_payment):
        expense = create_expense()
        assert _expense_status(client, expense["id"]) == "AWAITING_COMMITMENT"

        first = create_commitment(expense["id"], "400.00")
        assert _expense_status(client, expense["id"]) == "PARTIALLY_COMMITTED"

        second = create_commitment(expense["id"], "600.00", sequence=2)
        assert _expense_status(client, expense["id"]) == "AWAITING_PAYMENT"

        create_payment(first["id"], "400.00")
        assert _expense_status(client, expense["id"]) == "PARTIALLY_PAID"

        last = create_payment(second["id"], "600.00", sequence=2)
        assert _expense_status(client, expense["id"]) == "PAID"

        assert client.delete(f"/payments/{last['id']}").status_code == 204
        assert _expense_status(client, expense["id"]) == "PARTIALLY_PAID"

        response = client.get("/expenses/status/PARTIALLY_PAID").json()
        assert [e["id"] for e in response] == [expense["id"]]


class TestQueryPayments:

    def test_list_and_lookups(self, client, create_expense, create_commitment, create_payment, year):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "500.00")
        create_payment(commitment["id"], "100.00")
        create_payment(commitment["id"], "50.00", sequence=2)

        data = client.get("/payments/", params={"expense_id": expense["id"]}).json()
        assert data["total"] == 2

        data = client.get("/payments/", params={"commitment_id": commitment["id"], "limit": 1}).json()
        assert data["total"] == 2
        assert len(data["items"]) == 1

        by_commitment = client.get(f"/payments/commitment/{commitment['id']}").json()
        assert len(by_commitment) == 2

        response = client.get(f"/payments/number/{year}NP0002")
        assert response.status_code == 200
        assert Decimal(response.json()["amount"]) == Decimal("50.00")

    def test_not_found(self, client):
        assert client.get("/payments/999").status_code == 404
        assert client.get("/payments/commitment/999").status_code == 404


class TestUpdatePayment:

    def test_edit_ceiling_includes_current_amount(self, client, create_expense, create_commitment, create_payment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "500.00")
        payment = create_payment(commitment["id"], "200.00")
        create_payment(commitment["id"], "300.00", sequence=2)

        response = client.put(f"/payments/{payment['id']}", json={"amount": "200.00"})
        assert response.status_code == 200

        response = client.put(f"/payments/{payment['id']}", json={"amount": "200.01"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Valid amount is required (max: R$ 200,00)"

    def test_edit_recomputes_status(self, client, create_expense, create_commitment, create_payment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "1000.00")
        payment = create_payment(commitment["id"], "100.00")

        response = client.put(f"/payments/{payment['id']}", json={"amount": "1000.00"})

        assert response.status_code == 200
        assert _expense_status(client, expense["id"]) == "PAID"

    def test_commitment_is_frozen(self, client, create_expense, create_commitment, create_payment):
        expense = create_expense()
        commitment = create_commitment(expense["id"], "500.00")
        other = create_commitment(expense["id"], "500.00", sequence=2)
        payment = create_payment(commitment["id"], "100.00")

        response = client.put(f"/payments/{payment['id']}", json={"commitment_id": other["id"]})

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot change the commitment associated with a payment"
