"""
Tests para el módulo de Gastos (Expenses)

Cubren:
- Alta con validación de protocolo y unicidad
- Listado con filtros y paginación
- Búsquedas por protocolo y estado
- Reglas de edición y eliminación
"""

from decimal import Decimal


class TestCreateExpense:

    def test_create_expense(self, client, sample_expense_data):
        response = client.post("/expenses/", json=sample_expense_data)

        assert response.status_code == 201
        data = response.json()
        assert data["protocol_number"] == sample_expense_data["protocol_number"]
        assert data["status"] == "AWAITING_COMMITMENT"
        assert Decimal(data["amount"]) == Decimal("1000.00")
        assert Decimal(data["remaining_amount"]) == Decimal("1000.00")
        assert Decimal(data["total_committed_amount"]) == Decimal("0")
        assert data["commitment_count"] == 0
        assert data["protocol_date"] is not None

    def test_invalid_protocol_format(self, client, sample_expense_data):
        response = client.post("/expenses/", json={**sample_expense_data, "protocol_number": "12345"})

        assert response.status_code == 400
        assert "Invalid protocol number format" in response.json()["detail"]

    def test_duplicate_protocol(self, client, create_expense, sample_expense_data):
        create_expense()
        response = client.post("/expenses/", json=sample_expense_data)

        assert response.status_code == 409

    def test_non_positive_amount_is_422(self, client, sample_expense_data):
        response = client.post("/expenses/", json={**sample_expense_data, "amount": "0"})
        assert response.status_code == 422

    def test_amount_with_too_many_digits_is_422(self, client, sample_expense_data):
        response = client.post("/expenses/", json={**sample_expense_data, "amount": "1e30"})
        assert response.status_code == 422

    def test_amount_rounding_to_zero_is_422(self, client, sample_expense_data):
        response = client.post("/expenses/", json={**sample_expense_data, "amount": "0.004"})
        assert response.status_code == 422

    def test_amount_rounds_half_up(self, client, sample_expense_data):
        response = client.post("/expenses/", json={**sample_expense_data, "amount": "10.005"})

        assert response.status_code == 201
        assert Decimal(response.json()["amount"]) == Decimal("10.01")

    def test_status_is_not_accepted_from_client(self, client, sample_expense_data):
        response = client.post("/expenses/", json={**sample_expense_data, "status": "PAID"})

        assert response.status_code == 201
        assert response.json()["status"] == "AWAITING_COMMITMENT"


class TestQueryExpenses:

    def test_list_with_filters(self, client, create_expense):
        create_expense()
        create_expense(protocol_number="23001.000124/2024-11", creditor="Papelaria Central", expense_type="MATERIALS")

        response = client.get("/expenses/")
        assert response.status_code == 200
        assert response.json()["total"] == 2

        response = client.get("/expenses/", params={"creditor": "papelaria"})
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["creditor"] == "Papelaria Central"

        response = client.get("/expenses/", params={"expense_type": "SERVICES"})
        assert response.json()["total"] == 1

    def test_pagination(self, client, create_expense):
        for i in range(3):
            create_expense(protocol_number=f"23001.00012{i}/2024-11")

        data = client.get("/expenses/", params={"limit": 2, "offset": 0}).json()
        assert len(data["items"]) == 2
        assert data["total"] == 3
        assert data["limit"] == 2

    def test_due_date_range(self, client, create_expense):
        create_expense(due_date="2030-01-15")
        create_expense(protocol_number="23001.000124/2024-11", due_date="2030-06-15")

        data = client.get("/expenses/", params={"due_from": "2030-03-01", "due_to": "2030-12-31"}).json()
        assert data["total"] == 1
        assert data["items"][0]["due_date"] == "2030-06-15"

    def test_get_by_protocol_number(self, client, create_expense):
        expense = create_expense()

        response = client.get(f"/expenses/protocol/{expense['protocol_number']}")
        assert response.status_code == 200
        assert response.json()["id"] == expense["id"]

    def test_get_by_status(self, client, create_expense):
        create_expense()

        response = client.get("/expenses/status/AWAITING_COMMITMENT")
        assert response.status_code == 200
        assert len(response.json()) == 1
        assert client.get("/expenses/status/PAID").json() == []

    def test_not_found(self, client):
        response = client.get("/expenses/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Expense not found with id: 999"


class TestUpdateExpense:

    def test_update_fields(self, client, create_expense):
        expense = create_expense()

        response = client.put(f"/expenses/{expense['id']}", json={"creditor": "Nova Limpeza", "notes": None})

        assert response.status_code == 200
        data = response.json()
        assert data["creditor"] == "Nova Limpeza"
        assert data["notes"] is None
        assert data["description"] == expense["description"]

    def test_protocol_number_is_frozen(self, client, create_expense):
        expense = create_expense()

        response = client.put(f"/expenses/{expense['id']}", json={"protocol_number": "99999.999999/2024-99"})
        assert response.status_code == 400

    def test_amount_cannot_drop_below_committed(self, client, create_expense, create_commitment):
        expense = create_expense()
        create_commitment(expense["id"], "600.00")

        response = client.put(f"/expenses/{expense['id']}", json={"amount": "599.99"})
        assert response.status_code == 400
        assert "below the total committed amount" in response.json()["detail"]

    def test_amount_edit_recomputes_status(self, client, create_expense, create_commitment):
        expense = create_expense()
        create_commitment(expense["id"], "600.00")

        response = client.put(f"/expenses/{expense['id']}", json={"amount": "600.00"})

        assert response.status_code == 200
        assert response.json()["status"] == "AWAITING_PAYMENT"


class TestDeleteExpense:

    def test_delete_expense(self, client, create_expense):
        expense = create_expense()

        assert client.delete(f"/expenses/{expense['id']}").status_code == 204
        assert client.get(f"/expenses/{expense['id']}").status_code == 404

    def test_delete_with_commitments_rejected(self, client, create_expense, create_commitment):
        expense = create_expense()
        create_commitment(expense["id"], "100.00")

        response = client.delete(f"/expenses/{expense['id']}")
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot delete expense with associated commitments"
