from datetime import date


def _post(api_client, **body):
    payload = {"text": "Lunch", "amount": -120, "type": "expense", "category": "Food", "date": "2025-11-05"}
    payload.update(body)
    return api_client.post("/api/transactions", json=payload)


def test_health(api_client):
    response = api_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_and_list(api_client):
    created = _post(api_client)
    assert created.status_code == 201
    doc = created.json()
    assert doc["_id"]
    assert doc["amount"] == -120
    assert doc["date"] == "2025-11-05"

    _post(api_client, text="Salary", amount=1000, type="income", date="2025-11-07")
    listed = api_client.get("/api/transactions").json()
    assert [d["text"] for d in listed] == ["Salary", "Lunch"]


def test_defaults_for_category_and_date(api_client):
    doc = api_client.post("/api/transactions", json={"text": "Gift", "amount": 50, "type": "income"}).json()
    assert doc["category"] == "General"
    assert doc["date"] == date.today().isoformat()


def test_missing_required_field(api_client):
    response = api_client.post("/api/transactions", json={"amount": 5, "type": "expense"})
    assert response.status_code == 400
    assert "text" in response.json()["message"]


def test_invalid_values_are_rejected(api_client):
    assert _post(api_client, type="transfer").status_code == 400
    assert _post(api_client, amount="lots").status_code == 400
    bad_date = _post(api_client, date="31/31/2025")
    assert bad_date.status_code == 400
    assert "date" in bad_date.json()["message"]
    assert api_client.get("/api/transactions").json() == []


def test_delete(api_client, store):
    doc_id = _post(api_client).json()["_id"]
    assert store.get(doc_id)["text"] == "Lunch"
    response = api_client.delete(f"/api/transactions/{doc_id}")
    assert response.status_code == 200
    assert response.json() == {"message": "Transaction deleted successfully"}

    assert store.get(doc_id) is None

    again = api_client.delete(f"/api/transactions/{doc_id}")
    assert again.status_code == 404
    assert again.json() == {"message": "Transaction not found"}
