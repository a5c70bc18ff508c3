from logistik.models import Expense, UserApproval, AuditLog

from conftest import make_user


def test_signup_creates_a_pending_account(client, db):
    response = client.post("/api/v1/auth/signup", json={
        "email": "Baru@MKL.co.id", "password": "rahasia1", "full_name": "Staf Baru"
    })
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "baru@mkl.co.id"
    assert body["user"]["approval_status"] == "pending"

    approval = db.query(UserApproval).filter(UserApproval.user_id == body["user"]["id"]).one()
    assert approval.status == "pending"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json()["approval_status"] == "pending"
    assert me.json()["full_name"] == "Staf Baru"

    duplicate = client.post("/api/v1/auth/signup", json={"email": "baru@mkl.co.id", "password": "rahasia1"})
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Email sudah terdaftar"


def test_signup_rejects_short_passwords(client):
    response = client.post("/api/v1/auth/signup", json={"email": "pendek@mkl.co.id", "password": "123"})
    assert response.status_code == 422


def test_login(client, db):
    make_user(db, "masuk@mkl.co.id", password="benar123")

    failed = client.post("/api/v1/auth/login", json={"email": "masuk@mkl.co.id", "password": "salah"})
    assert failed.status_code == 401
    assert failed.json()["detail"] == "Email atau password salah"
    assert db.query(AuditLog).filter(AuditLog.status == "failure").count() == 1

    response = client.post("/api/v1/auth/login", json={"email": "masuk@mkl.co.id", "password": "benar123"})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"
    assert "access_token" in response.cookies


def test_data_routes_require_a_token(client):
    assert client.get("/api/v1/customers").status_code == 401
    assert client.get("/api/v1/customers", headers={"Authorization": "Bearer rusak"}).status_code == 401


def test_customer_crud(client, staff_headers):
    created = client.post("/api/v1/customers", headers=staff_headers, json={
        "company_name": "PT Samudra", "city": "Surabaya", "phone": ["031-111", "0812"]
    })
    assert created.status_code == 200
    customer = created.json()
    assert customer["phone"] == ["031-111", "0812"]
    assert customer["deleted_at"] is None

    url = f"/api/v1/customers/{customer['id']}"
    updated = client.put(url, headers=staff_headers, json={"city": "Jakarta"})
    assert updated.json()["city"] == "Jakarta"
    assert updated.json()["company_name"] == "PT Samudra"

    found = client.get("/api/v1/customers/search", params={"q": "jakar"}, headers=staff_headers)
    assert [c["company_name"] for c in found.json()] == ["PT Samudra"]

    deleted = client.delete(url, headers=staff_headers)
    assert deleted.json() == {"message": "Pelanggan dipindahkan ke Recycle Bin"}

    missing = client.get(url, headers=staff_headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Pelanggan tidak ditemukan"
    assert client.put(url, headers=staff_headers, json={"city": "Bogor"}).status_code == 404
    assert client.get("/api/v1/customers", headers=staff_headers).json() == []


def test_expense_records_its_creator(client, staff_headers, staff_user, db):
    response = client.post("/api/v1/expenses", headers=staff_headers, json={
        "category": "Solar", "amount": "150000", "expense_date": "2026-10-01"
    })
    assert response.status_code == 200
    assert response.json()["created_by"] == staff_user.id
    assert db.query(Expense).one().created_by == staff_user.id

    categories = client.get("/api/v1/expenses/categories", headers=staff_headers)
    assert categories.json() == {"categories": ["Solar"]}


def test_invoice_items_are_replaced_on_update(client, staff_headers):
    created = client.post("/api/v1/invoices", headers=staff_headers, json={
        "invoice_number": "INV-ITEM",
        "items": [{"description": "Trucking", "amount": 500000}, {"description": "Lolo", "amount": 100000}],
    }).json()
    assert [i["description"] for i in created["items"]] == ["Trucking", "Lolo"]

    url = f"/api/v1/invoices/{created['id']}"
    updated = client.put(url, headers=staff_headers,
                         json={"items": [{"description": "Storage", "amount": 75000}]}).json()
    assert [i["description"] for i in updated["items"]] == ["Storage"]

    # Omitting items leaves them untouched
    renamed = client.put(url, headers=staff_headers, json={"notes": "cek"}).json()
    assert [i["description"] for i in renamed["items"]] == ["Storage"]


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
