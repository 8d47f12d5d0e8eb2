from datetime import date

from backend.madrasha_module.models import Fee

from .conftest import auth_headers


def _create_fee(client, headers, student_id, **overrides):
    payload = {"studentId": student_id, "feeType": "tuition", "amount": 2000, "dueDate": "2024-02-01"}
    payload.update(overrides)
    return client.post("/api/fees", json=payload, headers=headers)


def test_create_fee_starts_pending(client, admin_headers, school):
    res = _create_fee(client, admin_headers, school.ahmad.id)
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["status"] == "pending"
    assert data["paidAmount"] == 0
    assert data["paidDate"] is None
    assert data["student"]["class"]["name"] == "Hifz 1"


def test_create_fee_validation(client, admin_headers, school):
    res = client.post("/api/fees", json={"studentId": school.ahmad.id}, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Missing required fields"

    res = _create_fee(client, admin_headers, 999)
    assert res.status_code == 404
    assert res.json()["error"] == "Student not found"


def test_teacher_views_fees_but_cannot_create(client, admin_headers, school):
    headers = auth_headers(school.teacher_user)
    assert client.get("/api/fees", headers=headers).status_code == 200
    assert _create_fee(client, headers, school.ahmad.id).status_code == 403


def test_fee_filters(client, admin_headers, school):
    _create_fee(client, admin_headers, school.ahmad.id)
    other = _create_fee(client, admin_headers, school.ibrahim.id).json()["data"]
    client.put(f"/api/fees/{other['id']}", json={"status": "paid"}, headers=admin_headers)

    res = client.get("/api/fees", params={"class": "all", "status": "all"}, headers=admin_headers)
    assert len(res.json()["data"]) == 2

    res = client.get("/api/fees", params={"status": "paid"}, headers=admin_headers)
    assert [f["studentId"] for f in res.json()["data"]] == [school.ibrahim.id]

    res = client.get("/api/fees", params={"class": str(school.hifz.id)}, headers=admin_headers)
    assert [f["studentId"] for f in res.json()["data"]] == [school.ahmad.id]

    res = client.get("/api/fees", params={"class": "hifz"}, headers=admin_headers)
    assert res.status_code == 400


def test_marking_paid_stamps_date_once(client, admin_headers, school, db):
    fee_id = _create_fee(client, admin_headers, school.ahmad.id).json()["data"]["id"]

    res = client.put(f"/api/fees/{fee_id}", json={"status": "paid", "paidAmount": 2000}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["data"]["paidDate"] == date.today().isoformat()

    fee = db.get(Fee, fee_id)
    fee.paid_date = date(2024, 1, 20)
    db.commit()

    res = client.put(f"/api/fees/{fee_id}", json={"status": "paid", "remarks": "cash"}, headers=admin_headers)
    data = res.json()["data"]
    assert data["paidDate"] == "2024-01-20"
    assert data["remarks"] == "cash"


def test_explicit_paid_date_wins(client, admin_headers, school):
    fee_id = _create_fee(client, admin_headers, school.ahmad.id).json()["data"]["id"]
    res = client.put(
        f"/api/fees/{fee_id}",
        json={"status": "paid", "paidDate": "2024-01-25T10:00:00.000Z", "receiptNo": "RCP001"},
        headers=admin_headers,
    )
    data = res.json()["data"]
    assert data["paidDate"] == "2024-01-25"
    assert data["receiptNo"] == "RCP001"


def test_partial_status_leaves_paid_date_empty(client, admin_headers, school):
    fee_id = _create_fee(client, admin_headers, school.ahmad.id).json()["data"]["id"]
    res = client.put(f"/api/fees/{fee_id}", json={"status": "partial", "paidAmount": 500}, headers=admin_headers)
    data = res.json()["data"]
    assert data["status"] == "partial"
    assert data["paidDate"] is None


def test_invalid_status_and_duplicate_receipt(client, admin_headers, school):
    first = _create_fee(client, admin_headers, school.ahmad.id).json()["data"]["id"]
    second = _create_fee(client, admin_headers, school.ibrahim.id).json()["data"]["id"]

    res = client.put(f"/api/fees/{first}", json={"status": "waived"}, headers=admin_headers)
    assert res.status_code == 400

    client.put(f"/api/fees/{first}", json={"receiptNo": "RCP9"}, headers=admin_headers)
    res = client.put(f"/api/fees/{second}", json={"receiptNo": "RCP9"}, headers=admin_headers)
    assert res.status_code == 409
    assert res.json()["error"] == "Receipt number already exists"


def test_fee_detail_and_404(client, admin_headers, school):
    fee_id = _create_fee(client, admin_headers, school.ahmad.id).json()["data"]["id"]
    res = client.get(f"/api/fees/{fee_id}", headers=admin_headers)
    assert res.json()["data"]["student"]["name"] == "Ahmad"
    assert client.get("/api/fees/999", headers=admin_headers).status_code == 404
    assert client.put("/api/fees/999", json={"status": "paid"}, headers=admin_headers).status_code == 404


def test_fee_reminder(client, admin_headers, school, mailer):
    fee_id = _create_fee(client, admin_headers, school.ahmad.id, amount=1500).json()["data"]["id"]
    res = client.post(f"/api/fees/{fee_id}/remind", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["data"] == {"sentTo": "student@test.local"}
    assert "1500" in mailer.outbox[-1]["html"]

    client.put(f"/api/fees/{fee_id}", json={"status": "paid"}, headers=admin_headers)
    res = client.post(f"/api/fees/{fee_id}/remind", headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Fee is already paid"


def test_fee_reminder_without_address(client, admin_headers, school):
    fee_id = _create_fee(client, admin_headers, school.ibrahim.id).json()["data"]["id"]
    res = client.post(f"/api/fees/{fee_id}/remind", headers=admin_headers)
    assert res.status_code == 400
