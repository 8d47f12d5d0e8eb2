from datetime import date, timedelta

from backend.madrasha_module.models import Attendance

from .conftest import auth_headers


def test_teacher_marks_attendance_for_a_day(client, school):
    headers = auth_headers(school.teacher_user)
    res = client.post(
        "/api/attendance",
        json={
            "date": "2024-03-01",
            "records": [
                {"studentId": school.ahmad.id, "status": "present"},
                {"studentId": school.ibrahim.id, "status": "late", "remarks": "bus"},
            ],
        },
        headers=headers,
    )
    assert res.status_code == 200
    assert len(res.json()["data"]) == 2

    res = client.get("/api/attendance", params={"date": "2024-03-01"}, headers=headers)
    records = {r["studentId"]: r for r in res.json()["data"]}
    assert records[school.ibrahim.id]["status"] == "late"
    assert records[school.ahmad.id]["date"] == "2024-03-01"


def test_remarking_same_day_updates_in_place(client, admin_headers, school, db):
    payload = {"date": "2024-03-01", "records": [{"studentId": school.ahmad.id, "status": "present"}]}
    client.post("/api/attendance", json=payload, headers=admin_headers)
    payload["records"][0]["status"] = "absent"
    res = client.post("/api/attendance", json=payload, headers=admin_headers)
    assert res.status_code == 200

    rows = db.query(Attendance).filter(Attendance.student_id == school.ahmad.id).all()
    assert [(row.attendance_date, row.status) for row in rows] == [(date(2024, 3, 1), "absent")]


def test_attendance_defaults_to_today(client, admin_headers, school):
    payload = {"records": [{"studentId": school.ahmad.id, "status": "leave"}]}
    res = client.post("/api/attendance", json=payload, headers=admin_headers)
    assert res.json()["data"][0]["date"] == date.today().isoformat()


def test_attendance_validation(client, admin_headers, school):
    res = client.post(
        "/api/attendance",
        json={"records": [{"studentId": school.ahmad.id, "status": "sleeping"}]},
        headers=admin_headers,
    )
    assert res.status_code == 400

    res = client.post("/api/attendance", json={"records": [{"studentId": 999, "status": "present"}]}, headers=admin_headers)
    assert res.status_code == 404
    assert res.json()["error"] == "Student not found: 999"

    res = client.post("/api/attendance", json={"records": []}, headers=admin_headers)
    assert res.status_code == 400


def test_attendance_filters_by_class_and_student(client, admin_headers, school):
    client.post(
        "/api/attendance",
        json={
            "date": "2024-03-02",
            "records": [
                {"studentId": school.ahmad.id, "status": "present"},
                {"studentId": school.ibrahim.id, "status": "absent"},
            ],
        },
        headers=admin_headers,
    )
    res = client.get("/api/attendance", params={"classId": school.kitab.id}, headers=admin_headers)
    assert [r["studentId"] for r in res.json()["data"]] == [school.ibrahim.id]
    res = client.get("/api/attendance", params={"studentId": school.ahmad.id}, headers=admin_headers)
    assert [r["status"] for r in res.json()["data"]] == ["present"]


def test_students_cannot_mark_attendance(client, school):
    res = client.post(
        "/api/attendance",
        json={"records": [{"studentId": school.ahmad.id, "status": "present"}]},
        headers=auth_headers(school.student_user),
    )
    assert res.status_code == 403


def _exam(school, **overrides):
    payload = {
        "studentId": school.ahmad.id,
        "subjectId": school.quran.id,
        "examType": "midterm",
        "examDate": "2024-01-15",
        "totalMarks": 100,
        "obtainedMarks": 85,
        "grade": "A",
    }
    payload.update(overrides)
    return payload


def test_teacher_records_and_lists_exams(client, school):
    headers = auth_headers(school.teacher_user)
    res = client.post("/api/exams", json=_exam(school), headers=headers)
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["subject"]["code"] == "QUR101"
    assert data["student"]["rollNumber"] == "H001"

    client.post("/api/exams", json=_exam(school, examType="final", examDate="2024-06-01"), headers=headers)
    res = client.get("/api/exams", params={"examType": "final"}, headers=headers)
    assert [e["examDate"] for e in res.json()["data"]] == ["2024-06-01"]
    res = client.get("/api/exams", params={"studentId": school.ahmad.id}, headers=headers)
    assert [e["examType"] for e in res.json()["data"]] == ["final", "midterm"]


def test_exam_marks_validation(client, admin_headers, school):
    res = client.post("/api/exams", json=_exam(school, obtainedMarks=120), headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Obtained marks must be between 0 and total marks"

    res = client.post("/api/exams", json=_exam(school, examType=None), headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["error"] == "Missing required fields"


def test_update_and_delete_exam(client, admin_headers, school):
    exam_id = client.post("/api/exams", json=_exam(school), headers=admin_headers).json()["data"]["id"]

    res = client.put(f"/api/exams/{exam_id}", json={"obtainedMarks": 90, "grade": "A+"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["data"]["obtainedMarks"] == 90

    res = client.put(f"/api/exams/{exam_id}", json={"totalMarks": 50}, headers=admin_headers)
    assert res.status_code == 400

    assert client.delete(f"/api/exams/{exam_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/exams/{exam_id}", headers=admin_headers).status_code == 404


def test_parent_sees_only_own_child_records(client, admin_headers, school):
    recent = (date.today() - timedelta(days=1)).isoformat()
    client.post("/api/exams", json=_exam(school, examDate=recent), headers=admin_headers)
    client.post(
        "/api/exams", json=_exam(school, studentId=school.ibrahim.id, examDate=recent), headers=admin_headers
    )
    for student_id in (school.ahmad.id, school.ibrahim.id):
        client.post(
            "/api/fees",
            json={"studentId": student_id, "feeType": "tuition", "amount": 100, "dueDate": "2024-02-01"},
            headers=admin_headers,
        )
    client.post(
        "/api/attendance",
        json={"records": [{"studentId": school.ibrahim.id, "status": "present"}]},
        headers=admin_headers,
    )

    for user in (school.parent_user, school.student_user):
        headers = auth_headers(user)
        fees = client.get("/api/me/fees", headers=headers).json()["data"]
        exams = client.get("/api/me/exams", headers=headers).json()["data"]
        attendance = client.get("/api/me/attendance", headers=headers).json()["data"]
        assert [f["studentId"] for f in fees] == [school.ahmad.id]
        assert [e["studentId"] for e in exams] == [school.ahmad.id]
        assert attendance == []


def test_staff_cannot_use_self_service_views(client, admin_headers, school):
    assert client.get("/api/me/fees", headers=admin_headers).status_code == 403
    assert client.get("/api/me/exams", headers=auth_headers(school.teacher_user)).status_code == 403
