import pytest

ACTOR = {"X-User-Id": "42"}


@pytest.fixture
def class_with_student(client):
    course = client.post("/v1/courses/", json={"code": "CS101", "name": "Intro to Computing", "credits": 3}).json()["data"]
    semester = client.post(
        "/v1/semesters/", json={"name": "Fall 2025", "start_date": "2025-09-01", "end_date": "2025-12-20"}
    ).json()["data"]
    class_obj = client.post(
        "/v1/classes/", json={"course_id": course["id"], "semester_id": semester["id"], "name": "CS101-A"}
    ).json()["data"]
    student = client.post(
        "/v1/students/",
        json={"student_number": "20250001", "first_name": "Sean", "last_name": "Cameron", "email": "sean@hums.edu"},
    ).json()["data"]
    enrollment = client.post(
        "/v1/enrollments/", json={"student_id": student["id"], "class_id": class_obj["id"]}
    ).json()["data"]
    return {"class": class_obj, "student": student, "enrollment": enrollment, "semester": semester}


def _component(client, class_id, name, weight, max_score=100, headers=None):
    return client.post(
        f"/v1/classes/{class_id}/components",
        json={"name": name, "type": "MIDTERM", "weight": weight, "max_score": max_score},
        headers=headers or {},
    )


def test_health_and_root(client):
    assert client.get("/health").json()["status"] == "ok"
    assert "message" in client.get("/").json()


def test_success_envelope(client, class_with_student):
    response = client.get(f"/v1/classes/{class_with_student['class']['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["course"]["code"] == "CS101"


def test_not_found_envelope(client):
    response = client.get("/v1/grade-components/9999")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "NOT_FOUND"
    assert "generated_at" in body


def test_duplicate_enrollment_is_conflict(client, class_with_student):
    payload = {"student_id": class_with_student["student"]["id"], "class_id": class_with_student["class"]["id"]}

    response = client.post("/v1/enrollments/", json=payload)
    assert response.status_code == 409


def test_weight_overflow_is_bad_request(client, class_with_student):
    class_id = class_with_student["class"]["id"]
    assert _component(client, class_id, "Midterm", 40).status_code == 201
    assert _component(client, class_id, "Final", 60).status_code == 201

    response = _component(client, class_id, "Bonus", 5)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_REQUEST"
    validation = client.get(f"/v1/classes/{class_id}/components/validate-weights").json()["data"]
    assert validation["valid"] is True
    assert validation["total"] == 100.0
    assert [c["name"] for c in validation["components"]] == ["Midterm", "Final"]


def test_request_body_validation(client, class_with_student):
    response = _component(client, class_with_student["class"]["id"], "Midterm", 140)

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_delete_component_with_entries_keeps_data(client, class_with_student):
    class_id = class_with_student["class"]["id"]
    component = _component(client, class_id, "Midterm", 40).json()["data"]
    entered = client.post(
        f"/v1/grade-components/{component['id']}/grades",
        json={"grades": [{"enrollment_id": class_with_student["enrollment"]["id"], "score": 80}]},
    )
    assert entered.status_code == 200

    response = client.delete(f"/v1/grade-components/{component['id']}")

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"
    after = client.get(f"/v1/grade-components/{component['id']}/grades").json()["data"]
    assert after["component"]["entry_count"] == 1
    assert after["entries"][0]["score"] == 80


def test_grading_flow(client, class_with_student):
    class_id = class_with_student["class"]["id"]
    enrollment_id = class_with_student["enrollment"]["id"]
    midterm = _component(client, class_id, "Midterm", 40).json()["data"]
    final = _component(client, class_id, "Final", 60).json()["data"]
    for component, score in ((midterm, 80), (final, 70)):
        client.post(
            f"/v1/grade-components/{component['id']}/grades",
            json={"grades": [{"enrollment_id": enrollment_id, "score": score}]},
            headers=ACTOR,
        )

    current = client.get(f"/v1/enrollments/{enrollment_id}/grades").json()["data"]
    assert current["current_grade"] == {"percentage": 74.0, "letter": "C+", "points": 2.3}

    assert client.post(f"/v1/classes/{class_id}/grades/finalize", json={}).status_code == 422
    finalized = client.post(f"/v1/classes/{class_id}/grades/finalize", json={"confirm": True}, headers=ACTOR)
    assert finalized.status_code == 200
    assert client.post(f"/v1/classes/{class_id}/grades/finalize", json={"confirm": True}).status_code == 409

    gpa = client.get(f"/v1/students/{class_with_student['student']['id']}/gpa").json()["data"]
    assert gpa["cumulative_gpa"] == 2.3

    # 확정 취소는 처리자 헤더 필수
    no_actor = client.post(f"/v1/classes/{class_id}/grades/unfinalize", json={"reason": "regrade"})
    assert no_actor.status_code == 403
    reopened = client.post(f"/v1/classes/{class_id}/grades/unfinalize", json={"reason": "regrade"}, headers=ACTOR)
    assert reopened.json()["data"]["unfinalized"] == 1


def test_letter_grade_endpoint(client):
    response = client.get("/v1/grade-scales/calculate", params={"percentage": 90})

    assert response.status_code == 200
    assert response.json()["data"]["letter"] == "A"
    assert client.get("/v1/grade-scales/default").json()["data"]["name"] == "Standard Scale"


def test_exam_scheduling_flow(client, class_with_student):
    class_id = class_with_student["class"]["id"]
    room = client.post("/v1/rooms/", json={"code": "R101", "name": "Main Hall", "capacity": 60}).json()["data"]
    exam_payload = {
        "class_id": class_id,
        "room_id": room["id"],
        "type": "MIDTERM",
        "title": "Midterm Exam",
        "date": "2025-10-20",
        "start_time": "09:00",
        "end_time": "10:30",
        "duration": 90,
        "max_score": 100,
    }

    created = client.post("/v1/exams/", json=exam_payload)
    assert created.status_code == 201
    exam = created.json()["data"]["exam"]
    assert exam["class"]["id"] == class_id
    assert exam["status"] == "SCHEDULED"
    assert created.json()["data"]["conflicts"] == []

    clash = client.post("/v1/exams/", json={**exam_payload, "start_time": "10:00", "end_time": "11:00"})
    assert clash.status_code == 400
    assert clash.json()["error"]["message"] == "Room is not available at the specified time"

    availability = client.get(
        f"/v1/rooms/{room['id']}/availability",
        params={"date": "2025-10-20", "start_time": "10:30", "end_time": "11:30"},
    ).json()["data"]
    assert availability["available"] is True

    cancelled = client.post(f"/v1/exams/{exam['id']}/cancel", json={"reason": "Holiday"})
    assert cancelled.json()["data"]["status"] == "CANCELLED"
    assert client.post(f"/v1/exams/{exam['id']}/complete").status_code == 400

    schedule = client.get(f"/v1/exams/schedule/{class_with_student['semester']['id']}").json()["data"]
    assert schedule == []


def test_bad_time_format_is_rejected(client, class_with_student):
    room = client.post("/v1/rooms/", json={"code": "R202", "name": "Lab"}).json()["data"]
    response = client.post("/v1/exams/check-conflicts", json={
        "class_id": class_with_student["class"]["id"],
        "date": "2025-10-20",
        "start_time": "9:00",
        "end_time": "10:00",
    })

    assert room["id"] is not None
    assert response.status_code == 422


def test_audit_log_pagination(client, class_with_student):
    class_id = class_with_student["class"]["id"]
    for i in range(3):
        _component(client, class_id, f"Quiz {i}", 10, headers=ACTOR)
    _component(client, class_id, "Anonymous", 10)

    response = client.get("/v1/audit-logs/", params={"resource": "GradeComponent", "size": 2})

    body = response.json()
    assert body["meta"] == {"total": 3, "page": 1, "size": 2, "pages": 2}
    assert len(body["data"]) == 2
    assert all(log["user_id"] == 42 for log in body["data"])


def test_invalid_user_header(client):
    response = client.get("/v1/grade-scales/")
    assert response.status_code == 200

    response = client.post(
        "/v1/grade-scales/",
        json={"name": "Pass/Fail", "grades": [
            {"letter": "P", "min_percentage": 50, "max_percentage": 100, "grade_points": 4.0},
            {"letter": "F", "min_percentage": 0, "max_percentage": 50, "grade_points": 0.0},
        ]},
        headers={"X-User-Id": "abc"},
    )
    assert response.status_code == 400
