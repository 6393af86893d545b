# tests/v1/test_complaints.py
"""Tests for complaint endpoints."""

from unittest.mock import ANY, AsyncMock

import pytest
from fastapi import status

from campus_wellness.api.v1.dependencies import get_notifier_dep
from campus_wellness.core.errors import NotifierError
from campus_wellness.services.notifier import NotifierClient

ANON = {
    "category": "safety",
    "description": "Broken lights in parking lot C",
    "studentPhone": "+1-555-0100",
}


@pytest.fixture()
def notifier(app):
    client = AsyncMock(spec=NotifierClient)
    client.notify.return_value = True
    app.dependency_overrides[get_notifier_dep] = lambda: client
    try:
        yield client
    finally:
        app.dependency_overrides.pop(get_notifier_dep, None)


def _submit_anonymous(client) -> str:
    response = client.post("/api/v1/complaints/anonymous", json=ANON)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["id"]


def test_anonymous_submission_needs_no_credentials(client, notifier) -> None:
    response = client.post("/api/v1/complaints/anonymous", json=ANON)

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["channel"] == "anonymous"
    assert body["status"] == "submitted"
    assert body["id"].startswith("anon_")


def test_anonymous_submission_validation(client, notifier) -> None:
    response = client.post("/api/v1/complaints/anonymous", json={"category": "safety"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert set(response.json()["errors"]) == {"description", "student_phone"}


def test_department_submission(client, notifier, student_headers, department) -> None:
    response = client.post(
        "/api/v1/complaints/department",
        json={
            "departmentId": department.id,
            "category": "grading",
            "description": "Lab marks missing",
            "studentName": "Sam Student",
            "studentPhone": "+1-555-0142",
        },
        headers=student_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["id"].startswith("dept_")
    notifier.notify.assert_awaited_once_with("+1-555-0199", ANY, "submitted", None)


def test_department_submission_requires_login(client, notifier, department) -> None:
    response = client.post(
        "/api/v1/complaints/department",
        json={"departmentId": department.id},
    )
    assert response.status_code in {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN}


def test_admin_lists_anonymous_without_phone(client, notifier, admin_headers) -> None:
    _submit_anonymous(client)

    response = client.get("/api/v1/complaints/anonymous", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    complaints = response.json()
    assert len(complaints) == 1
    assert "student_phone" not in complaints[0]


def test_members_cannot_list_anonymous(client, notifier, student_headers) -> None:
    response = client.get("/api/v1/complaints/anonymous", headers=student_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_resolution_flow_notifies_student(client, notifier, admin_headers) -> None:
    complaint_id = _submit_anonymous(client)
    url = f"/api/v1/complaints/{complaint_id}/status"

    review = client.post(url, json={"status": "in_review"}, headers=admin_headers)
    assert review.status_code == status.HTTP_200_OK

    notifier.notify.reset_mock()
    resolved = client.post(
        url, json={"status": "resolved", "notes": "Lights replaced"}, headers=admin_headers
    )

    assert resolved.status_code == status.HTTP_200_OK
    assert resolved.json()["status"] == "resolved"
    assert resolved.json()["notified"] is True
    notifier.notify.assert_awaited_once_with("+1-555-0100", ANY, "resolved", "Lights replaced")

    history = client.get(f"/api/v1/complaints/{complaint_id}/history", headers=admin_headers)
    assert [h["to_status"] for h in history.json()] == ["in_review", "resolved"]


def test_notifier_failure_is_reported_as_warning(client, notifier, admin_headers) -> None:
    complaint_id = _submit_anonymous(client)
    notifier.notify.side_effect = NotifierError("bot offline")

    response = client.post(
        f"/api/v1/complaints/{complaint_id}/status",
        json={"status": "rejected"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "rejected"
    assert body["notified"] is False
    assert body["warnings"]

    stored = client.get(f"/api/v1/complaints/{complaint_id}", headers=admin_headers).json()
    assert stored["status"] == "rejected"


def test_backward_transition_conflicts(client, notifier, admin_headers) -> None:
    complaint_id = _submit_anonymous(client)
    url = f"/api/v1/complaints/{complaint_id}/status"
    client.post(url, json={"status": "rejected"}, headers=admin_headers)

    response = client.post(url, json={"status": "in_review"}, headers=admin_headers)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["current"] == "rejected"


def test_head_reviews_own_department_only(
    client, notifier, student_headers, head_headers, auth_headers, department, other_department
) -> None:
    payload = {
        "category": "grading",
        "description": "Lab marks missing",
        "studentName": "Sam Student",
        "studentPhone": "+1-555-0142",
    }
    own = client.post(
        "/api/v1/complaints/department",
        json={**payload, "departmentId": department.id},
        headers=student_headers,
    ).json()["id"]
    client.post(
        "/api/v1/complaints/department",
        json={**payload, "departmentId": other_department.id},
        headers=student_headers,
    )

    listed = client.get("/api/v1/complaints/department", headers=head_headers).json()
    assert [c["id"] for c in listed] == [own]
    assert listed[0]["student_name"] == "Sam Student"

    moved = client.post(
        f"/api/v1/complaints/{own}/status", json={"status": "in_review"}, headers=head_headers
    )
    assert moved.status_code == status.HTTP_200_OK

    me_head = auth_headers("head-2", "head.me@campus.edu")
    refused = client.post(
        f"/api/v1/complaints/{own}/status", json={"status": "resolved"}, headers=me_head
    )
    assert refused.status_code == status.HTTP_403_FORBIDDEN


def test_unknown_complaint(client, notifier, admin_headers) -> None:
    response = client.get("/api/v1/complaints/anon_missing", headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_reassigned_head_loses_complaint_access(
    client, notifier, db_session, student_headers, head_headers, department
) -> None:
    complaint_id = client.post(
        "/api/v1/complaints/department",
        json={
            "departmentId": department.id,
            "category": "grading",
            "description": "Lab marks missing",
            "studentName": "Sam Student",
            "studentPhone": "+1-555-0100",
        },
        headers=student_headers,
    ).json()["id"]
    url = f"/api/v1/complaints/{complaint_id}"
    assert client.get(url, headers=head_headers).status_code == status.HTTP_200_OK

    department.head_email = "successor@campus.edu"
    db_session.commit()

    refused = client.get(url, headers=head_headers)
    assert refused.status_code == status.HTTP_403_FORBIDDEN
    assert "student_phone" not in refused.json()
    history = client.get(f"{url}/history", headers=head_headers)
    assert history.status_code == status.HTTP_403_FORBIDDEN
