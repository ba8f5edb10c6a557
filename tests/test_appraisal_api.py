import pytest
from fastapi import status

SEED_CYCLE = "seed-2025-01"


def _error(response):
    body = response.json()
    assert body["success"] is False
    return body["errors"][0]


@pytest.fixture
def submitted_id(client, faculty_headers):
    response = client.post("/api/appraisals", json={"cycle_id": SEED_CYCLE}, headers=faculty_headers)
    assert response.status_code == status.HTTP_201_CREATED
    appraisal_id = response.json()["id"]

    response = client.post(
        f"/api/appraisals/{appraisal_id}/research",
        json={"title": "Federated learning survey", "kind": "Journal"},
        headers=faculty_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["contribution_scores"]["research"] == 7

    response = client.post(f"/api/appraisals/{appraisal_id}/submit", headers=faculty_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "Submitted"
    return appraisal_id


def _review_payload(rows, attendance_score=None, comment=""):
    payload = []
    for row in rows:
        item = {"criterion_id": row["criterion_id"], "reviewer_score": row["reviewer_score"]}
        if row["is_attendance_auto_suggested"] and attendance_score is not None:
            item["reviewer_score"] = attendance_score
            item["reviewer_comments"] = comment
        payload.append(item)
    return {"assessments": payload}


# --- Identity ---

def test_missing_identity_is_unauthorized(client):
    response = client.get("/api/cycles")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert _error(response)["code"] == "AUTH_FAILED"


def test_unknown_role_is_unauthorized(client, faculty_headers):
    faculty_headers["X-Employee-Role"] = "Dean"
    response = client.get("/api/cycles", headers=faculty_headers)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


# --- Cycles ---

def test_seed_cycle_is_available(client, faculty_headers):
    response = client.get("/api/cycles/available", headers=faculty_headers)
    assert response.status_code == status.HTTP_200_OK
    cycles = response.json()
    assert [c["id"] for c in cycles] == [SEED_CYCLE]
    assert sum(c["weight"] for c in cycles[0]["criteria"]) == 100


def test_create_cycle_with_bad_weights(client, admin_headers):
    response = client.post("/api/cycles", json={
        "name": "February 2025",
        "start_date": "2025-02-01",
        "end_date": "2025-02-28",
        "criteria": [{"id": "teaching", "name": "Teaching", "weight": 70}],
    }, headers=admin_headers)
    assert response.status_code == 422
    error = _error(response)
    assert error["code"] == "VALIDATION_ERROR"
    assert "Total weightage must equal 100%" in error["msg"]


def test_faculty_cannot_create_cycle(client, faculty_headers):
    response = client.post("/api/cycles", json={
        "name": "February 2025", "start_date": "2025-02-01", "end_date": "2025-02-28",
    }, headers=faculty_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert _error(response)["code"] == "PERMISSION_DENIED"


def test_cycle_authoring_round_trip(client, admin_headers):
    response = client.post("/api/cycles", json={
        "name": "February 2025", "start_date": "2025-02-01", "end_date": "2025-02-28",
    }, headers=admin_headers)
    assert response.status_code == status.HTTP_201_CREATED
    cycle = response.json()
    assert cycle["status"] == "Draft"

    response = client.post(f"/api/cycles/{cycle['id']}/activate", headers=admin_headers)
    assert response.json()["status"] == "Active"

    response = client.delete(f"/api/cycles/{cycle['id']}", headers=admin_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    response = client.get(f"/api/cycles/{cycle['id']}", headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_request_body_validation_envelope(client, admin_headers):
    response = client.post("/api/cycles", json={"name": "No dates"}, headers=admin_headers)
    assert response.status_code == 422
    fields = {e["field"] for e in response.json()["errors"]}
    assert {"start_date", "end_date"} <= fields


# --- Appraisal workflow ---

def test_duplicate_create_rejected(client, faculty_headers, submitted_id):
    response = client.post("/api/appraisals", json={"cycle_id": SEED_CYCLE}, headers=faculty_headers)
    assert response.status_code == 422


def test_unknown_appraisal(client, admin_headers):
    response = client.get("/api/appraisals/nope", headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert _error(response)["code"] == "NOT_FOUND"


def test_finalize_before_review_conflicts(client, admin_headers, submitted_id):
    response = client.post(f"/api/appraisals/{submitted_id}/finalize", headers=admin_headers)
    assert response.status_code == status.HTTP_409_CONFLICT
    error = _error(response)
    assert error["code"] == "INVALID_TRANSITION"
    assert error["details"]["current_status"] == "Submitted"


def test_full_workflow(client, admin_headers, faculty_headers, submitted_id):
    rows = client.get(f"/api/appraisals/{submitted_id}/review", headers=admin_headers).json()
    attendance = next(r for r in rows if r["is_attendance_auto_suggested"])
    changed = 1 if attendance["suggested_score"] != 1 else 2

    response = client.post(
        f"/api/appraisals/{submitted_id}/review",
        json=_review_payload(rows, attendance_score=changed),
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert "Comment required for adjusted attendance score" in _error(response)["msg"]

    response = client.post(
        f"/api/appraisals/{submitted_id}/review",
        json=_review_payload(rows, attendance_score=changed, comment="Verified against the register"),
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    reviewed = response.json()
    assert reviewed["status"] == "Reviewed"
    assert reviewed["ai_insights"]["overall_summary"].startswith("Dr. Ayesha Khan")

    defaults = client.get(f"/api/appraisals/{submitted_id}/finalization", headers=admin_headers).json()
    response = client.post(f"/api/appraisals/{submitted_id}/finalize", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    done = response.json()
    assert done["status"] == "Completed"
    assert done["final_score"] == defaults["final_score"]
    assert done["performance_category"] == defaults["performance_category"]

    response = client.post(
        "/api/reports/annual-rollup", json={"employee_id": "EMP001", "year": 2025}, headers=admin_headers
    )
    assert response.status_code == status.HTTP_200_OK
    rollup = response.json()
    assert rollup["months"] == 1
    assert rollup["final_score"] == done["final_score"]

    summary = client.get("/api/reports/summary", headers=admin_headers).json()
    assert summary["completed_count"] == 1

    # The employee sees only their own records
    mine = client.get("/api/appraisals", headers=faculty_headers).json()
    assert {a["employee_id"] for a in mine} == {"EMP001"}


def test_preview_scores(client, faculty_headers):
    response = client.post("/api/appraisals/preview-scores", json={
        "research_entries": [],
        "admin_contributions": [{"title": "Admissions", "category": "Committee"}],
    }, headers=faculty_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "research": 4,
        "admin": 6.5,
        "reasoning": "No research submissions this month.. 1 committee(s).",
    }
