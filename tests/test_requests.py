from datetime import datetime

import pytest

from shiftly.domain.requests import service as request_service
from shiftly.domain.requests.service import RequestService, validate_request
from shiftly.models import Activity, EmployeeAvailability, EmployeeRequest

from .conftest import auth_headers

TIME_OFF = {"reason": "Family trip", "start_date": "2025-02-10", "end_date": "2025-02-12"}


@pytest.mark.parametrize(
    "data, error",
    [
        (None, "Missing request data."),
        ({"employee_id": "7", "request_type": "time-off", "request": TIME_OFF}, "Invalid or missing employee_id."),
        ({"employee_id": 7, "request_type": "vacation", "request": TIME_OFF}, "Invalid request_type."),
        ({"employee_id": 7, "request_type": "time-off", "request": "text"}, "Invalid or missing request content."),
        (
            {"employee_id": 7, "request_type": "availability", "request": {"start_date": "2025-02-10"}},
            "Availability request must include preferred_hours or start_date and end_date.",
        ),
        (
            {"employee_id": 7, "request_type": "time-off", "request": {"reason": "x", "start_date": "2025-02-10"}},
            "Time-off request must include reason, start_date, and end_date.",
        ),
        (
            {"employee_id": 7, "request_type": "complaint", "request": {"subject": "Noise"}},
            "Complaint must include subject and details.",
        ),
    ],
)
def test_validate_request_errors(data, error):
    assert validate_request(data) == (False, error)


def test_validate_request_accepts_preferred_hours():
    data = {"employee_id": 7, "request_type": "availability", "request": {"preferred_hours": "mornings"}}
    assert validate_request(data) == (True, None)


def test_time_off_submission_logs_activity(db, staff):
    alice = staff["alice"]
    result = RequestService(db).submit_employee_request(
        {"employee_id": alice.employee_id, "request_type": "time-off", "request": TIME_OFF}
    )

    assert result["success"] is True
    stored = db.query(EmployeeRequest).one()
    assert stored.status == "Pending"
    assert stored.request == TIME_OFF
    assert db.query(Activity).one().type == "Time-off Request"


def test_failed_activity_insert_stores_nothing(db, staff, monkeypatch):
    monkeypatch.setattr(request_service, "ACTIVITY_TYPE_TIME_OFF", None)

    result = RequestService(db).submit_employee_request(
        {"employee_id": staff["alice"].employee_id, "request_type": "time-off", "request": TIME_OFF}
    )

    assert result["success"] is False
    assert db.query(EmployeeRequest).count() == 0
    assert db.query(Activity).count() == 0


def test_approve_blocks_each_requested_day(db, staff):
    service = RequestService(db)
    request_id = service.submit_employee_request(
        {"employee_id": staff["alice"].employee_id, "request_type": "time-off", "request": TIME_OFF}
    )["request_id"]

    assert service.approve_employee_request(request_id) == {"success": True}

    days = [a.start_time for a in db.query(EmployeeAvailability).order_by(EmployeeAvailability.start_time)]
    assert days == [datetime(2025, 2, 10), datetime(2025, 2, 11), datetime(2025, 2, 12)]
    assert db.query(EmployeeRequest).count() == 0


def test_approve_and_reject_unknown_request(db):
    service = RequestService(db)
    assert service.approve_employee_request("missing") == {"success": False, "error": "Request not found."}
    assert service.reject_employee_request("missing") == {"success": False, "error": "Request not found."}


def test_pending_counts_by_store(db, staff):
    service = RequestService(db)
    for name in ("alice", "carol"):
        service.submit_employee_request(
            {"employee_id": staff[name].employee_id, "request_type": "time-off", "request": TIME_OFF}
        )
    service.submit_employee_request(
        {
            "employee_id": staff["bob"].employee_id,
            "request_type": "availability",
            "request": {"preferred_hours": "evenings"},
        }
    )

    assert service.fetch_pending_time_off_count() == 2
    assert service.fetch_pending_time_off_count(staff["alice"].store_id) == 1
    [availability] = service.fetch_pending_availability_requests()
    assert availability["employee_name"] == staff["bob"].full_name
    downtown_time_off = service.fetch_pending_time_off_requests(staff["alice"].store_id)
    assert [r["employee_name"] for r in downtown_time_off] == [staff["alice"].full_name]


class TestRoutes:
    def test_submit_and_list_mine(self, client, staff):
        headers = auth_headers(staff["alice"])
        resp = client.post("/requests", json={"request_type": "time-off", "request": TIME_OFF}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["success"] is True

        mine = client.get("/requests/mine", headers=headers).json()
        assert [r["request_type"] for r in mine] == ["time-off"]

    def test_invalid_submission_returns_message(self, client, staff):
        resp = client.post(
            "/requests",
            json={"request_type": "complaint", "request": {"subject": "Noise"}},
            headers=auth_headers(staff["alice"]),
        )
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Complaint must include subject and details."}

    def test_employees_cannot_review(self, client, staff):
        assert client.get("/requests/pending", headers=auth_headers(staff["alice"])).status_code == 403

    def test_manager_reviews_own_store_only(self, client, db, staff):
        service = RequestService(db)
        own = service.submit_employee_request(
            {"employee_id": staff["alice"].employee_id, "request_type": "time-off", "request": TIME_OFF}
        )["request_id"]
        other = service.submit_employee_request(
            {"employee_id": staff["carol"].employee_id, "request_type": "time-off", "request": TIME_OFF}
        )["request_id"]
        headers = auth_headers(staff["manager"])

        pending = client.get("/requests/pending", params={"type": "time-off"}, headers=headers).json()
        assert [r["request_id"] for r in pending] == [own]
        assert client.get("/requests/pending/time-off/count", headers=headers).json() == {"count": 1}

        assert client.post(f"/requests/{other}/approve", headers=headers).status_code == 403
        assert client.post(f"/requests/{own}/approve", headers=headers).json() == {"success": True}

    def test_owner_rejects_any_store(self, client, db, staff):
        request_id = RequestService(db).submit_employee_request(
            {"employee_id": staff["carol"].employee_id, "request_type": "time-off", "request": TIME_OFF}
        )["request_id"]

        resp = client.post(f"/requests/{request_id}/reject", headers=auth_headers(staff["owner"]))

        assert resp.json() == {"success": True}
        assert client.post(f"/requests/{request_id}/reject", headers=auth_headers(staff["owner"])).status_code == 404
