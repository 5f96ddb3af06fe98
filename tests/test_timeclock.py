from datetime import date, datetime, timedelta

import pytest
from fastapi import HTTPException

from shiftly.domain.timeclock.service import TimeclockService
from shiftly.models import StoreSchedule

from .conftest import auth_headers

AT_STORE = (43.6487, -79.3817)
ACROSS_TOWN = (43.7000, -79.4000)
NOW = datetime(2025, 1, 6, 14, 5)


@pytest.fixture
def shift(db, staff, stores):
    downtown, _ = stores
    shift = StoreSchedule(
        store_id=downtown.store_id,
        employee_id=staff["alice"].employee_id,
        start_time=datetime(2025, 1, 6, 14, 0),
        end_time=datetime(2025, 1, 6, 22, 0),
        time_log=[],
    )
    db.add(shift)
    db.commit()
    return shift


def clock(db, employee, event_type, coords=AT_STORE, now=NOW):
    return TimeclockService(db).record_clock_event(employee, event_type, *coords, now=now)


def test_clock_in_at_the_store(db, staff, shift):
    result = clock(db, staff["alice"], "clock_in")

    assert result["schedule_id"] == shift.schedule_id
    assert result["status"]["status"] == "clocked_in"
    assert result["event"]["timestamp"] == "2025-01-06T14:05:00Z"
    assert result["event"]["distance_from_store"] == 0
    db.refresh(shift)
    assert [e["type"] for e in shift.time_log] == ["clock_in"]


def test_clock_in_too_far_away(db, staff, shift):
    with pytest.raises(HTTPException) as exc_info:
        clock(db, staff["alice"], "clock_in", ACROSS_TOWN)

    assert exc_info.value.status_code == 403
    detail = exc_info.value.detail
    assert detail["allowed_radius"] == 50
    assert detail["distance"] > 5000
    assert detail["message"].startswith("You must be within 50m of the store to clock in.")
    db.refresh(shift)
    assert shift.time_log == []


def test_clock_out_and_breaks_away_from_the_store(db, staff, shift):
    alice = staff["alice"]
    clock(db, alice, "clock_in", now=NOW)
    clock(db, alice, "break_start", ACROSS_TOWN, now=NOW + timedelta(hours=3))
    clock(db, alice, "break_end", ACROSS_TOWN, now=NOW + timedelta(hours=3, minutes=30))
    result = clock(db, alice, "clock_out", ACROSS_TOWN, now=NOW + timedelta(hours=8))

    assert result["status"]["status"] == "clocked_out"
    assert result["event"]["distance_from_store"] > 5000
    assert result["hours"]["work_time"] == 7.5


def test_store_radius_override(db, staff, stores, shift):
    downtown, _ = stores
    downtown.clock_radius_meters = 10_000
    db.commit()
    assert clock(db, staff["alice"], "clock_in", ACROSS_TOWN)["status"]["is_clocked_in"] is True


def test_full_shift_with_break(db, staff, shift):
    alice = staff["alice"]
    clock(db, alice, "clock_in", now=NOW)
    clock(db, alice, "break_start", now=NOW + timedelta(hours=3))
    clock(db, alice, "break_end", now=NOW + timedelta(hours=3, minutes=30))
    result = clock(db, alice, "clock_out", now=NOW + timedelta(hours=8))

    assert result["status"]["status"] == "clocked_out"
    assert result["hours"] == {"total_hours": 8.0, "break_time": 0.5, "work_time": 7.5}


@pytest.mark.parametrize(
    "history, event_type, message",
    [
        (["clock_in"], "clock_in", "You are already clocked in."),
        ([], "clock_out", "No active clock in session found."),
        ([], "break_start", "You must be clocked in to start a break."),
        (["clock_in", "break_start"], "break_start", "You are already on a break."),
        (["clock_in"], "break_end", "You are not currently on a break."),
    ],
)
def test_invalid_transitions(db, staff, shift, history, event_type, message):
    for i, previous in enumerate(history):
        clock(db, staff["alice"], previous, now=NOW + timedelta(minutes=i))

    with pytest.raises(HTTPException) as exc_info:
        clock(db, staff["alice"], event_type, now=NOW + timedelta(minutes=30))

    assert exc_info.value.status_code == 409
    assert exc_info.value.detail == message


def test_no_shift_today(db, staff, shift):
    with pytest.raises(HTTPException) as exc_info:
        clock(db, staff["alice"], "clock_in", now=NOW + timedelta(days=1))
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "No schedule found for today"


def test_store_without_coordinates(db, staff, stores):
    _, uptown = stores
    db.add(
        StoreSchedule(
            store_id=uptown.store_id,
            employee_id=staff["carol"].employee_id,
            start_time=datetime(2025, 1, 6, 14, 0),
            end_time=datetime(2025, 1, 6, 22, 0),
        )
    )
    db.commit()
    with pytest.raises(HTTPException) as exc_info:
        clock(db, staff["carol"], "clock_in")
    assert exc_info.value.status_code == 409


def test_timecards_and_manager_correction(db, staff, stores, shift):
    downtown, _ = stores
    service = TimeclockService(db)
    clock(db, staff["alice"], "clock_in", now=NOW)

    cards = service.get_store_timecards(downtown.store_id, date(2025, 1, 6))
    assert cards[staff["alice"].employee_id]["events"] == {"clock_in": "09:05"}
    assert cards[staff["bob"].employee_id]["events"] == {}

    service.update_time_log_entry(downtown.store_id, staff["alice"].employee_id, date(2025, 1, 6), "clock_in", "09:00")
    service.update_time_log_entry(downtown.store_id, staff["alice"].employee_id, date(2025, 1, 6), "clock_out", "17:00")

    card = service.get_store_timecards(downtown.store_id, date(2025, 1, 6))[staff["alice"].employee_id]
    assert card["events"] == {"clock_in": "09:00", "clock_out": "17:00"}
    assert card["hours"]["total_hours"] == 8.0


class TestRoutes:
    def test_status_without_shift(self, client, staff):
        resp = client.get("/timeclock/status", headers=auth_headers(staff["bob"]))
        assert resp.status_code == 200
        assert resp.json()["schedule_id"] is None
        assert resp.json()["status"]["status"] == "clocked_out"

    def test_clock_in_route(self, client, db, staff, stores):
        downtown, _ = stores
        today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        db.add(
            StoreSchedule(
                store_id=downtown.store_id,
                employee_id=staff["bob"].employee_id,
                start_time=today,
                end_time=today + timedelta(hours=8),
                time_log=[],
            )
        )
        db.commit()

        resp = client.post(
            "/timeclock/events",
            json={"type": "clock_in", "latitude": AT_STORE[0], "longitude": AT_STORE[1]},
            headers=auth_headers(staff["bob"]),
        )

        assert resp.status_code == 200
        assert resp.json()["status"]["is_clocked_in"] is True

    def test_unknown_event_type_is_rejected(self, client, staff):
        resp = client.post(
            "/timeclock/events",
            json={"type": "nap", "latitude": 0, "longitude": 0},
            headers=auth_headers(staff["bob"]),
        )
        assert resp.status_code == 422

    def test_timecards_require_manager(self, client, staff, stores):
        downtown, _ = stores
        resp = client.get(
            f"/timeclock/stores/{downtown.store_id}/timecards",
            params={"date": "2025-01-06"},
            headers=auth_headers(staff["alice"]),
        )
        assert resp.status_code == 403
