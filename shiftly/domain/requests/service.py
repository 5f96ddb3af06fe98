"""
Employee request service - availability, time-off and complaint requests

Submission and approval return result dicts ({"success": bool, "error"?: str})
rather than raising, so pages can show the message as-is.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Activity, EmployeeAvailability, EmployeeRequest, generate_token
from .repository import RequestRepository

logger = logging.getLogger(__name__)

REQUEST_TYPE_AVAILABILITY = "availability"
REQUEST_TYPE_TIME_OFF = "time-off"
REQUEST_TYPE_COMPLAINT = "complaint"
REQUEST_TYPES = (REQUEST_TYPE_AVAILABILITY, REQUEST_TYPE_COMPLAINT, REQUEST_TYPE_TIME_OFF)

ACTIVITY_TYPE_TIME_OFF = "Time-off Request"


def validate_request(data: Optional[dict]) -> tuple[bool, Optional[str]]:
    """Check a request payload before storing it. Returns (valid, error)."""
    if not data:
        return False, "Missing request data."

    employee_id = data.get("employee_id")
    request_type = data.get("request_type")
    request = data.get("request")

    if not employee_id or isinstance(employee_id, bool) or not isinstance(employee_id, int):
        return False, "Invalid or missing employee_id."
    if request_type not in REQUEST_TYPES:
        return False, "Invalid request_type."
    if not isinstance(request, dict):
        return False, "Invalid or missing request content."

    if request_type == REQUEST_TYPE_AVAILABILITY:
        if not request.get("preferred_hours") and (
            not request.get("start_date") or not request.get("end_date")
        ):
            return (
                False,
                "Availability request must include preferred_hours or start_date and end_date.",
            )

    if request_type == REQUEST_TYPE_TIME_OFF:
        if not request.get("reason") or not request.get("start_date") or not request.get("end_date"):
            return False, "Time-off request must include reason, start_date, and end_date."

    if request_type == REQUEST_TYPE_COMPLAINT:
        if not request.get("subject") or not request.get("details"):
            return False, "Complaint must include subject and details."

    return True, None


def _parse_day(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class RequestService:
    """Service layer for employee requests"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RequestRepository()

    def submit_employee_request(self, data: dict) -> dict:
        valid, error = validate_request(data)
        if not valid:
            return {"success": False, "error": error}

        request_id = generate_token()
        activity = None
        if data["request_type"] == REQUEST_TYPE_TIME_OFF:
            activity = Activity(
                type=ACTIVITY_TYPE_TIME_OFF,
                description=f"Time-off requested {data['request'].get('start_date')} to {data['request'].get('end_date')}",
                employee_id=data["employee_id"],
                timestamp=datetime.utcnow(),
            )

        try:
            self.repo.create_request(
                self.db,
                activity=activity,
                request_id=request_id,
                employee_id=data["employee_id"],
                request_type=data["request_type"],
                request=data["request"],
                created_at=datetime.utcnow(),
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to store request for employee {data['employee_id']}: {e}")
            return {"success": False, "error": str(e.orig) if getattr(e, "orig", None) else str(e)}

        logger.info(f"📥 {data['request_type']} request {request_id} submitted")
        return {"success": True, "request_id": request_id}

    def approve_employee_request(self, request_id: str) -> dict:
        """
        Approve a request: one zero-length availability row per requested day
        (start_date to end_date inclusive), then the request is removed.
        """
        request = self.repo.get_request(self.db, request_id)
        if not request:
            return {"success": False, "error": "Request not found."}

        content = request.request or {}
        try:
            entries = []
            if content.get("start_date") and content.get("end_date"):
                day = _parse_day(content["start_date"])
                end_day = _parse_day(content["end_date"])
                while day <= end_day:
                    start = datetime(day.year, day.month, day.day)
                    entries.append(
                        EmployeeAvailability(
                            employee_id=request.employee_id, start_time=start, end_time=start
                        )
                    )
                    day += timedelta(days=1)

            self.db.add_all(entries)
            self.db.delete(request)
            self.db.commit()
        except (ValueError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.error(f"❌ Failed to approve request {request_id}: {e}")
            return {"success": False, "error": str(e)}

        logger.info(f"✅ Request {request_id} approved ({len(entries)} days blocked)")
        return {"success": True}

    def reject_employee_request(self, request_id: str) -> dict:
        request = self.repo.get_request(self.db, request_id)
        if not request:
            return {"success": False, "error": "Request not found."}
        try:
            self.db.delete(request)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            return {"success": False, "error": str(e)}
        logger.info(f"🚫 Request {request_id} rejected")
        return {"success": True}

    def fetch_pending_time_off_count(self, store_id: Optional[int] = None) -> int:
        return self.repo.count_pending(self.db, REQUEST_TYPE_TIME_OFF, store_id)

    def fetch_pending_availability_requests(self, store_id: Optional[int] = None) -> list[dict]:
        return self._with_names(
            self.repo.get_pending(self.db, REQUEST_TYPE_AVAILABILITY, store_id)
        )

    def fetch_pending_time_off_requests(self, store_id: Optional[int] = None) -> list[dict]:
        return self._with_names(self.repo.get_pending(self.db, REQUEST_TYPE_TIME_OFF, store_id))

    def fetch_pending_requests(
        self, request_type: Optional[str] = None, store_id: Optional[int] = None
    ) -> list[dict]:
        return self._with_names(self.repo.get_pending(self.db, request_type, store_id))

    def get_my_requests(self, employee_id: int) -> list[dict]:
        return self._with_names(self.repo.get_for_employee(self.db, employee_id))

    def get_availability(self, employee_id: int) -> list[EmployeeAvailability]:
        return self.repo.get_availability(self.db, employee_id)

    @staticmethod
    def _with_names(requests: list[EmployeeRequest]) -> list[dict]:
        return [
            {
                "request_id": r.request_id,
                "employee_id": r.employee_id,
                "employee_name": r.employee.full_name if r.employee else None,
                "request_type": r.request_type,
                "request": r.request,
                "status": r.status,
                "created_at": r.created_at,
            }
            for r in requests
        ]

    def request_store_id(self, request_id: str) -> Optional[int]:
        """Store of the employee who made the request, None if unknown"""
        request = self.repo.get_request(self.db, request_id)
        if not request or not request.employee:
            return None
        return request.employee.store_id
