"""
Invite service - setup tokens, invitation email and account setup

A manager (own store only), admin or owner invites an email address to a
store and role. The invitee signs up with the auth provider, then redeems the
token; the employee row takes store, role and email from the token.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import FRONTEND_URL, INVITE_EXPIRY_HOURS
from ...email_service import send_invite_email
from ...exceptions import EmailDeliveryError
from ...models import ROLE_ADMIN, ROLE_MANAGER, ROLE_OWNER, Employee, generate_token
from ...shared.validators import validate_uuid
from .repository import InviteRepository
from .schemas import AccountSetup, InviteCreate

logger = logging.getLogger(__name__)

INVITER_ROLES = (ROLE_OWNER, ROLE_ADMIN, ROLE_MANAGER)

REQUIRED_SETUP_FIELDS = (
    "first_name",
    "date_of_birth",
    "gender",
    "address_line_1",
    "city",
    "province",
    "country",
    "phone",
)

PROFILE_FIELDS = REQUIRED_SETUP_FIELDS + (
    "middle_name",
    "last_name",
    "preferred_name",
    "address_line_2",
    "postal_code",
)


def build_setup_link(token: str) -> str:
    return f"{FRONTEND_URL.rstrip('/')}/setup-account?token={token}"


class InviteService:
    """Service layer for invitations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InviteRepository()

    def _check_inviter(self, actor: Employee, data: InviteCreate) -> None:
        if data.role_id == ROLE_OWNER:
            raise HTTPException(status_code=400, detail="The Owner role cannot be assigned by invite")
        if actor.role_id not in INVITER_ROLES:
            raise HTTPException(status_code=403, detail="Access Denied")
        if actor.role_id == ROLE_MANAGER and actor.store_id != data.store_id:
            raise HTTPException(status_code=403, detail="Managers can only invite to their own store")

    async def create_invite(self, actor: Employee, data: InviteCreate) -> dict:
        """Create a setup token and email the link. Email failure keeps the token."""
        self._check_inviter(actor, data)

        if not self.repo.get_store(self.db, data.store_id):
            raise HTTPException(status_code=404, detail="Store not found")
        if not self.repo.get_role(self.db, data.role_id):
            raise HTTPException(status_code=404, detail="Role not found")
        if self.repo.get_employee_by_email(self.db, data.email):
            raise HTTPException(status_code=409, detail="An employee with this email already exists")
        if data.employee_id is not None and self.repo.get_employee_by_id(self.db, data.employee_id):
            raise HTTPException(status_code=409, detail=f"Employee ID {data.employee_id} is already taken")

        invite = self.repo.create_token(
            self.db,
            token=generate_token(),
            email=data.email,
            store_id=data.store_id,
            role_id=data.role_id,
            employee_id=data.employee_id,
            expires_at=datetime.utcnow() + timedelta(hours=INVITE_EXPIRY_HOURS),
        )
        link = build_setup_link(invite.token)
        logger.info(f"✉️ Invite created for {data.email} (store {data.store_id}, role {data.role_id})")

        email_sent = True
        email_error = None
        try:
            await send_invite_email(data.email, link)
        except EmailDeliveryError as e:
            email_sent = False
            email_error = str(e)
            logger.warning(f"⚠️ Invite email to {data.email} failed, token kept: {e}")

        return {
            "token": invite.token,
            "email": invite.email,
            "store_id": invite.store_id,
            "role_id": invite.role_id,
            "employee_id": invite.employee_id,
            "expires_at": invite.expires_at,
            "link": link,
            "email_sent": email_sent,
            "email_error": email_error,
        }

    def validate_invite(self, token: str, now: Optional[datetime] = None):
        """Return the token row, 404 if unknown, 410 if used or expired"""
        invite = self.repo.get_token(self.db, token) if validate_uuid(token) else None
        if not invite:
            raise HTTPException(status_code=404, detail="Invalid invitation link")
        if invite.is_used:
            raise HTTPException(status_code=410, detail="This invitation has already been used")
        if invite.expires_at < (now or datetime.utcnow()):
            raise HTTPException(status_code=410, detail="This invitation has expired")
        return invite

    def get_invite_details(self, token: str) -> dict:
        invite = self.validate_invite(token)
        store = self.repo.get_store(self.db, invite.store_id)
        role = self.repo.get_role(self.db, invite.role_id)
        return {
            "email": invite.email,
            "store_id": invite.store_id,
            "store_name": store.store_name if store else None,
            "role_id": invite.role_id,
            "role_name": role.role_name if role else None,
            "employee_id": invite.employee_id,
            "expires_at": invite.expires_at,
        }

    def setup_account(self, user: dict, data: AccountSetup) -> Employee:
        """Redeem a token for the authenticated auth user"""
        invite = self.validate_invite(data.token)

        email = (user.get("email") or "").lower()
        if email and email != invite.email.lower():
            raise HTTPException(status_code=403, detail="This invitation was sent to a different email")
        if self.repo.get_employee_by_auth_id(self.db, user["sub"]):
            raise HTTPException(status_code=409, detail="This account is already set up")

        missing = [f for f in REQUIRED_SETUP_FIELDS if not getattr(data, f)]
        if missing:
            raise HTTPException(
                status_code=400,
                detail={"message": "Please fill in all required fields.", "missing": missing},
            )

        employee = Employee(
            id=user["sub"],
            email=invite.email,
            store_id=invite.store_id,
            role_id=invite.role_id,
            **{f: getattr(data, f) for f in PROFILE_FIELDS},
        )
        if invite.employee_id is not None:
            employee.employee_id = invite.employee_id

        invite.is_used = True
        invite.used_at = datetime.utcnow()
        try:
            self.db.add(employee)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"❌ Account setup failed for {invite.email}: {e}")
            raise HTTPException(status_code=409, detail="Employee record already exists") from e

        self.db.refresh(employee)
        logger.info(f"✅ Account set up for {invite.email} as employee {employee.employee_id}")
        return employee


def cleanup_expired_invites(db: Session, now: Optional[datetime] = None) -> int:
    """Delete unused tokens past their expiry"""
    deleted = InviteRepository.delete_expired(db, now or datetime.utcnow())
    if deleted:
        logger.info(f"🧹 Deleted {deleted} expired invites")
    return deleted
