"""Invite router - create invites, validate tokens, redeem them"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_roles
from ...database import get_db
from ...models import Employee
from ..employees.schemas import EmployeeResponse
from ..employees.service import serialize_employee
from .schemas import AccountSetup, InviteCreate, InviteDetails, InviteResponse
from .service import INVITER_ROLES, InviteService

router = APIRouter(tags=["Invites"])

require_inviter = require_roles(*INVITER_ROLES)


def get_invite_service(db: Session = Depends(get_db)) -> InviteService:
    """Dependency injection for InviteService"""
    return InviteService(db)


@router.post("/invites", response_model=InviteResponse, status_code=201)
async def create_invite(
    data: InviteCreate,
    actor: Employee = Depends(require_inviter),
    service: InviteService = Depends(get_invite_service),
):
    return await service.create_invite(actor, data)


@router.get("/invites/{token}", response_model=InviteDetails)
async def get_invite(token: str, service: InviteService = Depends(get_invite_service)):
    return service.get_invite_details(token)


@router.post("/setup-account", response_model=EmployeeResponse, status_code=201)
async def setup_account(
    data: AccountSetup,
    user: dict = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    return serialize_employee(service.setup_account(user, data))
