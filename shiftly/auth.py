import logging
from typing import Any

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session, joinedload

from .config import SUPABASE_JWT_AUDIENCE, SUPABASE_JWT_SECRET
from .database import get_db
from .models import Employee

logger = logging.getLogger(__name__)

security = HTTPBearer()

ALGORITHM = "HS256"


def verify_supabase_token(token: str) -> dict[str, Any]:
    """
    Verify a Supabase access token (HS256, signed with the project JWT secret).
    Checks signature, expiry and audience.
    """
    if not SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    try:
        payload = jose_jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"⚠️ Token verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token") from e

    if not payload.get("sub"):
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return payload


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict[str, Any]:
    """Get the authenticated auth user (token claims) from the Bearer token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    payload = verify_supabase_token(token)
    logger.debug(f"✅ Token verified for user: {payload.get('email')}")
    return payload


async def get_current_employee(
    user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Employee:
    """
    Resolve the employee row linked to the auth user.
    Auth users without an employee record (invite not redeemed) are refused.
    """
    employee = (
        db.query(Employee)
        .options(joinedload(Employee.role), joinedload(Employee.store))
        .filter(Employee.id == user["sub"])
        .first()
    )
    if not employee:
        logger.warning(f"⚠️ No employee record for auth user {user.get('email')}")
        raise HTTPException(
            status_code=403,
            detail="No employee record found for this account",
            headers={"X-Setup-Required": "true"},
        )
    return employee


def require_roles(*role_ids: int):
    """
    Dependency factory gating a route on the employee's role.

    Example:
        @router.get("/", dependencies=[Depends(require_roles(ROLE_OWNER, ROLE_ADMIN))])
    """

    async def role_checker(employee: Employee = Depends(get_current_employee)) -> Employee:
        if employee.role_id not in role_ids:
            logger.warning(
                f"⚠️ Employee {employee.employee_id} (role {employee.role_id}) denied, "
                f"requires {list(role_ids)}"
            )
            raise HTTPException(status_code=403, detail="Access Denied")
        return employee

    return role_checker
