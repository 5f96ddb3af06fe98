"""
Invite email and content safety endpoints
Errors use a flat {"error": ...} body, which the invite and chat pages read directly.
"""

import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..auth import require_roles
from ..email_service import send_invite_email
from ..exceptions import ContentSafetyError, EmailDeliveryError
from ..models import ROLE_ADMIN, ROLE_MANAGER, ROLE_OWNER, Employee
from ..rate_limiter import create_rate_limiter
from ..services.content_safety import (
    ContentSafetyClient,
    get_content_safety_client,
    is_violation,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Mailer"])

rate_limit_invites = create_rate_limiter(
    limit=int(os.getenv("SEND_INVITE_RPH", "20")),
    window_seconds=3600,
    key_prefix="send_invite",
    use_ip=True,
)

rate_limit_content_safety = create_rate_limiter(
    limit=int(os.getenv("CONTENT_SAFETY_RPM", "60")),
    window_seconds=60,
    key_prefix="content_safety",
    use_ip=True,
)

require_inviter = require_roles(ROLE_OWNER, ROLE_ADMIN, ROLE_MANAGER)


class InviteEmailRequest(BaseModel):
    email: Optional[str] = None
    link: Optional[str] = None


class ContentSafetyRequest(BaseModel):
    text: Optional[str] = None


@router.post("/send-invite")
async def send_invite(
    data: InviteEmailRequest,
    actor: Employee = Depends(require_inviter),
    _: None = Depends(rate_limit_invites),
):
    if not data.email or not data.link:
        return JSONResponse(status_code=400, content={"error": "Missing email or link"})

    try:
        await send_invite_email(data.email, data.link)
    except EmailDeliveryError as e:
        logger.error(f"❌ Invite email to {data.email} failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": str(e), "statusCode": e.status_code, "details": e.details},
        )

    logger.info(f"✅ Invite email sent to {data.email} by employee {actor.employee_id}")
    return {"status": "sent"}


@router.post("/check-content-safety")
async def check_content_safety(
    data: ContentSafetyRequest,
    _: None = Depends(rate_limit_content_safety),
    client: Optional[ContentSafetyClient] = Depends(get_content_safety_client),
):
    if not data.text:
        return JSONResponse(status_code=400, content={"error": "Missing text"})
    if client is None:
        return JSONResponse(status_code=500, content={"error": "Content Safety not configured"})

    try:
        categories = await client.analyze_text(data.text)
    except ContentSafetyError as e:
        return JSONResponse(status_code=500, content={"error": str(e), "details": e.details})

    return {"categoriesAnalysis": categories, "flagged": is_violation(categories)}
