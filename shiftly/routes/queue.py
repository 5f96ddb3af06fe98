"""
Chat queue endpoints
/enqueue accepts an already-encrypted message; the /internal routes run the
unmoderated insert variants on demand.
"""

import hmac
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from ..config import INTERNAL_API_KEY
from ..exceptions import QueueError
from ..message_queue import MessageQueue, build_job, get_message_queue
from ..workers.chat_worker import process_message_record, process_one

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Queue"])

REQUIRED_FIELDS = ("roomId", "senderId", "iv", "ciphertext", "sentAt")


class EnqueueRequest(BaseModel):
    roomId: Optional[int] = None
    senderId: Optional[int] = None
    iv: Optional[str] = None
    ciphertext: Optional[str] = None
    sentAt: Optional[str] = None


def require_internal_key(x_internal_key: Optional[str] = Header(None)) -> None:
    """Internal routes are open only when INTERNAL_API_KEY is unset or matches"""
    if INTERNAL_API_KEY and not hmac.compare_digest(x_internal_key or "", INTERNAL_API_KEY):
        raise HTTPException(status_code=401, detail="Invalid internal key")


@router.post("/enqueue")
async def enqueue(data: EnqueueRequest, queue: MessageQueue = Depends(get_message_queue)):
    if any(getattr(data, field) in (None, "") for field in REQUIRED_FIELDS):
        return JSONResponse(status_code=400, content={"error": "Missing required fields"})

    try:
        msg_id = queue.send(
            build_job(data.roomId, data.senderId, data.iv, data.ciphertext, data.sentAt)
        )
    except QueueError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})

    return {"msg_id": msg_id}


@router.post("/internal/process-message", dependencies=[Depends(require_internal_key)])
def process_message(record: dict[str, Any]):
    try:
        message_id = process_message_record(record)
    except (KeyError, ValueError, SQLAlchemyError) as e:
        logger.error(f"❌ Failed to store pushed message: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
    return {"message_id": message_id}


@router.post("/internal/process-queue", dependencies=[Depends(require_internal_key)])
def process_queue(queue: MessageQueue = Depends(get_message_queue)):
    try:
        message_id = process_one(queue)
    except (QueueError, KeyError, ValueError, SQLAlchemyError) as e:
        logger.error(f"❌ Failed to process queued message: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
    if message_id is None:
        return {"message": "No messages in queue"}
    return {"message_id": message_id}
