"""
Chat queue worker
Pops queued chat jobs, moderates the decrypted text and stores the message.
Flagged messages are recorded as content safety events instead of being kept.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from ..chat_crypto import decrypt_message
from ..config import QUEUE_POLL_INTERVAL
from ..database import SessionLocal
from ..exceptions import QueueError
from ..message_queue import MessageQueue, get_message_queue
from ..models_chat import ChatRoom, ContentSafetyEvent, Message
from ..services.content_safety import (
    ContentSafetyClient,
    get_content_safety_client,
    is_violation,
)
from ..utils.location import parse_timestamp

logger = logging.getLogger(__name__)

VIOLATION_REASON = "Content policy violation"


def _sent_at(job: dict) -> datetime:
    if job.get("sentAt"):
        return parse_timestamp(job["sentAt"])
    return datetime.utcnow()


def _new_message(job: dict) -> Message:
    content = job.get("content") or {}
    if not content.get("iv") or not content.get("ciphertext"):
        raise ValueError("Job content is missing iv or ciphertext")
    return Message(
        chat_room_id=job["roomId"],
        sender_id=job["senderId"],
        iv=content["iv"],
        ciphertext=content["ciphertext"],
        created_at=_sent_at(job),
    )


def _record_error(db: Session, record: dict, error: Exception) -> None:
    job = record.get("message") or {}
    db.add(
        ContentSafetyEvent(
            chat_room_id=job.get("roomId"),
            message_id=record.get("msg_id"),
            employee_id=job.get("senderId"),
            reason=f"Worker error: {error}",
            created_at=datetime.utcnow(),
        )
    )
    db.commit()


async def process_job(
    db: Session, record: dict, safety_client: Optional[ContentSafetyClient] = None
) -> dict[str, Any]:
    """Moderate and store one queued job"""
    job = record.get("message") or {}
    room_id = job.get("roomId")

    room = db.query(ChatRoom).filter(ChatRoom.id == room_id).first()
    if not room:
        raise ValueError(f"Chat room {room_id} not found")

    content = job.get("content") or {}
    text = decrypt_message(content.get("iv"), content.get("ciphertext"), room.encryption_key)

    categories = []
    if safety_client is not None:
        categories = await safety_client.analyze_text(text)

    message = _new_message(job)
    db.add(message)

    if categories and is_violation(categories):
        # Flush for an id the event can reference, then drop the message
        db.flush()
        db.add(
            ContentSafetyEvent(
                chat_room_id=room_id,
                message_id=message.id,
                employee_id=job.get("senderId"),
                reason=VIOLATION_REASON,
                categories=categories,
                created_at=datetime.utcnow(),
            )
        )
        db.delete(message)
        db.commit()
        logger.warning(
            f"🚫 Message from employee {job.get('senderId')} in room {room_id} removed by moderation"
        )
        return {"msg_id": record.get("msg_id"), "status": "flagged", "categories": categories}

    db.commit()
    logger.info(f"✅ Message {message.id} stored in room {room_id}")
    return {"msg_id": record.get("msg_id"), "status": "stored", "message_id": message.id}


async def drain(
    queue: Optional[MessageQueue] = None,
    db_factory: Callable[[], Session] = SessionLocal,
    safety_client: Optional[ContentSafetyClient] = None,
) -> list[dict[str, Any]]:
    """Pop at most one job and process it. Per-job failures are recorded, never raised."""
    queue = queue or get_message_queue()
    try:
        records = queue.pop()
    except QueueError as e:
        logger.error(f"❌ Failed to read chat queue: {e}")
        return []

    results = []
    for record in records:
        db = db_factory()
        try:
            results.append(await process_job(db, record, safety_client))
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Error processing queued message {record.get('msg_id')}: {e}")
            try:
                _record_error(db, record, e)
            except Exception as record_error:
                db.rollback()
                logger.error(f"❌ Could not record worker error: {record_error}")
            results.append({"msg_id": record.get("msg_id"), "status": "error", "error": str(e)})
        finally:
            db.close()
    return results


def process_message_record(record: dict, db_factory: Callable[[], Session] = SessionLocal) -> int:
    """Insert a pushed job's message as-is, without moderation. Returns the message id."""
    job = record.get("message") or record
    db = db_factory()
    try:
        message = _new_message(job)
        db.add(message)
        db.commit()
        db.refresh(message)
        logger.info(f"✅ Pushed message {message.id} stored in room {message.chat_room_id}")
        return message.id
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def process_one(
    queue: Optional[MessageQueue] = None, db_factory: Callable[[], Session] = SessionLocal
) -> Optional[int]:
    """Pop one job and insert it without moderation. None when the queue is empty."""
    queue = queue or get_message_queue()
    records = queue.pop()
    if not records:
        return None
    return process_message_record(records[0], db_factory)


async def run_chat_worker(
    interval: float = QUEUE_POLL_INTERVAL,
    queue: Optional[MessageQueue] = None,
    safety_client: Optional[ContentSafetyClient] = None,
):
    """
    Main worker loop - drains one job per interval
    """
    logger.info(f"🚀 Starting chat worker (poll every {interval}s)...")
    safety_client = safety_client or get_content_safety_client()
    if safety_client is None:
        logger.warning("⚠️ Content Safety not configured, messages are stored unmoderated")

    while True:
        try:
            await drain(queue, safety_client=safety_client)
        except Exception as e:
            logger.error(f"❌ Error in chat worker loop: {e}")
        await asyncio.sleep(interval)
