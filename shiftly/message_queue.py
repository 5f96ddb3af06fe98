"""
Chat message queue
A Redis list per queue name holding JSON records:
{"msg_id": int, "enqueued_at": iso, "message": {roomId, senderId, content: {iv, ciphertext}, sentAt}}
"""

import json
import logging
from datetime import datetime
from typing import Any, Optional

import redis

from .config import CHAT_QUEUE_NAME
from .exceptions import QueueError
from .redis_client import get_redis_client

logger = logging.getLogger(__name__)

QUEUE_KEY_PREFIX = "queue"


class MessageQueue:
    """Redis-backed FIFO queue of chat jobs"""

    def __init__(self, client: redis.Redis, queue_name: str = CHAT_QUEUE_NAME):
        self.client = client
        self.queue_name = queue_name
        self.key = f"{QUEUE_KEY_PREFIX}:{queue_name}"
        self.id_key = f"{QUEUE_KEY_PREFIX}:{queue_name}:msg_id"

    def send(self, message: dict[str, Any]) -> int:
        """Append a job, returning its message id"""
        try:
            msg_id = int(self.client.incr(self.id_key))
            record = {
                "msg_id": msg_id,
                "enqueued_at": datetime.utcnow().isoformat(),
                "message": message,
            }
            self.client.rpush(self.key, json.dumps(record))
        except redis.RedisError as e:
            logger.error(f"❌ Enqueue failed on {self.queue_name}: {e}")
            raise QueueError(f"Failed to enqueue message: {e}") from e

        logger.info(f"🛎️ Job enqueued on {self.queue_name}: msg_id={msg_id}")
        return msg_id

    def pop(self) -> list[dict[str, Any]]:
        """Pop at most one job. Returns [] when the queue is empty."""
        try:
            raw = self.client.lpop(self.key)
        except redis.RedisError as e:
            raise QueueError(f"Failed to pop from {self.queue_name}: {e}") from e

        if raw is None:
            return []
        try:
            return [json.loads(raw)]
        except json.JSONDecodeError as e:
            raise QueueError(f"Malformed job on {self.queue_name}: {raw[:200]}") from e

    def length(self) -> int:
        try:
            return int(self.client.llen(self.key))
        except redis.RedisError as e:
            raise QueueError(f"Failed to read length of {self.queue_name}: {e}") from e


_queue: Optional[MessageQueue] = None


def get_message_queue() -> MessageQueue:
    """Queue on the shared Redis connection (FastAPI dependency)"""
    global _queue
    if _queue is None:
        _queue = MessageQueue(get_redis_client())
    return _queue


def build_job(room_id: int, sender_id: int, iv: str, ciphertext: str, sent_at: str) -> dict:
    return {
        "roomId": room_id,
        "senderId": sender_id,
        "content": {"iv": iv, "ciphertext": ciphertext},
        "sentAt": sent_at,
    }


def enqueue_message(
    queue: MessageQueue, room_id: int, sender_id: int, content: dict, sent_at: str
) -> int:
    """Queue an already-encrypted chat message for the worker"""
    return queue.send(
        build_job(room_id, sender_id, content["iv"], content["ciphertext"], sent_at)
    )
