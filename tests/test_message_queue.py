import json

import pytest
import redis

from shiftly.exceptions import QueueError
from shiftly.message_queue import MessageQueue, build_job, enqueue_message


class BrokenRedis:
    def incr(self, key):
        raise redis.ConnectionError("connection refused")

    def lpop(self, key):
        raise redis.ConnectionError("connection refused")


def test_send_assigns_increasing_ids_and_pops_in_order(queue):
    first = queue.send(build_job(1, 10, "iv1", "ct1", "2025-01-06T14:00:00Z"))
    second = queue.send(build_job(1, 11, "iv2", "ct2", "2025-01-06T14:00:01Z"))

    assert second == first + 1
    assert queue.length() == 2

    [record] = queue.pop()
    assert record["msg_id"] == first
    assert record["message"] == {
        "roomId": 1,
        "senderId": 10,
        "content": {"iv": "iv1", "ciphertext": "ct1"},
        "sentAt": "2025-01-06T14:00:00Z",
    }
    assert "enqueued_at" in record
    assert queue.pop()[0]["msg_id"] == second
    assert queue.pop() == []


def test_queues_are_isolated_by_name(fake_redis):
    a = MessageQueue(fake_redis, "a")
    b = MessageQueue(fake_redis, "b")
    a.send({"x": 1})
    assert b.length() == 0
    assert a.length() == 1


def test_enqueue_message_wraps_encrypted_content(queue):
    msg_id = enqueue_message(queue, 3, 7, {"iv": "i", "ciphertext": "c"}, "2025-01-06T00:00:00Z")
    [record] = queue.pop()
    assert record["msg_id"] == msg_id
    assert record["message"]["content"] == {"iv": "i", "ciphertext": "c"}


def test_malformed_record_raises_queue_error(queue, fake_redis):
    fake_redis.rpush(queue.key, "{not json")
    with pytest.raises(QueueError):
        queue.pop()


def test_redis_failures_become_queue_errors():
    queue = MessageQueue(BrokenRedis(), "messages")
    with pytest.raises(QueueError):
        queue.send({"roomId": 1})
    with pytest.raises(QueueError):
        queue.pop()


def test_enqueue_endpoint(client, queue, fake_redis):
    resp = client.post(
        "/enqueue",
        json={
            "roomId": 1,
            "senderId": 2,
            "iv": "aXY=",
            "ciphertext": "Y3Q=",
            "sentAt": "2025-01-06T14:00:00Z",
        },
    )
    assert resp.status_code == 200
    assert resp.json()["msg_id"] == 1
    stored = json.loads(fake_redis.lindex(queue.key, 0))
    assert stored["message"]["senderId"] == 2


def test_enqueue_endpoint_requires_every_field(client, queue):
    resp = client.post("/enqueue", json={"roomId": 1, "senderId": 2, "iv": "aXY="})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}
    assert queue.length() == 0


def test_enqueue_endpoint_reports_queue_failure(client):
    from shiftly.main import app
    from shiftly.message_queue import get_message_queue

    app.dependency_overrides[get_message_queue] = lambda: MessageQueue(BrokenRedis())
    resp = client.post(
        "/enqueue",
        json={"roomId": 1, "senderId": 2, "iv": "a", "ciphertext": "b", "sentAt": "c"},
    )
    assert resp.status_code == 500
    assert "error" in resp.json()
