import asyncio
import inspect
from datetime import datetime

import httpx
import pytest

from shiftly.chat_crypto import encrypt_message
from shiftly.database import SessionLocal
from shiftly.domain.chat.service import ChatService
from shiftly.message_queue import enqueue_message
from shiftly.models_chat import ContentSafetyEvent, Message
from shiftly.routes import queue as queue_routes
from shiftly.services.content_safety import ContentSafetyClient
from shiftly.workers.chat_worker import drain, process_message_record, process_one


def safety_client(severity: int) -> ContentSafetyClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "categoriesAnalysis": [
                    {"category": "Hate", "severity": 0},
                    {"category": "Violence", "severity": severity},
                ]
            },
        )

    return ContentSafetyClient(
        "https://safety.example.com/", "key", transport=httpx.MockTransport(handler)
    )


@pytest.fixture
def room(db, staff):
    return ChatService(db).create_chat_room(
        [staff["bob"].employee_id], "private", creator_id=staff["alice"].employee_id
    )


def queue_text(queue, room, sender_id, text, sent_at="2025-01-06T14:30:00Z"):
    return enqueue_message(queue, room.id, sender_id, encrypt_message(text, room.encryption_key), sent_at)


def test_drain_stores_clean_message_with_sent_at(db, queue, room, staff):
    queue_text(queue, room, staff["alice"].employee_id, "Running 5 min late")

    results = asyncio.run(drain(queue, safety_client=safety_client(0)))

    assert results[0]["status"] == "stored"
    message = db.query(Message).one()
    assert message.chat_room_id == room.id
    assert message.sender_id == staff["alice"].employee_id
    assert message.created_at == datetime(2025, 1, 6, 14, 30)
    assert queue.length() == 0


def test_drain_handles_one_job_per_call(db, queue, room, staff):
    queue_text(queue, room, staff["alice"].employee_id, "one")
    queue_text(queue, room, staff["alice"].employee_id, "two")

    asyncio.run(drain(queue))

    assert db.query(Message).count() == 1
    assert queue.length() == 1


def test_flagged_message_is_removed_and_recorded(db, queue, room, staff):
    queue_text(queue, room, staff["bob"].employee_id, "something nasty")

    results = asyncio.run(drain(queue, safety_client=safety_client(4)))

    assert results[0]["status"] == "flagged"
    assert db.query(Message).count() == 0
    event = db.query(ContentSafetyEvent).one()
    assert event.reason == "Content policy violation"
    assert event.employee_id == staff["bob"].employee_id
    assert event.chat_room_id == room.id
    assert event.message_id is not None
    assert {"category": "Violence", "severity": 4} in event.categories


def test_severity_below_threshold_is_kept(db, queue, room, staff):
    queue_text(queue, room, staff["bob"].employee_id, "mild")
    asyncio.run(drain(queue, safety_client=safety_client(1)))
    assert db.query(Message).count() == 1


def test_missing_room_is_recorded_as_worker_error(db, queue, staff):
    msg_id = enqueue_message(
        queue, 999, staff["alice"].employee_id, {"iv": "aXY=", "ciphertext": "Y3Q="}, "2025-01-06T00:00:00Z"
    )

    results = asyncio.run(drain(queue))

    assert results[0]["status"] == "error"
    event = db.query(ContentSafetyEvent).one()
    assert event.reason.startswith("Worker error: ")
    assert "999" in event.reason
    assert event.message_id == msg_id
    assert db.query(Message).count() == 0


def test_undecryptable_job_does_not_stop_the_worker(db, queue, room, staff):
    enqueue_message(
        queue, room.id, staff["alice"].employee_id, {"iv": "bad", "ciphertext": "bad"}, "2025-01-06T00:00:00Z"
    )
    queue_text(queue, room, staff["alice"].employee_id, "fine")

    asyncio.run(drain(queue))
    asyncio.run(drain(queue))

    assert db.query(ContentSafetyEvent).count() == 1
    assert db.query(Message).count() == 1


def test_drain_on_empty_queue_does_nothing(queue):
    assert asyncio.run(drain(queue)) == []


def test_content_safety_failure_is_recorded(db, queue, room, staff):
    failing = ContentSafetyClient(
        "https://safety.example.com",
        "key",
        transport=httpx.MockTransport(lambda r: httpx.Response(401, json={"error": "bad key"})),
    )
    queue_text(queue, room, staff["alice"].employee_id, "hello")

    asyncio.run(drain(queue, safety_client=failing))

    assert db.query(Message).count() == 0
    assert "Content Safety analysis failed" in db.query(ContentSafetyEvent).one().reason


def test_process_message_record_inserts_without_moderation(db, room, staff):
    record = {
        "msg_id": 5,
        "message": {
            "roomId": room.id,
            "senderId": staff["bob"].employee_id,
            "content": {"iv": "aXY=", "ciphertext": "Y3Q="},
            "sentAt": "2025-01-06T09:00:00Z",
        },
    }
    message_id = process_message_record(record, SessionLocal)
    assert db.query(Message).filter(Message.id == message_id).one().ciphertext == "Y3Q="


def test_process_one_pops_and_inserts(db, queue, room, staff):
    assert process_one(queue) is None
    queue_text(queue, room, staff["alice"].employee_id, "hi")
    assert process_one(queue) is not None
    assert db.query(Message).count() == 1


def test_internal_process_queue_route(client, db, queue, room, staff):
    assert client.post("/internal/process-queue").json() == {"message": "No messages in queue"}
    queue_text(queue, room, staff["alice"].employee_id, "hi")
    resp = client.post("/internal/process-queue")
    assert resp.status_code == 200
    assert "message_id" in resp.json()


def test_internal_routes_run_in_threadpool():
    # Blocking Redis and DB calls stay off the event loop
    assert not inspect.iscoroutinefunction(queue_routes.process_message)
    assert not inspect.iscoroutinefunction(queue_routes.process_queue)


def test_internal_process_message_route(client, db, room, staff):
    record = {
        "msg_id": 3,
        "message": {
            "roomId": room.id,
            "senderId": staff["alice"].employee_id,
            "content": {"iv": "aXY=", "ciphertext": "Y3Q="},
            "sentAt": "2025-01-06T09:00:00Z",
        },
    }
    resp = client.post("/internal/process-message", json=record)

    assert resp.status_code == 200
    message_id = resp.json()["message_id"]
    assert db.query(Message).filter(Message.id == message_id).one().chat_room_id == room.id
