"""Chat router - rooms, messages, unread counts and group management"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_employee
from ...database import get_db
from ...message_queue import MessageQueue, get_message_queue
from ...models import Employee
from .schemas import (
    AdminUpdate,
    ChatMessage,
    ChatRoomCreate,
    ChatRoomResponse,
    GroupMembersAdd,
    GroupRename,
    MessageCreate,
    ParticipantResponse,
    RoomListResponse,
    SafetyAlertResponse,
)
from .service import ChatService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])


def get_chat_service(db: Session = Depends(get_db)) -> ChatService:
    """Dependency injection for ChatService"""
    return ChatService(db)


def get_chat_sender(
    db: Session = Depends(get_db), queue: MessageQueue = Depends(get_message_queue)
) -> ChatService:
    """ChatService wired to the message queue"""
    return ChatService(db, queue)


@router.get("/rooms", response_model=RoomListResponse)
async def list_rooms(
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    """Group and private rooms with unread counts for the current employee"""
    return service.list_rooms(employee.employee_id)


@router.post("/rooms", response_model=ChatRoomResponse, status_code=201)
async def create_room(
    data: ChatRoomCreate,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    if data.type == "store":
        return service.ensure_store_room(employee)
    return service.create_chat_room(
        data.participantIds, data.type, name=data.name, creator_id=employee.employee_id
    )


@router.post("/rooms/store", response_model=ChatRoomResponse)
async def join_store_room(
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    return service.ensure_store_room(employee)


@router.get("/rooms/{room_id}/messages", response_model=list[ChatMessage])
async def get_messages(
    room_id: int,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    return service.load_messages(room_id, employee.employee_id)


@router.post("/rooms/{room_id}/messages", response_model=ChatMessage, status_code=202)
async def send_message(
    room_id: int,
    data: MessageCreate,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_sender),
):
    """Encrypt and queue a message; it appears once the worker has moderated it"""
    return service.send_message(room_id, data.text, employee.employee_id)


@router.post("/rooms/{room_id}/read")
async def mark_read(
    room_id: int,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    participant = service.mark_read(room_id, employee.employee_id)
    return {"roomId": room_id, "last_read": participant.last_read}


@router.delete("/rooms/{room_id}")
async def hide_room(
    room_id: int,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    """Delete the conversation for the current employee only"""
    participant = service.hide_room(room_id, employee.employee_id)
    return {"roomId": room_id, "deleted_at": participant.deleted_at}


@router.get("/rooms/{room_id}/participants", response_model=list[ParticipantResponse])
async def get_participants(
    room_id: int,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    return service.get_participants(room_id, employee.employee_id)


@router.patch("/groups/{room_id}", response_model=ChatRoomResponse)
async def rename_group(
    room_id: int,
    data: GroupRename,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    return service.rename_group(room_id, employee.employee_id, data.name)


@router.post("/groups/{room_id}/members")
async def add_members(
    room_id: int,
    data: GroupMembersAdd,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    added = service.add_members(room_id, employee.employee_id, data.employeeIds)
    return {"added": added}


@router.delete("/groups/{room_id}/members/{employee_id}")
async def remove_member(
    room_id: int,
    employee_id: int,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    service.remove_member(room_id, employee.employee_id, employee_id)
    return {"removed": employee_id}


@router.put("/groups/{room_id}/members/{employee_id}/admin")
async def set_admin(
    room_id: int,
    employee_id: int,
    data: AdminUpdate,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    service.set_admin(room_id, employee.employee_id, employee_id, data.isAdmin)
    return {"employeeId": employee_id, "isAdmin": data.isAdmin}


@router.post("/groups/{room_id}/leave")
async def leave_group(
    room_id: int,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    return service.leave_group(room_id, employee.employee_id)


@router.delete("/groups/{room_id}")
async def delete_group(
    room_id: int,
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    service.delete_group(room_id, employee.employee_id)
    return {"deleted": room_id}


@router.get("/safety-alert", response_model=Optional[SafetyAlertResponse])
async def get_safety_alert(
    minutes: int = Query(5, ge=1, le=60),
    employee: Employee = Depends(get_current_employee),
    service: ChatService = Depends(get_chat_service),
):
    """Newest moderation event for the current employee, if any in the window"""
    return service.recent_safety_alert(employee.employee_id, minutes)
