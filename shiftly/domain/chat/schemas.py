"""Chat domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models_chat import ROOM_TYPES


class ChatRoomCreate(BaseModel):
    """Schema for creating a group or private room"""

    type: str
    participantIds: list[int] = Field(default_factory=list)
    name: Optional[str] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v not in ROOM_TYPES:
            raise ValueError(f"type must be one of {', '.join(ROOM_TYPES)}")
        return v


class ChatRoomResponse(BaseModel):
    id: int
    type: str
    name: Optional[str] = None
    store_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def validate_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Message text cannot be empty")
        return v


class ChatMessage(BaseModel):
    """Decrypted message as shown in a room"""

    id: Optional[int] = None
    senderId: int
    text: str
    sentAt: Optional[datetime] = None


class GroupRoom(BaseModel):
    id: int
    type: str
    name: Optional[str] = None
    store_id: Optional[int] = None
    last_read: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    unread_count: int = 0


class PrivateRoom(BaseModel):
    roomId: int
    participantId: int
    name: str
    avatar: Optional[str] = None
    unread_count: int = 0


class RoomListResponse(BaseModel):
    groupChats: list[GroupRoom]
    privateChats: list[PrivateRoom]
    totalGroupUnread: int = 0
    totalPrivateUnread: int = 0


class ParticipantResponse(BaseModel):
    employeeId: int
    name: str
    avatar: Optional[str] = None
    isAdmin: bool = False


class GroupRename(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Group name cannot be empty")
        return v


class GroupMembersAdd(BaseModel):
    employeeIds: list[int]


class AdminUpdate(BaseModel):
    isAdmin: bool


class SafetyAlertResponse(BaseModel):
    id: int
    chat_room_id: Optional[int] = None
    message_id: Optional[int] = None
    reason: Optional[str] = None
    categories: Optional[list] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
