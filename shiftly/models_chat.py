from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

ROOM_TYPE_STORE = "store"
ROOM_TYPE_GROUP = "group"
ROOM_TYPE_PRIVATE = "private"
ROOM_TYPES = (ROOM_TYPE_STORE, ROOM_TYPE_GROUP, ROOM_TYPE_PRIVATE)


class ChatRoom(Base):
    __tablename__ = "chat_rooms"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(20), nullable=False)  # store, group, private
    name = Column(String(255), nullable=True)
    store_id = Column(Integer, ForeignKey("store.store_id"), nullable=True, index=True)
    encryption_key = Column(String(64), nullable=False)  # hex AES key
    created_at = Column(DateTime, server_default=func.now())

    participants = relationship(
        "ChatRoomParticipant", back_populates="room", cascade="all, delete-orphan"
    )
    messages = relationship("Message", back_populates="room", cascade="all, delete-orphan")


class ChatRoomParticipant(Base):
    __tablename__ = "chat_room_participants"
    __table_args__ = (UniqueConstraint("room_id", "employee_id", name="uq_room_participant"),)

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("chat_rooms.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employee.employee_id"), nullable=False, index=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    last_read = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)  # hidden for this participant since
    joined_at = Column(DateTime, server_default=func.now())

    room = relationship("ChatRoom", back_populates="participants")
    employee = relationship("Employee")


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    chat_room_id = Column(Integer, ForeignKey("chat_rooms.id"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("employee.employee_id"), nullable=False)
    ciphertext = Column(Text, nullable=False)  # Base64
    iv = Column(String(32), nullable=False)  # Base64
    created_at = Column(DateTime, server_default=func.now(), index=True)

    room = relationship("ChatRoom", back_populates="messages")


class ContentSafetyEvent(Base):
    """A removed message or a failed queue job, surfaced to the sender"""

    __tablename__ = "content_safety_events"

    id = Column(Integer, primary_key=True, index=True)
    chat_room_id = Column(Integer, nullable=True, index=True)
    message_id = Column(Integer, nullable=True)  # removed message id, or queue msg id on error
    employee_id = Column(Integer, nullable=True, index=True)
    reason = Column(Text, nullable=True)
    categories = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), index=True)
