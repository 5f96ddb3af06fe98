"""Chat repository - Database operations for rooms, participants and messages"""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session, joinedload

from ...models import Employee
from ...models_chat import (
    ROOM_TYPE_PRIVATE,
    ROOM_TYPE_STORE,
    ChatRoom,
    ChatRoomParticipant,
    ContentSafetyEvent,
    Message,
)


class ChatRepository:
    """Repository for chat database operations"""

    @staticmethod
    def get_room(db: Session, room_id: int) -> Optional[ChatRoom]:
        return db.query(ChatRoom).filter(ChatRoom.id == room_id).first()

    @staticmethod
    def get_store_room(db: Session, store_id: int) -> Optional[ChatRoom]:
        return (
            db.query(ChatRoom)
            .filter(ChatRoom.type == ROOM_TYPE_STORE, ChatRoom.store_id == store_id)
            .order_by(ChatRoom.id)
            .first()
        )

    @staticmethod
    def find_private_room(db: Session, employee_a: int, employee_b: int) -> Optional[ChatRoom]:
        """Existing private room whose participants are exactly the two employees"""
        candidate_ids = (
            db.query(ChatRoomParticipant.room_id)
            .join(ChatRoom, ChatRoom.id == ChatRoomParticipant.room_id)
            .filter(
                ChatRoom.type == ROOM_TYPE_PRIVATE,
                ChatRoomParticipant.employee_id.in_([employee_a, employee_b]),
            )
            .group_by(ChatRoomParticipant.room_id)
            .having(func.count(func.distinct(ChatRoomParticipant.employee_id)) == 2)
            .all()
        )
        for (room_id,) in sorted(candidate_ids):
            total = (
                db.query(func.count(ChatRoomParticipant.id))
                .filter(ChatRoomParticipant.room_id == room_id)
                .scalar()
            )
            if total == 2:
                return ChatRepository.get_room(db, room_id)
        return None

    @staticmethod
    def get_participant(db: Session, room_id: int, employee_id: int) -> Optional[ChatRoomParticipant]:
        return (
            db.query(ChatRoomParticipant)
            .filter(
                ChatRoomParticipant.room_id == room_id,
                ChatRoomParticipant.employee_id == employee_id,
            )
            .first()
        )

    @staticmethod
    def get_participants(db: Session, room_id: int) -> list[ChatRoomParticipant]:
        return (
            db.query(ChatRoomParticipant)
            .options(joinedload(ChatRoomParticipant.employee))
            .filter(ChatRoomParticipant.room_id == room_id)
            .order_by(ChatRoomParticipant.id)
            .all()
        )

    @staticmethod
    def count_participants(db: Session, room_id: int) -> int:
        return (
            db.query(func.count(ChatRoomParticipant.id))
            .filter(ChatRoomParticipant.room_id == room_id)
            .scalar()
            or 0
        )

    @staticmethod
    def get_memberships(db: Session, employee_id: int) -> list[ChatRoomParticipant]:
        """Participant rows for an employee, with their rooms"""
        return (
            db.query(ChatRoomParticipant)
            .options(joinedload(ChatRoomParticipant.room))
            .filter(ChatRoomParticipant.employee_id == employee_id)
            .order_by(ChatRoomParticipant.room_id)
            .all()
        )

    @staticmethod
    def count_messages_after_deletion(db: Session, employee_id: int) -> dict[int, int]:
        """{room_id: messages created after the employee hid the room}"""
        rows = (
            db.query(Message.chat_room_id, func.count(Message.id))
            .join(
                ChatRoomParticipant,
                and_(
                    ChatRoomParticipant.room_id == Message.chat_room_id,
                    ChatRoomParticipant.employee_id == employee_id,
                ),
            )
            .filter(
                ChatRoomParticipant.deleted_at.isnot(None),
                Message.created_at > ChatRoomParticipant.deleted_at,
            )
            .group_by(Message.chat_room_id)
            .all()
        )
        return {room_id: count for room_id, count in rows}

    @staticmethod
    def count_unread(db: Session, employee_id: int) -> dict[int, int]:
        """
        {room_id: unread count} in one grouped query.
        Unread = from other senders after last_read, else after deleted_at, else ever.
        """
        since_filter = or_(
            and_(
                ChatRoomParticipant.last_read.isnot(None),
                Message.created_at > ChatRoomParticipant.last_read,
            ),
            and_(
                ChatRoomParticipant.last_read.is_(None),
                ChatRoomParticipant.deleted_at.isnot(None),
                Message.created_at > ChatRoomParticipant.deleted_at,
            ),
            and_(
                ChatRoomParticipant.last_read.is_(None),
                ChatRoomParticipant.deleted_at.is_(None),
            ),
        )
        rows = (
            db.query(Message.chat_room_id, func.count(Message.id))
            .join(
                ChatRoomParticipant,
                and_(
                    ChatRoomParticipant.room_id == Message.chat_room_id,
                    ChatRoomParticipant.employee_id == employee_id,
                ),
            )
            .filter(Message.sender_id != employee_id, since_filter)
            .group_by(Message.chat_room_id)
            .all()
        )
        return {room_id: count for room_id, count in rows}

    @staticmethod
    def get_peers(db: Session, room_ids: list[int], employee_id: int) -> list[ChatRoomParticipant]:
        """Other participants of the given rooms, with their employee rows"""
        if not room_ids:
            return []
        return (
            db.query(ChatRoomParticipant)
            .options(joinedload(ChatRoomParticipant.employee))
            .filter(
                ChatRoomParticipant.room_id.in_(room_ids),
                ChatRoomParticipant.employee_id != employee_id,
            )
            .order_by(ChatRoomParticipant.room_id, ChatRoomParticipant.id)
            .all()
        )

    @staticmethod
    def get_messages(db: Session, room_id: int) -> list[Message]:
        return (
            db.query(Message)
            .filter(Message.chat_room_id == room_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )

    @staticmethod
    def get_employees(db: Session, employee_ids: list[int]) -> list[Employee]:
        if not employee_ids:
            return []
        return db.query(Employee).filter(Employee.employee_id.in_(employee_ids)).all()

    @staticmethod
    def delete_room(db: Session, room: ChatRoom) -> None:
        """Delete a room with its participants and messages"""
        db.delete(room)
        db.commit()

    @staticmethod
    def latest_safety_event(
        db: Session, employee_id: int, since: datetime
    ) -> Optional[ContentSafetyEvent]:
        return (
            db.query(ContentSafetyEvent)
            .filter(
                ContentSafetyEvent.employee_id == employee_id,
                ContentSafetyEvent.created_at >= since,
            )
            .order_by(ContentSafetyEvent.created_at.desc(), ContentSafetyEvent.id.desc())
            .first()
        )
